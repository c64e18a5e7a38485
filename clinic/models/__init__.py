from .user import User
from .patient import Patient
from .appointment import Appointment, AppointmentStatus
from .counter import Counter

__all__ = ["User", "Patient", "Appointment", "AppointmentStatus", "Counter"]
