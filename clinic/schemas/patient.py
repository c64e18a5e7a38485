from datetime import date, datetime
from typing import List, Optional

from pydantic import field_validator

from . import CamelModel
from .auth import UserSummary
from ..models.appointment import AppointmentStatus

class PatientBase(CamelModel):
    first_name: str
    last_name: str
    gender: str
    date_of_birth: date
    email: Optional[str] = None
    phone_number: Optional[str] = None
    allergies: Optional[str] = None
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None

def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("cannot be empty")
    return value

class PatientCreate(PatientBase):
    @field_validator("first_name", "last_name", "gender")
    @classmethod
    def required_not_blank(cls, value: str) -> str:
        return _not_blank(value)

class PatientUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    allergies: Optional[str] = None
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None

    @field_validator("first_name", "last_name", "gender")
    @classmethod
    def required_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)

class PatientResponse(PatientBase):
    id: int
    record_number: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PatientAppointment(CamelModel):
    id: int
    record_number: str
    clinician_id: int
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    note: Optional[str] = None
    clinician_note: Optional[str] = None
    clinician: UserSummary

class PatientDetail(PatientResponse):
    appointments: List[PatientAppointment] = []
