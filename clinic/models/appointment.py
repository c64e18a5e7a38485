from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    record_number = Column(String(20), unique=True, index=True, nullable=False)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    clinician_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Half-open slot [start_time, end_time)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.PENDING)

    # Reception-authored and clinician-authored notes
    note = Column(Text, nullable=True)
    clinician_note = Column(Text, nullable=True)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    patient = relationship("Patient", back_populates="appointments")
    clinician = relationship(
        "User",
        back_populates="clinician_appointments",
        foreign_keys=[clinician_id],
    )
    created_by = relationship(
        "User",
        back_populates="created_appointments",
        foreign_keys=[created_by_id],
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, record_number='{self.record_number}', clinician_id={self.clinician_id}, start='{self.start_time}')>"
