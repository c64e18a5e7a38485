from datetime import datetime, timezone
from typing import Optional

from pydantic import field_validator

from . import CamelModel
from .auth import UserSummary
from .patient import PatientResponse
from ..models.appointment import AppointmentStatus

def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware timestamps are stored as naive UTC; naive ones as given."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

STAFF_FIELDS = {"clinician_id", "patient_id", "start_time", "end_time", "note"}
CLINICIAN_FIELDS = {"status", "clinician_note"}

class AppointmentCreate(CamelModel):
    clinician_id: int
    patient_id: int
    start_time: datetime
    end_time: datetime
    note: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return _to_naive_utc(value)

class StaffAppointmentUpdate(CamelModel):
    """Scheduling changes open to reception and admin staff."""
    clinician_id: Optional[int] = None
    patient_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    note: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return _to_naive_utc(value)

class ClinicianAppointmentUpdate(CamelModel):
    """Workflow changes open to the assigned clinician."""
    status: Optional[str] = None
    clinician_note: Optional[str] = None

class AppointmentUpdate(StaffAppointmentUpdate, ClinicianAppointmentUpdate):
    """Request body for PUT; split per role before anything is applied."""

    def staff_changes(self) -> StaffAppointmentUpdate:
        supplied = self.model_dump(include=STAFF_FIELDS, exclude_unset=True)
        # Only the note may be cleared; a null id or time bound means "unchanged"
        supplied = {
            key: value for key, value in supplied.items()
            if value is not None or key == "note"
        }
        return StaffAppointmentUpdate(**supplied)

    def clinician_changes(self) -> ClinicianAppointmentUpdate:
        return ClinicianAppointmentUpdate(
            **self.model_dump(include=CLINICIAN_FIELDS, exclude_unset=True)
        )

class AppointmentResponse(CamelModel):
    id: int
    record_number: str
    clinician_id: int
    patient_id: int
    created_by_id: int
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    note: Optional[str] = None
    clinician_note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: PatientResponse
    clinician: UserSummary
    created_by: UserSummary
