from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from ..core.database import is_row_id, transaction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.security import AuthorizationError, UserRole, SCHEDULING_ROLES
from ..models.appointment import Appointment, AppointmentStatus
from ..models.patient import Patient
from ..models.user import User
from ..schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, StaffAppointmentUpdate,
    ClinicianAppointmentUpdate
)
from .record_numbers import RecordNumberAllocator

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Appointment time conflicts with existing appointment"

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db
        self.record_numbers = RecordNumberAllocator(db)

    def list_appointments(self, actor: User) -> List[Appointment]:
        """All appointments for staff; only their own for a clinician."""
        query = self._query()
        if actor.role == UserRole.CLINICIAN:
            query = query.filter(Appointment.clinician_id == actor.id)
        return query.order_by(Appointment.start_time.desc()).all()

    def get_appointment(self, appointment_id: int, actor: User) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        if actor.role == UserRole.CLINICIAN and appointment.clinician_id != actor.id:
            raise AuthorizationError("Access denied")
        return appointment

    def has_conflict(
        self,
        clinician_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[int] = None
    ) -> bool:
        """Check [start_time, end_time) against every booking of the clinician.

        Slots that only touch at a boundary do not conflict.
        """
        query = self.db.query(Appointment.id).filter(
            Appointment.clinician_id == clinician_id,
            or_(
                # starts during an existing appointment
                and_(Appointment.start_time <= start_time, Appointment.end_time > start_time),
                # ends during an existing appointment
                and_(Appointment.start_time < end_time, Appointment.end_time >= end_time),
                # contains an existing appointment
                and_(Appointment.start_time >= start_time, Appointment.end_time <= end_time),
            )
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first() is not None

    def create_appointment(self, data: AppointmentCreate, actor: User) -> Appointment:
        """Book a new PENDING appointment on behalf of reception or admin."""
        if data.end_time <= data.start_time:
            raise ValidationError("End time must be after start time")

        with transaction(self.db, "create appointment"):
            self._lock_clinician(data.clinician_id)
            self._require_patient(data.patient_id)

            if self.has_conflict(data.clinician_id, data.start_time, data.end_time):
                logger.info(
                    f"Rejected booking for clinician {data.clinician_id}: "
                    f"{data.start_time} - {data.end_time} overlaps"
                )
                raise ConflictError(CONFLICT_MESSAGE)

            appointment = Appointment(
                record_number=self.record_numbers.allocate("appointment"),
                clinician_id=data.clinician_id,
                patient_id=data.patient_id,
                created_by_id=actor.id,
                start_time=data.start_time,
                end_time=data.end_time,
                note=data.note,
                status=AppointmentStatus.PENDING,
            )
            self.db.add(appointment)

        logger.info(
            f"Appointment {appointment.record_number} created by user {actor.id}"
        )
        return self._get_or_404(appointment.id)

    def update_appointment(
        self,
        appointment_id: int,
        changes: AppointmentUpdate,
        actor: User
    ) -> Appointment:
        """Apply the part of ``changes`` the actor's role is allowed to make.

        Fields outside the actor's role are ignored rather than rejected.
        """
        with transaction(self.db, "update appointment"):
            appointment = self._get_or_404(appointment_id)

            if actor.role in SCHEDULING_ROLES:
                self._apply_staff_changes(appointment, changes.staff_changes())
            if actor.role == UserRole.CLINICIAN:
                self._apply_clinician_changes(
                    appointment, changes.clinician_changes(), actor
                )

        logger.info(f"Appointment {appointment_id} updated by user {actor.id}")
        return self._get_or_404(appointment_id)

    def delete_appointment(self, appointment_id: int) -> None:
        with transaction(self.db, "delete appointment"):
            appointment = self._get_or_404(appointment_id)
            self.db.delete(appointment)
        logger.info(f"Appointment {appointment_id} deleted")

    def _apply_staff_changes(
        self,
        appointment: Appointment,
        changes: StaffAppointmentUpdate
    ) -> None:
        supplied = changes.model_fields_set
        clinician_id = changes.clinician_id if "clinician_id" in supplied else appointment.clinician_id
        start_time = changes.start_time if "start_time" in supplied else appointment.start_time
        end_time = changes.end_time if "end_time" in supplied else appointment.end_time

        reschedule = bool(supplied & {"clinician_id", "start_time", "end_time"})
        if reschedule:
            if end_time <= start_time:
                raise ValidationError("End time must be after start time")
            self._lock_clinician(clinician_id)
            if self.has_conflict(clinician_id, start_time, end_time, appointment.id):
                logger.info(
                    f"Rejected reschedule of appointment {appointment.id}: "
                    f"{start_time} - {end_time} overlaps"
                )
                raise ConflictError(CONFLICT_MESSAGE)
        if "patient_id" in supplied:
            self._require_patient(changes.patient_id)

        # All checks passed
        if reschedule:
            appointment.clinician_id = clinician_id
            appointment.start_time = start_time
            appointment.end_time = end_time
        if "patient_id" in supplied:
            appointment.patient_id = changes.patient_id
        if "note" in supplied:
            appointment.note = changes.note

    def _apply_clinician_changes(
        self,
        appointment: Appointment,
        changes: ClinicianAppointmentUpdate,
        actor: User
    ) -> None:
        if appointment.clinician_id != actor.id:
            raise AuthorizationError("Access denied")

        supplied = changes.model_fields_set
        if "status" in supplied:
            try:
                status = AppointmentStatus(changes.status)
            except ValueError:
                raise ValidationError("Invalid status")
            appointment.status = status
        if "clinician_note" in supplied:
            appointment.clinician_note = changes.clinician_note

    def _lock_clinician(self, clinician_id: int) -> User:
        """Load the clinician row FOR UPDATE so bookings for one clinician serialize."""
        if not is_row_id(clinician_id):
            raise ValidationError("Invalid clinician")
        clinician = self.db.query(User).filter(
            User.id == clinician_id
        ).with_for_update().first()

        if not clinician or clinician.role != UserRole.CLINICIAN:
            raise ValidationError("Invalid clinician")
        return clinician

    def _require_patient(self, patient_id: int) -> Patient:
        if not is_row_id(patient_id):
            raise ValidationError("Invalid patient")
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise ValidationError("Invalid patient")
        return patient

    def _query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.clinician),
            joinedload(Appointment.created_by),
        )

    def _get_or_404(self, appointment_id: int) -> Appointment:
        if not is_row_id(appointment_id):
            raise NotFoundError("Appointment not found")
        appointment = self._query().filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment
