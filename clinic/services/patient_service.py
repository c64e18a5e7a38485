from typing import List
import logging

from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session, selectinload

from ..core.database import is_row_id, transaction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.appointment import Appointment
from ..models.patient import Patient
from ..schemas.patient import PatientCreate, PatientUpdate
from .record_numbers import RecordNumberAllocator

logger = logging.getLogger(__name__)

# Columns that may be edited but never cleared
REQUIRED_FIELDS = {"first_name", "last_name", "gender", "date_of_birth"}

class PatientService:
    def __init__(self, db: Session):
        self.db = db
        self.record_numbers = RecordNumberAllocator(db)

    def list_patients(self) -> List[Patient]:
        return self.db.query(Patient).order_by(
            Patient.created_at.desc(), Patient.id.desc()
        ).all()

    def get_patient(self, patient_id: int) -> Patient:
        """Patient with their appointments and each appointment's clinician."""
        if not is_row_id(patient_id):
            raise NotFoundError("Patient not found")
        patient = self.db.query(Patient).options(
            selectinload(Patient.appointments).joinedload(Appointment.clinician)
        ).filter(Patient.id == patient_id).first()

        if not patient:
            raise NotFoundError("Patient not found")
        return patient

    def create_patient(self, data: PatientCreate) -> Patient:
        with transaction(self.db, "create patient"):
            patient = Patient(
                record_number=self.record_numbers.allocate("patient"),
                **data.model_dump()
            )
            self.db.add(patient)

        self.db.refresh(patient)
        logger.info(f"Patient {patient.record_number} created")
        return patient

    def update_patient(self, patient_id: int, data: PatientUpdate) -> Patient:
        changes = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS & changes.keys():
            if changes[field] is None:
                raise ValidationError(f"{to_camel(field)} cannot be empty")

        with transaction(self.db, "update patient"):
            patient = self._get_or_404(patient_id)
            for field, value in changes.items():
                setattr(patient, field, value)

        self.db.refresh(patient)
        logger.info(f"Patient {patient.record_number} updated")
        return patient

    def delete_patient(self, patient_id: int) -> None:
        """Remove a patient; refused while any appointment still references them."""
        with transaction(self.db, "delete patient"):
            patient = self._get_or_404(patient_id)
            booked = self.db.query(Appointment.id).filter(
                Appointment.patient_id == patient_id
            ).first()
            if booked:
                raise ConflictError("Cannot delete patient with existing appointments")
            self.db.delete(patient)

        logger.info(f"Patient {patient_id} deleted")

    def _get_or_404(self, patient_id: int) -> Patient:
        if not is_row_id(patient_id):
            raise NotFoundError("Patient not found")
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient not found")
        return patient
