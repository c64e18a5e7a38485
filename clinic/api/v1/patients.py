from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_user, get_scheduling_user, get_admin_user
from ...services.patient_service import PatientService
from ...schemas.patient import (
    PatientCreate, PatientUpdate, PatientResponse, PatientDetail
)

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.get(
    "",
    response_model=List[PatientResponse],
    dependencies=[Depends(get_current_user)],
)
def list_patients(db: Session = Depends(get_db)):
    """List all patients, newest first."""
    return PatientService(db).list_patients()

@router.get(
    "/{patient_id}",
    response_model=PatientDetail,
    dependencies=[Depends(get_current_user)],
)
def get_patient(patient_id: int, db: Session = Depends(get_db)):
    """Get a patient with their appointment history."""
    return PatientService(db).get_patient(patient_id)

@router.post(
    "",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_scheduling_user)],
)
def create_patient(patient_data: PatientCreate, db: Session = Depends(get_db)):
    """Register a patient (reception and admin)."""
    return PatientService(db).create_patient(patient_data)

@router.put(
    "/{patient_id}",
    response_model=PatientResponse,
    dependencies=[Depends(get_scheduling_user)],
)
def update_patient(
    patient_id: int,
    patient_data: PatientUpdate,
    db: Session = Depends(get_db)
):
    """Update patient details (reception and admin)."""
    return PatientService(db).update_patient(patient_id, patient_data)

@router.delete("/{patient_id}", dependencies=[Depends(get_admin_user)])
def delete_patient(patient_id: int, db: Session = Depends(get_db)):
    """Delete a patient (admin only)."""
    PatientService(db).delete_patient(patient_id)
    return {"message": "Patient deleted successfully"}
