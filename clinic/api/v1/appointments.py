from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_user, get_scheduling_user, get_admin_user
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AppointmentResponse
)
from ...models.user import User

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List appointments; clinicians only see their own."""
    return AppointmentService(db).list_appointments(current_user)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a single appointment."""
    return AppointmentService(db).get_appointment(appointment_id, current_user)

@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_scheduling_user)
):
    """Book an appointment (reception and admin)."""
    return AppointmentService(db).create_appointment(appointment_data, current_user)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update an appointment; editable fields depend on the caller's role."""
    return AppointmentService(db).update_appointment(
        appointment_id, appointment_data, current_user
    )

@router.delete("/{appointment_id}", dependencies=[Depends(get_admin_user)])
def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    """Delete an appointment (admin only)."""
    AppointmentService(db).delete_appointment(appointment_id)
    return {"message": "Appointment deleted successfully"}
