from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_user
from ...services.auth_service import AuthService
from ...schemas.auth import UserSummary

router = APIRouter(prefix="/users", tags=["Users"])

@router.get(
    "/clinicians",
    response_model=List[UserSummary],
    dependencies=[Depends(get_current_user)],
)
def list_clinicians(db: Session = Depends(get_db)):
    """Clinicians that appointments can be booked with."""
    return AuthService(db).list_clinicians()
