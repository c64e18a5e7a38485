from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_user, rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import (
    UserLogin, UserRegister, AuthResponse, UserResponse,
    PasswordReset, ChangePassword
)
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_check)],
)
def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """Register a new staff user."""
    return AuthService(db).register_user(user_data)

@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(rate_limit_check)],
)
def login(
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Authenticate user and return a bearer token."""
    return AuthService(db).authenticate_user(login_data)

@router.post("/reset-password", dependencies=[Depends(rate_limit_check)])
def reset_password(
    reset_data: PasswordReset,
    db: Session = Depends(get_db)
):
    """Reset password by email."""
    AuthService(db).reset_password(reset_data)
    return {"message": "Password reset successfully"}

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return current_user

@router.post("/change-password")
def change_password(
    password_data: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change user password."""
    AuthService(db).change_password(current_user, password_data)
    return {"message": "Password changed successfully"}
