from sqlalchemy.orm import Session
from typing import List
import logging

from ..models.user import User
from ..core.database import transaction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.security import (
    verify_password, get_password_hash, create_user_token, AuthenticationError,
    UserRole
)
from ..schemas.auth import (
    UserLogin, UserRegister, AuthResponse, UserResponse,
    PasswordReset, ChangePassword
)

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> AuthResponse:
        """Register a new staff user and sign them in."""
        if self.db.query(User).filter(User.username == user_data.username).first():
            raise ConflictError("Username already exists")

        if self.db.query(User).filter(User.email == user_data.email).first():
            raise ConflictError("Email already exists")

        new_user = User(
            username=user_data.username,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=user_data.role,
        )

        with transaction(self.db, "register user", "Username or email already exists"):
            self.db.add(new_user)

        self.db.refresh(new_user)
        logger.info(f"Registered user {new_user.username} ({new_user.role.value})")
        return self._token_response(new_user)

    def authenticate_user(self, login_data: UserLogin) -> AuthResponse:
        """Authenticate user and return a bearer token."""
        if not login_data.username.strip() or not login_data.password:
            raise ValidationError("Username and password are required")

        user = self.db.query(User).filter(
            User.username == login_data.username
        ).first()

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.info(f"Failed login for {login_data.username}")
            raise AuthenticationError("Invalid credentials")

        return self._token_response(user)

    def reset_password(self, reset_data: PasswordReset) -> None:
        """Set a new password for the account registered under an email."""
        user = self.db.query(User).filter(User.email == reset_data.email).first()
        if not user:
            raise NotFoundError("User not found")

        with transaction(self.db, "reset password"):
            user.password_hash = get_password_hash(reset_data.password)
        logger.info(f"Password reset for user {user.id}")

    def change_password(self, user: User, password_data: ChangePassword) -> None:
        if not verify_password(password_data.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        with transaction(self.db, "change password"):
            user.password_hash = get_password_hash(password_data.new_password)

    def list_clinicians(self) -> List[User]:
        """Clinicians that appointments can be booked with."""
        return self.db.query(User).filter(
            User.role == UserRole.CLINICIAN
        ).order_by(User.username).all()

    def _token_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            token=create_user_token(user.id, user.username, user.email, user.role),
            user=UserResponse.model_validate(user),
        )
