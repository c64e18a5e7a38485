from pydantic import EmailStr, field_validator

from . import CamelModel
from ..core.config import settings
from ..core.security import UserRole

def _check_password_length(value: str) -> str:
    if len(value) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )
    return value

class UserRegister(CamelModel):
    username: str
    email: EmailStr
    password: str
    role: UserRole

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _check_password_length(value)

class UserLogin(CamelModel):
    username: str
    password: str

class PasswordReset(CamelModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _check_password_length(value)

class ChangePassword(CamelModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _check_password_length(value)

class UserSummary(CamelModel):
    id: int
    username: str
    role: UserRole

class UserResponse(UserSummary):
    email: str

class AuthResponse(CamelModel):
    token: str
    user: UserResponse
