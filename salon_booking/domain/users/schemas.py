"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import Role
from ...shared.validators import require_text, validate_email

MIN_PASSWORD_LENGTH = 6


def _check_password(v: str) -> str:
    if not v or len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
        )
    return v


class RegisterRequest(BaseModel):
    """Self-service sign up; always creates a ``user`` account"""

    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "El nombre es requerido")

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _check_password(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UserCreate(RegisterRequest):
    """Admin-created account with an explicit role"""

    # Validated by UserService
    role: str = Role.USER.value


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return require_text(v, "El nombre no puede estar vacío")


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class UserMessageResponse(BaseModel):
    message: str
    user: UserResponse
