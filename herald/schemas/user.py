"""User, login and token exchange schemas."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, EmailStr, Field

from herald.models.user import Role
from herald.schemas.common import BaseSchema

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(password: str) -> str:
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


Password = Annotated[str, Field(min_length=6), AfterValidator(_check_password_bytes)]


class RegisterRequest(BaseSchema):
    email: EmailStr
    password: Password


class LoginRequest(BaseSchema):
    email: EmailStr
    password: Password


class UserCreate(BaseSchema):
    """Admin-side user creation."""

    email: EmailStr
    password: Password
    roles: list[Role] = Field(..., min_length=1)


class UserUpdate(BaseSchema):
    """Partial user update; omitted fields keep their value."""

    email: EmailStr | None = None
    roles: list[Role] | None = Field(None, min_length=1)
    password: Password | None = None
    verified: bool | None = None


class UserResponse(BaseSchema):
    """User as returned by the API. The password hash is never exposed."""

    id: UUID
    email: str
    roles: list[Role]
    verified: bool
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseSchema):
    session_id: UUID
    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    user: UserResponse


class TokenRequest(BaseSchema):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseSchema):
    access_token: str
    access_token_expires_at: datetime
