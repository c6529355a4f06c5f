"""Request/response schemas for the register, login and whoMI endpoints."""

from datetime import datetime
from typing import Any, Literal

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from patient_auth.models.user import Role

PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


def _check_email(v: str) -> str:
    # Stored and looked up verbatim; only surrounding whitespace is removed.
    v = v.strip()
    if len(v) > 255:
        raise ValueError("must be a valid email")
    try:
        validate_email(v, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError("must be a valid email") from e
    return v


class UserDetailsIn(BaseModel):
    """Profile fields captured at registration; all required."""

    age: int = Field(..., ge=0, le=150)
    gender: str = Field(..., min_length=1, max_length=32)
    height_cm: float = Field(..., gt=0, le=300)
    weight_kg: float = Field(..., gt=0, le=700)
    phone: str = Field(..., min_length=1, max_length=32)
    address: str = Field(..., min_length=1, max_length=1024)


class RegisterRequest(BaseModel):
    """Registration payload. Wire names (fullName, user_details) match existing clients."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    role: Role | None = None
    user_details: UserDetailsIn

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class InsertResult(BaseModel):
    """Raw result of the profile insert, the shape existing clients read after /register."""

    command: Literal["INSERT"] = "INSERT"
    rowCount: int
    rows: list[dict[str, Any]]


class UserPublic(BaseModel):
    """User record as returned after login (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: int
    created_at: datetime | None = None


class CurrentUser(BaseModel):
    """Projection returned by /whoMI."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: int


class TokenClaims(BaseModel):
    """Decoded session token claims attached to the request by the auth gate."""

    id: str
    email: str
    role: int
    iat: int
    exp: int


class LoginData(BaseModel):
    user: UserPublic
    token: str


class LoginResponse(BaseModel):
    success: Literal[True] = True
    message: str = "Login successful"
    data: LoginData


class CurrentUserResponse(BaseModel):
    success: Literal[True] = True
    data: CurrentUser


class ErrorResponse(BaseModel):
    """Envelope for every failure; errors is present only for validation failures."""

    success: Literal[False] = False
    message: str
    errors: list[str] | None = None
