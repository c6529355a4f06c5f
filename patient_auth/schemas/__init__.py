"""Pydantic request/response schemas."""

from patient_auth.schemas.auth import (
    CurrentUser,
    CurrentUserResponse,
    ErrorResponse,
    InsertResult,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TokenClaims,
    UserDetailsIn,
    UserPublic,
)
from patient_auth.schemas.health import HealthResponse

__all__ = [
    "CurrentUser",
    "CurrentUserResponse",
    "ErrorResponse",
    "HealthResponse",
    "InsertResult",
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "TokenClaims",
    "UserDetailsIn",
    "UserPublic",
]
