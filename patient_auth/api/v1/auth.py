"""Registration, login and current-user endpoints."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import APIRouter, Depends

from patient_auth.api.deps import get_auth_service, require_identity
from patient_auth.core.errors import AuthError, InternalError
from patient_auth.schemas.auth import (
    CurrentUserResponse,
    ErrorResponse,
    InsertResult,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TokenClaims,
)
from patient_auth.services.auth import AuthService

logger = logging.getLogger(__name__)
router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@contextmanager
def _server_errors(message: str) -> Iterator[None]:
    """Log unexpected failures and re-raise them as InternalError with a generic message."""
    try:
        yield
    except AuthError:
        raise
    except Exception as e:
        logger.exception("%s: %s", message, type(e).__name__)
        raise InternalError(message) from e


@router.post("/register", response_model=InsertResult, responses=_ERROR_RESPONSES)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> InsertResult:
    """
    Create a user and their profile details.

    Returns the profile insert result: `{"command": "INSERT", "rowCount": 1, "rows": [{"user_id": ...}]}`.
    """
    with _server_errors("Server error during registration"):
        return service.register(body)


@router.post("/login", response_model=LoginResponse, responses=_ERROR_RESPONSES)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns the user (without password) and a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    with _server_errors("Server error during login"):
        data = service.login(body)
    return LoginResponse(data=data)


@router.get("/whoMI", response_model=CurrentUserResponse, responses=_ERROR_RESPONSES)
def who_am_i(
    claims: Annotated[TokenClaims, Depends(require_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> CurrentUserResponse:
    """Return {id, email, role} of the token's user, read fresh from the store."""
    with _server_errors("Server error"):
        user = service.current_user(claims.id)
    return CurrentUserResponse(data=user)
