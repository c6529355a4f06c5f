"""
Shared API dependencies.

Builds the hasher, token service and auth service from settings, and the
bearer-token gate used by protected routes.
"""

import logging
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from patient_auth.core.config import Settings, get_settings
from patient_auth.core.database import get_db
from patient_auth.core.errors import InvalidToken, NoToken
from patient_auth.core.security import PasswordHasher, TokenService
from patient_auth.repositories.users import UserRepository
from patient_auth.schemas.auth import TokenClaims
from patient_auth.services.auth import AuthService

logger = logging.getLogger(__name__)

# auto_error=False: require_identity decides between NoToken (403) and InvalidToken (401).
security = HTTPBearer(auto_error=False)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_token_service(settings: Annotated[Settings, Depends(get_settings)]) -> TokenService:
    """Token service signed with the process-wide secret."""
    return TokenService(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(UserRepository(db), hasher, tokens)


def require_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenClaims:
    """
    Dependency: require `Authorization: Bearer <token>` and return its decoded claims.

    Raises NoToken (403) when the header is absent or has no token part, and
    InvalidToken (401) when the scheme is not Bearer or the token is malformed,
    tampered, expired or lacks identity claims. The store is not consulted;
    identity is trusted from the token alone.
    """
    if credentials is None:
        # HTTPBearer yields None both for a missing header and for "Basic abc".
        parts = request.headers.get("Authorization", "").split()
        if len(parts) < 2:
            raise NoToken()
        raise InvalidToken()
    try:
        payload = tokens.decode(credentials.credentials)
        return TokenClaims.model_validate(payload)
    except (jwt.PyJWTError, ValidationError) as e:
        logger.debug("Rejected bearer token: %s", type(e).__name__)
        raise InvalidToken() from e
