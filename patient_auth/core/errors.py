"""Error taxonomy for the auth API and the single kind -> HTTP status table."""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Every failure the auth endpoints can report."""

    VALIDATION_FAILED = "validation_failed"
    ALREADY_EXISTS = "already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.ALREADY_EXISTS: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.NO_TOKEN: 403,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL_ERROR: 500,
}


class AuthError(Exception):
    """Base class for failures that are reported to the caller with a `success: false` envelope."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationFailed(AuthError):
    """Request body did not match its schema; carries one message per violated field."""

    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Validation error"

    def __init__(self, errors: list[str], message: str | None = None) -> None:
        self.errors = errors
        super().__init__(message)


class AlreadyExists(AuthError):
    kind = ErrorKind.ALREADY_EXISTS
    default_message = "User already exists"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password; the two are deliberately indistinguishable."""

    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class NoToken(AuthError):
    kind = ErrorKind.NO_TOKEN
    default_message = "No token provided"


class InvalidToken(AuthError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid or expired token"


class NotFound(AuthError):
    kind = ErrorKind.NOT_FOUND
    default_message = "User not found"


class InternalError(AuthError):
    """Unexpected store/crypto failure. The message is generic; details go to the log only."""

    kind = ErrorKind.INTERNAL_ERROR
    default_message = "Server error"


def _field_path(loc: Iterable[Any]) -> str:
    # FastAPI prefixes body errors with "body"; the client only knows field names.
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) if parts else "body"


def _message_for(error: Mapping[str, Any]) -> str:
    if error.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    field = _field_path(error.get("loc", ()))
    if error.get("type") == "missing":
        return f'"{field}" is required'
    if error.get("type") == "extra_forbidden":
        return f'"{field}" is not allowed'
    if error.get("type") == "value_error" and error.get("ctx", {}).get("error"):
        return f'"{field}" {error["ctx"]["error"]}'
    msg = str(error.get("msg") or "is invalid")
    if msg[1:2].islower():
        msg = msg[0].lower() + msg[1:]
    return f'"{field}" {msg}'


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> list[str]:
    """
    Turn pydantic error dicts into human-readable messages, one per violated field.

    All violations are kept (no abort on first error); duplicates are dropped.
    """
    messages: list[str] = []
    for error in errors:
        message = _message_for(error)
        if message not in messages:
            messages.append(message)
    return messages
