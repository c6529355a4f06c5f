"""Exception handlers: the only place an error kind becomes an HTTP status and envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from patient_auth.core.errors import AuthError, ValidationFailed, format_validation_errors
from patient_auth.schemas.auth import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(exc: AuthError) -> JSONResponse:
    """Render an AuthError as `{"success": false, "message": ..., ["errors": [...]]}`."""
    body = ErrorResponse(
        message=exc.message,
        errors=exc.errors if isinstance(exc, ValidationFailed) else None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body, exclude_none=True),
    )


async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    return error_response(exc)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema mismatches are reported as 400 "Validation error" with one message per field."""
    errors = format_validation_errors(exc.errors())
    logger.debug("Validation failed on %s: %d error(s)", request.url.path, len(errors))
    return error_response(ValidationFailed(errors))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
