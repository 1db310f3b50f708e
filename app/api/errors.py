"""Exception handlers: render domain, validation and storage errors as {status, message}."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import (
    AuthError,
    StorageFaultError,
    UnauthenticatedError,
    ValidationFailedError,
)
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

# Request locations that prefix field names in pydantic error locs.
_LOC_SECTIONS = frozenset({"body", "query", "path", "header", "cookie"})


def _error_response(
    status_code: int,
    message: str,
    errors: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def field_errors(exc: RequestValidationError) -> dict[str, str]:
    """Map pydantic errors to {field: message}, keeping the first message per field."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOC_SECTIONS]
        field = ".".join(loc) or "body"
        ctx_error = (error.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error else error.get("msg", "Invalid value")
        errors.setdefault(field, message)
    return errors


def auth_error_response(exc: AuthError) -> JSONResponse:
    """Render a domain error; 401s carry a Bearer challenge, validation errors their field map."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    errors = exc.errors if isinstance(exc, ValidationFailedError) else None
    return _error_response(exc.status_code, exc.message, errors=errors, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers so no internal exception detail reaches the client."""

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        if isinstance(exc, StorageFaultError):
            logger.error("Storage fault: %s %s", request.method, request.url.path)
        return auth_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationFailedError(field_errors(exc))
        logger.info("Validation failed: %s %s fields=%s", request.method, request.url.path, sorted(error.errors))
        return auth_error_response(error)

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Unhandled storage error: %s %s", request.method, request.url.path)
        return auth_error_response(StorageFaultError())
