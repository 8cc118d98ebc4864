"""Exception handlers for the TaleCraft API.

Every failure is rendered as ``{"success": false, "error": <message>}`` with
the status code of its error kind.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from talecraft.core.config import get_settings
from talecraft.core.errors import AppError, ErrorKind, status_for
from talecraft.services.user_service import conflicting_field

logger = logging.getLogger(__name__)

UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again later."

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def error_response(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build the standard failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
        headers=headers,
    )


def _validation_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        # Drop the "body"/"path"/"query" prefix FastAPI adds
        if len(loc) > 1 and loc[0] in ("body", "path", "query", "header", "cookie"):
            loc = loc[1:]
        grouped.setdefault(".".join(loc), []).append(error.get("msg", "Invalid value"))
    return grouped


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError exceptions."""
    if exc.kind is ErrorKind.UNEXPECTED:
        logger.error("Unexpected error on %s %s: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHENTICATED else None
    return error_response(exc.status_code, exc.message, headers=headers)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body/parameter validation errors."""
    return error_response(
        status_for(ErrorKind.INVALID_INPUT),
        "Validation failed",
        errors=_validation_errors(exc.errors()),
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors raised inside handlers."""
    return error_response(
        status_for(ErrorKind.INVALID_INPUT),
        "Validation failed",
        errors=_validation_errors(exc.errors()),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Translate database constraint violations."""
    pgcode = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    text = str(exc.orig).lower()

    if pgcode == UNIQUE_VIOLATION or "unique" in text:
        return error_response(
            status_for(ErrorKind.CONFLICT),
            f"This {conflicting_field(exc)} is already registered.",
        )
    if pgcode == FOREIGN_KEY_VIOLATION or "foreign key" in text:
        return error_response(
            status_for(ErrorKind.INVALID_INPUT),
            "Invalid reference. The referenced resource does not exist.",
        )
    return await generic_error_handler(request, exc)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (unknown routes, bad methods) in the envelope."""
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals."""
    logger.exception("Unexpected error", exc_info=exc)
    extra: dict[str, Any] = {}
    if get_settings().environment == "development":
        extra["details"] = str(exc)
    return error_response(status_for(ErrorKind.UNEXPECTED), UNEXPECTED_MESSAGE, **extra)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_error_handler)
