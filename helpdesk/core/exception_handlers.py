"""
FastAPI exception handlers for custom exceptions.

WHY: Exception handlers convert our custom exceptions (and the database
driver's failures) into JSON responses with a stable error kind and status
code. Raw internal error text never reaches the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from helpdesk.core.exceptions import (
    AppException,
    ConflictError,
    InvalidEnumValueError,
    ResourceAlreadyExistsError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom AppException and its subclasses.

    Args:
        request: The FastAPI request object
        exc: The custom exception instance

    Returns:
        JSONResponse with error details
    """
    if isinstance(exc, StoreUnavailableError):
        logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    WHY: Request-body validation failures use the same response shape as
    our own exceptions. When every failure is a value outside a closed set,
    the kind is InvalidEnumValueError so clients can tell it apart from a
    missing field.

    Args:
        request: The FastAPI request object
        exc: The Pydantic validation error

    Returns:
        JSONResponse with validation error details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    if errors and all(e["type"] == "enum" for e in errors):
        error_cls = InvalidEnumValueError
    else:
        error_cls = ValidationError

    return JSONResponse(
        status_code=error_cls.status_code,
        content={
            "error": error_cls.__name__,
            "message": "Request validation failed",
            "status_code": error_cls.status_code,
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions.

    WHY: Some HTTP exceptions (404, 405) are raised by Starlette/FastAPI
    before reaching our routes. This handler ensures they match our error format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTPException",
            "message": exc.detail,
            "status_code": exc.status_code,
            "details": None,
        },
    )


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle database connectivity failures and pool exhaustion.

    WHY: The driver's message may contain hostnames or credentials, so it is
    logged and replaced with the StoreUnavailableError body.
    """
    logger.error(
        "Database unavailable on %s %s: %s",
        request.method,
        request.url.path,
        exc.__class__.__name__,
    )
    error = StoreUnavailableError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """PostgreSQL reports SQLSTATE 23505; SQLite only says so in the message."""
    if getattr(exc.orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Handle constraint violations that slipped past DAO checks.

    WHY: Two concurrent registrations with the same email can both pass
    the existence check; the database constraint is the final word. Only
    unique violations are reported as "already exists". Any other
    constraint (a foreign key to a row deleted meanwhile) is a plain
    conflict.
    """
    if _is_unique_violation(exc):
        error = ResourceAlreadyExistsError()
    else:
        error = ConflictError()
    logger.warning(
        "Integrity error on %s %s (%s)", request.method, request.url.path, error.kind
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    WHY: Log the full traceback but return a generic error to avoid
    leaking implementation details.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": "Internal server error",
            "status_code": 500,
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers to the application."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(InterfaceError, store_unavailable_handler)
    app.add_exception_handler(PoolTimeoutError, store_unavailable_handler)
    app.add_exception_handler(ConnectionError, store_unavailable_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
