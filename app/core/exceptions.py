"""
Domain error taxonomy and global exception handlers.

Services raise the ``AppError`` subclasses below; the handlers translate
them (and any stray database / unexpected error) into JSON bodies so no
stack trace ever reaches a client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class AppError(Exception):
    """Base class for errors reported to the caller with a fixed status."""

    status_code: int = 500
    code: str = "error"
    default_detail: str = "Application error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInputError(AppError):
    status_code = 422
    code = "invalid_input"
    default_detail = "Invalid input"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    default_detail = "Resource not found"


class DomainConflict(AppError):
    """A request that is well-formed but illegal in the record's current state."""

    status_code = 409
    code = "conflict"
    default_detail = "Operation conflicts with current state"


class AlreadyCheckedIn(DomainConflict):
    code = "already_checked_in"
    default_detail = "Already checked in today"


class NotCheckedIn(DomainConflict):
    code = "not_checked_in"
    default_detail = "Check-in required first"


class AlreadyOnBreak(DomainConflict):
    code = "already_on_break"
    default_detail = "Break already in progress"


class BreakAlreadyTaken(DomainConflict):
    code = "break_already_taken"
    default_detail = "Only one break is allowed per day"


class NotOnBreak(DomainConflict):
    code = "not_on_break"
    default_detail = "No break in progress"


class OnBreak(DomainConflict):
    code = "on_break"
    default_detail = "End the current break before checking out"


class AlreadyCheckedOut(DomainConflict):
    code = "already_checked_out"
    default_detail = "Already checked out today"


class ConcurrentModification(DomainConflict):
    code = "concurrent_modification"
    default_detail = "Record was modified by another request, retry"


# ── Handlers ────────────────────────────────────────────────────────
async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code, "success": False},
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
