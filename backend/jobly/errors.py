"""
Application errors.

Services raise these; the handler registered in `jobly.main` turns them into
JSON responses of the form {"detail": message} with the class status code.
"""
import logging
from typing import Optional, Union

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


class JoblyError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message: Union[str, list[str]] = "Internal Server Error"):
        self.message = message
        super().__init__(message)


class BadRequestError(JoblyError):
    """Malformed or disallowed input (400)."""
    status_code = 400

    def __init__(self, message: Union[str, list[str]] = "Bad Request"):
        super().__init__(message)


class UnauthorizedError(JoblyError):
    """Missing or insufficient credentials (401)."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(JoblyError):
    """Primary key or referenced entity does not exist (404)."""
    status_code = 404

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)


class NoMatchingJobsError(NotFoundError):
    """The global job listing matched nothing under the given filter."""

    def __init__(self, message: str = "No jobs matched the filter"):
        super().__init__(message)


class ConflictError(JoblyError):
    """Unique constraint would be violated (409)."""
    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)


def constraint_violation(exc: IntegrityError) -> Optional[str]:
    """
    Return the SQLSTATE of an integrity failure.

    asyncpg exposes `sqlstate`/`pgcode` on the wrapped driver error. SQLite
    has no SQLSTATE, so its message text is mapped onto the same codes.
    Returns None when the violation kind cannot be told.
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code

    message = str(orig)
    if "FOREIGN KEY constraint failed" in message:
        return FOREIGN_KEY_VIOLATION
    if "UNIQUE constraint failed" in message:
        return UNIQUE_VIOLATION
    return None


def error_messages(errors) -> list[str]:
    """Flatten pydantic errors into "<location>: <message>" strings."""
    return [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in errors
    ]


async def jobly_error_handler(request: Request, exc: JoblyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures are reported as 400 with one message per field."""
    return JSONResponse(status_code=400, content={"detail": error_messages(exc.errors())})
