"""Error taxonomy and the JSON error envelope.

Learn: Services and auth code raise these exceptions; the handlers
registered in main.py turn them into responses of the form
{"status": "error", "message": "..."}. The message is always a fixed,
client-safe string. Anything internal (SQL errors, hashing failures)
is logged server-side and reaches the client only as "Internal server error".
"""

from enum import Enum
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.db.models import UnknownTaskStatusError

logger = structlog.get_logger()


class ResourceKind(str, Enum):
    """Resource types that go through ownership checks."""

    PROJECT = "project"
    TASK = "task"


class AppError(Exception):
    """Base class for errors rendered as the JSON error envelope."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None


class LoginFail(AppError):
    """Unknown username or wrong password. Same response for both."""

    status_code = 401
    message = "Login failed"


class AuthFail(AppError):
    """Missing, malformed, expired or forged token, or a vanished principal."""

    status_code = 401
    message = "Authentication failed"

    @property
    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class ResourceNotFound(AppError):
    status_code = 404

    def __init__(self, kind: ResourceKind):
        self.kind = kind
        super().__init__(f"{kind.value.capitalize()} not found")


class ResourceUnauthorized(AppError):
    status_code = 403

    def __init__(self, kind: ResourceKind):
        self.kind = kind
        super().__init__(f"Forbidden access to {kind.value}")


class Conflict(AppError):
    status_code = 409
    message = "Conflict"


class BadRequest(AppError):
    status_code = 400
    message = "Bad request"


class Internal(AppError):
    """Database, hashing or signing failure. Detail is never sent to clients."""

    status_code = 500
    message = "Internal server error"


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
        headers=exc.headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request.internal_error",
            path=request.url.path,
            error=repr(exc.__cause__ or exc),
        )
    else:
        logger.info(
            "request.rejected",
            path=request.url.path,
            status_code=exc.status_code,
            error=type(exc).__name__,
        )
    return error_response(exc)


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.error(
        "request.database_error",
        path=request.url.path,
        error=repr(exc),
        exc_info=exc,
    )
    return error_response(Internal())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: anything that isn't an AppError still gets the envelope."""
    logger.error(
        "request.unhandled_error",
        path=request.url.path,
        error=repr(exc),
        exc_info=exc,
    )
    return error_response(Internal())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    # Raised while loading rows, outside SQLAlchemyError.
    app.add_exception_handler(UnknownTaskStatusError, unhandled_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
