"""
Domain exceptions and their HTTP translation.

Services raise these; the handlers registered by ``setup_error_handlers``
turn them into ``{"message": ...}`` responses. Anything unexpected becomes a
500 that passes the exception message through.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


class AgriLoopError(Exception):
    """Base exception for API errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidRequestError(AgriLoopError):
    """The request is well-formed JSON but cannot be honoured."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AgriLoopError):
    """Credentials are missing, wrong or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(AgriLoopError):
    """The caller is authenticated but may not perform the action."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not authorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFoundError(AgriLoopError):
    """The addressed document does not exist (or is not visible to the caller)."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        super().__init__(f"{resource} not found", {"resource": resource, "id": resource_id})


class DuplicateError(InvalidRequestError):
    """A unique field is already taken."""


def setup_error_handlers(app: FastAPI) -> None:
    """
    Register exception handlers on the app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AgriLoopError)
    async def agriloop_error_handler(request: Request, exc: AgriLoopError):
        logger.warning(
            "request_rejected",
            path=request.url.path,
            status_code=exc.status_code,
            message=exc.message,
            details=exc.details,
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "validation_error",
            path=request.url.path,
            errors=exc.errors()
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _jsonable_errors(exc.errors())}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "http_exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unexpected_exception",
            path=request.url.path,
            error=str(exc),
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Server error", "error": str(exc)}
        )


def _jsonable_errors(errors):
    # pydantic puts the raw exception under ctx["error"] for custom validators
    cleaned = []
    for error in errors:
        error = dict(error)
        ctx = error.get("ctx")
        if ctx:
            error["ctx"] = {key: str(value) for key, value in ctx.items()}
        error.pop("input", None)
        cleaned.append(error)
    return cleaned
