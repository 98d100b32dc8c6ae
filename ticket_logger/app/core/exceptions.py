"""
Custom exceptions and error handlers for consistent error responses.

Every error leaves the API as JSON with a human-readable `message`.
Internal exception text is attached as `error` only in development.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("ticket_logger.errors")

ROUTE_NOT_FOUND_MESSAGE = "Route not found"


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class RequestValidationFailed(AppException):
    """Raised when an inbound payload has one or more invalid fields."""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__(
            message="Validation failed",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": errors},
        )
        self.errors = errors


class InvalidIdentifierError(AppException):
    """Raised when a path identifier is not an integer."""

    def __init__(self, resource: str = "ticket"):
        super().__init__(
            message=f"Invalid {resource} ID",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND)


class DatabaseUnavailableError(AppException):
    """Raised when the ticket store cannot be reached."""

    def __init__(self, reason: str):
        super().__init__(
            message="Database connection error. Please try again later.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.reason = reason


def _expose_details(request: Request) -> bool:
    app_settings = getattr(request.app.state, "settings", None)
    return bool(app_settings and app_settings.expose_error_details)


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    content: Dict[str, Any] = {"message": exc.message}
    if isinstance(exc, RequestValidationFailed):
        content["errors"] = exc.errors
    elif isinstance(exc, DatabaseUnavailableError):
        logger.error("Database unavailable: %s", exc.reason)
        if _expose_details(request):
            content["error"] = exc.reason
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler for framework HTTP errors (unmatched routes, wrong methods)."""
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = ROUTE_NOT_FOUND_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for validation errors raised by FastAPI parameter parsing."""
    errors = [
        {"field": str(error["loc"][-1]) if error.get("loc") else "request", "message": error["msg"]}
        for error in exc.errors()
    ]
    return await app_exception_handler(request, RequestValidationFailed(errors))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    content: Dict[str, Any] = {"message": "Internal server error"}
    if _expose_details(request):
        content["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
