"""
Service exceptions and the handlers that turn them into JSON error bodies.
"""

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class UserNotFoundException(ServiceException):
    """Raised when a user profile cannot be built."""
    pass


class AnalyticsUnavailableException(ServiceException):
    """Raised when connection history cannot be read."""
    pass


def _error(status_code: int, error: str, type_name: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "type": type_name},
    )


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    status_code = 404 if isinstance(exc, UserNotFoundException) else 500
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    return _error(status_code, str(exc), exc.__class__.__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, exc.detail, "HTTPException")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors (400), not 422s."""
    return _error(400, "Invalid request body", "RequestValidationError")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error in {request.url.path}")
    return _error(500, "Internal server error", "InternalError")
