import logging
from typing import Dict, List, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError

from app.api.utils.response_payloads import error_response

logger = logging.getLogger("app")


class HelpdeskError(Exception):
    """
    Base class for domain errors raised by the service layer.

    Attributes:
        status_code: HTTP status the error is rendered with
        error: Machine-readable error code
        message: Human-readable description
        errors: Optional field-level details
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "ERROR"

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        self.message = message
        self.errors = errors or {}
        super().__init__(message)


class ValidationError(HelpdeskError):
    """A required field is missing or a reference does not resolve."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "VALIDATION_ERROR"


class InvalidTransitionError(HelpdeskError):
    """The requested status change is not an allowed edge."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "INVALID_TRANSITION"


class UnauthorizedError(HelpdeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "UNAUTHORIZED"


class ForbiddenError(HelpdeskError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "FORBIDDEN"


class NotFoundError(HelpdeskError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NOT_FOUND"


class ConflictError(HelpdeskError):
    status_code = status.HTTP_409_CONFLICT
    error = "CONFLICT"


async def helpdesk_exception_handler(request: Request, exc: HelpdeskError):
    """
    Render a domain error as a standardized JSON response.

    Args:
        request (Request): The incoming HTTP request.
        exc (HelpdeskError): The domain error raised by a service or dependency.

    Returns:
        JSONResponse: Error response carrying the exception's status and code.
    """
    logger.warning(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")

    response = error_response(
        status_code=exc.status_code,
        error=exc.error,
        message=exc.message,
        errors=exc.errors,
    )
    if isinstance(exc, UnauthorizedError):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic request validation errors and return a standardized JSON response.

    Validation failures are reported as 400 Bad Request, matching the
    status used for domain validation errors.

    Args:
        request (Request): The incoming HTTP request.
        exc (RequestValidationError): The validation error raised by FastAPI/Pydantic.

    Returns:
        JSONResponse: Standardized error response containing field-level validation messages.
    """
    errors = {}
    for err in exc.errors():
        loc = str(err["loc"][-1]) if err["loc"] else "body"
        msg = err["msg"]
        if msg.startswith("Value error,"):
            msg = msg.replace("Value error,", "").strip()
        errors.setdefault(loc, []).append(msg)

    return error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation failed",
        error="VALIDATION_ERROR",
        errors=errors,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions (4xx/5xx) and return a standardized JSON response.

    Args:
        request (Request): The incoming HTTP request.
        exc (HTTPException): The HTTP exception raised by FastAPI.

    Returns:
        JSONResponse: Standardized error response with HTTP status code and message.
    """
    logger.error(f"HTTP exception: {exc.detail} ({exc.status_code})")

    return error_response(
        status_code=exc.status_code,
        error="HTTP_ERROR",
        message=exc.detail,
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions and return a standardized JSON response.

    Args:
        request (Request): The incoming HTTP request.
        exc (Exception): The unhandled exception.

    Returns:
        JSONResponse: Standardized 500 error response.
    """
    logger.exception(f"Unhandled exception: {exc}")

    return error_response(
        status_code=500,
        error="INTERNAL_SERVER_ERROR",
        message="Internal server error",
    )
