"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, request validation and unexpected) and return consistent JSON
responses with proper HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 404, 500)
- RequestValidationError → 422 with field errors in details
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from todo_api.core.errors import AppError, NotFoundAppError, StorageAppError
from todo_api.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, StorageAppError):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Routes domain errors to appropriate HTTP status codes:
    - ValidationAppError → 400 Bad Request (client fault)
    - NotFoundAppError → 404 Not Found
    - StorageAppError → 500 Internal Server Error (server fault)

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    # Storage details stay in the logs
    if exc.details and not isinstance(exc, StorageAppError):
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI request validation failures in the shared error shape."""
    errors = jsonable_encoder(exc.errors())
    logger.info(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "request_method": request.method,
            "error_count": len(errors),
        },
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "request_validation_error",
                "message": "Request payload or parameters are invalid",
                "request_id": get_request_id(),
                "details": {"errors": errors},
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic message.
    No stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Specific handlers are registered before the general fallback.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
