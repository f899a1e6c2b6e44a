"""Global exception handlers for consistent error responses.

Design:
- ValidationAppError → 400 (caller fault)
- UpstreamBackoffError → 503 with Retry-After (try again later)
- UpstreamAppError → 502 (remote API answered with something unusable)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for log correlation
"""

import logging
import math

from fastapi import Request
from fastapi.responses import JSONResponse

from bnc_gateway.core.errors import (
    AppError,
    UpstreamAppError,
    UpstreamBackoffError,
    ValidationAppError,
)
from bnc_gateway.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, UpstreamBackoffError):
        return 503
    if isinstance(exc, UpstreamAppError):
        return 502
    if isinstance(exc, ValidationAppError):
        return 400
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors as ``{"error": {code, message, request_id, details?}}``.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers: dict[str, str] = {}
    if isinstance(exc, UpstreamBackoffError):
        # Retry-After is whole seconds; never round a wait down.
        headers["Retry-After"] = str(math.ceil(exc.retry_after_seconds))

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure and returns a generic message; no implementation
    details reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
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
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
