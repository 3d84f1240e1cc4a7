"""Global exception handlers rendering errors as the response envelope.

Design:
- ValidationAppError → 400 Bad Request
- ResolutionAppError → 502 Bad Gateway
- Other AppError → 500
- Unexpected Exception → generic 500 (safety net, no internals leaked)

Every body is an ``ApiResponse`` with ``data: null``. Rate-limit rejections
are not routed through here; they keep the admission layer's own body.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from dnsqueryx.core.errors import (
    CODE_INTERNAL_ERROR,
    AppError,
    ResolutionAppError,
    ValidationAppError,
)
from dnsqueryx.core.logging import get_request_id
from dnsqueryx.schemas.envelope import ApiResponse

logger = logging.getLogger(__name__)


def status_for_error(exc: AppError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, ValidationAppError):
        return 400
    if isinstance(exc, ResolutionAppError):
        return 502
    return 500


def _envelope_response(status_code: int, code: str, msg: str) -> JSONResponse:
    body = ApiResponse[None].fail(code, msg)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    The envelope carries the error's own code and message; the message is
    passed through unchanged (for resolution failures that is the
    resolver's error text).

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code and failure envelope.
    """
    status_code = status_for_error(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "details": exc.details or {},
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return _envelope_response(status_code, exc.code, exc.message)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the error type and message for debugging while returning a generic
    message to the client.
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

    return _envelope_response(500, CODE_INTERNAL_ERROR, "Internal server error")


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
