"""Global exception handlers.

Every error leaves the service as ``{"error": {code, message, request_id}}``.
Client faults may carry ``details``; server-side failures keep them in the
logs. Rate-limit rejections also carry the ``Retry-After`` and
``X-RateLimit-*`` headers.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meeting_edge.core.errors import (
    AppError,
    AuthenticationAppError,
    RateLimitAppError,
    SerializationAppError,
    StoreAppError,
)
from meeting_edge.core.logging import get_request_id

logger = logging.getLogger(__name__)

# Checked in order; anything not listed is a client fault (400).
_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (AuthenticationAppError, 401),
    (RateLimitAppError, 429),
    (SerializationAppError, 500),
    (StoreAppError, 500),
)


def status_for(exc: AppError) -> int:
    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status_code
    return 400


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str] | None:
    details = exc.details
    if not details:
        return None
    return {
        "Retry-After": str(details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(details.get("limit", 0)),
        "X-RateLimit-Remaining": str(details.get("remaining", 0)),
        "X-RateLimit-Reset": str(details.get("reset_at", 0)),
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Turn an ``AppError`` into its JSON error response.

    Args:
        request: Incoming request.
        exc: The raised application error.

    Returns:
        JSON response with the status mapped from the error class.
    """
    status_code = status_for(exc)
    request_id = get_request_id()

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_method": request.method,
            "request_path": request.url.path,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": request_id,
    }
    if exc.details and status_code < 500:
        error_content["details"] = exc.details

    headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitAppError) else None
    return JSONResponse(status_code=status_code, content={"error": error_content}, headers=headers)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer unexpected errors with a generic 500; the cause stays in the logs."""
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "request_method": request.method,
            "request_path": request.url.path,
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


def setup_exception_handlers(app: FastAPI) -> None:
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
