"""Global exception handlers for consistent error responses.

Design:
- RateLimitExceededError → 429 with the throttling body and headers
- AppError subclasses → appropriate HTTP status (400, 401, 403, 500)
- Unexpected Exception → generic 500 (safety net), also raised as an alert
- AppError and 500 responses include request_id for tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    AuthorizationAppError,
    RateLimitExceededError,
    SessionTokenError,
)
from app.core.logging import get_request_id
from app.core.rate_limit import build_rate_limited_response

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    # The catch-all handler runs outside request_id_middleware, after the
    # context variable has been cleared; request.state still holds the id.
    return get_request_id() or getattr(request.state, "request_id", None)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, AuthenticationAppError):
        return 401
    if isinstance(exc, AuthorizationAppError):
        return 403
    if isinstance(exc, SessionTokenError):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Routes domain errors to appropriate HTTP status codes:
    - ValidationAppError → 400 Bad Request (client fault)
    - AuthenticationAppError → 401 Unauthorized (no valid session)
    - AuthorizationAppError → 403 Forbidden (insufficient role)
    - SessionTokenError → 500 Internal Server Error (server fault)

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = _status_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
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
        "request_id": _request_id(request),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceededError
) -> JSONResponse:
    """Turn a route-level limiter denial into a 429 response."""

    include_headers = request.app.state.container.settings.rate_limit.include_headers
    return build_rate_limited_response(
        exc.result,
        message=exc.message,
        include_headers=include_headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure, counts it towards the endpoint's alert threshold and
    returns a generic message without implementation details.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    request_id = _request_id(request)
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": request_id,
        },
    )

    container = request.app.state.container
    container.alerts.send_alert(
        "error",
        "Unhandled exception",
        tags={"endpoint": request.url.path, "error_type": type(exc).__name__},
        context={"request_method": request.method, "request_id": request_id},
    )

    headers = {}
    if request_id:
        headers[container.settings.log.request_id_header] = request_id

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": request_id,
            }
        },
        headers=headers,
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Must be called during app initialization, before route registration.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(RateLimitExceededError)(rate_limit_exceeded_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
