"""HTTP middleware: request correlation and the general-traffic gate.

``request_id_middleware``:
- Accepts incoming X-Request-ID header or generates a UUID
- Stores request_id in contextvars for access throughout the request lifecycle,
  and on request.state for handlers that run after the context is cleared
- Injects request_id and total duration into response headers
- Clears context after request completion to prevent context leaks

``rate_limit_middleware``:
- Checks the "general" limiter for every request outside the exempt paths
- Short-circuits with 429 when denied, reporting the event as a warning
- Adds X-RateLimit-* headers without overriding those set by a stricter
  route-class limiter

Usage:
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from app.adapters.rate_limit.registry import GENERAL
from app.core.logging import clear_request_id, set_request_id
from app.core.rate_limit import (
    DENIAL_MESSAGES,
    apply_rate_limit_headers,
    build_rate_limited_response,
    check_request,
)

RATE_LIMIT_EXEMPT_PREFIXES: tuple[str, ...] = (
    "/api/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
)


async def request_id_middleware(request: Request, call_next) -> Response:
    """HTTP middleware for request ID generation and propagation.

    If the client provides an X-Request-ID header (configurable via
    LOG_REQUEST_ID_HEADER), that value is used. Otherwise, a new UUID is
    generated.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The response from the next handler with request_id and
            duration headers added.
    """

    header_name = request.app.state.container.settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    request.state.request_id = request_id
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """Coarse per-client gate applied to all non-exempt traffic."""

    container = request.app.state.container
    cfg = container.settings.rate_limit
    path = request.url.path

    if not cfg.enabled or path.startswith(RATE_LIMIT_EXEMPT_PREFIXES):
        return await call_next(request)

    identifier, result = check_request(container, GENERAL, request)
    if not result.allowed:
        container.reporter.capture_message(
            "Rate limit exceeded",
            level="warning",
            tags={"path": path, "limiter": GENERAL},
            extra={"identifier": identifier, "retry_after_s": result.retry_after_seconds},
        )
        return build_rate_limited_response(
            result,
            message=DENIAL_MESSAGES[GENERAL],
            include_headers=cfg.include_headers,
        )

    response: Response = await call_next(request)
    if cfg.include_headers:
        apply_rate_limit_headers(response.headers, result, overwrite=False)
    return response
