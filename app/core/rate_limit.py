"""Rate limiting dependency for FastAPI routes.

This module wires the named rate limiters into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: limiters live behind an abstract interface in the service
  container, so storage can move to Redis without touching routes.
- Layering: the general-traffic middleware and a route-class limiter are
  checked independently; denial by either one denies the request.

Rate limiting strategy:
- Fixed window per client identifier (see ``app.core.client_identity``).
- Route classes: "general" (middleware), "api" and "auth" (dependencies).
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, MutableMapping

from fastapi import Depends, Request, Response
from fastapi.responses import JSONResponse

from app.adapters.rate_limit.base import RateLimitResult
from app.core.client_identity import resolve_client_identifier
from app.core.container import ServiceContainer, get_container
from app.core.errors import RateLimitExceededError
from app.core.logging import hash_for_logs

logger = logging.getLogger(__name__)

DEFAULT_DENIAL_MESSAGE = "Rate limit exceeded. Please try again later."

DENIAL_MESSAGES = {
    "general": DEFAULT_DENIAL_MESSAGE,
    "api": "API rate limit exceeded. Please try again later.",
    "auth": "Too many login attempts. Please try again later.",
}


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build the X-RateLimit-* headers (plus Retry-After when denied)."""

    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at),
    }
    if not result.allowed:
        headers["Retry-After"] = str(result.retry_after_seconds or 0)
    return headers


def apply_rate_limit_headers(
    target: MutableMapping[str, str],
    result: RateLimitResult,
    *,
    overwrite: bool = True,
) -> None:
    """Copy rate limit headers onto a response header mapping.

    Args:
        target: Response headers to update.
        result: Limiter decision for the current request.
        overwrite: When False, existing headers are kept (``setdefault``).
    """

    for name, value in rate_limit_headers(result).items():
        if overwrite:
            target[name] = value
        else:
            target.setdefault(name, value)


def build_rate_limited_response(
    result: RateLimitResult,
    *,
    message: str = DEFAULT_DENIAL_MESSAGE,
    include_headers: bool = True,
) -> JSONResponse:
    """Build the 429 response returned to throttled clients."""

    retry_after = result.retry_after_seconds or 0
    headers = rate_limit_headers(result) if include_headers else {"Retry-After": str(retry_after)}
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too Many Requests",
            "message": message,
            "retryAfter": retry_after,
        },
        headers=headers,
    )


def check_request(
    container: ServiceContainer,
    limiter_name: str,
    request: Request,
) -> tuple[str, RateLimitResult]:
    """Resolve the client identifier and run one named limiter for it.

    Returns:
        Tuple of (identifier, result).
    """

    identifier = resolve_client_identifier(request.headers)
    limiter = container.limiters.get(limiter_name)
    result = limiter.check(identifier)

    log_extra = {
        "limiter": limiter_name,
        "client_hash": hash_for_logs(identifier),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_s": limiter.window_seconds,
        "path": request.url.path,
    }
    if result.allowed:
        logger.debug("rate_limit.allowed", extra=log_extra)
    else:
        logger.warning(
            "rate_limit.exceeded",
            extra={**log_extra, "retry_after_s": result.retry_after_seconds},
        )
    return identifier, result


def enforce_rate_limit(limiter_name: str) -> Callable[..., Awaitable[None]]:
    """Create a FastAPI dependency enforcing the named limiter.

    Usage:
        @router.post("/auth/login", dependencies=[Depends(enforce_rate_limit("auth"))])

    Args:
        limiter_name: Registry name of the limiter ("api", "auth", ...).

    Returns:
        Dependency that writes X-RateLimit-* headers on success and raises
        RateLimitExceededError when the limiter denies the request.
    """

    async def _dependency(
        request: Request,
        response: Response,
        container: ServiceContainer = Depends(get_container),
    ) -> None:
        cfg = container.settings.rate_limit
        if not cfg.enabled:
            return

        _, result = check_request(container, limiter_name, request)
        if not result.allowed:
            raise RateLimitExceededError(
                limiter=limiter_name,
                result=result,
                message=DENIAL_MESSAGES.get(limiter_name, DEFAULT_DENIAL_MESSAGE),
            )

        if cfg.include_headers:
            apply_rate_limit_headers(response.headers, result)

    _dependency.__name__ = f"enforce_{limiter_name}_rate_limit"
    return _dependency
