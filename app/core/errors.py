"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict

from app.adapters.rate_limit.base import RateLimitResult


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: float
    limiter: str
    required_role: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when a request carries no valid credentials or session."""


class AuthorizationAppError(AppError):
    """Raised when an authenticated user lacks the required role."""


class SessionTokenError(AppError):
    """Raised when a session token cannot be generated.

    This is the only unrecoverable condition of the session store; it is
    surfaced as an internal error instead of degrading silently.
    """


class RateLimitExceededError(Exception):
    """Raised by the HTTP gate to short-circuit a throttled request.

    Limiters themselves never raise; they return ``allowed=False``. The gate
    converts that result into this exception so FastAPI can answer with 429.
    """

    def __init__(self, *, limiter: str, result: RateLimitResult, message: str) -> None:
        super().__init__(message)
        self.limiter = limiter
        self.result = result
        self.message = message
