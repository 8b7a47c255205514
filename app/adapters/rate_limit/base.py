"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window (the limiter's capacity).
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch milliseconds when the current window resets.
        retry_after_seconds: Seconds until reset, rounded up, when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum number of requests allowed per window."""
        raise NotImplementedError

    @property
    @abstractmethod
    def window_seconds(self) -> float:
        """Length of a window in seconds."""
        raise NotImplementedError

    @abstractmethod
    def check(self, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier`` and decide whether it may pass.

        Implementations must be total: any identifier string yields a result,
        and denial is reported via ``allowed=False`` rather than an exception.

        Args:
            identifier: Bucketing key (e.g., client IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop records whose window has elapsed.

        Returns:
            Number of records removed.
        """
        raise NotImplementedError

    @abstractmethod
    def tracked_keys(self) -> int:
        """Return the number of identifiers currently holding a record."""
        raise NotImplementedError
