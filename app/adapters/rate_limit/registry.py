"""Named rate limiter instances.

Each route class ("general", "api", "auth") owns its own limiter with its own
capacity and window. Instances never share records, so a request can be
checked against several of them independently.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, Mapping

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

logger = logging.getLogger(__name__)

GENERAL = "general"
API = "api"
AUTH = "auth"


class RateLimiterRegistry:
    """Holds the limiter instances used by the request gate."""

    def __init__(self, limiters: Mapping[str, AbstractRateLimiter]) -> None:
        self._limiters: dict[str, AbstractRateLimiter] = dict(limiters)

    @classmethod
    def from_limits(
        cls,
        limits: Mapping[str, tuple[int, float]],
        *,
        clock: Callable[[], float] = time.time,
    ) -> "RateLimiterRegistry":
        """Build in-memory limiters from ``{name: (requests, window_seconds)}``."""

        return cls(
            {
                name: InMemoryFixedWindowRateLimiter(
                    limit=requests,
                    window_seconds=window_seconds,
                    clock=clock,
                )
                for name, (requests, window_seconds) in limits.items()
            }
        )

    def get(self, name: str) -> AbstractRateLimiter:
        """Return the limiter registered under ``name``.

        Raises:
            KeyError: If no limiter has that name.
        """

        try:
            return self._limiters[name]
        except KeyError:
            raise KeyError(f"unknown rate limiter: {name!r}") from None

    def names(self) -> list[str]:
        return list(self._limiters)

    def __iter__(self) -> Iterator[tuple[str, AbstractRateLimiter]]:
        return iter(self._limiters.items())

    def purge_expired(self) -> int:
        """Sweep every limiter and return the total number of records dropped."""

        removed_total = 0
        for name, limiter in self._limiters.items():
            removed = limiter.purge_expired()
            removed_total += removed
            if removed:
                logger.debug(
                    "rate_limit.purged",
                    extra={"limiter": name, "removed": removed},
                )
        return removed_total
