"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state, including sweeps.
- Windows start at a key's first request, not on clock-aligned boundaries.
  A client may send ``limit`` requests right before its window resets and
  another ``limit`` right after, so up to twice the limit can pass in a
  short burst around a boundary.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowState:
    count: int
    reset_at_ms: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    Each key gets a window of ``window_seconds`` starting at its first
    request. Up to ``limit`` requests pass inside that window; later ones are
    denied until the window elapses, at which point the record is replaced by
    a fresh one.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed requests per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        window_ms = int(round(window_seconds * 1000))
        if window_ms < 1:
            raise ValueError("window_seconds must be at least 1 millisecond")

        self._limit = limit
        self._window_seconds = window_seconds
        self._window_ms = window_ms
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryFixedWindowRateLimiter(limit={self._limit}, "
            f"window_seconds={self._window_seconds}, keys={len(self._state_by_key)})"
        )

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _build_allowed_result(self, *, remaining: int, reset_at: int) -> RateLimitResult:
        """Build a RateLimitResult for an allowed request."""
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=remaining,
            reset_at=reset_at,
            retry_after_seconds=None,
        )

    def _build_blocked_result(self, *, now_ms: int, reset_at: int) -> RateLimitResult:
        """Build a RateLimitResult for a blocked request."""
        retry_after = max(0, int(math.ceil((reset_at - now_ms) / 1000)))
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

    def check(self, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier``.

        A missing or elapsed record is replaced by a new window holding this
        request. A full window denies without touching the record. Otherwise
        the count is incremented.

        Args:
            identifier: Bucketing key (e.g., client IP address).

        Returns:
            RateLimitResult with allowance decision and metadata.
        """
        with self._lock:
            now_ms = self._now_ms()
            state = self._state_by_key.get(identifier)

            if state is None or now_ms >= state.reset_at_ms:
                state = _WindowState(count=1, reset_at_ms=now_ms + self._window_ms)
                self._state_by_key[identifier] = state
                return self._build_allowed_result(
                    remaining=self._limit - 1,
                    reset_at=state.reset_at_ms,
                )

            if state.count >= self._limit:
                return self._build_blocked_result(now_ms=now_ms, reset_at=state.reset_at_ms)

            state.count += 1
            return self._build_allowed_result(
                remaining=self._limit - state.count,
                reset_at=state.reset_at_ms,
            )

    def purge_expired(self) -> int:
        """Remove records whose window has already elapsed.

        Returns:
            Number of records removed.
        """
        with self._lock:
            now_ms = self._now_ms()
            expired = [k for k, s in self._state_by_key.items() if s.reset_at_ms < now_ms]
            for key in expired:
                del self._state_by_key[key]
            return len(expired)

    def tracked_keys(self) -> int:
        """Return the number of identifiers currently holding a record."""
        with self._lock:
            return len(self._state_by_key)
