"""In-memory session store with TTL expiry.

Notes:
- Per-process only: sessions are lost on restart and are not shared between
  workers or replicas.
- Thread-safe: every read-modify-write, including sweeps, runs under one lock.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.session.base import AbstractSessionStore, SessionCreated
from app.core.errors import SessionTokenError
from app.core.logging import hash_for_logs
from app.schemas.auth import User

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_session_token() -> str:
    """Return a URL-safe token with 256 bits of randomness."""

    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass
class _SessionEntry:
    user: User
    expires_at_ms: int


class InMemorySessionStore(AbstractSessionStore):
    """Maps opaque tokens to users until the session expires or is revoked.

    Attributes:
        ttl_seconds: Lifetime applied to every new session.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
        token_factory: Callable[[], str] = generate_session_token,
    ) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        self._ttl = ttl_seconds
        self._clock = clock
        self._token_factory = token_factory
        self._lock = threading.RLock()
        self._sessions: dict[str, _SessionEntry] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemorySessionStore(ttl_seconds={self._ttl}, size={len(self._sessions)})"

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def create(self, user: User) -> SessionCreated:
        """Open a session for ``user`` lasting ``ttl_seconds``.

        Args:
            user: Authenticated user to bind to the new token.

        Returns:
            SessionCreated with the token and its expiry (epoch ms).

        Raises:
            SessionTokenError: If the system randomness source fails.
        """

        try:
            session_id = self._token_factory()
        except (OSError, NotImplementedError) as exc:
            logger.error(
                "session.token_generation_failed",
                extra={"error_type": type(exc).__name__},
            )
            raise SessionTokenError(
                code="session_token_unavailable",
                message="Could not generate a session token",
            ) from exc

        with self._lock:
            expires_at = self._now_ms() + self._ttl * 1000
            self._sessions[session_id] = _SessionEntry(user=user, expires_at_ms=expires_at)
            size = len(self._sessions)

        logger.info(
            "session.created",
            extra={
                "session_hash": hash_for_logs(session_id),
                "user_id": user.id,
                "ttl_s": self._ttl,
                "size": size,
            },
        )
        return SessionCreated(session_id=session_id, expires_at=expires_at)

    def lookup(self, session_id: str) -> User | None:
        """Return the user bound to ``session_id``.

        An expired entry is removed on this read and reported as absent.

        Args:
            session_id: Token previously returned by ``create``.

        Returns:
            The session's user, or None if absent or expired.
        """

        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None

            if self._now_ms() >= entry.expires_at_ms:
                del self._sessions[session_id]
                logger.debug(
                    "session.expired",
                    extra={"session_hash": hash_for_logs(session_id)},
                )
                return None

            return entry.user

    def revoke(self, session_id: str) -> None:
        """Remove ``session_id`` if present."""

        with self._lock:
            removed = self._sessions.pop(session_id, None)

        if removed is not None:
            logger.info(
                "session.revoked",
                extra={
                    "session_hash": hash_for_logs(session_id),
                    "user_id": removed.user.id,
                },
            )

    def purge_expired(self) -> int:
        """Remove every session whose expiry has passed.

        Returns:
            Number of sessions removed.
        """

        with self._lock:
            now_ms = self._now_ms()
            expired = [k for k, e in self._sessions.items() if e.expires_at_ms < now_ms]
            for key in expired:
                del self._sessions[key]
            return len(expired)

    def count(self) -> int:
        """Return the number of held sessions, expired-but-unswept included."""

        with self._lock:
            return len(self._sessions)
