"""Session store interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.schemas.auth import User


@dataclass(frozen=True)
class SessionCreated:
    """Handle returned to the caller when a session is opened.

    Attributes:
        session_id: Opaque, unguessable token identifying the session.
        expires_at: UNIX epoch milliseconds after which the session is gone.
    """

    session_id: str
    expires_at: int


class AbstractSessionStore(ABC):
    """Interface for session stores.

    Expired, revoked and never-created sessions are indistinguishable to
    callers: all of them look up as ``None``.
    """

    @property
    @abstractmethod
    def ttl_seconds(self) -> int:
        """Lifetime applied to every new session."""
        raise NotImplementedError

    @abstractmethod
    def create(self, user: User) -> SessionCreated:
        """Open a new session for ``user``.

        Raises:
            SessionTokenError: If no random token could be generated.
        """
        raise NotImplementedError

    @abstractmethod
    def lookup(self, session_id: str) -> User | None:
        """Return the session's user, or None when absent or expired."""
        raise NotImplementedError

    @abstractmethod
    def revoke(self, session_id: str) -> None:
        """Remove a session. Revoking an unknown id is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the number of sessions currently held."""
        raise NotImplementedError
