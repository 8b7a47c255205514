"""Login, logout and current-user resolution on top of the session store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.adapters.session.base import AbstractSessionStore, SessionCreated
from app.core.errors import AuthenticationAppError
from app.schemas.auth import User
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    session: SessionCreated


class AuthService:
    """Orchestrates credential checks and session lifecycle.

    Args:
        users: Directory used to verify credentials.
        sessions: Store holding active sessions.
    """

    def __init__(self, *, users: UserDirectory, sessions: AbstractSessionStore) -> None:
        self._users = users
        self._sessions = sessions

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and open a new session.

        Raises:
            AuthenticationAppError: If email or password do not match.
            SessionTokenError: If no session token could be generated.
        """

        user = self._users.authenticate(email, password)
        if user is None:
            logger.warning("auth.login_failed", extra={"reason": "invalid_credentials"})
            raise AuthenticationAppError(
                code="invalid_credentials",
                message="Invalid credentials",
            )

        session = self._sessions.create(user)
        logger.info("auth.login_succeeded", extra={"user_id": user.id, "role": user.role})
        return LoginResult(user=user, session=session)

    def logout(self, session_id: str | None) -> None:
        if session_id:
            self._sessions.revoke(session_id)

    def current_user(self, session_id: str | None) -> User | None:
        if not session_id:
            return None
        return self._sessions.lookup(session_id)
