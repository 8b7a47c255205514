"""In-memory user directory.

Stands in for a real user database. Passwords are compared in plain text
against a single demo password; there is no hashing or credential storage.
"""

from __future__ import annotations

import hmac
from typing import Iterable

from app.schemas.auth import User

DEMO_PASSWORD = "password123"

DEFAULT_USERS: tuple[User, ...] = (
    User(id="1", email="admin@example.com", name="Admin User", role="admin"),
    User(id="2", email="user@example.com", name="Regular User", role="user"),
)


class UserDirectory:
    """Looks up reference users by email and checks the demo password."""

    def __init__(
        self,
        users: Iterable[User] = DEFAULT_USERS,
        *,
        password: str = DEMO_PASSWORD,
    ) -> None:
        self._users_by_email = {u.email.lower(): u for u in users}
        self._password = password

    def get_by_email(self, email: str) -> User | None:
        return self._users_by_email.get(email.strip().lower())

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when both email and password match, else None."""

        user = self.get_by_email(email)
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        if user is None or not password_ok:
            return None
        return user
