"""Cookie session authentication.

This module reads and writes the session cookie and exposes FastAPI
dependencies resolving the current user from it.

Design principles:
- Cookie parsing works on any header-lookup object, not on a framework
  request type.
- A missing, malformed or undecodable cookie means "no session", never an
  error.
- Dependencies resolve services from the container, so tests can inject
  isolated stores.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable
from urllib.parse import quote, unquote

from fastapi import Depends, Request

from app.core.client_identity import HeaderSource
from app.core.container import ServiceContainer, get_container
from app.core.errors import AuthenticationAppError, AuthorizationAppError
from app.schemas.auth import Role, User

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "auth_session"


def parse_cookie_header(cookie_header: str | None) -> dict[str, str]:
    """Split a ``Cookie`` header into raw name/value pairs.

    Pairs without ``=`` are skipped. The first occurrence of a name wins.

    Examples:
        >>> parse_cookie_header("a=1; b=2")
        {'a': '1', 'b': '2'}
        >>> parse_cookie_header("broken; a=1")
        {'a': '1'}
        >>> parse_cookie_header(None)
        {}
    """
    if not cookie_header:
        return {}

    cookies: dict[str, str] = {}
    for part in cookie_header.split(";"):
        name, sep, value = part.strip().partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        cookies.setdefault(name, value.strip())
    return cookies


def read_session_cookie(
    headers: HeaderSource,
    cookie_name: str = SESSION_COOKIE_NAME,
) -> str | None:
    """Return the decoded session token from the request's Cookie header.

    Args:
        headers: Request headers.
        cookie_name: Name of the session cookie.

    Returns:
        The token, or None if the cookie is missing, empty or its
        percent-encoding does not decode.
    """

    raw = parse_cookie_header(headers.get("cookie")).get(cookie_name)
    if not raw:
        return None

    try:
        value = unquote(raw, errors="strict")
    except UnicodeDecodeError:
        logger.debug("session.cookie_undecodable", extra={"cookie_name": cookie_name})
        return None

    return value or None


def build_session_cookie(
    session_id: str,
    *,
    max_age: int,
    secure: bool = False,
    cookie_name: str = SESSION_COOKIE_NAME,
) -> str:
    """Build the ``Set-Cookie`` value that opens a session."""

    cookie = (
        f"{cookie_name}={quote(session_id, safe='')}; HttpOnly; SameSite=Lax; "
        f"Max-Age={max_age}; Path=/"
    )
    if secure:
        cookie += "; Secure"
    return cookie


def build_clear_session_cookie(cookie_name: str = SESSION_COOKIE_NAME) -> str:
    """Build the ``Set-Cookie`` value that deletes the session cookie."""

    return f"{cookie_name}=; HttpOnly; SameSite=Lax; Max-Age=0; Path=/"


def get_session_id(
    request: Request,
    container: ServiceContainer = Depends(get_container),
) -> str | None:
    """FastAPI dependency returning the session token sent by the client."""

    return read_session_cookie(request.headers, container.settings.session.cookie_name)


def get_current_user(
    session_id: str | None = Depends(get_session_id),
    container: ServiceContainer = Depends(get_container),
) -> User | None:
    """FastAPI dependency resolving the session's user, or None."""

    return container.auth.current_user(session_id)


def require_user(user: User | None = Depends(get_current_user)) -> User:
    """FastAPI dependency requiring an authenticated user.

    Raises:
        AuthenticationAppError: 401 when there is no valid session.
    """

    if user is None:
        logger.info("auth.not_authenticated")
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Not authenticated",
        )
    return user


def require_role(role: Role) -> Callable[..., Awaitable[User]]:
    """Create a dependency requiring ``role``; admins satisfy every role.

    Usage:
        @router.get("/admin/report", dependencies=[Depends(require_role("admin"))])
    """

    async def _dependency(user: User = Depends(require_user)) -> User:
        if user.role != role and user.role != "admin":
            logger.warning(
                "auth.forbidden",
                extra={"user_id": user.id, "role": user.role, "required_role": role},
            )
            raise AuthorizationAppError(
                code="forbidden",
                message=f"Role {role} required",
                details={"required_role": role},
            )
        return user

    return _dependency
