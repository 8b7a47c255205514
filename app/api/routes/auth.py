from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from app.core.auth import (
    build_clear_session_cookie,
    build_session_cookie,
    get_session_id,
    require_user,
)
from app.core.container import ServiceContainer, get_container
from app.core.rate_limit import enforce_rate_limit
from app.schemas.auth import CurrentUserResponse, LoginRequest, LoginResponse, LogoutResponse, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

NO_STORE = "no-store, no-cache, must-revalidate"


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(enforce_rate_limit("auth"))],
)
def login(
    payload: LoginRequest,
    response: Response,
    container: ServiceContainer = Depends(get_container),
) -> LoginResponse:
    """Log in with email and password.

    Opens a session and returns it in the ``auth_session`` cookie. The token
    itself is never part of the response body.

    Raises:
        AuthenticationAppError: 401 if the credentials do not match.
        SessionTokenError: 500 if no session token could be generated.
    """
    result = container.auth.login(payload.email, payload.password)

    response.headers.append(
        "Set-Cookie",
        build_session_cookie(
            result.session.session_id,
            max_age=container.sessions.ttl_seconds,
            secure=container.settings.session_cookie_secure,
            cookie_name=container.settings.session.cookie_name,
        ),
    )
    response.headers["Cache-Control"] = NO_STORE
    return LoginResponse(user=result.user)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    dependencies=[Depends(enforce_rate_limit("api"))],
)
def logout(
    response: Response,
    session_id: str | None = Depends(get_session_id),
    container: ServiceContainer = Depends(get_container),
) -> LogoutResponse:
    """Revoke the current session (if any) and clear the cookie.

    Always succeeds, so repeated logouts are harmless.
    """
    container.auth.logout(session_id)

    response.headers.append(
        "Set-Cookie",
        build_clear_session_cookie(container.settings.session.cookie_name),
    )
    response.headers["Cache-Control"] = NO_STORE
    return LogoutResponse()


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    dependencies=[Depends(enforce_rate_limit("api"))],
)
def me(response: Response, user: User = Depends(require_user)) -> CurrentUserResponse:
    """Return the user bound to the session cookie, or 401."""

    response.headers["Cache-Control"] = "private, max-age=30"
    return CurrentUserResponse(user=user)
