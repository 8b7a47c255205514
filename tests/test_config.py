"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from app.core.config import RateLimitSettings, SessionSettings, Settings


def test_rate_limit_defaults() -> None:
    assert RateLimitSettings().limits() == {
        "general": (200, 60),
        "api": (100, 60),
        "auth": (5, 60),
    }


def test_rate_limits_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_AUTH_REQUESTS", "3")
    monkeypatch.setenv("RATE_LIMIT_AUTH_WINDOW_SECONDS", "900")

    assert RateLimitSettings().limits()["auth"] == (3, 900)


def test_non_positive_limits_rejected() -> None:
    with pytest.raises(ValidationError):
        RateLimitSettings(api_requests=0)


def test_session_defaults() -> None:
    session = SessionSettings()

    assert session.ttl_seconds == 604800
    assert session.cookie_name == "auth_session"


@pytest.mark.parametrize(
    ("app_env", "cookie_secure", "expected"),
    [
        ("production", None, True),
        ("development", None, False),
        ("testing", None, False),
        ("development", True, True),
        ("production", False, False),
    ],
)
def test_session_cookie_secure(app_env: str, cookie_secure, expected: bool) -> None:
    settings = Settings(app_env=app_env, session=SessionSettings(cookie_secure=cookie_secure))

    assert settings.session_cookie_secure is expected
