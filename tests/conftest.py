"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets the environment before any module reads settings, and provides a
controllable clock plus isolated service containers per test.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_REPORTER", "none")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import RateLimitSettings, SessionSettings, Settings
from app.core.container import ServiceContainer, build_container
from app.core.reporting import AbstractReporter


class FakeClock:
    """Deterministic clock returning UNIX seconds, advanced manually."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingReporter(AbstractReporter):
    """Reporter keeping every captured message for assertions."""

    def __init__(self) -> None:
        self.messages: list[dict] = []

    def capture_message(self, message, *, level="info", tags=None, extra=None) -> None:
        self.messages.append(
            {"message": message, "level": level, "tags": dict(tags or {}), "extra": dict(extra or {})}
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        app_env="testing",
        rate_limit=RateLimitSettings(
            general_requests=200,
            general_window_seconds=60,
            api_requests=100,
            api_window_seconds=60,
            auth_requests=5,
            auth_window_seconds=60,
        ),
        session=SessionSettings(ttl_seconds=3600),
    )


@pytest.fixture
def container(settings: Settings, clock: FakeClock, reporter: RecordingReporter) -> ServiceContainer:
    return build_container(settings, clock=clock, reporter=reporter)


@pytest.fixture
def app(container: ServiceContainer) -> FastAPI:
    return create_app(container=container)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
