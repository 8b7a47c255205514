"""Process-wide service objects.

Everything with shared mutable state is constructed once in
``build_container`` and stored on ``app.state``; request handlers reach it
through ``get_container``. Tests build their own containers to get isolated
limiters and session stores.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request

from app.adapters.rate_limit.registry import RateLimiterRegistry
from app.adapters.session.base import AbstractSessionStore
from app.adapters.session.in_memory import InMemorySessionStore
from app.core.config import Settings
from app.core.reporting import AbstractReporter, AlertManager, build_reporter
from app.core.sweeper import PeriodicSweeper
from app.services.auth_service import AuthService
from app.services.user_directory import UserDirectory

ALERT_RESET_INTERVAL_SECONDS = 60 * 60


@dataclass
class ServiceContainer:
    settings: Settings
    limiters: RateLimiterRegistry
    sessions: AbstractSessionStore
    users: UserDirectory
    auth: AuthService
    reporter: AbstractReporter
    alerts: AlertManager
    started_at: float
    clock: Callable[[], float] = time.time
    sweepers: list[PeriodicSweeper] = field(default_factory=list)

    async def start_background_tasks(self) -> None:
        for sweeper in self.sweepers:
            sweeper.start()

    async def stop_background_tasks(self) -> None:
        for sweeper in reversed(self.sweepers):
            await sweeper.stop()


def build_container(
    settings: Settings,
    *,
    clock: Callable[[], float] = time.time,
    reporter: AbstractReporter | None = None,
    users: UserDirectory | None = None,
) -> ServiceContainer:
    """Construct every service from configuration.

    Args:
        settings: Resolved application settings.
        clock: Time source (UNIX seconds) shared by limiters and sessions.
        reporter: Explicit reporter; defaults to the one named by
            ``settings.app.reporter``.
        users: Explicit user directory; defaults to the built-in users.
    """

    limiters = RateLimiterRegistry.from_limits(settings.rate_limit.limits(), clock=clock)
    sessions = InMemorySessionStore(ttl_seconds=settings.session.ttl_seconds, clock=clock)
    users = users or UserDirectory()
    reporter = reporter or build_reporter(settings.app.reporter)
    alerts = AlertManager(reporter, error_threshold=settings.app.alert_error_threshold)

    sweepers = [
        PeriodicSweeper(
            "rate_limit",
            interval_seconds=settings.rate_limit.sweep_interval_seconds,
            job=limiters.purge_expired,
        ),
        PeriodicSweeper(
            "sessions",
            interval_seconds=settings.session.sweep_interval_seconds,
            job=sessions.purge_expired,
        ),
        PeriodicSweeper(
            "alert_counts",
            interval_seconds=ALERT_RESET_INTERVAL_SECONDS,
            job=alerts.reset_counts,
        ),
    ]

    return ServiceContainer(
        settings=settings,
        limiters=limiters,
        sessions=sessions,
        users=users,
        auth=AuthService(users=users, sessions=sessions),
        reporter=reporter,
        alerts=alerts,
        started_at=clock(),
        clock=clock,
        sweepers=sweepers,
    )


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the app's service container."""

    return request.app.state.container
