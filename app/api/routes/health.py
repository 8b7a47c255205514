from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from app.core.container import ServiceContainer, get_container
from app.core.rate_limit import enforce_rate_limit

router = APIRouter(tags=["Health"])


def format_uptime(seconds: int) -> str:
    """Render an uptime in seconds as e.g. ``"2d 3h 4m"`` or ``"5m 6s"``.

    Examples:
        >>> format_uptime(42)
        '42s'
        >>> format_uptime(3725)
        '1h 2m 5s'
        >>> format_uptime(90061)
        '1d 1h 1m'
    """
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


@router.get("/health")
def health_check(
    response: Response,
    container: ServiceContainer = Depends(get_container),
) -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service
    health. Never rate limited.

    Returns:
        dict: Status, timestamp, environment and version.
    """
    response.headers["Cache-Control"] = "public, max-age=10"
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": container.settings.app_env,
        "version": container.settings.app.version,
    }


@router.get("/uptime", dependencies=[Depends(enforce_rate_limit("api"))])
def uptime(container: ServiceContainer = Depends(get_container)) -> dict:
    """Report how long this process has been serving requests."""

    uptime_s = max(0, int(container.clock() - container.started_at))
    return {
        "status": "operational",
        "uptime": uptime_s,
        "uptimeFormatted": format_uptime(uptime_s),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": container.settings.app_env,
        "version": container.settings.app.version,
    }
