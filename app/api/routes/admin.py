from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.auth import require_role
from app.core.container import ServiceContainer, get_container
from app.core.rate_limit import enforce_rate_limit
from app.schemas.admin import GatewayStatsResponse, LimiterStats

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/stats",
    response_model=GatewayStatsResponse,
    dependencies=[Depends(enforce_rate_limit("api")), Depends(require_role("admin"))],
)
def gateway_stats(container: ServiceContainer = Depends(get_container)) -> GatewayStatsResponse:
    """Report in-memory state sizes: held sessions and tracked clients per limiter."""

    return GatewayStatsResponse(
        sessions=container.sessions.count(),
        limiters={
            name: LimiterStats(
                limit=limiter.limit,
                window_seconds=limiter.window_seconds,
                tracked_keys=limiter.tracked_keys(),
            )
            for name, limiter in container.limiters
        },
    )
