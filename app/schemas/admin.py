"""Pydantic schemas for operator endpoints."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field


class LimiterStats(BaseModel):
    limit: int = Field(..., description="Requests allowed per window.")
    window_seconds: float = Field(..., description="Window length in seconds.")
    tracked_keys: int = Field(
        ..., description="Client identifiers currently holding a window record."
    )


class GatewayStatsResponse(BaseModel):
    """Sizes of the process-local stores."""

    sessions: int = Field(
        ..., description="Sessions held in memory, including expired ones not yet swept."
    )
    limiters: Dict[str, LimiterStats] = Field(
        default_factory=dict,
        description="Per-limiter configuration and tracked identifier counts.",
    )
