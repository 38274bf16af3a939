"""
Health check DTOs for GET /api/v1/health.

Reports subsystem status for load balancers and uptime monitors. The
health endpoint never raises; a down subsystem is reported, not thrown.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Canonical subsystem names -- the health endpoint always reports exactly these.
SUBSYSTEM_NAMES: frozenset[str] = frozenset(
    {
        "database",
        "inference",
        "live_weather",
        "live_news",
    }
)


class SubsystemStatus(BaseModel):
    """Status of a single infrastructure subsystem."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Subsystem identifier, one of the canonical names")
    healthy: bool = Field(..., description="Whether this subsystem is operational")
    detail: Optional[str] = Field(
        None,
        description="Human-readable status detail (error message, backend, etc.)",
    )
    checked_at: datetime = Field(..., description="When this subsystem was checked")


class HealthResponse(BaseModel):
    """Aggregate health status of the forecasting service.

    - "healthy": all subsystems healthy
    - "degraded": some subsystems unavailable; forecasts fall back to
      lower tiers or fail at inference
    - "unhealthy": the database is down
    """

    model_config = ConfigDict(from_attributes=True)

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ..., description="Aggregate system health status"
    )
    subsystems: list[SubsystemStatus] = Field(..., description="Per-subsystem health status")
    timestamp: datetime = Field(..., description="When this health check was performed")
    version: str = Field(..., description="API server version string")
