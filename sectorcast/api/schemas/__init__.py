"""
Pydantic V2 DTO schemas for the sector forecasting API.

All public DTOs are re-exported here for convenient import:

    from sectorcast.api.schemas import ForecastResponse, ProblemDetail
"""

from sectorcast.api.schemas.common import ProblemDetail
from sectorcast.api.schemas.forecast import (
    AlertListResponse,
    ContextResponse,
    ForecastResponse,
    RegionDTO,
    SectorDTO,
    SignalDTO,
    StoredForecastResponse,
)
from sectorcast.api.schemas.health import (
    SUBSYSTEM_NAMES,
    HealthResponse,
    SubsystemStatus,
)

__all__ = [
    "AlertListResponse",
    "ContextResponse",
    "ForecastResponse",
    "HealthResponse",
    "ProblemDetail",
    "RegionDTO",
    "SUBSYSTEM_NAMES",
    "SectorDTO",
    "SignalDTO",
    "StoredForecastResponse",
    "SubsystemStatus",
]
