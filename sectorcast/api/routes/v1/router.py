"""
V1 API router -- aggregates all v1 sub-routers.

Included in the app at ``/api/v1`` prefix by ``create_app()``.
"""

from __future__ import annotations

from fastapi import APIRouter

from sectorcast.api.routes.v1.alerts import router as alerts_router
from sectorcast.api.routes.v1.forecasts import router as forecasts_router
from sectorcast.api.routes.v1.health import router as health_router
from sectorcast.api.routes.v1.regions import router as regions_router
from sectorcast.api.routes.v1.sectors import router as sectors_router

v1_router = APIRouter()

v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(forecasts_router, prefix="/forecasts", tags=["forecasts"])
v1_router.include_router(alerts_router, prefix="/alerts", tags=["alerts"])
v1_router.include_router(regions_router, prefix="/regions", tags=["regions"])
v1_router.include_router(sectors_router, prefix="/sectors", tags=["sectors"])
