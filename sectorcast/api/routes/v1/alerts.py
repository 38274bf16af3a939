"""
Derived alert endpoints.

Endpoints:
    GET  /alerts                      -- Filter by sector/region, unresolved by default
    POST /alerts/{alert_id}/resolve   -- Mark one alert resolved
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from sectorcast.api.deps import get_pipeline
from sectorcast.api.schemas.forecast import AlertListResponse
from sectorcast.forecasting.models import Alert, Sector
from sectorcast.pipeline import Pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=AlertListResponse, summary="List derived alerts")
async def list_alerts(
    sector: Optional[Sector] = Query(None, description="Filter by sector"),
    region: Optional[str] = Query(None, description="Filter by region"),
    include_resolved: bool = Query(False, description="Include resolved alerts"),
    pipeline: Pipeline = Depends(get_pipeline),
) -> AlertListResponse:
    canonical_region = pipeline.registry.resolve(region).name if region else None
    alerts = await pipeline.store.get_alerts(
        sector=sector.value if sector else None,
        region=canonical_region,
        include_resolved=include_resolved,
    )
    return AlertListResponse(alerts=alerts, count=len(alerts))


@router.post("/{alert_id}/resolve", response_model=Alert, summary="Resolve an alert")
async def resolve_alert(
    alert_id: str,
    pipeline: Pipeline = Depends(get_pipeline),
) -> Alert:
    alert = await pipeline.store.resolve_alert(alert_id)
    if alert is None:
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found")
    return alert
