"""
Forecast endpoints.

Endpoints:
    POST /forecasts                    -- Run the full pipeline and persist (201)
    GET  /forecasts/{sector}/{region}  -- Currently stored batch for a key

Pipeline failures propagate as ``ForecastError`` and are rendered as
problem+json by ``api/errors.py``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from sectorcast.api.deps import get_pipeline
from sectorcast.api.schemas.forecast import ForecastResponse, StoredForecastResponse
from sectorcast.forecasting.models import ForecastRequest, Sector
from sectorcast.pipeline import Pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ForecastResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a sector demand forecast",
    description=(
        "Aggregates regional signals, calls the inference service, normalizes "
        "the reply and atomically replaces the stored batch for (sector, region). "
        "Not retried on failure; re-submit to try again."
    ),
)
async def create_forecast(
    body: ForecastRequest,
    pipeline: Pipeline = Depends(get_pipeline),
) -> ForecastResponse:
    outcome = await pipeline.orchestrator.execute(body)
    return ForecastResponse(
        **outcome.forecast.model_dump(),
        alerts=outcome.alerts,
    )


@router.get(
    "/{sector}/{region}",
    response_model=StoredForecastResponse,
    summary="Stored forecast batch",
)
async def get_stored_forecast(
    sector: Sector,
    region: str,
    pipeline: Pipeline = Depends(get_pipeline),
) -> StoredForecastResponse:
    location = pipeline.registry.resolve(region)
    batch = await pipeline.store.get_batch(sector.value, location.name)
    if batch is None:
        raise HTTPException(
            status_code=404,
            detail=f"No stored forecast for {sector.value}/{location.name}",
        )
    return StoredForecastResponse(
        sector=batch.sector,
        region=batch.region,
        timeframe=batch.timeframe,
        batch_id=batch.batch_id,
        generated_at=batch.created_at,
        predictions=batch.predictions,
    )
