"""
Region endpoints.

Endpoints:
    GET /regions                          -- Location registry contents
    GET /regions/{region}/context?sector= -- Aggregated signals preview
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from sectorcast.api.deps import get_pipeline
from sectorcast.api.schemas.forecast import ContextResponse, RegionDTO, SignalDTO
from sectorcast.context.models import SignalKind
from sectorcast.forecasting.models import Sector
from sectorcast.pipeline import Pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[RegionDTO], summary="Known regions")
async def list_regions(pipeline: Pipeline = Depends(get_pipeline)) -> list[RegionDTO]:
    return [
        RegionDTO(
            name=loc.name,
            state=loc.state,
            country=loc.country,
            latitude=loc.latitude,
            longitude=loc.longitude,
            aliases=list(loc.aliases),
        )
        for loc in pipeline.registry
    ]


@router.get(
    "/{region}/context",
    response_model=ContextResponse,
    summary="Preview the contextual signals a forecast would use",
)
async def region_context(
    region: str,
    sector: Sector = Query(Sector.HEALTHCARE, description="Sector whose signal set to resolve"),
    pipeline: Pipeline = Depends(get_pipeline),
) -> ContextResponse:
    context = await pipeline.aggregator.aggregate(sector.value, region)
    signals = [
        SignalDTO(
            kind=kind.value,
            provenance=signal.provenance.value,
            source=signal.source_label,
            fetched_at=signal.fetched_at,
            substituted=signal.substituted,
            payload=signal.payload.model_dump(mode="json"),
        )
        for kind in SignalKind
        if (signal := context.signals.get(kind)) is not None
    ]
    return ContextResponse(
        sector=context.sector,
        region=context.region,
        signals=signals,
        sources_used=context.sources_used,
    )
