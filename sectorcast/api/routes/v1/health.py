"""
Subsystem health endpoint.

Each check is wrapped in try/except -- the health endpoint NEVER crashes
regardless of backend availability. A down subsystem is reported as
unhealthy, not as a 500 error.

Subsystems:
    1. database     -- async SELECT 1
    2. inference    -- configured backend has credentials
    3. live_weather -- live weather tier enabled
    4. live_news    -- live news tier has an API key
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from sectorcast.api.app import API_VERSION
from sectorcast.api.deps import get_current_settings, get_db
from sectorcast.api.schemas.health import HealthResponse, SubsystemStatus
from sectorcast.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_database(db: AsyncSession) -> SubsystemStatus:
    """Attempt async SELECT 1."""
    now = datetime.now(timezone.utc)
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        return SubsystemStatus(
            name="database", healthy=True, detail=f"{db.get_bind().dialect.name} OK", checked_at=now
        )
    except Exception as exc:
        logger.warning("Health check: database unhealthy: %s", exc)
        return SubsystemStatus(
            name="database", healthy=False, detail=str(exc)[:200], checked_at=now
        )


def _check_inference(settings: Settings) -> SubsystemStatus:
    now = datetime.now(timezone.utc)
    backend = settings.inference_backend
    model = settings.gemini_model if backend == "gemini" else settings.inference_model
    if settings.inference_configured:
        return SubsystemStatus(
            name="inference", healthy=True, detail=f"{backend} ({model})", checked_at=now
        )
    return SubsystemStatus(
        name="inference", healthy=False, detail=f"{backend}: no API key configured", checked_at=now
    )


def _check_live_providers(settings: Settings) -> list[SubsystemStatus]:
    now = datetime.now(timezone.utc)
    return [
        SubsystemStatus(
            name="live_weather",
            healthy=settings.live_weather_enabled,
            detail=settings.weather_api_url if settings.live_weather_enabled else "disabled",
            checked_at=now,
        ),
        SubsystemStatus(
            name="live_news",
            healthy=bool(settings.news_api_key),
            detail=settings.news_api_url if settings.news_api_key else "no API key; static/synthesized only",
            checked_at=now,
        ),
    ]


def _derive_status(subsystems: list[SubsystemStatus]) -> str:
    """healthy if all up, unhealthy if the database is down, else degraded."""
    unhealthy = [s for s in subsystems if not s.healthy]
    if not unhealthy:
        return "healthy"

    db_status = next((s for s in subsystems if s.name == "database"), None)
    if db_status and not db_status.healthy:
        return "unhealthy"

    return "degraded"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Subsystem health inventory",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_current_settings),
) -> HealthResponse:
    subsystems: list[SubsystemStatus] = [await _check_database(db), _check_inference(settings)]
    subsystems.extend(_check_live_providers(settings))

    return HealthResponse(
        status=_derive_status(subsystems),
        subsystems=subsystems,
        timestamp=datetime.now(timezone.utc),
        version=API_VERSION,
    )
