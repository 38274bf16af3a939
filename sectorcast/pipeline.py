"""
Wiring: build the full forecast pipeline from settings.

Shared by the API (``api/deps.py``) and the CLI so both run the same
components with the same configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sectorcast.context.aggregator import ContextAggregator
from sectorcast.context.registry import LocationRegistry
from sectorcast.context.resolver import TieredResolver, build_default_resolver
from sectorcast.forecasting.inference_client import (
    CompletionsClient,
    GeminiClient,
    build_inference_client,
)
from sectorcast.forecasting.normalizer import ResponseNormalizer
from sectorcast.forecasting.orchestrator import ForecastOrchestrator
from sectorcast.http_session import SharedSession
from sectorcast.persistence.forecast_store import ForecastStore
from sectorcast.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    settings: Settings
    registry: LocationRegistry
    resolver: TieredResolver
    aggregator: ContextAggregator
    client: Optional[CompletionsClient | GeminiClient]
    store: ForecastStore
    orchestrator: ForecastOrchestrator
    http: SharedSession

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.close()
        await self.http.close()


def load_registry(settings: Settings) -> LocationRegistry:
    if settings.regions_file:
        return LocationRegistry.from_json(settings.regions_file)
    return LocationRegistry.default()


def build_pipeline(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    registry: Optional[LocationRegistry] = None,
) -> Pipeline:
    """Assemble registry, resolver chains, inference client, store and orchestrator."""
    registry = registry or load_registry(settings)
    http = SharedSession()
    client = build_inference_client(settings, http=http)
    resolver = build_default_resolver(settings, registry, client=client, http=http)
    aggregator = ContextAggregator(resolver)
    store = ForecastStore(
        session_factory,
        lock_timeout=settings.persist_lock_timeout,
        change_threshold=settings.alert_change_threshold,
    )
    orchestrator = ForecastOrchestrator(
        registry=registry,
        aggregator=aggregator,
        client=client,
        normalizer=ResponseNormalizer(
            tolerance=settings.percentage_tolerance,
            default_confidence=settings.default_confidence,
        ),
        store=store,
        prediction_count=settings.prediction_count,
        opportunity_threshold=settings.opportunity_threshold,
        deadline_seconds=settings.forecast_deadline_seconds,
    )
    logger.info(
        "Pipeline ready: %d regions, inference=%s",
        len(registry), settings.inference_backend if client else "none",
    )
    return Pipeline(
        settings=settings,
        registry=registry,
        resolver=resolver,
        aggregator=aggregator,
        client=client,
        store=store,
        orchestrator=orchestrator,
        http=http,
    )
