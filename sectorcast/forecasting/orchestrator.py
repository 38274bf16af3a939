"""
Forecast orchestrator: the per-request state machine.

    START -> AGGREGATING -> PROMPTING -> INFERRING -> NORMALIZING
          -> SUMMARIZING -> PERSISTING -> DONE

Any stage may go to FAILED. Stages run strictly in sequence; only
aggregation is internally concurrent. Nothing is retried: a failed attempt
surfaces as one ``ForecastFailed`` carrying the originating error kind and
the stage it happened in, and the caller decides whether to re-run.
Exceptions outside the error taxonomy are reported with kind
``InternalError``.

Persistence is the last stage, so a failure anywhere earlier leaves the
previously stored batch for the key untouched. The optional deadline covers
everything up to (not including) persistence.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sectorcast.context.aggregator import ContextAggregator
from sectorcast.context.models import AggregatedContext
from sectorcast.context.synthesized import InferenceBackend
from sectorcast.context.registry import LocationRegistry
from sectorcast.errors import (
    ForecastError,
    ForecastFailed,
    ForecastTimedOut,
    InferenceUnavailable,
    InternalError,
)
from sectorcast.forecasting.models import (
    Alert,
    DemandPrediction,
    ForecastRequest,
    SectorForecast,
)
from sectorcast.forecasting.normalizer import NormalizedBatch, ResponseNormalizer
from sectorcast.forecasting.prompt_builder import build_prompt
from sectorcast.persistence.forecast_store import ForecastStore

logger = logging.getLogger(__name__)


class ForecastStage(str, Enum):
    START = "START"
    AGGREGATING = "AGGREGATING"
    PROMPTING = "PROMPTING"
    INFERRING = "INFERRING"
    NORMALIZING = "NORMALIZING"
    SUMMARIZING = "SUMMARIZING"
    PERSISTING = "PERSISTING"
    DONE = "DONE"
    FAILED = "FAILED"


_ORDER = [
    ForecastStage.START,
    ForecastStage.AGGREGATING,
    ForecastStage.PROMPTING,
    ForecastStage.INFERRING,
    ForecastStage.NORMALIZING,
    ForecastStage.SUMMARIZING,
    ForecastStage.PERSISTING,
    ForecastStage.DONE,
]


@dataclass
class ForecastRun:
    """Tracks state throughout one forecast attempt."""

    request: ForecastRequest
    stage: ForecastStage = ForecastStage.START
    history: list[dict[str, Any]] = field(default_factory=list)
    failed_stage: Optional[ForecastStage] = None
    error: Optional[ForecastError] = None

    def advance(self, stage: ForecastStage) -> None:
        """Move to the next stage. Skipping or going back is a programming error."""
        expected = _ORDER[_ORDER.index(self.stage) + 1]
        if stage is not expected:
            raise RuntimeError(f"Illegal transition {self.stage.value} -> {stage.value}")
        self.history.append({
            "from": self.stage.value,
            "to": stage.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        logger.debug(
            "%s/%s: %s -> %s",
            self.request.sector.value, self.request.region, self.stage.value, stage.value,
        )
        self.stage = stage

    def fail(self, error: ForecastError) -> None:
        self.failed_stage = self.stage
        self.error = error
        self.history.append({
            "from": self.stage.value,
            "to": ForecastStage.FAILED.value,
            "error": error.kind,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        self.stage = ForecastStage.FAILED

    @property
    def terminal(self) -> bool:
        return self.stage in (ForecastStage.DONE, ForecastStage.FAILED)


@dataclass
class ForecastOutcome:
    forecast: SectorForecast
    alerts: list[Alert]
    run: ForecastRun
    context: AggregatedContext


def summarize(predictions: list[DemandPrediction], opportunity_threshold: float) -> dict[str, Any]:
    """Batch-level statistics: mean confidence, risk items, opportunity items."""
    return {
        "confidence": min(sum(p.confidence for p in predictions) / len(predictions), 1.0),
        "risk_factors": [p.item_name for p in predictions if p.risk_level == "High"],
        "opportunities": [
            p.item_name for p in predictions if p.demand_change_percentage > opportunity_threshold
        ],
    }


def _fallback_analysis(predictions: list[DemandPrediction], sector: str, region: str, timeframe: str) -> str:
    rising = sum(1 for p in predictions if p.demand_trend == "increase")
    falling = sum(1 for p in predictions if p.demand_trend == "decrease")
    mean_change = sum(p.demand_change_percentage for p in predictions) / len(predictions)
    return (
        f"{len(predictions)} {sector} items forecast for {region} over {timeframe}: "
        f"{rising} rising, {falling} falling, mean change {mean_change:+.1f}%."
    )


class ForecastOrchestrator:
    """Drives aggregation, prompting, inference, normalization and persistence.

    Attributes:
        prediction_count: Items requested from (and kept from) the model.
        opportunity_threshold: Percent change above which an item is an opportunity.
        deadline_seconds: Optional bound on everything before persistence.
    """

    def __init__(
        self,
        registry: LocationRegistry,
        aggregator: ContextAggregator,
        client: Optional[InferenceBackend],
        normalizer: ResponseNormalizer,
        store: ForecastStore,
        prediction_count: int = 10,
        opportunity_threshold: float = 10.0,
        deadline_seconds: Optional[float] = None,
    ) -> None:
        self.registry = registry
        self.aggregator = aggregator
        self.client = client
        self.normalizer = normalizer
        self.store = store
        self.prediction_count = prediction_count
        self.opportunity_threshold = opportunity_threshold
        self.deadline_seconds = deadline_seconds

    async def run(self, request: ForecastRequest) -> SectorForecast:
        """Execute the pipeline and return the committed forecast."""
        outcome = await self.execute(request)
        return outcome.forecast

    async def execute(self, request: ForecastRequest) -> ForecastOutcome:
        """Execute the pipeline, returning forecast, stored alerts and run trace.

        Raises:
            ForecastFailed: on any unrecovered error, with ``kind`` and ``stage``.
        """
        run = ForecastRun(request=request)
        logger.info(
            "Forecast requested: %s/%s (%s)",
            request.sector.value, request.region, request.timeframe.value,
        )

        try:
            if self.deadline_seconds is not None:
                try:
                    forecast, context = await asyncio.wait_for(
                        self._produce(run), timeout=self.deadline_seconds
                    )
                except asyncio.TimeoutError as exc:
                    raise ForecastTimedOut(
                        f"Deadline of {self.deadline_seconds}s elapsed during {run.stage.value}"
                    ) from exc
            else:
                forecast, context = await self._produce(run)

            run.advance(ForecastStage.PERSISTING)
            alerts = await self.store.commit(forecast)
            run.advance(ForecastStage.DONE)
        except ForecastError as exc:
            run.fail(exc)
            logger.error(
                "Forecast %s/%s failed at %s: [%s] %s",
                request.sector.value, request.region,
                run.failed_stage.value, exc.kind, exc.message,
            )
            raise ForecastFailed(exc, run.failed_stage.value) from exc
        except Exception as exc:
            error = InternalError(exc)
            run.fail(error)
            logger.exception(
                "Forecast %s/%s failed at %s with an unexpected error",
                request.sector.value, request.region, run.failed_stage.value,
            )
            raise ForecastFailed(error, run.failed_stage.value) from exc

        logger.info(
            "Forecast %s/%s done: %d predictions, %d alerts, confidence %.2f",
            forecast.sector.value, forecast.region,
            len(forecast.predictions), len(alerts), forecast.confidence,
        )
        return ForecastOutcome(forecast=forecast, alerts=alerts, run=run, context=context)

    async def _produce(self, run: ForecastRun) -> tuple[SectorForecast, AggregatedContext]:
        request = run.request
        sector = request.sector.value

        location = self.registry.resolve(request.region)

        run.advance(ForecastStage.AGGREGATING)
        context = await self.aggregator.aggregate(sector, location.name)

        run.advance(ForecastStage.PROMPTING)
        prompt = build_prompt(
            request.sector,
            location.name,
            request.timeframe,
            context,
            filters={"department": request.department, "category": request.category},
            prediction_count=self.prediction_count,
        )

        run.advance(ForecastStage.INFERRING)
        if self.client is None:
            raise InferenceUnavailable("No inference backend configured")
        raw = await self.client.infer(prompt)

        run.advance(ForecastStage.NORMALIZING)
        batch: NormalizedBatch = self.normalizer.normalize_batch(raw, self.prediction_count)

        run.advance(ForecastStage.SUMMARIZING)
        summary = summarize(batch.predictions, self.opportunity_threshold)
        forecast = SectorForecast(
            sector=request.sector,
            region=location.name,
            timeframe=request.timeframe,
            predictions=batch.predictions,
            data_sources_used=list(context.sources_used),
            market_analysis=batch.market_analysis
            or _fallback_analysis(batch.predictions, sector, location.name, request.timeframe.value),
            **summary,
        )
        return forecast, context
