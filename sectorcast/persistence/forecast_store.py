"""
ForecastStore -- atomic replace-and-derive persistence for forecast batches.

``commit`` replaces everything stored for a (sector, region) key in a single
transaction: delete old alerts, delete old predictions, insert the new
predictions, insert the alerts derived from them. Readers see either the old
batch or the new one, never a mix.

Writers for the same key are serialized twice over:
  - an in-process ``asyncio.Lock`` per key, acquired with a bounded wait;
  - on PostgreSQL, ``pg_advisory_xact_lock`` on the key inside the
    transaction, so separate worker processes also queue up.
A writer that cannot get the key in time, or that the database aborts with a
serialization/deadlock/lock-unavailable error, gets ``PersistenceConflict``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sectorcast.db.models import DemandAlertRow, DemandPredictionRow
from sectorcast.errors import PersistenceConflict
from sectorcast.forecasting.models import Alert, DemandPrediction, SectorForecast
from sectorcast.persistence.alerts import DEFAULT_CHANGE_THRESHOLD, derive_alerts

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
_CONFLICT_SQLSTATES = frozenset({"40001", "40P01", "55P03"})


@dataclass
class StoredBatch:
    """The prediction batch currently stored for one key."""

    sector: str
    region: str
    timeframe: str
    batch_id: str
    created_at: datetime
    predictions: list[DemandPrediction] = field(default_factory=list)


def _is_conflict(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in _CONFLICT_SQLSTATES:
        return True
    # SQLite reports writer contention only through the message
    return "database is locked" in str(orig)


def _row_to_prediction(row: DemandPredictionRow) -> DemandPrediction:
    return DemandPrediction(
        item_name=row.item_name,
        category=row.category,
        subcategory=row.subcategory,
        current_demand=row.current_demand,
        predicted_demand=row.predicted_demand,
        demand_change_percentage=row.demand_change_percentage,
        demand_trend=row.demand_trend,
        confidence=row.confidence,
        peak_period=row.peak_period,
        reasoning=row.reasoning,
        market_factors=list(row.market_factors or []),
        recommendations=list(row.recommendations or []),
        risk_level=row.risk_level,
        demand_level=row.demand_level,
    )


def _row_to_alert(row: DemandAlertRow) -> Alert:
    return Alert(
        id=row.id,
        title=row.title,
        severity=row.severity,
        sector=row.sector,
        region=row.region,
        message=row.message,
        item_name=row.item_name,
        is_resolved=row.is_resolved,
        created_at=row.created_at,
    )


class ForecastStore:
    """Persists forecast batches and their derived alerts.

    Each operation opens its own session from *session_factory* so the store
    can be shared by concurrent requests.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lock_timeout: float = 30.0,
        change_threshold: float = DEFAULT_CHANGE_THRESHOLD,
    ) -> None:
        self._session_factory = session_factory
        self.lock_timeout = lock_timeout
        self.change_threshold = change_threshold
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}

    def _lock_for(self, key: tuple[str, str]) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def commit(self, forecast: SectorForecast) -> list[Alert]:
        """Atomically replace the stored batch for the forecast's key.

        Returns:
            The alerts derived from the new batch, as stored.

        Raises:
            PersistenceConflict: another writer held the key too long, or the
                database aborted the transaction for a concurrency reason.
        """
        key = (forecast.sector.value, forecast.region)
        lock = self._lock_for(key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.lock_timeout)
        except asyncio.TimeoutError as exc:
            raise PersistenceConflict(
                f"Timed out after {self.lock_timeout}s waiting for writer on {key[0]}/{key[1]}"
            ) from exc

        try:
            return await self._replace(forecast)
        except DBAPIError as exc:
            if _is_conflict(exc):
                raise PersistenceConflict(
                    f"Concurrent write conflict on {key[0]}/{key[1]}: {exc.orig}"
                ) from exc
            raise
        finally:
            lock.release()

    async def _replace(self, forecast: SectorForecast) -> list[Alert]:
        sector, region = forecast.sector.value, forecast.region
        batch_id = str(uuid.uuid4())
        alerts = derive_alerts(forecast, self.change_threshold)

        async with self._session_factory() as session:
            async with session.begin():
                if session.get_bind().dialect.name == "postgresql":
                    await session.execute(
                        text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                        {"key": f"{sector}:{region}"},
                    )

                await session.execute(
                    delete(DemandAlertRow).where(
                        DemandAlertRow.sector == sector, DemandAlertRow.region == region
                    )
                )
                await session.execute(
                    delete(DemandPredictionRow).where(
                        DemandPredictionRow.sector == sector,
                        DemandPredictionRow.region == region,
                    )
                )

                rows = [
                    DemandPredictionRow(
                        id=str(uuid.uuid4()),
                        batch_id=batch_id,
                        position=position,
                        sector=sector,
                        region=region,
                        timeframe=forecast.timeframe.value,
                        item_name=p.item_name,
                        category=p.category,
                        subcategory=p.subcategory,
                        current_demand=p.current_demand,
                        predicted_demand=p.predicted_demand,
                        demand_change_percentage=p.demand_change_percentage,
                        demand_trend=p.demand_trend,
                        demand_level=p.demand_level,
                        confidence=p.confidence,
                        peak_period=p.peak_period,
                        reasoning=p.reasoning,
                        market_factors=list(p.market_factors),
                        recommendations=list(p.recommendations),
                        risk_level=p.risk_level,
                        created_at=forecast.generated_at,
                    )
                    for position, p in enumerate(forecast.predictions)
                ]
                session.add_all(rows)
                prediction_ids = {row.item_name: row.id for row in rows}

                alert_rows = [
                    DemandAlertRow(
                        id=str(uuid.uuid4()),
                        batch_id=batch_id,
                        prediction_id=prediction_ids.get(a.item_name),
                        sector=sector,
                        region=region,
                        item_name=a.item_name,
                        title=a.title,
                        severity=a.severity,
                        message=a.message,
                        is_resolved=False,
                        created_at=forecast.generated_at,
                    )
                    for a in alerts
                ]
                session.add_all(alert_rows)

        logger.info(
            "Committed batch %s for %s/%s: %d predictions, %d alerts",
            batch_id, sector, region, len(rows), len(alert_rows),
        )
        return [_row_to_alert(row) for row in alert_rows]

    async def get_batch(self, sector: str, region: str) -> Optional[StoredBatch]:
        """Return the stored batch for (sector, region), or None if absent."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(DemandPredictionRow)
                .where(DemandPredictionRow.sector == sector, DemandPredictionRow.region == region)
                .order_by(DemandPredictionRow.position)
            )
            rows = list(result.scalars().all())

        if not rows:
            return None
        return StoredBatch(
            sector=sector,
            region=region,
            timeframe=rows[0].timeframe,
            batch_id=rows[0].batch_id,
            created_at=rows[0].created_at,
            predictions=[_row_to_prediction(row) for row in rows],
        )

    async def get_predictions(self, sector: str, region: str) -> list[DemandPrediction]:
        batch = await self.get_batch(sector, region)
        return batch.predictions if batch else []

    async def get_alerts(
        self,
        sector: Optional[str] = None,
        region: Optional[str] = None,
        include_resolved: bool = False,
    ) -> list[Alert]:
        stmt = select(DemandAlertRow)
        if sector:
            stmt = stmt.where(DemandAlertRow.sector == sector)
        if region:
            stmt = stmt.where(DemandAlertRow.region == region)
        if not include_resolved:
            stmt = stmt.where(DemandAlertRow.is_resolved.is_(False))
        stmt = stmt.order_by(DemandAlertRow.created_at.desc(), DemandAlertRow.title)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_row_to_alert(row) for row in result.scalars().all()]

    async def resolve_alert(self, alert_id: str) -> Optional[Alert]:
        """Mark one alert resolved. Returns None if no such alert exists."""
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.get(DemandAlertRow, alert_id)
                if row is None:
                    return None
                row.is_resolved = True
            logger.info("Resolved alert %s (%s)", alert_id, row.title)
            return _row_to_alert(row)
