"""
SQLAlchemy 2.0 ORM models for forecast persistence.

Tables:
    demand_predictions -- One row per DemandPrediction of the current batch
    demand_alerts      -- Alerts derived from the current batch

Both tables are scoped by (sector, region). Rows for a key are only ever
replaced as a whole batch; the only in-place update is resolving an alert.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    """Timezone-aware UTC now -- avoids deprecated datetime.utcnow()."""
    return datetime.now(timezone.utc)


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class DemandPredictionRow(Base):
    """Persisted demand prediction, one batch member."""

    __tablename__ = "demand_predictions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    batch_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    sector: Mapped[str] = mapped_column(String(32), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    timeframe: Mapped[str] = mapped_column(String(16), nullable=False)

    item_name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    subcategory: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    current_demand: Mapped[float] = mapped_column(Float, nullable=False)
    predicted_demand: Mapped[float] = mapped_column(Float, nullable=False)
    demand_change_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    demand_trend: Mapped[str] = mapped_column(String(16), nullable=False)
    demand_level: Mapped[str] = mapped_column(String(16), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    peak_period: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    reasoning: Mapped[str] = mapped_column(Text, nullable=False, default="")
    market_factors: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    recommendations: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    risk_level: Mapped[str] = mapped_column(String(8), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_demand_predictions_sector_region", "sector", "region"),
    )

    def __repr__(self) -> str:
        return (
            f"<DemandPredictionRow(item={self.item_name!r}, {self.sector}/{self.region}, "
            f"change={self.demand_change_percentage:.1f}%, risk={self.risk_level})>"
        )


class DemandAlertRow(Base):
    """Alert derived from one prediction at commit time."""

    __tablename__ = "demand_alerts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    batch_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    prediction_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    sector: Mapped[str] = mapped_column(String(32), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    item_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_demand_alerts_sector_region", "sector", "region"),
    )

    def __repr__(self) -> str:
        return (
            f"<DemandAlertRow(id={self.id!r}, severity={self.severity}, "
            f"{self.sector}/{self.region}, resolved={self.is_resolved})>"
        )
