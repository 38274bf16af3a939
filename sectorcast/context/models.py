"""
Data structures for contextual signals.

Each signal kind has a typed payload model. Providers of every tier (live,
synthesized, static) must produce the same payload model for a kind so the
prompt builder never has to know which tier answered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Type

from pydantic import BaseModel, Field


class SignalKind(str, Enum):
    """Categories of contextual input to a forecast."""

    WEATHER = "weather"
    NEWS = "news"
    SOCIAL = "social"
    HOSPITAL = "hospital"
    DEMOGRAPHIC = "demographic"
    MARKET = "market"


class Provenance(str, Enum):
    """Fallback tier that actually produced a signal value."""

    LIVE = "live"
    SYNTHESIZED = "synthesized"
    STATIC = "static"


# Prompt-facing provenance of a neutral placeholder.
UNAVAILABLE = "unavailable"


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


class WeatherPayload(BaseModel):
    """Current weather conditions for a region."""

    temperature: float = Field(..., description="Air temperature in degrees Celsius")
    humidity: float = Field(..., description="Relative humidity percentage", ge=0.0, le=100.0)
    precipitation: float = Field(0.0, description="Precipitation in millimetres", ge=0.0)
    wind_speed: float = Field(0.0, description="Wind speed in km/h", ge=0.0)
    conditions: str = Field("", description="Short description of sky conditions")
    season: str = Field("", description="winter, summer, monsoon or post-monsoon")


class NewsPayload(BaseModel):
    """Recent headlines relevant to the region and sector."""

    headlines: List[str] = Field(default_factory=list, description="Recent headlines")
    sentiment: str = Field("neutral", description="positive, negative or neutral")


class SocialPayload(BaseModel):
    """Social media sentiment and trending topics."""

    trending_topics: List[str] = Field(default_factory=list, description="Trending topics")
    sentiment_score: float = Field(
        0.5, description="Sector sentiment, 0 (negative) to 1 (positive)", ge=0.0, le=1.0
    )
    viral_keywords: List[str] = Field(default_factory=list, description="Viral keywords")


class HospitalPayload(BaseModel):
    """Aggregate hospital capacity for the region."""

    total_beds: int = Field(0, description="Total hospital beds", ge=0)
    occupancy_rate: float = Field(
        0.0, description="Bed occupancy percentage", ge=0.0, le=100.0
    )
    available_beds: int = Field(0, description="Currently free beds", ge=0)
    emergency_wait: str = Field("", description="Typical emergency wait time")
    seasonal_concerns: List[str] = Field(
        default_factory=list, description="Seasonal illnesses currently driving admissions"
    )


class DemographicPayload(BaseModel):
    """Population structure for the region."""

    population: int = Field(0, description="Total population", ge=0)
    age_distribution: Dict[str, int] = Field(
        default_factory=dict, description="Population per age band"
    )
    urbanization: str = Field("", description="Urbanization level")
    economic_status: str = Field("", description="Dominant household income band")


class MarketIndex(BaseModel):
    name: str
    value: float
    change: float = Field(0.0, description="Percent change")


class MarketPayload(BaseModel):
    """Market indices and commodity prices."""

    indices: List[MarketIndex] = Field(default_factory=list)
    commodities: List[MarketIndex] = Field(default_factory=list)
    inflation: float = Field(0.0, description="Consumer price inflation, percent")
    usd_inr: float = Field(0.0, description="USD to INR exchange rate", ge=0.0)


PAYLOAD_MODELS: Dict[SignalKind, Type[BaseModel]] = {
    SignalKind.WEATHER: WeatherPayload,
    SignalKind.NEWS: NewsPayload,
    SignalKind.SOCIAL: SocialPayload,
    SignalKind.HOSPITAL: HospitalPayload,
    SignalKind.DEMOGRAPHIC: DemographicPayload,
    SignalKind.MARKET: MarketPayload,
}


def neutral_payload(kind: SignalKind) -> BaseModel:
    """Minimal placeholder used when a signal could not be resolved at all."""
    if kind is SignalKind.WEATHER:
        return WeatherPayload(temperature=25.0, humidity=50.0, conditions="unknown")
    return PAYLOAD_MODELS[kind]()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ContextSignal:
    """One resolved signal, tagged with the tier that produced it.

    ``substituted`` is True only for the neutral placeholder inserted by the
    aggregator after every tier failed. Such a signal keeps ``provenance``
    STATIC, meaning a hard-coded neutral value rather than the static tier;
    check ``substituted`` to tell them apart.
    """

    kind: SignalKind
    payload: BaseModel
    provenance: Provenance
    source_label: str
    fetched_at: datetime = field(default_factory=_utcnow)
    substituted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "payload": self.payload.model_dump(mode="json"),
            "provenance": self.provenance.value,
            "source": self.source_label,
            "fetched_at": self.fetched_at.isoformat(),
            "substituted": self.substituted,
        }


@dataclass
class AggregatedContext:
    """Merged signals for one (sector, region) request."""

    region: str
    sector: str
    signals: Dict[SignalKind, ContextSignal] = field(default_factory=dict)
    sources_used: List[str] = field(default_factory=list)

    def to_prompt_dict(self) -> Dict[str, Any]:
        """Payloads keyed by kind, in a stable order, for embedding in a prompt.

        A ``provenance`` entry tells the model which tier answered each kind;
        neutral placeholders are marked ``unavailable``.
        """
        kinds = [kind for kind in SignalKind if kind in self.signals]
        if not kinds:
            return {}
        prompt: Dict[str, Any] = {
            kind.value: self.signals[kind].payload.model_dump(mode="json") for kind in kinds
        }
        prompt["provenance"] = {
            kind.value: UNAVAILABLE if self.signals[kind].substituted
            else self.signals[kind].provenance.value
            for kind in kinds
        }
        return prompt

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "sector": self.sector,
            "signals": {
                kind.value: self.signals[kind].to_dict()
                for kind in SignalKind
                if kind in self.signals
            },
            "sources_used": list(self.sources_used),
        }
