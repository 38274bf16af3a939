"""
Forecast, alert, region and sector DTOs.

Field names are camelCase on the wire, matching the forecast models.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sectorcast.forecasting.models import Alert, DemandPrediction, SectorForecast


class _CamelDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ForecastResponse(SectorForecast):
    """A freshly generated forecast plus the alerts stored with it."""

    alerts: List[Alert] = Field(default_factory=list)


class StoredForecastResponse(_CamelDTO):
    """The prediction batch currently stored for a (sector, region)."""

    sector: str
    region: str
    timeframe: str
    batch_id: str
    generated_at: datetime
    predictions: List[DemandPrediction]


class AlertListResponse(_CamelDTO):
    alerts: List[Alert]
    count: int


class RegionDTO(_CamelDTO):
    name: str
    state: str
    country: str
    latitude: float
    longitude: float
    aliases: List[str] = Field(default_factory=list)


class SignalDTO(_CamelDTO):
    kind: str
    provenance: str
    source: str
    fetched_at: datetime
    substituted: bool
    payload: Dict[str, Any]


class ContextResponse(_CamelDTO):
    """What the aggregator would feed a forecast for (sector, region)."""

    sector: str
    region: str
    signals: List[SignalDTO]
    sources_used: List[str]


class SectorDTO(_CamelDTO):
    id: str
    name: str
    departments: List[str]
    categories: List[str]
    focus: Optional[str] = None
