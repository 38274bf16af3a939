"""
Pydantic models for sector demand forecasts.

These are the typed outputs of the pipeline. JSON field names are camelCase
(``itemName``, ``demandChangePercentage``) to match the contract the model
is asked to produce and the dashboard consumes; Python attributes are
snake_case. Both spellings are accepted on input.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Sector(str, Enum):
    HEALTHCARE = "healthcare"
    AUTOMOBILE = "automobile"
    AGRICULTURE = "agriculture"
    RETAIL = "retail"
    ENERGY = "energy"


class Timeframe(str, Enum):
    DAYS_15 = "15 days"
    DAYS_30 = "30 days"
    DAYS_60 = "60 days"


DemandTrend = Literal["increase", "decrease", "no-change"]
RiskLevel = Literal["Low", "Medium", "High"]
DemandLevel = Literal["low", "medium", "high"]
AlertSeverity = Literal["medium", "high", "critical"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ForecastRequest(_CamelModel):
    """One user request for a sector forecast."""

    sector: Sector = Field(..., description="Sector to forecast")
    region: str = Field(..., min_length=1, max_length=100, description="Region name")
    timeframe: Timeframe = Field(Timeframe.DAYS_30, description="Forecast horizon")
    department: Optional[str] = Field(None, max_length=100, description="Department filter")
    category: Optional[str] = Field(None, max_length=100, description="Category filter")


class DemandPrediction(_CamelModel):
    """A single demand item forecast, as produced by the normalizer."""

    item_name: str = Field(..., min_length=1, description="Product or service name")
    category: str = Field("General", description="Item category")
    subcategory: str = Field("", description="Item subcategory")
    current_demand: float = Field(..., ge=0.0, description="Current demand in units")
    predicted_demand: float = Field(..., ge=0.0, description="Predicted demand in units")
    demand_change_percentage: float = Field(..., description="Percent change, current to predicted")
    demand_trend: DemandTrend = Field(..., description="Direction of change")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Model confidence")
    peak_period: str = Field("", description="When demand peaks")
    reasoning: str = Field("", description="Why the model expects this change")
    market_factors: List[str] = Field(default_factory=list, description="Drivers of demand")
    recommendations: List[str] = Field(default_factory=list, description="Suggested actions")
    risk_level: RiskLevel = Field("Medium", description="Supply/demand risk")
    demand_level: DemandLevel = Field("low", description="Bucketed magnitude of change")


class SectorForecast(_CamelModel):
    """A full forecast batch for one (sector, region, timeframe)."""

    sector: Sector
    region: str
    timeframe: Timeframe
    predictions: List[DemandPrediction] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0, description="Mean item confidence")
    data_sources_used: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list, description="High-risk item names")
    opportunities: List[str] = Field(default_factory=list, description="Strong-growth item names")
    market_analysis: str = Field("", description="Narrative summary of the batch")
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Alert(_CamelModel):
    """Notification derived from a prediction crossing a threshold."""

    id: Optional[str] = None
    title: str
    severity: AlertSeverity
    sector: str
    region: str
    message: str
    item_name: str = ""
    is_resolved: bool = False
    created_at: Optional[datetime] = None
