"""
Deterministic static fallback tier.

No network, no model: every kind is generated from the location's baseline
values (or a generic default) plus a ``random.Random`` seeded by region and
kind, so the same region always yields the same numbers within a season.
This tier is expected to always succeed.
"""

from __future__ import annotations

import hashlib
import random
from datetime import datetime, timezone
from typing import Callable, Optional

from sectorcast.context.models import (
    DemographicPayload,
    HospitalPayload,
    MarketIndex,
    MarketPayload,
    NewsPayload,
    SignalKind,
    SocialPayload,
    WeatherPayload,
)
from sectorcast.context.registry import Location

DEFAULT_AVG_TEMP = 27.0
DEFAULT_HUMIDITY = 65.0

# Winter (Dec-Feb), Summer (Mar-May), Monsoon (Jun-Sep), Post-monsoon (Oct-Nov)
_SEASON_WEATHER = {
    "winter": (15.0, "Clear skies"),
    "summer": (5.0, "Hot and dry"),
    "monsoon": (120.0, "Monsoon rains"),
    "post-monsoon": (35.0, "Partly cloudy"),
}

_SEASONAL_ILLNESS = {
    "winter": ["Respiratory infections", "Pneumonia", "Heart disease complications", "Arthritis flare-ups"],
    "summer": ["Heat stroke", "Dehydration", "Dengue fever", "Food poisoning"],
    "monsoon": ["Malaria", "Dengue", "Typhoid", "Hepatitis A", "Leptospirosis"],
    "post-monsoon": ["Vector-borne diseases", "Dengue fever", "Chikungunya", "Viral fever"],
}

_HEADLINES = {
    "healthcare": [
        "{region} hospitals report increased demand for preventive care",
        "Government announces new healthcare infrastructure investments",
        "Digital health adoption accelerates across urban centers",
        "Medical device manufacturing sees growth in domestic market",
    ],
    "automobile": [
        "Electric vehicle sales surge in {region} metropolitan area",
        "Government incentives boost two-wheeler demand",
        "Automotive sector shows strong recovery",
        "EV charging infrastructure expansion planned for major cities",
    ],
    "agriculture": [
        "{region} farmers adopt precision agriculture technologies",
        "Monsoon forecast indicates favorable crop conditions",
        "Government announces increased MSP for key crops",
        "Agricultural exports show positive growth trends",
    ],
}
_DEFAULT_HEADLINES = [
    "{region} market shows stable growth trends",
    "Economic indicators point to positive outlook",
    "Industry experts forecast continued demand growth",
]

_TRENDING = {
    "healthcare": ["telemedicine adoption", "preventive health", "health insurance", "medical tourism"],
    "automobile": ["electric vehicles", "smart mobility", "sustainable transport", "autonomous driving"],
    "agriculture": ["precision farming", "organic agriculture", "climate-smart farming", "agri-tech innovation"],
}
_VIRAL = {
    "healthcare": ["health awareness", "vaccination drive", "wellness programs", "medical checkups"],
    "automobile": ["EV revolution", "fuel efficiency", "smart cars", "green mobility"],
    "agriculture": ["crop yield", "sustainable farming", "farmer income", "food security"],
}
_SENTIMENT = {"healthcare": 0.75, "automobile": 0.62, "agriculture": 0.68}

_INDICES = [("Sensex", 82500.0, 1.2), ("Nifty 50", 25200.0, 0.8), ("Bank Nifty", 54800.0, -0.5)]
_BASE_COMMODITIES = [("Gold", 72800.0, 0.5), ("Silver", 91200.0, -0.3), ("Crude Oil", 7200.0, 1.8)]
_SECTOR_COMMODITIES = {
    "agriculture": [("Wheat", 2850.0, 2.1), ("Rice", 3200.0, 1.5), ("Cotton", 7800.0, -1.2)],
    "automobile": [("Steel", 58500.0, 0.8), ("Aluminum", 245000.0, 1.2), ("Copper", 820000.0, -0.5)],
}

# Share of population per age band
_AGE_BANDS = {"0-18": 0.28, "19-35": 0.32, "36-55": 0.25, "56-70": 0.10, "70+": 0.05}

_BEDS_PER_THOUSAND = 1.4


def season_for(month: int) -> str:
    """Indian meteorological season for a calendar month (1-12)."""
    if month == 12 or month <= 2:
        return "winter"
    if month <= 5:
        return "summer"
    if month <= 9:
        return "monsoon"
    return "post-monsoon"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StaticSource:
    """Seeded generator over regional baselines. One method per signal kind."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    def _rng(self, location: Location, kind: SignalKind) -> random.Random:
        digest = hashlib.md5(f"{location.name}:{kind.value}".encode()).hexdigest()
        return random.Random(int(digest[:16], 16))

    def _season(self) -> str:
        return season_for(self._clock().month)

    def _population(self, location: Location) -> int:
        if location.population:
            return location.population
        return self._rng(location, SignalKind.DEMOGRAPHIC).randint(500_000, 2_500_000)

    async def weather(self, location: Location, sector: Optional[str] = None) -> WeatherPayload:
        season = self._season()
        precipitation, conditions = _SEASON_WEATHER[season]
        return WeatherPayload(
            temperature=location.avg_temp if location.avg_temp is not None else DEFAULT_AVG_TEMP,
            humidity=location.humidity if location.humidity is not None else DEFAULT_HUMIDITY,
            precipitation=precipitation,
            wind_speed=12.0,
            conditions=conditions,
            season=season,
        )

    async def news(self, location: Location, sector: Optional[str] = None) -> NewsPayload:
        templates = _HEADLINES.get(sector or "", _DEFAULT_HEADLINES)
        headlines = [t.format(region=location.name) for t in templates]
        headlines.append(f"{location.name} economic growth maintains steady pace")
        return NewsPayload(headlines=headlines, sentiment="positive")

    async def social(self, location: Location, sector: Optional[str] = None) -> SocialPayload:
        key = sector or ""
        return SocialPayload(
            trending_topics=_TRENDING.get(key, ["market growth", "digital transformation"]),
            sentiment_score=_SENTIMENT.get(key, 0.6),
            viral_keywords=_VIRAL.get(key, ["demand forecast", "market analysis"]),
        )

    async def hospital(self, location: Location, sector: Optional[str] = None) -> HospitalPayload:
        rng = self._rng(location, SignalKind.HOSPITAL)
        beds = int(self._population(location) / 1000 * _BEDS_PER_THOUSAND)
        occupancy = round(rng.uniform(65.0, 90.0), 1)
        return HospitalPayload(
            total_beds=beds,
            occupancy_rate=occupancy,
            available_beds=int(beds * (100.0 - occupancy) / 100.0),
            emergency_wait=f"{rng.randint(15, 60)} minutes",
            seasonal_concerns=list(_SEASONAL_ILLNESS[self._season()]),
        )

    async def demographic(self, location: Location, sector: Optional[str] = None) -> DemographicPayload:
        population = self._population(location)
        if population >= 4_000_000:
            urbanization = "Very High"
        elif population >= 1_500_000:
            urbanization = "High"
        else:
            urbanization = "Medium"
        return DemographicPayload(
            population=population,
            age_distribution={band: round(population * share) for band, share in _AGE_BANDS.items()},
            urbanization=urbanization,
            economic_status="Middle income",
        )

    async def market(self, location: Location, sector: Optional[str] = None) -> MarketPayload:
        commodities = _BASE_COMMODITIES + _SECTOR_COMMODITIES.get(sector or "", [])
        return MarketPayload(
            indices=[MarketIndex(name=n, value=v, change=c) for n, v, c in _INDICES],
            commodities=[MarketIndex(name=n, value=v, change=c) for n, v, c in commodities],
            inflation=4.1,
            usd_inr=84.2,
        )

    def fetcher(self, kind: SignalKind):
        """Bound generator method for *kind*."""
        return {
            SignalKind.WEATHER: self.weather,
            SignalKind.NEWS: self.news,
            SignalKind.SOCIAL: self.social,
            SignalKind.HOSPITAL: self.hospital,
            SignalKind.DEMOGRAPHIC: self.demographic,
            SignalKind.MARKET: self.market,
        }[kind]
