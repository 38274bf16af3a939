"""Tests for the deterministic static fallback tier."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from sectorcast.context.models import PAYLOAD_MODELS, SignalKind
from sectorcast.context.registry import Location, LocationRegistry
from sectorcast.context.static import DEFAULT_AVG_TEMP, StaticSource, season_for


def _clock(month: int):
    return lambda: datetime(2026, month, 15, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "month,season",
    [(1, "winter"), (12, "winter"), (4, "summer"), (7, "monsoon"), (10, "post-monsoon")],
)
def test_season_for(month: int, season: str) -> None:
    assert season_for(month) == season


class TestStaticSource:
    @pytest.mark.asyncio
    async def test_weather_uses_location_baseline(self) -> None:
        jaipur = LocationRegistry.default().resolve("Jaipur")
        payload = await StaticSource(clock=_clock(7)).weather(jaipur)

        assert payload.temperature == 28
        assert payload.humidity == 55
        assert payload.season == "monsoon"

    @pytest.mark.asyncio
    async def test_weather_defaults_without_baseline(self) -> None:
        bare = Location("Nowhere", "State", "India", 0.0, 0.0)
        payload = await StaticSource().weather(bare)
        assert payload.temperature == DEFAULT_AVG_TEMP

    @pytest.mark.asyncio
    async def test_every_kind_produces_its_payload_model(self) -> None:
        source = StaticSource()
        location = LocationRegistry.default().resolve("Pune")
        for kind in SignalKind:
            payload = await source.fetcher(kind)(location, "healthcare")
            assert isinstance(payload, PAYLOAD_MODELS[kind])

    @pytest.mark.asyncio
    async def test_hospital_is_deterministic(self) -> None:
        source = StaticSource(clock=_clock(1))
        location = LocationRegistry.default().resolve("Lucknow")

        first = await source.hospital(location)
        second = await source.hospital(location)

        assert first == second
        assert first.total_beds == int(2817105 / 1000 * 1.4)
        assert "Pneumonia" in first.seasonal_concerns

    @pytest.mark.asyncio
    async def test_news_mentions_region_for_sector(self) -> None:
        location = LocationRegistry.default().resolve("Jaipur")
        payload = await StaticSource().news(location, "agriculture")
        assert any("Jaipur" in h for h in payload.headlines)

    @pytest.mark.asyncio
    async def test_market_adds_sector_commodities_once(self) -> None:
        location = LocationRegistry.default().resolve("Jaipur")
        source = StaticSource()

        base = await source.market(location)
        agri = await source.market(location, "agriculture")

        assert [c.name for c in base.commodities] == ["Gold", "Silver", "Crude Oil"]
        assert [c.name for c in agri.commodities][-3:] == ["Wheat", "Rice", "Cotton"]
        assert len(agri.commodities) == 6
