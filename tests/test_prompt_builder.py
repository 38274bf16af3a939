"""Tests for the forecast prompt builder."""

from __future__ import annotations

from datetime import datetime, timezone

from sectorcast.context.models import (
    AggregatedContext,
    ContextSignal,
    MarketPayload,
    Provenance,
    SignalKind,
    WeatherPayload,
)
from sectorcast.forecasting.models import Sector, Timeframe
from sectorcast.forecasting.prompt_builder import MAX_CONFIDENCE, MIN_CONFIDENCE, build_prompt

_FIXED = datetime(2026, 7, 1, tzinfo=timezone.utc)


def _make_context() -> AggregatedContext:
    context = AggregatedContext(region="Jaipur", sector="agriculture")
    context.signals[SignalKind.WEATHER] = ContextSignal(
        kind=SignalKind.WEATHER,
        payload=WeatherPayload(temperature=34.0, humidity=61.0, season="monsoon"),
        provenance=Provenance.LIVE,
        source_label="Open-Meteo",
        fetched_at=_FIXED,
    )
    context.signals[SignalKind.MARKET] = ContextSignal(
        kind=SignalKind.MARKET,
        payload=MarketPayload(inflation=4.1, usd_inr=84.2),
        provenance=Provenance.STATIC,
        source_label="Regional baseline market",
        fetched_at=_FIXED,
    )
    context.sources_used = ["Open-Meteo", "Regional baseline market"]
    return context


class TestBuildPrompt:
    def test_is_deterministic(self) -> None:
        context = _make_context()
        first = build_prompt(Sector.AGRICULTURE, "Jaipur", Timeframe.DAYS_30, context)
        second = build_prompt(Sector.AGRICULTURE, "Jaipur", Timeframe.DAYS_30, context)
        assert first == second

    def test_contains_request_and_context(self) -> None:
        prompt = build_prompt(Sector.AGRICULTURE, "Jaipur", Timeframe.DAYS_30, _make_context())

        assert "Agriculture sector in Jaipur" in prompt
        assert "next 30 days" in prompt
        assert '"temperature": 34.0' in prompt
        assert '"usd_inr": 84.2' in prompt
        assert "Context sources: Open-Meteo, Regional baseline market" in prompt
        assert "Fertilizers" in prompt
        assert "Irrigation Department" in prompt

    def test_output_contract(self) -> None:
        prompt = build_prompt("healthcare", "Delhi", "15 days", _make_context(), prediction_count=7)

        assert "Return EXACTLY 7 predictions" in prompt
        assert '"itemName"' in prompt
        assert '"demandChangePercentage"' in prompt
        assert '"marketAnalysis"' in prompt
        assert f"{MIN_CONFIDENCE} to {MAX_CONFIDENCE}" in prompt
        assert "Respond with ONLY a JSON object" in prompt

    def test_filters_add_focus_section(self) -> None:
        prompt = build_prompt(
            Sector.HEALTHCARE,
            "Delhi",
            Timeframe.DAYS_60,
            _make_context(),
            filters={"department": "Cardiac Department", "category": "Veterinary Drugs"},
        )
        assert "## Focus" in prompt
        assert "Cardiac Department department" in prompt
        # unknown categories pass through as hints
        assert "Veterinary Drugs category" in prompt

    def test_all_and_empty_filters_ignored(self) -> None:
        prompt = build_prompt(
            Sector.RETAIL,
            "Mumbai",
            Timeframe.DAYS_30,
            _make_context(),
            filters={"department": "all", "category": None},
        )
        assert "## Focus" not in prompt

    def test_empty_context(self) -> None:
        context = AggregatedContext(region="Pune", sector="energy")
        prompt = build_prompt(Sector.ENERGY, "Pune", Timeframe.DAYS_30, context)
        assert "Context sources: none" in prompt
        assert "{}" in prompt
