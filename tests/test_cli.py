"""
Tests for CLI argument parsing and output formatting.

Verifies:
1. Argument parsing and exit codes for bad input
2. Output formatting produces valid JSON/text
"""

import json

import pytest

from sectorcast.cli import main, parse_args
from sectorcast.forecasting.models import (
    Alert,
    DemandPrediction,
    Sector,
    SectorForecast,
    Timeframe,
)
from sectorcast.forecasting.output_formatter import OutputFormatter


def _make_forecast() -> SectorForecast:
    prediction = DemandPrediction(
        item_name="Paracetamol",
        category="Medicines",
        current_demand=1000.0,
        predicted_demand=1300.0,
        demand_change_percentage=30.0,
        demand_trend="increase",
        confidence=0.85,
        reasoning="Monsoon fever season.",
        recommendations=["Raise safety stock"],
        risk_level="Medium",
        demand_level="high",
    )
    return SectorForecast(
        sector=Sector.HEALTHCARE,
        region="Delhi",
        timeframe=Timeframe.DAYS_60,
        predictions=[prediction],
        confidence=0.85,
        opportunities=["Paracetamol"],
        market_analysis="Seasonal uptick.",
        data_sources_used=["Regional baseline weather"],
    )


class TestArgParsing:
    def test_defaults(self):
        args = parse_args(["-s", "retail", "-r", "Mumbai"])
        assert args.sector == "retail"
        assert args.region == "Mumbai"
        assert args.timeframe == "30 days"
        assert args.json_output is False

    def test_rejects_unknown_sector(self):
        with pytest.raises(SystemExit):
            parse_args(["-s", "mining", "-r", "Mumbai"])

    def test_missing_region_exit_code(self, capsys):
        assert main(["--sector", "energy"]) == 2
        assert "--region" in capsys.readouterr().err

    def test_list_regions(self, capsys):
        assert main(["--list-regions"]) == 0
        out = capsys.readouterr().out
        assert "Jaipur, Rajasthan" in out
        assert "Bangalore, Karnataka (aka Bengaluru)" in out


class TestOutputFormatter:
    def test_json_is_camel_case(self):
        alert = Alert(
            title="Demand Surge: Paracetamol",
            severity="medium",
            sector="healthcare",
            region="Delhi",
            message="Predicted +30.0% change",
            item_name="Paracetamol",
        )
        payload = json.loads(OutputFormatter(use_colors=False).format_json(_make_forecast(), [alert]))

        assert payload["sector"] == "healthcare"
        assert payload["timeframe"] == "60 days"
        assert payload["predictions"][0]["demandChangePercentage"] == 30.0
        assert payload["alerts"][0]["itemName"] == "Paracetamol"

    def test_text_without_colors(self):
        text = OutputFormatter(use_colors=False).format_text(_make_forecast(), verbose=True)

        assert text.startswith("HEALTHCARE DEMAND FORECAST: Delhi (60 days)")
        assert "Paracetamol [Medicines] 1000 -> 1300 (+30.0%" in text
        assert "Monsoon fever season." in text
        assert "\033[" not in text

    def test_error_message(self):
        assert OutputFormatter(use_colors=False).format_error("boom") == "ERROR: boom"
