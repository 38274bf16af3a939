"""Tests for alert derivation rules."""

from __future__ import annotations

from sectorcast.forecasting.models import DemandPrediction, Sector, SectorForecast, Timeframe
from sectorcast.persistence.alerts import derive_alert, derive_alerts


def _make_prediction(
    name: str = "Insulin",
    change: float = 5.0,
    risk: str = "Medium",
) -> DemandPrediction:
    return DemandPrediction(
        item_name=name,
        current_demand=100.0,
        predicted_demand=100.0 * (1 + change / 100.0),
        demand_change_percentage=change,
        demand_trend="increase" if change > 0 else "decrease" if change < 0 else "no-change",
        confidence=0.8,
        risk_level=risk,
    )


class TestDeriveAlert:
    def test_high_risk_is_critical(self) -> None:
        alert = derive_alert(_make_prediction(risk="High", change=-10.0), "healthcare", "Delhi")
        assert alert is not None
        assert alert.severity == "critical"
        assert alert.title == "High Risk: Insulin"
        assert alert.item_name == "Insulin"
        assert alert.region == "Delhi"

    def test_high_risk_wins_over_surge(self) -> None:
        alert = derive_alert(_make_prediction(risk="High", change=80.0), "healthcare", "Delhi")
        assert alert.severity == "critical"

    def test_surge_above_threshold_is_medium(self) -> None:
        alert = derive_alert(_make_prediction(change=35.0), "healthcare", "Delhi")
        assert alert is not None
        assert alert.severity == "medium"
        assert alert.title == "Demand Surge: Insulin"
        assert "35.0%" in alert.message

    def test_threshold_is_exclusive(self) -> None:
        assert derive_alert(_make_prediction(change=20.0), "healthcare", "Delhi") is None

    def test_custom_threshold(self) -> None:
        alert = derive_alert(_make_prediction(change=12.0), "healthcare", "Delhi", change_threshold=10.0)
        assert alert.severity == "medium"

    def test_low_risk_small_change_no_alert(self) -> None:
        assert derive_alert(_make_prediction(risk="Low", change=3.0), "retail", "Pune") is None


def test_derive_alerts_for_batch() -> None:
    forecast = SectorForecast(
        sector=Sector.HEALTHCARE,
        region="Jaipur",
        timeframe=Timeframe.DAYS_30,
        predictions=[
            _make_prediction("ORS", change=45.0),
            _make_prediction("Masks", change=2.0),
            _make_prediction("Antivenom", change=1.0, risk="High"),
        ],
        confidence=0.8,
    )

    alerts = derive_alerts(forecast)

    assert [(a.item_name, a.severity) for a in alerts] == [("ORS", "medium"), ("Antivenom", "critical")]
    assert all(a.sector == "healthcare" for a in alerts)
