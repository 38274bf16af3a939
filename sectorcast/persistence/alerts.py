"""Alert derivation rules applied to a new forecast batch at commit time."""

from __future__ import annotations

from sectorcast.forecasting.models import Alert, DemandPrediction, SectorForecast

DEFAULT_CHANGE_THRESHOLD = 20.0


def derive_alert(
    prediction: DemandPrediction,
    sector: str,
    region: str,
    change_threshold: float = DEFAULT_CHANGE_THRESHOLD,
) -> Alert | None:
    """One alert for a High-risk or strongly growing item, otherwise None.

    High risk yields ``critical``; a change above *change_threshold*
    percent with lower risk yields ``medium``.
    """
    if prediction.risk_level == "High":
        return Alert(
            title=f"High Risk: {prediction.item_name}",
            severity="critical",
            sector=sector,
            region=region,
            item_name=prediction.item_name,
            message=(
                f"{prediction.item_name} is flagged high risk in {region}: "
                f"demand {prediction.demand_trend} of "
                f"{prediction.demand_change_percentage:+.1f}% expected "
                f"({prediction.peak_period or 'timing unclear'})."
            ),
        )
    if prediction.demand_change_percentage > change_threshold:
        return Alert(
            title=f"Demand Surge: {prediction.item_name}",
            severity="medium",
            sector=sector,
            region=region,
            item_name=prediction.item_name,
            message=(
                f"{prediction.item_name} demand in {region} is expected to rise "
                f"{prediction.demand_change_percentage:.1f}% "
                f"({prediction.current_demand:g} -> {prediction.predicted_demand:g})."
            ),
        )
    return None


def derive_alerts(
    forecast: SectorForecast, change_threshold: float = DEFAULT_CHANGE_THRESHOLD
) -> list[Alert]:
    sector = forecast.sector.value
    alerts = []
    for prediction in forecast.predictions:
        alert = derive_alert(prediction, sector, forecast.region, change_threshold)
        if alert is not None:
            alerts.append(alert)
    return alerts
