"""
Output formatter for sector forecasts.

Provides formatting utilities for the CLI:
1. JSON formatting (camelCase, same shape as the HTTP API)
2. Text formatting (human-readable table of predictions)
3. Color-coded terminal output (optional)
"""

import json
from typing import Any, Dict, List, Optional

from sectorcast.forecasting.models import Alert, DemandPrediction, SectorForecast


class OutputFormatter:
    """
    Formats forecast outputs for display.

    Attributes:
        use_colors: Whether to use ANSI color codes (for terminal)
    """

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors

        # ANSI color codes
        self.colors = {
            "reset": "\033[0m" if use_colors else "",
            "bold": "\033[1m" if use_colors else "",
            "red": "\033[91m" if use_colors else "",
            "green": "\033[92m" if use_colors else "",
            "yellow": "\033[93m" if use_colors else "",
            "cyan": "\033[96m" if use_colors else "",
        }

    def format_json(
        self,
        forecast: SectorForecast,
        alerts: Optional[List[Alert]] = None,
        indent: int = 2,
    ) -> str:
        """
        Format forecast as JSON.

        Args:
            forecast: Completed sector forecast
            alerts: Alerts stored alongside the forecast
            indent: JSON indentation level

        Returns:
            JSON string with camelCase keys
        """
        payload: Dict[str, Any] = forecast.model_dump(mode="json", by_alias=True)
        if alerts is not None:
            payload["alerts"] = [a.model_dump(mode="json", by_alias=True) for a in alerts]
        return json.dumps(payload, indent=indent)

    def format_text(
        self,
        forecast: SectorForecast,
        alerts: Optional[List[Alert]] = None,
        verbose: bool = False,
    ) -> str:
        """
        Format forecast as human-readable text.

        Args:
            forecast: Completed sector forecast
            alerts: Alerts stored alongside the forecast
            verbose: Whether to include per-item reasoning and recommendations

        Returns:
            Formatted text string
        """
        lines = []

        lines.append(
            self._format_header(
                f"{forecast.sector.value.upper()} DEMAND FORECAST: "
                f"{forecast.region} ({forecast.timeframe.value})"
            )
        )
        lines.append(f"Overall confidence: {self._format_confidence(forecast.confidence)}")
        lines.append("")

        lines.append(self._format_section("Predictions"))
        for i, prediction in enumerate(forecast.predictions, 1):
            lines.append(self._format_prediction(i, prediction))
            if verbose:
                if prediction.reasoning:
                    lines.append(f"     {prediction.reasoning}")
                for rec in prediction.recommendations[:3]:
                    lines.append(f"     - {rec}")
        lines.append("")

        if forecast.market_analysis:
            lines.append(self._format_section("Market Analysis"))
            lines.append(forecast.market_analysis)
            lines.append("")

        if forecast.risk_factors:
            lines.append(self._format_section("Risk Factors"))
            for risk in forecast.risk_factors:
                lines.append(f"- {risk}")
            lines.append("")

        if forecast.opportunities:
            lines.append(self._format_section("Opportunities"))
            for opportunity in forecast.opportunities:
                lines.append(f"- {opportunity}")
            lines.append("")

        if alerts:
            lines.append(self._format_section("Alerts"))
            for alert in alerts:
                lines.append(f"{self._format_severity(alert.severity)} {alert.title}")
                if verbose:
                    lines.append(f"  {alert.message}")
            lines.append("")

        lines.append(self._format_section("Metadata"))
        lines.append(f"Generated: {forecast.generated_at.isoformat()}")
        lines.append(f"Sources: {', '.join(forecast.data_sources_used) or 'N/A'}")

        return "\n".join(lines)

    def _format_prediction(self, index: int, prediction: DemandPrediction) -> str:
        change = self._format_change(prediction.demand_change_percentage)
        return (
            f"{index:>2}. {prediction.item_name} [{prediction.category}] "
            f"{prediction.current_demand:g} -> {prediction.predicted_demand:g} "
            f"({change}, risk {prediction.risk_level}, "
            f"conf {self._format_confidence(prediction.confidence)})"
        )

    def _format_header(self, text: str) -> str:
        """Format section header with colors."""
        return f"{self.colors['bold']}{self.colors['cyan']}{text}{self.colors['reset']}"

    def _format_section(self, text: str) -> str:
        """Format section title."""
        return f"{self.colors['bold']}{text}{self.colors['reset']}"

    def _format_change(self, pct: float) -> str:
        """Rising demand green, falling red."""
        if pct > 0:
            color = self.colors["green"]
        elif pct < 0:
            color = self.colors["red"]
        else:
            color = self.colors["yellow"]
        return f"{color}{pct:+.1f}%{self.colors['reset']}"

    def _format_confidence(self, conf: float) -> str:
        """Format confidence score with color coding."""
        if conf >= 0.8:
            color = self.colors["green"]
        elif conf >= 0.65:
            color = self.colors["yellow"]
        else:
            color = self.colors["red"]

        return f"{color}{conf:.1%}{self.colors['reset']}"

    def _format_severity(self, severity: str) -> str:
        color = self.colors["red"] if severity == "critical" else self.colors["yellow"]
        return f"{color}[{severity.upper()}]{self.colors['reset']}"

    def format_error(self, error_msg: str) -> str:
        return (
            f"{self.colors['bold']}{self.colors['red']}"
            f"ERROR: {error_msg}"
            f"{self.colors['reset']}"
        )
