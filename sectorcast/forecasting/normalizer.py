"""
Response normalizer: untrusted model text -> validated DemandPrediction list.

Stages:
1. recover candidate JSON values from the text (``json_extract``), trying
   each in order until one yields predictions;
2. locate the item list (bare array, ``{"predictions": [...]}`` wrapper, or
   a single item object);
3. per item: require ``itemName`` and ``predictedDemand``, coerce
   numeric-looking strings, fill optional fields with defaults;
4. recompute ``demandChangePercentage`` from current/predicted demand when
   the reported value is missing, disagrees in sign, or diverges by more
   than the tolerance;
5. normalize confidence and risk level, drop duplicate item names, cap the
   batch at the requested count.

Items that fail are dropped and logged, never raised. Only an empty result
is an error.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from sectorcast.errors import NoValidPredictions
from sectorcast.forecasting.json_extract import iter_json_candidates, unparsable
from sectorcast.forecasting.models import DemandPrediction

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 5.0
DEFAULT_CONFIDENCE = 0.65

_LIST_KEYS = ("predictions", "items", "forecasts")
_ITEM_NAME_KEYS = ("itemName", "item_name", "name")
_PREDICTED_KEYS = ("predictedDemand", "predicted_demand")
_CURRENT_KEYS = ("currentDemand", "current_demand")
_PERCENT_KEYS = (
    "demandChangePercentage",
    "demand_change_percentage",
    "demandChange",
    "demand_change",
)
_RISK_LEVELS = {"low": "Low", "medium": "Medium", "moderate": "Medium", "high": "High", "critical": "High"}


@dataclass
class NormalizedBatch:
    predictions: list[DemandPrediction] = field(default_factory=list)
    market_analysis: str = ""
    dropped: int = 0


def coerce_number(value: Any) -> Optional[float]:
    """Return *value* as a finite float, or None if it is not numeric.

    Accepts numbers and strings like ``"1,200"``, ``" 15.5 % "``. Booleans
    are not numbers here.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("%", "").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _first(item: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in item and item[key] is not None:
            return item[key]
    return None


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]
    return []


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


def demand_trend(change_pct: float) -> str:
    if change_pct > 0:
        return "increase"
    if change_pct < 0:
        return "decrease"
    return "no-change"


def demand_level(change_pct: float) -> str:
    if change_pct > 20:
        return "high"
    if change_pct > 5:
        return "medium"
    return "low"


class ResponseNormalizer:
    """Turns raw model output into a validated, de-duplicated prediction batch.

    Attributes:
        tolerance: Allowed divergence, in percentage points, between the
            reported and recomputed change before the recomputed value wins.
        default_confidence: Used when confidence is missing or out of range.
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_TOLERANCE,
        default_confidence: float = DEFAULT_CONFIDENCE,
    ) -> None:
        self.tolerance = tolerance
        self.default_confidence = default_confidence

    def normalize(self, raw: str, expected_count: int) -> list[DemandPrediction]:
        """Parse and validate *raw*; see ``normalize_batch``."""
        return self.normalize_batch(raw, expected_count).predictions

    def normalize_batch(self, raw: str, expected_count: int) -> NormalizedBatch:
        """Parse and validate *raw* into at most *expected_count* predictions.

        Each JSON value recoverable from *raw* is tried in order of appearance,
        so a stray citation like ``[1]`` ahead of the real array is skipped.
        The first candidate that yields predictions wins; if none does, the
        first candidate's ``NoValidPredictions`` is raised.

        Raises:
            ResponseUnparsable: no JSON could be recovered from *raw*.
            NoValidPredictions: JSON was found but no candidate yielded a valid item.
        """
        first_error: Optional[NoValidPredictions] = None
        for payload in iter_json_candidates(raw):
            try:
                return self.normalize_payload(payload, expected_count)
            except NoValidPredictions as exc:
                logger.debug("JSON candidate rejected: %s", exc.message)
                first_error = first_error or exc
        if first_error is not None:
            raise first_error
        raise unparsable(raw)

    def normalize_payload(self, payload: Any, expected_count: int) -> NormalizedBatch:
        items, market_analysis = self._locate_items(payload)

        batch = NormalizedBatch(market_analysis=market_analysis)
        seen: set[str] = set()
        for index, item in enumerate(items):
            prediction = self._normalize_item(item, index)
            if prediction is None:
                batch.dropped += 1
                continue
            key = prediction.item_name.casefold()
            if key in seen:
                logger.info("Dropping duplicate item %r at index %d", prediction.item_name, index)
                batch.dropped += 1
                continue
            seen.add(key)
            batch.predictions.append(prediction)

        if not batch.predictions:
            raise NoValidPredictions(
                f"No valid predictions among {len(items)} returned item(s)"
            )

        if len(batch.predictions) > expected_count:
            logger.info(
                "Model returned %d valid items, keeping first %d",
                len(batch.predictions), expected_count,
            )
            batch.predictions = batch.predictions[:expected_count]
        elif len(batch.predictions) < expected_count:
            logger.warning(
                "Model returned %d valid items, expected %d",
                len(batch.predictions), expected_count,
            )
        return batch

    def _locate_items(self, payload: Any) -> tuple[list, str]:
        if isinstance(payload, list):
            return payload, ""
        if isinstance(payload, dict):
            analysis = _text(_first(payload, ("marketAnalysis", "market_analysis")))
            for key in _LIST_KEYS:
                if isinstance(payload.get(key), list):
                    return payload[key], analysis
            if _first(payload, _ITEM_NAME_KEYS) is not None:
                return [payload], ""
        raise NoValidPredictions(
            f"Model JSON has no prediction list (got {type(payload).__name__})"
        )

    def _normalize_item(self, item: Any, index: int) -> Optional[DemandPrediction]:
        if not isinstance(item, dict):
            logger.warning("Dropping item %d: not an object (%s)", index, type(item).__name__)
            return None

        name = _text(_first(item, _ITEM_NAME_KEYS))
        if not name:
            logger.warning("Dropping item %d: missing itemName", index)
            return None

        predicted = coerce_number(_first(item, _PREDICTED_KEYS))
        if predicted is None:
            logger.warning("Dropping item %d (%s): missing or non-numeric predictedDemand", index, name)
            return None
        predicted = max(predicted, 0.0)

        reported_pct = coerce_number(_first(item, _PERCENT_KEYS))
        current = coerce_number(_first(item, _CURRENT_KEYS))
        if current is None:
            if reported_pct is not None and reported_pct > -100.0:
                current = predicted / (1.0 + reported_pct / 100.0)
            else:
                current = predicted
        current = max(current, 0.0)

        change_pct = self._reconcile_percentage(name, current, predicted, reported_pct)

        try:
            return DemandPrediction(
                item_name=name,
                category=_text(item.get("category"), "General"),
                subcategory=_text(item.get("subcategory")),
                current_demand=current,
                predicted_demand=predicted,
                demand_change_percentage=change_pct,
                demand_trend=demand_trend(change_pct),
                confidence=self._confidence(item.get("confidence")),
                peak_period=_text(_first(item, ("peakPeriod", "peak_period"))),
                reasoning=_text(item.get("reasoning")),
                market_factors=_string_list(_first(item, ("marketFactors", "market_factors"))),
                recommendations=_string_list(item.get("recommendations")),
                risk_level=self._risk_level(_first(item, ("riskLevel", "risk_level"))),
                demand_level=demand_level(change_pct),
            )
        except ValidationError as exc:
            logger.warning("Dropping item %d (%s): %s", index, name, exc.errors()[0].get("msg"))
            return None

    def _reconcile_percentage(
        self, name: str, current: float, predicted: float, reported: Optional[float]
    ) -> float:
        computed = (predicted - current) / max(current, 1.0) * 100.0
        if reported is None:
            return computed
        if _sign(reported) != _sign(predicted - current) or abs(reported - computed) > self.tolerance:
            logger.debug(
                "Recomputed change for %s: reported %.2f%%, computed %.2f%%",
                name, reported, computed,
            )
            return computed
        return reported

    def _confidence(self, value: Any) -> float:
        confidence = coerce_number(value)
        if confidence is None:
            return self.default_confidence
        if 1.0 < confidence <= 100.0:
            confidence /= 100.0
        elif confidence < 0.0 or confidence > 100.0:
            return self.default_confidence
        return min(max(confidence, 0.0), 1.0)

    @staticmethod
    def _risk_level(value: Any) -> str:
        if isinstance(value, str):
            return _RISK_LEVELS.get(value.strip().casefold(), "Medium")
        return "Medium"
