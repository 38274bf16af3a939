"""
Tests for ResponseNormalizer.

Verifies:
1. Wrapped / fenced / prose-surrounded replies yield the same batch
2. Change percentage is recomputed when missing, wrong-signed or divergent
3. Confidence and risk level normalization
4. Invalid and duplicate items are dropped, not raised
5. Only an empty result is an error
"""

from __future__ import annotations

import json
from typing import Any, Optional

import pytest

from sectorcast.errors import NoValidPredictions, ResponseUnparsable
from sectorcast.forecasting.normalizer import (
    ResponseNormalizer,
    coerce_number,
    demand_level,
    demand_trend,
)


def _make_item(
    name: str = "Paracetamol 500mg",
    current: Any = 100,
    predicted: Any = 120,
    pct: Any = 20,
    confidence: Any = 0.8,
    risk: Optional[str] = "Medium",
    **extra: Any,
) -> dict:
    item = {
        "itemName": name,
        "category": "Medicines",
        "currentDemand": current,
        "predictedDemand": predicted,
        "demandChangePercentage": pct,
        "confidence": confidence,
        "riskLevel": risk,
    }
    item.update(extra)
    return {k: v for k, v in item.items() if v is not None}


class TestHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [(5, 5.0), ("1,200", 1200.0), (" 15.5 % ", 15.5), ("abc", None), (True, None),
         (None, None), (float("nan"), None), ("", None)],
    )
    def test_coerce_number(self, value: Any, expected: Optional[float]) -> None:
        assert coerce_number(value) == expected

    def test_demand_trend(self) -> None:
        assert demand_trend(3.0) == "increase"
        assert demand_trend(-0.1) == "decrease"
        assert demand_trend(0.0) == "no-change"

    def test_demand_level_buckets(self) -> None:
        assert demand_level(25.0) == "high"
        assert demand_level(20.0) == "medium"
        assert demand_level(6.0) == "medium"
        assert demand_level(5.0) == "low"
        assert demand_level(-40.0) == "low"


class TestWrapping:
    def test_fenced_reply_with_prose(self) -> None:
        raw = (
            "Here you go:\n```json\n"
            + json.dumps([_make_item()])
            + "\n```\nHope that helps!"
        )
        result = ResponseNormalizer().normalize(raw, 10)

        assert len(result) == 1
        assert result[0].item_name == "Paracetamol 500mg"
        assert result[0].demand_change_percentage == pytest.approx(20.0)
        assert result[0].demand_trend == "increase"

    def test_predictions_wrapper_carries_market_analysis(self) -> None:
        raw = json.dumps({"predictions": [_make_item()], "marketAnalysis": "Monsoon lifts demand."})
        batch = ResponseNormalizer().normalize_batch(raw, 10)

        assert batch.market_analysis == "Monsoon lifts demand."
        assert len(batch.predictions) == 1

    def test_single_item_object(self) -> None:
        result = ResponseNormalizer().normalize(json.dumps(_make_item(name="ORS")), 10)
        assert [p.item_name for p in result] == ["ORS"]

    def test_no_json_is_unparsable(self) -> None:
        with pytest.raises(ResponseUnparsable):
            ResponseNormalizer().normalize("I cannot help with that.", 10)

    def test_object_without_items_is_no_valid_predictions(self) -> None:
        with pytest.raises(NoValidPredictions):
            ResponseNormalizer().normalize('{"status": "ok"}', 10)

    def test_citation_before_array_is_skipped(self) -> None:
        raw = "Based on the regional data [1], here is the forecast:\n" + json.dumps([_make_item(name="ORS")])
        result = ResponseNormalizer().normalize(raw, 10)
        assert [p.item_name for p in result] == ["ORS"]

    def test_wrapper_after_stray_object_is_used(self) -> None:
        raw = (
            'Context used: {"source": "static"}. Forecast: '
            + json.dumps({"predictions": [_make_item(name="Insulin")], "marketAnalysis": "Steady."})
        )
        batch = ResponseNormalizer().normalize_batch(raw, 10)
        assert [p.item_name for p in batch.predictions] == ["Insulin"]
        assert batch.market_analysis == "Steady."

    @pytest.mark.parametrize("raw", ["[" * 5000 + "x", "[" * 20000, "{" * 20000])
    def test_deeply_nested_input_is_unparsable(self, raw: str) -> None:
        with pytest.raises(ResponseUnparsable):
            ResponseNormalizer().normalize(raw, 10)

    def test_deeply_nested_balanced_array_is_unparsable(self) -> None:
        with pytest.raises(ResponseUnparsable):
            ResponseNormalizer().normalize("[" * 5000 + "]" * 5000, 10)


class TestPercentageReconciliation:
    def test_reported_value_kept_within_tolerance(self) -> None:
        item = _make_item(current=100, predicted=120, pct=22)
        [p] = ResponseNormalizer(tolerance=5.0).normalize(json.dumps([item]), 10)
        assert p.demand_change_percentage == pytest.approx(22.0)

    def test_divergent_value_recomputed(self) -> None:
        item = _make_item(current=100, predicted=120, pct=60)
        [p] = ResponseNormalizer(tolerance=5.0).normalize(json.dumps([item]), 10)
        assert p.demand_change_percentage == pytest.approx(20.0)

    def test_wrong_sign_recomputed(self) -> None:
        item = _make_item(current=100, predicted=80, pct=20)
        [p] = ResponseNormalizer().normalize(json.dumps([item]), 10)
        assert p.demand_change_percentage == pytest.approx(-20.0)
        assert p.demand_trend == "decrease"
        assert p.demand_level == "low"

    def test_missing_percentage_computed(self) -> None:
        item = _make_item(current=200, predicted=250, pct=None)
        [p] = ResponseNormalizer().normalize(json.dumps([item]), 10)
        assert p.demand_change_percentage == pytest.approx(25.0)
        assert p.demand_level == "high"

    def test_missing_current_derived_from_percentage(self) -> None:
        item = _make_item(current=None, predicted=150, pct=50)
        [p] = ResponseNormalizer().normalize(json.dumps([item]), 10)
        assert p.current_demand == pytest.approx(100.0)
        assert p.demand_change_percentage == pytest.approx(50.0)

    def test_numeric_strings_coerced(self) -> None:
        item = _make_item(current="1,000", predicted="1,100", pct="10%")
        [p] = ResponseNormalizer().normalize(json.dumps([item]), 10)
        assert p.current_demand == 1000.0
        assert p.predicted_demand == 1100.0
        assert p.demand_change_percentage == pytest.approx(10.0)

    def test_negative_demand_clamped(self) -> None:
        item = _make_item(current=-5, predicted=10, pct=None)
        [p] = ResponseNormalizer().normalize(json.dumps([item]), 10)
        assert p.current_demand == 0.0
        assert p.predicted_demand == 10.0


class TestConfidenceAndRisk:
    @pytest.mark.parametrize(
        "raw,expected",
        [(0.82, 0.82), (85, 0.85), ("0.7", 0.7), (None, 0.65), (-0.3, 0.65), (250, 0.65)],
    )
    def test_confidence(self, raw: Any, expected: float) -> None:
        [p] = ResponseNormalizer().normalize(json.dumps([_make_item(confidence=raw)]), 10)
        assert p.confidence == pytest.approx(expected)

    @pytest.mark.parametrize(
        "raw,expected",
        [("high", "High"), ("LOW", "Low"), ("moderate", "Medium"), ("critical", "High"),
         ("unknown", "Medium"), (None, "Medium")],
    )
    def test_risk_level(self, raw: Optional[str], expected: str) -> None:
        [p] = ResponseNormalizer().normalize(json.dumps([_make_item(risk=raw)]), 10)
        assert p.risk_level == expected


class TestDropping:
    def test_invalid_items_dropped(self) -> None:
        items = [
            _make_item(name="Insulin"),
            {"category": "Medicines", "predictedDemand": 5},  # no name
            _make_item(name="Masks", predicted="lots"),  # non-numeric
            "not an object",
        ]
        batch = ResponseNormalizer().normalize_batch(json.dumps(items), 10)

        assert [p.item_name for p in batch.predictions] == ["Insulin"]
        assert batch.dropped == 3

    def test_duplicate_names_dropped_case_insensitively(self) -> None:
        items = [_make_item(name="Rice"), _make_item(name="rice "), _make_item(name="Wheat")]
        result = ResponseNormalizer().normalize(json.dumps(items), 10)
        assert [p.item_name for p in result] == ["Rice", "Wheat"]

    def test_truncates_to_expected_count(self) -> None:
        items = [_make_item(name=f"Item {i}") for i in range(12)]
        result = ResponseNormalizer().normalize(json.dumps(items), 10)
        assert len(result) == 10
        assert result[-1].item_name == "Item 9"

    def test_short_batch_is_accepted(self) -> None:
        items = [_make_item(name=f"Item {i}") for i in range(3)]
        assert len(ResponseNormalizer().normalize(json.dumps(items), 10)) == 3

    def test_all_items_invalid_raises(self) -> None:
        with pytest.raises(NoValidPredictions):
            ResponseNormalizer().normalize(json.dumps([{"foo": 1}, {"bar": 2}]), 10)

    def test_empty_array_raises(self) -> None:
        with pytest.raises(NoValidPredictions):
            ResponseNormalizer().normalize("[]", 10)
