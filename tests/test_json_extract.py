"""Tests for JSON recovery from free-form model text."""

from __future__ import annotations

import pytest

from sectorcast.errors import ResponseUnparsable
from sectorcast.forecasting.json_extract import (
    MAX_CANDIDATES,
    extract_json_payload,
    find_json_span,
    iter_json_candidates,
    json_spans,
    strip_wrappers,
)


class TestStripWrappers:
    def test_strips_json_fence(self) -> None:
        assert strip_wrappers('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence_and_whitespace(self) -> None:
        assert strip_wrappers('  ```\n[1, 2]\n```  \n') == "[1, 2]"

    def test_plain_text_untouched(self) -> None:
        assert strip_wrappers("  hello  ") == "hello"


class TestFindJsonSpan:
    def test_brackets_inside_strings_ignored(self) -> None:
        text = 'prefix {"note": "use [brackets] and }", "n": 1} suffix'
        begin, end = find_json_span(text)
        assert text[begin:end] == '{"note": "use [brackets] and }", "n": 1}'

    def test_escaped_quote_inside_string(self) -> None:
        text = 'x ["say \\"hi\\"]", 2] y'
        begin, end = find_json_span(text)
        assert text[begin:end] == '["say \\"hi\\"]", 2]'

    def test_unbalanced_returns_none(self) -> None:
        assert find_json_span("only an opener { here") is None

    def test_mismatched_opener_skipped(self) -> None:
        text = "bad [} then {\"ok\": true}"
        begin, end = find_json_span(text)
        assert text[begin:end] == '{"ok": true}'


class TestExtractJsonPayload:
    def test_bare_array(self) -> None:
        assert extract_json_payload('[{"itemName": "Rice"}]') == [{"itemName": "Rice"}]

    def test_fenced_with_prose(self) -> None:
        raw = 'Here you go:\n```json\n{"predictions": []}\n```\nHope that helps!'
        assert extract_json_payload(raw) == {"predictions": []}

    def test_embedded_in_prose_without_fence(self) -> None:
        raw = 'Sure! The forecast is {"predictions": [{"itemName": "Urea"}]} as requested.'
        assert extract_json_payload(raw) == {"predictions": [{"itemName": "Urea"}]}

    def test_skips_unparsable_span_for_later_valid_one(self) -> None:
        raw = "notes {not json} then [1, 2, 3]"
        assert extract_json_payload(raw) == [1, 2, 3]

    def test_scalar_json_is_not_a_payload(self) -> None:
        with pytest.raises(ResponseUnparsable):
            extract_json_payload("42")

    @pytest.mark.parametrize("raw", ["", "   \n", "I cannot help with that."])
    def test_nothing_recoverable(self, raw: str) -> None:
        with pytest.raises(ResponseUnparsable):
            extract_json_payload(raw)


class TestJsonSpans:
    def test_nested_spans_in_opener_order(self) -> None:
        text = 'x {"a": [1, {"b": 2}]} y'
        assert [text[b:e] for b, e in json_spans(text)] == [
            '{"a": [1, {"b": 2}]}', '[1, {"b": 2}]', '{"b": 2}',
        ]

    def test_closed_span_inside_unclosed_one(self) -> None:
        text = 'truncated [{"itemName": "Urea"}, {"itemName": '
        assert [text[b:e] for b, e in json_spans(text)] == ['{"itemName": "Urea"}']

    def test_quotes_outside_brackets_are_prose(self) -> None:
        text = 'He said "see [1]" then'
        assert [text[b:e] for b, e in json_spans(text)] == ["[1]"]

    def test_long_unclosed_input_has_no_spans(self) -> None:
        assert json_spans("{" * 200_000) == []


class TestIterJsonCandidates:
    def test_yields_each_distinct_value_in_order(self) -> None:
        raw = 'cited [1], result [{"itemName": "Rice"}]'
        assert list(iter_json_candidates(raw)) == [[1], [{"itemName": "Rice"}], {"itemName": "Rice"}]

    def test_recursion_depth_is_skipped(self) -> None:
        assert list(iter_json_candidates("[" * 20000)) == []
        with pytest.raises(ResponseUnparsable):
            extract_json_payload("[" * 5000 + "x")

    def test_candidate_budget(self) -> None:
        raw = "refs " + " ".join(f"[{i}]" for i in range(MAX_CANDIDATES * 2))
        assert len(list(iter_json_candidates(raw))) == MAX_CANDIDATES
