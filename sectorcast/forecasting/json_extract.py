"""
Recover a JSON value from free-form model text.

Models wrap JSON in code fences, prepend "Here you go:", append "Hope that
helps!", or ignore the format instructions entirely. Recovery runs in
stages and only gives up once every stage has failed:

1. trim whitespace and strip leading/trailing fence markers;
2. try the whole remainder as JSON;
3. try the contents of each fenced block;
4. try each balanced ``[...]`` / ``{...}`` span found by string-aware
   bracket matching, in order of appearance (nested spans included).
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator, Optional

from sectorcast.errors import ResponseUnparsable

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")
_FENCED_BLOCK = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n(.*?)```", re.DOTALL)

_CLOSERS = {"[": "]", "{": "}"}

MAX_CANDIDATES = 100


def strip_wrappers(text: str) -> str:
    """Trim whitespace and any code fence wrapping the whole text."""
    text = text.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def find_json_span(text: str, start: int = 0) -> Optional[tuple[int, int]]:
    """Locate the first balanced JSON array/object whose opener is at or after *start*.

    Brackets inside string literals are ignored. Returns ``(begin, end)``
    with *end* exclusive, or None if no balanced span exists.
    """
    for begin, end in json_spans(text):
        if begin >= start:
            return begin, end
    return None


def json_spans(text: str) -> list[tuple[int, int]]:
    """Every balanced ``[...]`` / ``{...}`` span, ordered by opener position.

    One pass over *text*. A closer that does not match the innermost open
    bracket fails every bracket still open, so none of them can yield a span.
    Quotes only start a string inside an open bracket; prose outside JSON is
    never treated as a literal.
    """
    spans: list[tuple[int, int]] = []
    stack: list[tuple[int, str]] = []
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and stack:
            in_string = True
        elif ch in _CLOSERS:
            stack.append((i, _CLOSERS[ch]))
        elif ch in ("]", "}") and stack:
            begin, closer = stack.pop()
            if ch == closer:
                spans.append((begin, i + 1))
            else:
                stack.clear()
    spans.sort()
    return spans


def _candidates(text: str) -> Iterator[str]:
    yield text
    for match in _FENCED_BLOCK.finditer(text):
        yield match.group(1).strip()
    for begin, end in json_spans(text):
        yield text[begin:end]


def iter_json_candidates(raw: str) -> Iterator[Any]:
    """Yield each distinct JSON array/object recoverable from *raw*, in order.

    Candidates nested too deeply for the decoder are skipped like any other
    unparsable span. At most ``MAX_CANDIDATES`` spans are decoded.
    """
    if not isinstance(raw, str) or not raw.strip():
        return

    text = strip_wrappers(raw)
    tried: set[str] = set()
    for candidate in _candidates(text):
        if not candidate or candidate[0] not in _CLOSERS or candidate in tried:
            continue
        if len(tried) >= MAX_CANDIDATES:
            logger.warning("Stopped JSON recovery after %d candidates", MAX_CANDIDATES)
            return
        tried.add(candidate)
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
        yield value


def extract_json_payload(raw: str) -> Any:
    """Parse the first JSON array/object recoverable from *raw*.

    Raises:
        ResponseUnparsable: nothing in the text parses as a JSON array or object.
    """
    for value in iter_json_candidates(raw):
        return value
    raise unparsable(raw)


def unparsable(raw: Any) -> ResponseUnparsable:
    if not isinstance(raw, str) or not raw.strip():
        return ResponseUnparsable("Model response is empty")
    return ResponseUnparsable(
        f"No JSON array or object found in model response ({len(raw)} chars)"
    )
