"""Logging setup shared by the API server and the forecast CLI.

Two renderings of the same records:
- text: ``time [LEVEL] logger: message`` for terminals and local runs
- JSON lines: one object per record, with any ``extra=`` fields (sector,
  region, stage, ...) promoted to top-level keys for log search

Usage:
    from sectorcast.logging_config import setup_logging

    setup_logging(level="DEBUG")
    setup_logging(json_format=True)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

# Third-party loggers held at WARNING or above.
_QUIET_LOGGERS = ("aiohttp.access", "httpx", "google_genai", "sqlalchemy.engine")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonLineFormatter(logging.Formatter):
    """Render a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _resolve_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Invalid log level: {level!r}")
    return numeric


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Point the root logger at one stderr handler.

    Safe to call repeatedly: handlers from earlier calls are closed and
    replaced, so the CLI and test runs never duplicate lines.

    Raises:
        ValueError: If *level* is not a logging level name.
    """
    numeric = _resolve_level(level)
    root = logging.getLogger()

    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonLineFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))
