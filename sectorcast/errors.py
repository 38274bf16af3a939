"""
Error taxonomy for the forecast pipeline.

Every failure the pipeline can report carries a stable ``kind`` string so
callers (HTTP layer, CLI) can tell "model unreachable" apart from "model
replied garbage" apart from "bad region" without string-matching messages.

Only ``SignalUnavailable`` is recovered inside the pipeline (the aggregator
substitutes a neutral payload). Everything else aborts the forecast attempt
and reaches the caller as a single ``ForecastFailed``.
"""

from __future__ import annotations

from typing import Optional


class ForecastError(Exception):
    """Base class for all pipeline errors."""

    kind: str = "ForecastError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind


class RegionUnknown(ForecastError):
    """Region is not present in the location registry."""

    kind = "RegionUnknown"

    def __init__(self, region: str) -> None:
        super().__init__(f"Unknown region: {region!r}")
        self.region = region


class SignalUnavailable(ForecastError):
    """Every provider tier for one signal kind failed."""

    kind = "SignalUnavailable"

    def __init__(self, signal_kind: str, attempts: Optional[list[str]] = None) -> None:
        self.signal_kind = signal_kind
        self.attempts = attempts or []
        detail = "; ".join(self.attempts) if self.attempts else "no providers"
        super().__init__(f"All tiers failed for {signal_kind} signal ({detail})")


class InferenceUnavailable(ForecastError):
    """Transport, auth or non-success status calling the model endpoint."""

    kind = "InferenceUnavailable"


class InferenceMalformed(ForecastError):
    """The response envelope lacks the expected transport fields."""

    kind = "InferenceMalformed"


class ResponseUnparsable(ForecastError):
    """No JSON payload could be recovered from the model text."""

    kind = "ResponseUnparsable"


class NoValidPredictions(ForecastError):
    """The payload parsed but yielded zero usable prediction items."""

    kind = "NoValidPredictions"


class PersistenceConflict(ForecastError):
    """A concurrent writer holds the (sector, region) key; retry the request."""

    kind = "PersistenceConflict"


class ForecastTimedOut(ForecastError):
    """The optional orchestrator deadline elapsed before persistence began."""

    kind = "ForecastTimedOut"


class InternalError(ForecastError):
    """An exception outside this taxonomy escaped a pipeline stage.

    The orchestrator wraps it so the run still ends in FAILED with a kind.
    """

    kind = "InternalError"

    def __init__(self, exc: BaseException) -> None:
        super().__init__(f"{type(exc).__name__}: {exc}")
        self.exc = exc


class ForecastFailed(ForecastError):
    """Terminal failure of one forecast attempt.

    Wraps the originating error; ``kind`` is the originating kind and
    ``stage`` is the orchestrator state in which it happened.
    """

    def __init__(self, cause: ForecastError, stage: str) -> None:
        super().__init__(f"Forecast failed at {stage}: {cause.message}")
        self.kind = cause.kind
        self.stage = stage
        self.cause = cause
