"""
Provider abstraction shared by all fallback tiers.

A provider is just a labelled async callable ``(location, sector) -> payload``.
Returning ``None`` means "nothing to offer" and lets the next tier try; any
raised exception means the same thing but is logged as a fault.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from sectorcast.context.models import Provenance
from sectorcast.context.registry import Location

FetchFn = Callable[[Location, Optional[str]], Awaitable[Optional[BaseModel]]]


@dataclass(frozen=True, slots=True)
class SignalProvider:
    """One tier in a signal's fallback chain."""

    provenance: Provenance
    label: str
    fetch: FetchFn


class ProviderError(RuntimeError):
    """A provider could not produce a payload (bad status, bad body)."""
