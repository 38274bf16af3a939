"""
Contextual aggregator: resolve every signal a sector needs, concurrently.

All resolves are awaited together ("wait for all, tolerate individual
failure"). A resolve that still raises after its fallback chain is replaced
by a neutral placeholder for that one kind, so a single bad signal never
aborts the forecast. Results are merged by kind, so completion order has no
effect on the output.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from sectorcast.context.models import (
    AggregatedContext,
    ContextSignal,
    Provenance,
    SignalKind,
    neutral_payload,
)
from sectorcast.context.resolver import TieredResolver

logger = logging.getLogger(__name__)

NEUTRAL_SOURCE_LABEL = "Neutral placeholder"

_ALL_BUT_HOSPITAL = tuple(k for k in SignalKind if k is not SignalKind.HOSPITAL)

REQUIRED_SIGNALS: dict[str, tuple[SignalKind, ...]] = {
    "healthcare": tuple(SignalKind),
    "automobile": _ALL_BUT_HOSPITAL,
    "agriculture": _ALL_BUT_HOSPITAL,
    "retail": _ALL_BUT_HOSPITAL,
    "energy": _ALL_BUT_HOSPITAL,
}


def required_signals(sector: str) -> tuple[SignalKind, ...]:
    return REQUIRED_SIGNALS.get(sector, _ALL_BUT_HOSPITAL)


class ContextAggregator:
    """Fan out to the resolver for every required signal kind."""

    def __init__(self, resolver: TieredResolver) -> None:
        self.resolver = resolver

    async def aggregate(
        self,
        sector: str,
        region: str,
        kinds: Optional[Sequence[SignalKind]] = None,
    ) -> AggregatedContext:
        """Resolve all required signals for (sector, region).

        Raises:
            RegionUnknown: before any provider is called.
        """
        location = self.resolver.registry.resolve(region)
        kinds = tuple(kinds) if kinds is not None else required_signals(sector)

        results = await asyncio.gather(
            *(self.resolver.resolve(kind, location.name, sector) for kind in kinds),
            return_exceptions=True,
        )

        context = AggregatedContext(region=location.name, sector=sector)
        for kind, result in zip(kinds, results):
            if isinstance(result, ContextSignal):
                context.signals[kind] = result
                continue
            if not isinstance(result, Exception):
                # BaseException (cancellation) propagates
                raise result
            logger.warning(
                "Substituting neutral %s signal for %s: %s", kind.value, location.name, result
            )
            context.signals[kind] = ContextSignal(
                kind=kind,
                payload=neutral_payload(kind),
                provenance=Provenance.STATIC,
                source_label=NEUTRAL_SOURCE_LABEL,
                substituted=True,
            )

        for kind in kinds:
            label = context.signals[kind].source_label
            if label not in context.sources_used:
                context.sources_used.append(label)

        logger.info(
            "Aggregated %d signals for %s/%s (%d substituted)",
            len(context.signals), sector, location.name,
            sum(1 for s in context.signals.values() if s.substituted),
        )
        return context
