"""
Tiered data source resolver.

Each signal kind owns an ordered chain of providers (live -> synthesized ->
static). ``resolve`` walks the chain and returns the first payload that
arrived without raising and is not None, tagged with the provenance of the
provider that produced it. A semantically empty payload (no headlines, say)
still counts as success.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from sectorcast.context.live import NewsApiHeadlines, OpenMeteoWeather
from sectorcast.context.models import PAYLOAD_MODELS, ContextSignal, Provenance, SignalKind
from sectorcast.context.providers import SignalProvider
from sectorcast.context.registry import LocationRegistry
from sectorcast.context.static import StaticSource
from sectorcast.context.synthesized import InferenceBackend, SynthesizedSource
from sectorcast.errors import SignalUnavailable
from sectorcast.http_session import SharedSession
from sectorcast.settings import Settings

logger = logging.getLogger(__name__)


class TieredResolver:
    """Resolve one signal kind for one region through its fallback chain."""

    def __init__(
        self,
        registry: LocationRegistry,
        chains: Mapping[SignalKind, Sequence[SignalProvider]],
    ) -> None:
        self.registry = registry
        self._chains = {kind: list(chain) for kind, chain in chains.items()}

    def chain(self, kind: SignalKind) -> list[SignalProvider]:
        return list(self._chains.get(kind, ()))

    async def resolve(
        self, kind: SignalKind, region: str, sector: Optional[str] = None
    ) -> ContextSignal:
        """Return the first successful tier's payload for *kind* in *region*.

        Raises:
            RegionUnknown: *region* is not in the registry.
            SignalUnavailable: every tier raised or returned None.
        """
        location = self.registry.resolve(region)
        attempts: list[str] = []

        for provider in self._chains.get(kind, ()):
            try:
                payload = await provider.fetch(location, sector)
            except Exception as exc:
                logger.warning(
                    "%s tier '%s' failed for %s/%s: %s",
                    provider.provenance.value, provider.label, kind.value, location.name, exc,
                )
                attempts.append(f"{provider.label}: {exc}")
                continue

            if payload is None:
                logger.debug(
                    "%s tier '%s' returned nothing for %s/%s",
                    provider.provenance.value, provider.label, kind.value, location.name,
                )
                attempts.append(f"{provider.label}: empty")
                continue

            if not isinstance(payload, PAYLOAD_MODELS[kind]):
                attempts.append(f"{provider.label}: wrong payload type {type(payload).__name__}")
                logger.warning(
                    "Provider '%s' returned %s for %s signal",
                    provider.label, type(payload).__name__, kind.value,
                )
                continue

            logger.debug(
                "Resolved %s/%s via %s tier '%s'",
                kind.value, location.name, provider.provenance.value, provider.label,
            )
            return ContextSignal(
                kind=kind,
                payload=payload,
                provenance=provider.provenance,
                source_label=provider.label,
            )

        raise SignalUnavailable(kind.value, attempts)


def build_default_resolver(
    settings: Settings,
    registry: LocationRegistry,
    client: Optional[InferenceBackend] = None,
    http: Optional[SharedSession] = None,
    static: Optional[StaticSource] = None,
) -> TieredResolver:
    """Wire the standard live -> synthesized -> static chains from settings.

    Live tiers are only included when enabled/configured and an HTTP session
    holder is given; the synthesized tier only when an inference client is.
    """
    static = static or StaticSource()
    chains: dict[SignalKind, list[SignalProvider]] = {}

    for kind in SignalKind:
        chain: list[SignalProvider] = []

        if http is not None:
            if kind is SignalKind.WEATHER and settings.live_weather_enabled:
                weather = OpenMeteoWeather(http, settings.weather_api_url, settings.live_api_timeout)
                chain.append(SignalProvider(Provenance.LIVE, weather.label, weather))
            elif kind is SignalKind.NEWS and settings.news_api_key:
                news = NewsApiHeadlines(
                    http, settings.news_api_url, settings.news_api_key, settings.live_api_timeout
                )
                chain.append(SignalProvider(Provenance.LIVE, news.label, news))

        if client is not None:
            chain.append(
                SignalProvider(
                    Provenance.SYNTHESIZED,
                    f"AI-estimated {kind.value}",
                    SynthesizedSource(client, kind),
                )
            )

        chain.append(
            SignalProvider(Provenance.STATIC, f"Regional baseline {kind.value}", static.fetcher(kind))
        )
        chains[kind] = chain

    logger.info(
        "Resolver chains: %s",
        {k.value: [p.provenance.value for p in v] for k, v in chains.items()},
    )
    return TieredResolver(registry, chains)
