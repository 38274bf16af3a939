"""
Live external API tier.

Two real sources are wired in:
  - Open-Meteo current conditions (weather), located by registry coordinates.
  - A NewsAPI-compatible ``/everything`` search (news), only when a key is set.

Other signal kinds have no live source; their chains start at the
synthesized tier. Failures raise ``ProviderError`` (or the underlying
aiohttp error) and the resolver moves on to the next tier.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import aiohttp

from sectorcast.context.models import NewsPayload, WeatherPayload
from sectorcast.context.providers import ProviderError
from sectorcast.context.registry import Location
from sectorcast.context.static import season_for
from sectorcast.http_session import SharedSession

logger = logging.getLogger(__name__)

_CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,precipitation,wind_speed_10m,weather_code"
)

# WMO weather interpretation codes, grouped
_WMO_CONDITIONS = [
    ((0,), "Clear skies"),
    ((1, 2), "Partly cloudy"),
    ((3,), "Overcast"),
    ((45, 48), "Fog"),
    ((51, 53, 55, 56, 57), "Drizzle"),
    ((61, 63, 65, 66, 67), "Rain"),
    ((71, 73, 75, 77), "Snow"),
    ((80, 81, 82), "Rain showers"),
    ((85, 86), "Snow showers"),
    ((95, 96, 99), "Thunderstorm"),
]

_POSITIVE_WORDS = frozenset(
    "growth surge rise rises boost record gain gains expands expansion strong recovery improves".split()
)
_NEGATIVE_WORDS = frozenset(
    "decline falls fall drop drops slump shortage crisis outbreak loss losses weak slowdown".split()
)


def describe_weather_code(code: Optional[int]) -> str:
    if code is None:
        return ""
    for codes, label in _WMO_CONDITIONS:
        if code in codes:
            return label
    return "Unknown"


def headline_sentiment(headlines: list[str]) -> str:
    """Crude lexicon vote over headline words."""
    score = 0
    for headline in headlines:
        words = {w.strip(".,:;!?'\"").lower() for w in headline.split()}
        score += len(words & _POSITIVE_WORDS) - len(words & _NEGATIVE_WORDS)
    if score > 0:
        return "positive"
    if score < 0:
        return "negative"
    return "neutral"


async def _get_json(
    session: aiohttp.ClientSession,
    url: str,
    *,
    params: dict,
    timeout: float,
    headers: Optional[dict] = None,
    source: str,
) -> dict:
    try:
        async with session.get(
            url,
            params=params,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            if resp.status != 200:
                raise ProviderError(f"{source} returned HTTP {resp.status}")
            body = await resp.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise ProviderError(f"{source} request failed: {exc}") from exc
    if not isinstance(body, dict):
        raise ProviderError(f"{source} returned non-object JSON")
    return body


class OpenMeteoWeather:
    """Current weather from an Open-Meteo compatible endpoint."""

    label = "Open-Meteo"

    def __init__(self, http: SharedSession, base_url: str, timeout: float = 10.0) -> None:
        self._http = http
        self._base_url = base_url
        self._timeout = timeout

    async def __call__(self, location: Location, sector: Optional[str] = None) -> WeatherPayload:
        session = await self._http.get()
        body = await _get_json(
            session,
            self._base_url,
            params={
                "latitude": location.latitude,
                "longitude": location.longitude,
                "current": _CURRENT_FIELDS,
                "timezone": "auto",
            },
            timeout=self._timeout,
            source=self.label,
        )
        current = body.get("current")
        if not isinstance(current, dict) or current.get("temperature_2m") is None:
            raise ProviderError(f"{self.label} response missing current conditions")

        logger.debug("Live weather for %s: %s", location.name, current)
        return WeatherPayload(
            temperature=current["temperature_2m"],
            humidity=current.get("relative_humidity_2m") or 0.0,
            precipitation=current.get("precipitation") or 0.0,
            wind_speed=current.get("wind_speed_10m") or 0.0,
            conditions=describe_weather_code(current.get("weather_code")),
            season=season_for(datetime.now(timezone.utc).month),
        )


class NewsApiHeadlines:
    """Recent headlines from a NewsAPI-compatible search endpoint."""

    label = "NewsAPI"

    def __init__(
        self,
        http: SharedSession,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        page_size: int = 10,
    ) -> None:
        self._http = http
        self._base_url = base_url
        self._api_key = api_key
        self._timeout = timeout
        self._page_size = page_size

    async def __call__(self, location: Location, sector: Optional[str] = None) -> NewsPayload:
        query = f'"{location.name}"'
        if sector:
            query += f" AND {sector}"
        session = await self._http.get()
        body = await _get_json(
            session,
            self._base_url,
            params={
                "q": query,
                "language": "en",
                "sortBy": "publishedAt",
                "pageSize": self._page_size,
            },
            headers={"X-Api-Key": self._api_key},
            timeout=self._timeout,
            source=self.label,
        )
        if body.get("status") not in (None, "ok"):
            raise ProviderError(f"{self.label} error: {body.get('message', body.get('status'))}")

        headlines = [
            a["title"].strip()
            for a in body.get("articles") or []
            if isinstance(a, dict) and isinstance(a.get("title"), str) and a["title"].strip()
        ]
        logger.debug("Live news for %s/%s: %d headlines", location.name, sector, len(headlines))
        return NewsPayload(headlines=headlines, sentiment=headline_sentiment(headlines))
