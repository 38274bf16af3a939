"""
Tests for the live API tier (Open-Meteo weather, NewsAPI headlines).

The aiohttp session is mocked -- no network access.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from sectorcast.context.live import (
    NewsApiHeadlines,
    OpenMeteoWeather,
    describe_weather_code,
    headline_sentiment,
)
from sectorcast.context.providers import ProviderError
from sectorcast.context.registry import LocationRegistry
from sectorcast.http_session import SharedSession

JAIPUR = LocationRegistry.default().resolve("Jaipur")


def _make_session(
    status: int = 200,
    body: Any = None,
    exc: Optional[BaseException] = None,
) -> MagicMock:
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=body)

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=resp)
    ctx.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value = ctx
    return session


class TestHelpers:
    def test_weather_codes(self) -> None:
        assert describe_weather_code(0) == "Clear skies"
        assert describe_weather_code(63) == "Rain"
        assert describe_weather_code(1234) == "Unknown"
        assert describe_weather_code(None) == ""

    def test_headline_sentiment(self) -> None:
        assert headline_sentiment(["Tractor sales surge to record high"]) == "positive"
        assert headline_sentiment(["Fertilizer shortage deepens crisis"]) == "negative"
        assert headline_sentiment(["Council meets on Tuesday"]) == "neutral"


class TestOpenMeteoWeather:
    @pytest.mark.asyncio
    async def test_parses_current_conditions(self) -> None:
        session = _make_session(body={
            "current": {
                "temperature_2m": 31.4,
                "relative_humidity_2m": 48,
                "precipitation": 0.0,
                "wind_speed_10m": 9.7,
                "weather_code": 2,
            }
        })
        provider = OpenMeteoWeather(SharedSession(session), "https://weather.test/v1/forecast")

        payload = await provider(JAIPUR)

        assert payload.temperature == 31.4
        assert payload.humidity == 48
        assert payload.conditions == "Partly cloudy"
        params = session.get.call_args.kwargs["params"]
        assert params["latitude"] == 26.9124
        assert params["longitude"] == 75.7873

    @pytest.mark.asyncio
    async def test_non_200_raises(self) -> None:
        provider = OpenMeteoWeather(SharedSession(_make_session(status=503, body={})), "https://weather.test")
        with pytest.raises(ProviderError, match="503"):
            await provider(JAIPUR)

    @pytest.mark.asyncio
    async def test_missing_current_raises(self) -> None:
        provider = OpenMeteoWeather(SharedSession(_make_session(body={"hourly": {}})), "https://weather.test")
        with pytest.raises(ProviderError):
            await provider(JAIPUR)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()]
    )
    async def test_transport_errors_wrapped(self, exc: BaseException) -> None:
        provider = OpenMeteoWeather(SharedSession(_make_session(exc=exc)), "https://weather.test")
        with pytest.raises(ProviderError):
            await provider(JAIPUR)


class TestNewsApiHeadlines:
    @pytest.mark.asyncio
    async def test_collects_titles(self) -> None:
        session = _make_session(body={
            "status": "ok",
            "articles": [
                {"title": "Jaipur tractor sales surge ahead of sowing"},
                {"title": "  "},
                {"description": "no title"},
                {"title": "Mandi arrivals rise in Jaipur"},
            ],
        })
        provider = NewsApiHeadlines(SharedSession(session), "https://news.test", api_key="k-123")

        payload = await provider(JAIPUR, "agriculture")

        assert payload.headlines == [
            "Jaipur tractor sales surge ahead of sowing",
            "Mandi arrivals rise in Jaipur",
        ]
        assert payload.sentiment == "positive"
        kwargs = session.get.call_args.kwargs
        assert kwargs["headers"] == {"X-Api-Key": "k-123"}
        assert kwargs["params"]["q"] == '"Jaipur" AND agriculture'

    @pytest.mark.asyncio
    async def test_empty_articles_is_success(self) -> None:
        provider = NewsApiHeadlines(
            SharedSession(_make_session(body={"status": "ok", "articles": []})),
            "https://news.test",
            api_key="k",
        )
        payload = await provider(JAIPUR)
        assert payload.headlines == []
        assert payload.sentiment == "neutral"

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        provider = NewsApiHeadlines(
            SharedSession(_make_session(body={"status": "error", "message": "apiKeyInvalid"})),
            "https://news.test",
            api_key="bad",
        )
        with pytest.raises(ProviderError, match="apiKeyInvalid"):
            await provider(JAIPUR)
