"""
Model-synthesized tier: ask the inference service for a plausible estimate.

The prompt embeds the payload model's JSON schema so the reply can be
validated with the same pydantic model the other tiers produce.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import BaseModel

from sectorcast.context.models import PAYLOAD_MODELS, SignalKind
from sectorcast.context.registry import Location
from sectorcast.forecasting.json_extract import extract_json_payload

logger = logging.getLogger(__name__)

_KIND_BRIEFS = {
    SignalKind.WEATHER: "current weather conditions, accounting for the season and regional climate",
    SignalKind.NEWS: "recent news headlines relevant to local demand",
    SignalKind.SOCIAL: "current social media trends and sentiment",
    SignalKind.HOSPITAL: "aggregate hospital capacity and seasonal illness pressure",
    SignalKind.DEMOGRAPHIC: "population size and age structure",
    SignalKind.MARKET: "current market indices, commodity prices and inflation",
}


class InferenceBackend(Protocol):
    """Anything with ``async infer(prompt) -> str``: the synthesized tier and the orchestrator."""

    async def infer(self, prompt: str) -> str: ...


class SynthesizedSource:
    """Payload estimates produced by the inference client for one signal kind."""

    def __init__(self, client: InferenceBackend, kind: SignalKind) -> None:
        self._client = client
        self._kind = kind
        self._model = PAYLOAD_MODELS[kind]

    def build_prompt(self, location: Location, sector: Optional[str]) -> str:
        schema = json.dumps(self._model.model_json_schema(), indent=2)
        today = datetime.now(timezone.utc).strftime("%B %Y")
        focus = f" with relevance to the {sector} sector" if sector else ""
        prompt_parts = [
            f"Generate realistic {_KIND_BRIEFS[self._kind]} for "
            f"{location.name}, {location.state}, {location.country}{focus}.",
            f"Current month: {today}.",
            "",
            "Return ONLY a JSON object matching this JSON schema, with no prose and no code fences:",
            schema,
        ]
        return "\n".join(prompt_parts)

    async def __call__(self, location: Location, sector: Optional[str] = None) -> BaseModel:
        raw = await self._client.infer(self.build_prompt(location, sector))
        payload = extract_json_payload(raw)
        if isinstance(payload, list) and len(payload) == 1:
            payload = payload[0]
        result = self._model.model_validate(payload)
        logger.debug("Synthesized %s signal for %s", self._kind.value, location.name)
        return result
