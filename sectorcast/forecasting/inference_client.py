"""
Inference clients: one prompt in, one raw text blob out.

Two backends share the ``infer(prompt) -> str`` contract:

- ``CompletionsClient``: an OpenAI-style ``/completions`` gateway
  (``{"choices": [{"text": ...}]}`` envelope) reached over aiohttp.
- ``GeminiClient``: Google Gemini via the google-genai SDK.

Neither retries. Transport, auth and status failures raise
``InferenceUnavailable``; an envelope without the expected text field raises
``InferenceMalformed``. The text itself is not inspected here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from sectorcast.errors import InferenceMalformed, InferenceUnavailable
from sectorcast.http_session import SharedSession
from sectorcast.settings import Settings

logger = logging.getLogger(__name__)


class CompletionsClient:
    """Client for a text-completions gateway authenticated by API key."""

    def __init__(
        self,
        url: str,
        api_key: str,
        model: str,
        http: Optional[SharedSession] = None,
        timeout: float = 120.0,
        temperature: float = 1.0,
        top_p: float = 1.0,
        seed: int = 25,
    ) -> None:
        if not api_key:
            raise ValueError("Completions backend requires an API key (INFERENCE_API_KEY)")
        self.url = url
        self.model = model
        self._api_key = api_key
        self._owns_http = http is None
        self._http = http or SharedSession()
        self._timeout = timeout
        self._params = {
            "presence_penalty": 0,
            "seed": seed,
            "stream": False,
            "temperature": temperature,
            "top_p": top_p,
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "API-Key": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }

    async def infer(self, prompt: str) -> str:
        body = {"model": self.model, "prompt": prompt, **self._params}
        session = await self._http.get()
        logger.debug("POST %s (model=%s, prompt=%d chars)", self.url, self.model, len(prompt))

        try:
            async with session.post(
                self.url,
                json=body,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                body_bytes = await resp.read()
                if resp.status < 200 or resp.status >= 300:
                    detail = body_bytes.decode("utf-8", errors="replace")[:200]
                    raise InferenceUnavailable(
                        f"Inference endpoint returned HTTP {resp.status}: {detail}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise InferenceUnavailable(f"Inference endpoint unreachable: {exc}") from exc

        try:
            raw_body = body_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InferenceMalformed(f"Inference response body is not valid text: {exc}") from exc
        return self._extract_text(raw_body)

    @staticmethod
    def _extract_text(raw_body: str) -> str:
        try:
            envelope: Any = json.loads(raw_body)
        except json.JSONDecodeError as exc:
            raise InferenceMalformed("Inference response body is not JSON") from exc

        choices = envelope.get("choices") if isinstance(envelope, dict) else None
        if not isinstance(choices, list) or not choices:
            raise InferenceMalformed("Inference response has no choices")
        first = choices[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise InferenceMalformed("Inference response choice has no text")

        logger.debug("Inference returned %d chars", len(text))
        return text

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()


class GeminiClient:
    """Client for Google Gemini using the google-genai async API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 1.0,
        top_p: float = 1.0,
        seed: int = 25,
        client: Optional[genai.Client] = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("Gemini backend requires an API key (GEMINI_API_KEY)")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model
        self.generation_config = types.GenerateContentConfig(
            temperature=temperature,
            top_p=top_p,
            seed=seed,
        )

    async def infer(self, prompt: str) -> str:
        logger.debug("Gemini %s request (prompt=%d chars)", self.model, len(prompt))
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self.generation_config,
            )
        except genai_errors.APIError as exc:
            raise InferenceUnavailable(f"Gemini API error {exc.code}: {exc.message}") from exc
        except Exception as exc:
            raise InferenceUnavailable(f"Gemini request failed: {exc}") from exc

        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise InferenceMalformed("Gemini response carries no text candidate")
        return text

    async def close(self) -> None:
        return None


def build_inference_client(
    settings: Settings, http: Optional[SharedSession] = None
) -> Optional[CompletionsClient | GeminiClient]:
    """Create the configured backend, or None when no credentials are set."""
    if not settings.inference_configured:
        logger.warning(
            "No credentials for inference backend '%s'; forecasts will fail with InferenceUnavailable",
            settings.inference_backend,
        )
        return None

    if settings.inference_backend == "gemini":
        return GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            temperature=settings.inference_temperature,
            top_p=settings.inference_top_p,
            seed=settings.inference_seed,
        )
    return CompletionsClient(
        url=settings.inference_url,
        api_key=settings.inference_api_key,
        model=settings.inference_model,
        http=http,
        timeout=settings.inference_timeout,
        temperature=settings.inference_temperature,
        top_p=settings.inference_top_p,
        seed=settings.inference_seed,
    )
