"""Gemini adapter — implements PartnerSuggester via the Generative Language REST API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

import httpx

from swiftroute.adapters.llm.prompt_builder import SYSTEM_PROMPT, build_prompt, parse_suggestion
from swiftroute.application.ports.suggester_port import PartnerSuggester
from swiftroute.domain.clock import utcnow
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.entities.suggestion import Suggestion
from swiftroute.domain.errors import (
    ConfigurationError,
    MalformedUpstreamResponse,
    UpstreamServiceError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

GEMINI_SOURCE = "gemini"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiAdapter(PartnerSuggester):
    """Gemini implementation of PartnerSuggester.

    The API key is sent in the ``x-goog-api-key`` header so it never ends up
    in a logged URL.  *transport* lets tests swap in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float,
        clock: Callable[[], datetime] = utcnow,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not (api_key or "").strip():
            raise ConfigurationError("Server configuration error: GOOGLE_API_KEY is missing.")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._clock = clock
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{GEMINI_BASE_URL}/models/{self._model}:generateContent"

    async def suggest(self, order: Order, candidates: list[Partner]) -> Suggestion:
        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": build_prompt(order, candidates, self._clock())}]}],
            "generationConfig": {
                "temperature": 0.3,
                "maxOutputTokens": 200,
                "responseMimeType": "application/json",
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"x-goog-api-key": self._api_key},
                )
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("Gemini request timed out for order %s", order.id)
            raise UpstreamTimeoutError("The AI service timed out.", detail=str(e)) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "Gemini API error %d for order %s: %s",
                e.response.status_code, order.id, e.response.text[:500],
            )
            raise UpstreamServiceError(
                f"Error from AI service: {e.response.reason_phrase}",
                detail=e.response.text[:500],
            ) from e
        except httpx.HTTPError as e:
            logger.exception("Gemini request failed for order %s", order.id)
            raise UpstreamServiceError("Error from AI service.", detail=f"{type(e).__name__}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedUpstreamResponse(
                "AI service returned a non-JSON body.", response.text
            ) from e

        return parse_suggestion(_extract_text(data), candidates, GEMINI_SOURCE)


def _extract_text(data: dict) -> str:
    """Pull candidates[0].content.parts[0].text out of a generateContent reply."""
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        logger.error("Unexpected Gemini API response structure: %s", str(data)[:500])
        raise MalformedUpstreamResponse(
            "AI service returned an unexpected response structure.", str(data)
        ) from e
