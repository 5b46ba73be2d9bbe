"""OpenAI adapter — implements PartnerSuggester using the OpenAI API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from openai import APIError, APITimeoutError, AsyncOpenAI

from swiftroute.adapters.llm.prompt_builder import SYSTEM_PROMPT, build_prompt, parse_suggestion
from swiftroute.application.ports.suggester_port import PartnerSuggester
from swiftroute.domain.clock import utcnow
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.entities.suggestion import Suggestion
from swiftroute.domain.errors import (
    ConfigurationError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

OPENAI_SOURCE = "openai"


class OpenAIAdapter(PartnerSuggester):
    """OpenAI implementation of PartnerSuggester.

    One call per suggestion, no retries: a failure is reported to the
    caller instead of being papered over with a guess.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float,
        clock: Callable[[], datetime] = utcnow,
        client: AsyncOpenAI | None = None,
    ):
        if client is None:
            if not (api_key or "").strip():
                raise ConfigurationError("Server configuration error: OPENAI_API_KEY is missing.")
            client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client
        self._model = model
        self._clock = clock

    async def suggest(self, order: Order, candidates: list[Partner]) -> Suggestion:
        prompt = build_prompt(order, candidates, self._clock())
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
                max_tokens=200,
                response_format={"type": "json_object"},
            )
        except APITimeoutError as e:
            logger.warning("OpenAI request timed out for order %s", order.id)
            raise UpstreamTimeoutError("The AI service timed out.", detail=str(e)) from e
        except APIError as e:
            logger.exception("OpenAI request failed for order %s", order.id)
            raise UpstreamServiceError(
                "Error from AI service.", detail=f"{type(e).__name__}: {e.message}"
            ) from e

        raw_text = ""
        if response.choices:
            raw_text = response.choices[0].message.content or ""
        return parse_suggestion(raw_text, candidates, OPENAI_SOURCE)
