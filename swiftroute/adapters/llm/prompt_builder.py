"""Prompt construction and response parsing shared by the LLM suggesters."""

from __future__ import annotations

import json
import logging
from datetime import datetime

from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import MAX_CONCURRENT_ORDERS, Partner
from swiftroute.domain.entities.suggestion import Suggestion
from swiftroute.domain.errors import MalformedUpstreamResponse

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an intelligent dispatch system for SwiftRoute, a delivery service. "
    "Always respond with a single valid JSON object and nothing else."
)

_decoder = json.JSONDecoder()


def build_prompt(
    order: Order,
    candidates: list[Partner],
    now: datetime,
    ceiling: int = MAX_CONCURRENT_ORDERS,
) -> str:
    """Describe *order* and every candidate's areas, load and shift, plus the rubric."""
    partner_lines = "\n".join(
        f"- ID: {p.id}, Name: {p.name}, Areas: {', '.join(p.assigned_areas) or 'none'}, "
        f"Current Load: {p.current_load}, Shift: {p.shift}"
        for p in candidates
    )
    return f"""Your task is to suggest the most suitable delivery partner for a new order.

Order Details:
- Order ID: {(order.id or "new")[:8]}
- Customer Name: {order.customer_name}
- Delivery Area: {order.area}
- Items: {order.items_summary() or "not listed"}
- Order Value: {order.order_value:.2f}

Current local time: {now:%H:%M}

Available Active Delivery Partners:
{partner_lines}

Consider these factors for suggestion:
1. Partner's assigned area(s) should include the order's delivery area.
2. Partner's current load (lower is better, avoid overloading). The maximum load capacity is {ceiling}.
3. Partner's shift timings (the order should be deliverable within their shift).

Your output MUST be a JSON object with the following structure:
{{
  "suggestionMade": boolean,
  "suggestedPartnerId": string,
  "suggestedPartnerName": string,
  "reason": string
}}
Include suggestedPartnerId and suggestedPartnerName only if suggestionMade is true.
Keep reason to 1-2 sentences: why this partner fits, or why nobody does
(e.g. "No partners available in Koramangala with capacity").

If multiple partners are equally good, pick one.
If no partner is suitable (no one covers the area, all are at max load, or outside shift),
set "suggestionMade" to false and explain why.
Do not suggest a partner whose current load is {ceiling} or more."""


def parse_suggestion(raw: str, candidates: list[Partner], source: str) -> Suggestion:
    """Turn raw model text into a Suggestion.

    Raises:
        MalformedUpstreamResponse: no JSON object, invalid JSON, a missing or
            non-boolean ``suggestionMade``, or a suggestion naming nobody.
    """
    raw = raw or ""
    if "{" not in raw:
        logger.warning("%s response did not contain a JSON object", source)
        raise MalformedUpstreamResponse("AI response could not be parsed as JSON.", raw)

    parsed, block = _first_json_object(raw)
    if parsed is None:
        logger.warning("%s response was not valid JSON", source)
        raise MalformedUpstreamResponse("AI response was not valid JSON.", raw)

    if not isinstance(parsed.get("suggestionMade"), bool):
        raise MalformedUpstreamResponse(
            "AI response is missing the boolean 'suggestionMade' field.", block
        )

    reason = str(parsed.get("reason") or "").strip()
    if not parsed["suggestionMade"]:
        return Suggestion.none(reason or "No suitable partner was found.", source=source)

    partner_id = _resolve_partner_id(parsed, candidates)
    if partner_id is None:
        raise MalformedUpstreamResponse(
            "AI response made a suggestion without identifying a known partner.", block
        )
    return Suggestion(
        suggestion_made=True,
        suggested_partner_id=partner_id,
        reason=reason,
        source=source,
    )


def _first_json_object(raw: str) -> tuple[dict | None, str]:
    """Decode the first {...} object in *raw*; models sometimes wrap JSON in prose or fences."""
    start = raw.find("{")
    while start != -1:
        try:
            parsed, end = _decoder.raw_decode(raw, start)
        except json.JSONDecodeError:
            start = raw.find("{", start + 1)
            continue
        return parsed, raw[start:end]
    return None, ""


def _resolve_partner_id(parsed: dict, candidates: list[Partner]) -> str | None:
    """Prefer the returned id; fall back to a case-insensitive name match."""
    by_id = {p.id: p for p in candidates}
    raw_id = parsed.get("suggestedPartnerId")
    if isinstance(raw_id, str) and raw_id.strip() in by_id:
        return raw_id.strip()

    raw_name = parsed.get("suggestedPartnerName")
    if isinstance(raw_name, str) and raw_name.strip():
        wanted = raw_name.strip().lower()
        matches = [p for p in candidates if p.name.strip().lower() == wanted]
        if len(matches) == 1:
            return matches[0].id

    # An unknown id is passed through so the caller can reject it explicitly.
    if isinstance(raw_id, str) and raw_id.strip():
        return raw_id.strip()
    return None
