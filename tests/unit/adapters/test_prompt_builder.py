"""Tests for prompt construction and model response parsing."""

import pytest

from swiftroute.adapters.llm.prompt_builder import build_prompt, parse_suggestion
from swiftroute.domain.errors import MalformedUpstreamResponse


@pytest.fixture
def candidates(make_partner):
    return [
        make_partner("p-1", name="Rajesh Kumar", areas=["Downtown"], load=2),
        make_partner("p-2", name="Priya Singh", areas=["Koramangala", "Indiranagar"]),
    ]


def test_prompt_lists_order_and_partner_details(make_order, candidates, fixed_clock):
    prompt = build_prompt(make_order(area="Koramangala"), candidates, fixed_clock())

    assert "Delivery Area: Koramangala" in prompt
    assert "Pepperoni Pizza (Qty: 1), Coke (Qty: 4)" in prompt
    assert "ID: p-1, Name: Rajesh Kumar, Areas: Downtown, Current Load: 2, Shift: 09:00-17:00" in prompt
    assert "Areas: Koramangala, Indiranagar" in prompt
    assert "Current local time: 12:00" in prompt
    assert "maximum load capacity is 5" in prompt
    assert '"suggestionMade": boolean' in prompt


def test_parses_fenced_json(candidates):
    raw = 'Sure!\n```json\n{"suggestionMade": true, "suggestedPartnerId": "p-2", "reason": "Covers the area."}\n```'
    s = parse_suggestion(raw, candidates, "openai")
    assert s.suggestion_made is True
    assert s.suggested_partner_id == "p-2"
    assert s.reason == "Covers the area."
    assert s.source == "openai"


def test_falls_back_to_partner_name(candidates):
    raw = '{"suggestionMade": true, "suggestedPartnerId": "", "suggestedPartnerName": "priya singh", "reason": "ok"}'
    assert parse_suggestion(raw, candidates, "gemini").suggested_partner_id == "p-2"


def test_unknown_id_is_passed_through(candidates):
    raw = '{"suggestionMade": true, "suggestedPartnerId": "p-99", "reason": "ok"}'
    assert parse_suggestion(raw, candidates, "gemini").suggested_partner_id == "p-99"


def test_negative_answer_drops_partner_id(candidates):
    raw = '{"suggestionMade": false, "suggestedPartnerId": "p-1", "reason": "No partners available in Whitefield"}'
    s = parse_suggestion(raw, candidates, "openai")
    assert s.suggestion_made is False
    assert s.suggested_partner_id is None
    assert s.reason == "No partners available in Whitefield"


@pytest.mark.parametrize(
    "raw",
    [
        "I could not decide.",
        "{not json}",
        '{"suggestedPartnerId": "p-1"}',
        '{"suggestionMade": "yes", "suggestedPartnerId": "p-1"}',
        '{"suggestionMade": true, "reason": "someone"}',
    ],
)
def test_malformed_responses(raw, candidates):
    with pytest.raises(MalformedUpstreamResponse):
        parse_suggestion(raw, candidates, "openai")


def test_takes_first_object_when_several_are_present(candidates):
    raw = (
        '{"suggestionMade": true, "suggestedPartnerId": "p-2", "reason": "Covers the area."}\n'
        'Alternative: {"suggestionMade": true, "suggestedPartnerId": "p-1"}'
    )
    assert parse_suggestion(raw, candidates, "openai").suggested_partner_id == "p-2"


def test_ignores_braces_in_surrounding_prose(candidates):
    raw = (
        'Note {draft}: {"suggestionMade": false, "reason": "No partners in Whitefield"} '
        "(see {notes})"
    )
    s = parse_suggestion(raw, candidates, "gemini")
    assert s.suggestion_made is False
    assert s.reason == "No partners in Whitefield"
