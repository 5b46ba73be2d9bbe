"""Tests for the OpenAI and Gemini suggesters with the network stubbed out."""

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from swiftroute.adapters.llm.gemini_adapter import GeminiAdapter
from swiftroute.adapters.llm.openai_adapter import OpenAIAdapter
from swiftroute.domain.errors import (
    ConfigurationError,
    MalformedUpstreamResponse,
    UpstreamServiceError,
    UpstreamTimeoutError,
)

ANSWER = '{"suggestionMade": true, "suggestedPartnerId": "p1", "reason": "Covers Downtown."}'


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai(completions, clock):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIAdapter(api_key="", model="gpt-3.5-turbo", timeout=5, clock=clock, client=client)


def _gemini(handler, clock):
    return GeminiAdapter(
        api_key="test-key", model="gemini-1.5-flash", timeout=5,
        clock=clock, transport=httpx.MockTransport(handler),
    )


def _gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.mark.asyncio
async def test_openai_success(make_order, make_partner, fixed_clock):
    completions = FakeCompletions(content=ANSWER)

    s = await _openai(completions, fixed_clock).suggest(make_order(), [make_partner("p1")])

    assert s.suggested_partner_id == "p1"
    assert s.source == "openai"
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    assert completions.kwargs["temperature"] == 0.3
    assert completions.kwargs["messages"][0]["role"] == "system"


@pytest.mark.asyncio
async def test_openai_timeout(make_order, make_partner, fixed_clock):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    completions = FakeCompletions(error=openai.APITimeoutError(request=request))

    with pytest.raises(UpstreamTimeoutError):
        await _openai(completions, fixed_clock).suggest(make_order(), [make_partner("p1")])


@pytest.mark.asyncio
async def test_openai_empty_content_is_malformed(make_order, make_partner, fixed_clock):
    with pytest.raises(MalformedUpstreamResponse):
        await _openai(FakeCompletions(content=""), fixed_clock).suggest(make_order(), [make_partner("p1")])


def test_openai_requires_key():
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        OpenAIAdapter(api_key=" ", model="gpt-3.5-turbo", timeout=5)


def test_gemini_requires_key():
    with pytest.raises(ConfigurationError, match="GOOGLE_API_KEY"):
        GeminiAdapter(api_key="", model="gemini-1.5-flash", timeout=5)


@pytest.mark.asyncio
async def test_gemini_success_sends_key_in_header(make_order, make_partner, fixed_clock):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_body(ANSWER))

    s = await _gemini(handler, fixed_clock).suggest(make_order(), [make_partner("p1")])

    assert s.suggested_partner_id == "p1"
    assert s.source == "gemini"
    assert seen["url"].endswith("/models/gemini-1.5-flash:generateContent")
    assert "key=" not in seen["url"]
    assert seen["key"] == "test-key"
    assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"


@pytest.mark.asyncio
async def test_gemini_http_error(make_order, make_partner, fixed_clock):
    adapter = _gemini(lambda request: httpx.Response(500, text="boom"), fixed_clock)
    with pytest.raises(UpstreamServiceError, match="Internal Server Error") as exc_info:
        await adapter.suggest(make_order(), [make_partner("p1")])
    assert not isinstance(exc_info.value, UpstreamTimeoutError)


@pytest.mark.asyncio
async def test_gemini_timeout(make_order, make_partner, fixed_clock):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamTimeoutError):
        await _gemini(handler, fixed_clock).suggest(make_order(), [make_partner("p1")])


@pytest.mark.asyncio
async def test_gemini_unexpected_structure(make_order, make_partner, fixed_clock):
    adapter = _gemini(lambda request: httpx.Response(200, json={"candidates": []}), fixed_clock)
    with pytest.raises(MalformedUpstreamResponse, match="unexpected response structure"):
        await adapter.suggest(make_order(), [make_partner("p1")])
