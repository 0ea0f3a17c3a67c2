"""
Tests for regime_forecaster/ai/client.py using httpx.MockTransport.
"""

from __future__ import annotations

import json

import httpx
import pytest

from regime_forecaster.ai.client import ChatCompletionReportGenerator
from regime_forecaster.ai.prompt import generate_report
from regime_forecaster.config.models import ReportConfig
from regime_forecaster.engine.orchestrator import compute_forecast
from regime_forecaster.errors import ExternalUnavailableError


def _generator(handler, **overrides) -> ChatCompletionReportGenerator:
    config = ReportConfig(api_url="http://llm.test/v1/chat/completions", retry_attempts=1, **overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatCompletionReportGenerator(config, client=client)


@pytest.mark.asyncio
async def test_summarize_posts_prompt_and_returns_content() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers.get("Authorization")
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Verdict: Buy  "}}]})

    generator = _generator(handler, api_key="k-123", model="analyst")
    text = await generator.summarize("prompt text")
    await generator.aclose()

    assert text == "Verdict: Buy"
    assert captured["auth"] == "Bearer k-123"
    assert captured["body"]["model"] == "analyst"
    assert captured["body"]["messages"][-1] == {"role": "user", "content": "prompt text"}


@pytest.mark.asyncio
async def test_summarize_without_api_key_sends_no_auth_header() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    assert await _generator(handler).summarize("p") == "ok"


@pytest.mark.asyncio
async def test_http_error_propagates_from_client() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with pytest.raises(httpx.HTTPStatusError):
        await _generator(handler).summarize("p")


@pytest.mark.asyncio
async def test_missing_content_is_external_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    with pytest.raises(ExternalUnavailableError):
        await _generator(handler).summarize("p")


@pytest.mark.asyncio
async def test_generate_report_degrades_on_http_failure(make_history, rng) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    result = compute_forecast("LUCK.KA", "1M", make_history(), rng)
    assert await generate_report(_generator(handler), result) == "AI Analyst is currently offline."
