from __future__ import annotations

import httpx
import pytest

from statement_lens.core.exceptions import (
    EmptyUpstreamResponse,
    RateLimited,
    UpstreamError,
    UpstreamNotConfigured,
)
from statement_lens.services.llm import AnthropicClient, document_block, extract_text, text_block
from tests.helpers.stubs import RecordingUpstream, anthropic_reply, make_settings


@pytest.mark.asyncio
async def test_create_message_sends_headers_and_returns_text() -> None:
    upstream = RecordingUpstream()
    upstream.queue_text("hello there")
    client = upstream.client()

    async with client.lifecycle():
        text = await client.create_message(
            model="claude-sonnet-4-5",
            system="be brief",
            messages=[{"role": "user", "content": "hi"}],
            max_tokens=100,
        )

    assert text == "hello there"
    request = upstream.requests[0]
    assert request.url.path == "/v1/messages"
    assert request.headers["x-api-key"] == "test-key"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert upstream.payloads[0] == {
        "model": "claude-sonnet-4-5",
        "max_tokens": 100,
        "system": "be brief",
        "messages": [{"role": "user", "content": "hi"}],
    }


@pytest.mark.asyncio
async def test_rate_limit_maps_to_throttled_error() -> None:
    upstream = RecordingUpstream([httpx.Response(429, json={"error": {"type": "rate_limit_error"}})])
    client = upstream.client()

    with pytest.raises(RateLimited) as excinfo:
        await client.create_message(model="m", system="s", messages=[], max_tokens=10)

    assert excinfo.value.http_status == 429
    assert excinfo.value.message == "Rate limit exceeded. Please wait a moment and try again."
    assert len(upstream.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 500, 529])
async def test_other_failures_report_upstream_status(status: int) -> None:
    upstream = RecordingUpstream([httpx.Response(status, text="boom")])
    client = upstream.client()

    with pytest.raises(UpstreamError) as excinfo:
        await client.create_message(model="m", system="s", messages=[], max_tokens=10)

    assert excinfo.value.http_status == 500
    assert excinfo.value.upstream_status == status
    assert excinfo.value.message == f"API error: {status}"


@pytest.mark.asyncio
async def test_empty_content_is_reported() -> None:
    upstream = RecordingUpstream([httpx.Response(200, json={"content": []})])
    client = upstream.client()

    with pytest.raises(EmptyUpstreamResponse):
        await client.create_message(model="m", system="s", messages=[], max_tokens=10)


@pytest.mark.asyncio
async def test_transport_error_is_not_retried() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://upstream.test")
    client = AnthropicClient.from_settings(make_settings(), client=http_client)

    with pytest.raises(UpstreamError) as excinfo:
        await client.create_message(model="m", system="s", messages=[], max_tokens=10)

    assert excinfo.value.upstream_status == 502
    assert len(calls) == 1
    await http_client.aclose()


def test_missing_credential_raises_configuration_error() -> None:
    with pytest.raises(UpstreamNotConfigured) as excinfo:
        AnthropicClient.from_settings(make_settings(anthropic_api_key=None))

    assert excinfo.value.message == "ANTHROPIC_API_KEY is not configured"
    assert excinfo.value.http_status == 500


def test_content_blocks() -> None:
    assert document_block("QUJD") == {
        "type": "document",
        "source": {"type": "base64", "media_type": "application/pdf", "data": "QUJD"},
    }
    assert text_block("hi") == {"type": "text", "text": "hi"}


def test_extract_text_reads_first_block() -> None:
    assert extract_text(anthropic_reply("first")) == "first"
    assert extract_text({"content": [{"type": "text", "text": "   "}]}) == "   "
    assert extract_text({"content": [{"type": "text", "text": ""}]}) is None
    assert extract_text({"content": "nope"}) is None
    assert extract_text(None) is None
