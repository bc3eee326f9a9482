from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Sequence

import httpx

from ..core import metrics
from ..core.config import Settings
from ..core.exceptions import EmptyUpstreamResponse, RateLimited, UpstreamError, UpstreamNotConfigured
from ..core.logging import get_logger

logger = get_logger(name=__name__)

MESSAGES_PATH = "/v1/messages"


def document_block(pdf_base64: str, media_type: str = "application/pdf") -> dict[str, Any]:
    return {
        "type": "document",
        "source": {"type": "base64", "media_type": media_type, "data": pdf_base64},
    }


def text_block(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


def extract_text(response_payload: Any) -> str | None:
    """Return the text of the first content block; blank-but-present text is kept."""
    if not isinstance(response_payload, dict):
        return None
    content = response_payload.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    text = first.get("text") if isinstance(first, dict) else None
    if isinstance(text, str) and text:
        return text
    return None


@dataclass
class AnthropicClient:
    """Minimal async client for the Anthropic Messages API.

    A call either returns the reply text or raises one of the structured
    upstream errors; nothing is retried here.
    """

    api_key: str
    _client: httpx.AsyncClient
    api_version: str = "2023-06-01"

    @classmethod
    def from_settings(cls, settings: Settings, *, client: httpx.AsyncClient | None = None) -> "AnthropicClient":
        if not settings.anthropic_api_key:
            raise UpstreamNotConfigured()
        if client is None:
            client = httpx.AsyncClient(
                base_url=settings.anthropic.base_url.rstrip("/"),
                timeout=httpx.Timeout(settings.anthropic.timeout_seconds),
            )
        return cls(api_key=settings.anthropic_api_key, _client=client, api_version=settings.anthropic.api_version)

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator["AnthropicClient"]:
        try:
            yield self
        finally:
            await self._client.aclose()

    async def create_message(
        self,
        *,
        model: str,
        system: str,
        messages: Sequence[dict[str, Any]],
        max_tokens: int,
    ) -> str:
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": list(messages),
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        start = time.perf_counter()
        try:
            response = await self._client.post(MESSAGES_PATH, json=payload, headers=headers)
        except httpx.RequestError as exc:
            metrics.observe_upstream_latency(model=model, status=None, latency=time.perf_counter() - start)
            logger.error("upstream_transport_error", model=model, error=str(exc))
            raise UpstreamError(502, details={"error": str(exc)}) from exc
        metrics.observe_upstream_latency(model=model, status=response.status_code, latency=time.perf_counter() - start)

        if not response.is_success:
            logger.error(
                "upstream_request_failed",
                model=model,
                status=response.status_code,
                body=response.text[:500],
            )
            if response.status_code == 429:
                raise RateLimited(details={"upstream_status": 429})
            raise UpstreamError(response.status_code)

        try:
            body = response.json()
        except ValueError:
            body = None
        text = extract_text(body)
        if text is None:
            logger.error("upstream_empty_response", model=model)
            raise EmptyUpstreamResponse()
        return text


__all__ = ["AnthropicClient", "document_block", "extract_text", "text_block"]
