from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends

from .core.config import Settings, get_settings
from .services.analysis import StatementAnalyzer
from .services.chat import StatementChat
from .services.llm import AnthropicClient


async def get_app_settings() -> AsyncIterator[Settings]:
    yield get_settings()


async def get_anthropic_client(
    settings: Settings = Depends(get_app_settings),
) -> AsyncIterator[AnthropicClient]:
    client = AnthropicClient.from_settings(settings)
    async with client.lifecycle():
        yield client


async def get_statement_analyzer(
    settings: Settings = Depends(get_app_settings),
    client: AnthropicClient = Depends(get_anthropic_client),
) -> AsyncIterator[StatementAnalyzer]:
    yield StatementAnalyzer.from_settings(settings, client=client)


async def get_statement_chat(
    settings: Settings = Depends(get_app_settings),
    client: AnthropicClient = Depends(get_anthropic_client),
) -> AsyncIterator[StatementChat]:
    yield StatementChat.from_settings(settings, client=client)
