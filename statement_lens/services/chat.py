from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ..core.config import ChatSettings, Settings
from ..core.exceptions import MissingInput, NoMessages
from ..core.logging import get_logger
from ..schemas.statement import ChatMessage, Language
from .llm import AnthropicClient, document_block, text_block
from .prompts import chat_system_prompt

logger = get_logger(name=__name__)


def build_upstream_messages(pdf_base64: str, messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
    """Attach the statement to the opening user turn only.

    Later turns are sent as plain text; the model keeps the document in
    context through the conversation itself.
    """
    upstream: list[dict[str, Any]] = []
    for index, message in enumerate(messages):
        if index == 0 and message.role == "user":
            upstream.append(
                {
                    "role": "user",
                    "content": [document_block(pdf_base64), text_block(message.content)],
                }
            )
            continue
        upstream.append({"role": message.role, "content": message.content})
    return upstream


@dataclass
class StatementChat:
    client: AnthropicClient
    config: ChatSettings

    @classmethod
    def from_settings(cls, settings: Settings, *, client: AnthropicClient | None = None) -> "StatementChat":
        return cls(client=client or AnthropicClient.from_settings(settings), config=settings.chat)

    async def reply(
        self,
        pdf_base64: str | None,
        messages: Sequence[ChatMessage] | None,
        lang: Language | str | None = None,
    ) -> str:
        if not pdf_base64:
            raise MissingInput()
        if not messages:
            raise NoMessages()

        language = Language.coerce(lang)
        logger.info("statement_chat_turn", turns=len(messages), lang=language.value, model=self.config.model)
        return await self.client.create_message(
            model=self.config.model,
            system=chat_system_prompt(language),
            max_tokens=self.config.max_tokens,
            messages=build_upstream_messages(pdf_base64, messages),
        )


__all__ = ["StatementChat", "build_upstream_messages"]
