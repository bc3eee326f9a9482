from __future__ import annotations

from ..core.logging import get_logger
from ..schemas.statement import ChatMessage, Language
from ..services.encoder import EncodedDocument
from .api import StatementBackend
from .messages import t

logger = get_logger(name=__name__)


class ConversationClosed(RuntimeError):
    """Raised when a message is sent without an analyzed statement attached."""


class ConversationController:
    """Owns the chat history for one analyzed statement.

    History is append-only and alternates user/assistant turns. The statement
    is never stored in the history itself; the backend attaches it to the
    first turn when building the upstream request.
    """

    def __init__(self, backend: StatementBackend, document: EncodedDocument | None = None) -> None:
        self._backend = backend
        self._document = document
        self._messages: list[ChatMessage] = []
        self._awaiting_reply = False
        self._generation = 0

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def awaiting_reply(self) -> bool:
        return self._awaiting_reply

    @property
    def document(self) -> EncodedDocument | None:
        return self._document

    def attach(self, document: EncodedDocument) -> None:
        self.reset()
        self._document = document

    def reset(self) -> None:
        self._generation += 1
        self._document = None
        self._messages = []
        self._awaiting_reply = False

    async def send(self, text: str, *, lang: Language | str = Language.EN) -> ChatMessage | None:
        """Send a user turn and append the assistant's answer.

        Blank input and sends made while a reply is pending are ignored and
        return None. Backend failures become a localized assistant line.
        """
        content = (text or "").strip()
        if not content or self._awaiting_reply:
            return None
        document = self._document
        if document is None:
            raise ConversationClosed("No analyzed statement is attached to this conversation.")

        language = Language.coerce(lang)
        generation = self._generation
        self._messages.append(ChatMessage(role="user", content=content))
        self._awaiting_reply = True
        try:
            reply_text = await self._backend.chat(document, list(self._messages), language)
        except Exception as exc:
            logger.warning("chat_turn_failed", error=str(exc), turns=len(self._messages))
            reply_text = t(language, "chat_error")
        finally:
            if generation == self._generation:
                self._awaiting_reply = False

        if generation != self._generation:
            logger.info("chat_reply_discarded", reason="conversation_reset")
            return None
        reply = ChatMessage(role="assistant", content=reply_text)
        self._messages.append(reply)
        return reply


__all__ = ["ConversationClosed", "ConversationController"]
