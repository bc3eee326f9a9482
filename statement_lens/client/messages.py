from __future__ import annotations

from ..schemas.statement import Language

_MESSAGES: dict[str, dict[Language, str]] = {
    "chat_error": {
        Language.EN: "Sorry, I couldn't answer that right now. Please try again.",
        Language.ZH: "抱歉，暂时无法回答这个问题，请稍后重试。",
        Language.ES: "Lo siento, no pude responder en este momento. Inténtalo de nuevo.",
    },
    "analysis_error": {
        Language.EN: "An unexpected error occurred",
        Language.ZH: "发生了意外错误",
        Language.ES: "Ocurrió un error inesperado",
    },
}


def t(lang: Language | str, key: str) -> str:
    """Look up a client-facing string, falling back to English."""
    entries = _MESSAGES[key]
    return entries.get(Language.coerce(lang)) or entries[Language.EN]


__all__ = ["t"]
