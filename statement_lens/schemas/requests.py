from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .statement import ChatMessage


class AnalyzeStatementRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pdf_base64: str | None = Field(None, alias="pdfBase64", description="Base64-encoded PDF statement.")
    filename: str | None = Field(None, description="Original filename, used only in the instruction text.")


class ChatStatementRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pdf_base64: str | None = Field(None, alias="pdfBase64", description="Base64-encoded PDF statement.")
    messages: list[ChatMessage] | None = Field(None, description="Conversation so far, oldest first.")
    lang: str | None = Field(None, description="Reply language code: en, zh or es.")


class AnalyzeStatementResponse(BaseModel):
    # Echoed exactly as parsed from the model reply.
    data: Any


class ChatStatementResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str


__all__ = [
    "AnalyzeStatementRequest",
    "AnalyzeStatementResponse",
    "ChatStatementRequest",
    "ChatStatementResponse",
    "ErrorResponse",
]
