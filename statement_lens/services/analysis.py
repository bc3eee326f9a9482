from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..core.config import AnalysisSettings, Settings
from ..core.exceptions import MalformedSchema, MissingInput
from ..core.logging import get_logger
from ..schemas.statement import StatementData
from .llm import AnthropicClient, document_block, text_block
from .prompts import ANALYSIS_PROMPT_VERSION, ANALYSIS_SYSTEM_PROMPT, analysis_user_prompt

logger = get_logger(name=__name__)

_LEADING_JSON_FENCE = re.compile(r"^```json\s*", re.IGNORECASE)
_LEADING_FENCE = re.compile(r"^```\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a JSON reply."""
    cleaned = _LEADING_JSON_FENCE.sub("", text.strip())
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)
    return cleaned.strip()


def parse_statement_reply(text: str, *, validate: bool = False) -> Any:
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("analysis_reply_not_json", error=str(exc), excerpt=cleaned[:200])
        raise MalformedSchema(details={"error": str(exc)}) from exc
    if validate:
        try:
            StatementData.validate_contract(parsed)
        except ValidationError as exc:
            logger.warning("analysis_reply_schema_mismatch", error_count=exc.error_count())
            raise MalformedSchema(details={"errors": exc.errors(include_url=False)}) from exc
    return parsed


@dataclass
class StatementAnalyzer:
    """Turns an encoded statement into StatementData-shaped JSON."""

    client: AnthropicClient
    config: AnalysisSettings

    @classmethod
    def from_settings(cls, settings: Settings, *, client: AnthropicClient | None = None) -> "StatementAnalyzer":
        return cls(client=client or AnthropicClient.from_settings(settings), config=settings.analysis)

    async def analyze(self, pdf_base64: str | None, filename: str | None = None) -> Any:
        if not pdf_base64:
            raise MissingInput()

        logger.info(
            "statement_analysis_started",
            filename=filename,
            model=self.config.model,
            prompt_version=ANALYSIS_PROMPT_VERSION,
            payload_chars=len(pdf_base64),
        )
        reply = await self.client.create_message(
            model=self.config.model,
            system=ANALYSIS_SYSTEM_PROMPT,
            max_tokens=self.config.max_tokens,
            messages=[
                {
                    "role": "user",
                    "content": [document_block(pdf_base64), text_block(analysis_user_prompt(filename))],
                }
            ],
        )
        parsed = parse_statement_reply(reply, validate=self.config.validate_schema)
        logger.info("statement_analysis_completed", filename=filename)
        return parsed


__all__ = ["StatementAnalyzer", "parse_statement_reply", "strip_code_fences"]
