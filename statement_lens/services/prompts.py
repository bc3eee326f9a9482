"""Instruction sets sent to the upstream model.

The analysis prompt is the only thing that enforces the StatementData shape;
bump ``ANALYSIS_PROMPT_VERSION`` whenever its wording changes.
"""

from __future__ import annotations

from ..schemas.statement import (
    CHANNELS,
    CHANNELS_ES,
    CHANNELS_ZH,
    HIGHLIGHT_ORDER,
    TOTAL_CHANNEL,
    Language,
)

ANALYSIS_PROMPT_VERSION = "2026.01"


def _quoted(values: tuple[str, ...]) -> str:
    return ", ".join(f'"{value}"' for value in values)


_STATEMENT_SCHEMA = """{
  "period": "string (reporting period, e.g. 'January 2026')",
  "restaurant_name": "string (restaurant name from the statement header)",
  "highlights": [
    {"label_en": "string", "label_zh": "string", "label_es": "string", "value": "string (formatted, e.g. '$82,638.93')"}
  ],
  "order_breakdown": [
    {
      "channel_en": "string",
      "channel_zh": "string",
      "channel_es": "string",
      "orders": "string (formatted integer, e.g. '1,260')",
      "revenue": "string (formatted USD, e.g. '$72,759.26')",
      "tips": "string (formatted USD, '$0.00' when not broken out)",
      "is_total": false
    }
  ],
  "sections": [
    {
      "title_en": "string",
      "title_zh": "string",
      "title_es": "string",
      "items": [
        {
          "label_en": "string",
          "label_zh": "string",
          "label_es": "string",
          "value": "string",
          "note_en": "string or empty string",
          "note_zh": "string or empty string",
          "note_es": "string or empty string"
        }
      ]
    }
  ],
  "insights_en": "2-3 sentence plain-language business insight for the owner, in English",
  "insights_zh": "the same insight in simplified Chinese",
  "insights_es": "the same insight in Spanish"
}"""

_HIGHLIGHT_LINES = "\n".join(f"{index}. {label}" for index, label in enumerate(HIGHLIGHT_ORDER, start=1))
_CHANNEL_LIST = ", ".join(CHANNELS)
_CHANNELS_EN = _quoted(CHANNELS + (TOTAL_CHANNEL,))
_CHANNELS_ZH = _quoted(CHANNELS_ZH)
_CHANNELS_ES = _quoted(CHANNELS_ES)

ANALYSIS_SYSTEM_PROMPT = f"""You are a financial data extraction assistant for restaurant point-of-sale monthly statements.

Analyze the attached PDF statement and return ONLY a valid JSON object matching EXACTLY this schema. No markdown, no code fences, no explanation: raw JSON only.

{_STATEMENT_SCHEMA}

The highlights array must contain exactly these 4 KPIs, in this order:
{_HIGHLIGHT_LINES}

The order_breakdown array must contain one row per order channel plus a final Total row.
- Include every one of these channels, in this order: {_CHANNEL_LIST}. Carry Out covers take-out; Online Delivery covers DoorDash, Uber Eats, Grubhub and similar.
- For each channel extract the number of orders, net revenue and tips ('$0.00' when tips are not broken out per channel).
- A channel with no orders is still included with orders "0", revenue "$0.00" and tips "$0.00".
- The LAST entry must be the {TOTAL_CHANNEL} row with is_total: true, summing all channel rows. No other row has is_total: true.
- English channel names must be exactly: {_CHANNELS_EN}
- Chinese channel names must be exactly: {_CHANNELS_ZH}
- Spanish channel names must be exactly: {_CHANNELS_ES}

The sections array must contain ALL of these sections, in this order:
1. Sales Summary (Gross Sales, Discounts, Net Sales Refunds, Net Sales, Taxes, Service Tips, Voided Items, Amount Receivable)
2. Payment Methods (each payment method with its amount)
3. Top Categories by Order Volume (top 5)
4. Top Categories by Revenue (top 5)
5. Fees & Payout (every fee line item and the total payout)

Every *_zh value must be simplified Chinese. Every *_es value must be Spanish.
All amounts stay in USD. Never translate currency or numbers.
Return ONLY the JSON object, nothing else."""


def analysis_user_prompt(filename: str | None) -> str:
    suffix = f" ({filename})" if filename else ""
    return f"Please analyze this monthly POS statement{suffix} and return the structured JSON data as specified."


CHAT_SYSTEM_PROMPT = """You are a helpful assistant for restaurant owners reviewing their monthly point-of-sale statements. A PDF of the statement is attached to the first message of the conversation.

Answer questions about the statement concisely and accurately. Reference specific numbers, line items, fees, order channels or any other data in the PDF. Keep answers focused and practical; these are busy restaurant owners.

If a question cannot be answered from the statement, say so clearly."""

LANGUAGE_INSTRUCTIONS: dict[Language, str] = {
    Language.EN: "Respond in English.",
    Language.ZH: "Respond in simplified Chinese (简体中文).",
    Language.ES: "Respond in Spanish.",
}


def chat_system_prompt(lang: Language | str | None) -> str:
    return f"{CHAT_SYSTEM_PROMPT}\n\n{LANGUAGE_INSTRUCTIONS[Language.coerce(lang)]}"


__all__ = [
    "ANALYSIS_PROMPT_VERSION",
    "ANALYSIS_SYSTEM_PROMPT",
    "CHAT_SYSTEM_PROMPT",
    "LANGUAGE_INSTRUCTIONS",
    "analysis_user_prompt",
    "chat_system_prompt",
]
