from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationInfo, model_validator


class Language(str, Enum):
    EN = "en"
    ZH = "zh"
    ES = "es"

    @classmethod
    def coerce(cls, value: Any) -> "Language":
        """Return the matching language, falling back to English."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.EN


HIGHLIGHT_ORDER: tuple[str, ...] = ("Net Sales", "Total Orders", "Service Tips", "Total Payout Amount")

CHANNELS: tuple[str, ...] = ("Dine In", "Carry Out", "Kiosk", "Online Delivery", "Call In")
TOTAL_CHANNEL = "Total"
CHANNELS_ZH: tuple[str, ...] = ("堂食", "外带", "自助点餐机", "线上外卖", "电话点餐", "合计")
CHANNELS_ES: tuple[str, ...] = ("Comer Aquí", "Para Llevar", "Quiosco", "Entrega en Línea", "Por Teléfono", "Total")

SECTION_ORDER: tuple[str, ...] = (
    "Sales Summary",
    "Payment Methods",
    "Top Categories by Order Volume",
    "Top Categories by Revenue",
    "Fees & Payout",
)


def _is_strict(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get("strict_contract"))


def _as_text(value: Any, info: ValidationInfo) -> Any:
    if _is_strict(info) or isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_flag(value: Any, info: ValidationInfo) -> Any:
    if _is_strict(info):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return bool(value)


def _as_rows(value: Any, info: ValidationInfo) -> Any:
    if _is_strict(info):
        return value
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


# Model output is rendered as given: values are coerced to their display form
# unless validation runs with the strict_contract context.
Text = Annotated[str, BeforeValidator(_as_text)]
Flag = Annotated[bool, BeforeValidator(_as_flag)]
AsRows = BeforeValidator(_as_rows)


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def fill_missing_fields(cls, data: Any, info: ValidationInfo) -> Any:
        if _is_strict(info) or not isinstance(data, dict):
            return data
        filled = dict(data)
        for name, field in cls.model_fields.items():
            if field.is_required():
                filled.setdefault(name, None)
        return filled


class _Triple(_Lenient):
    def _pick(self, prefix: str, lang: Language | str) -> str:
        code = Language.coerce(lang).value
        return getattr(self, f"{prefix}_{code}") or ""


class Highlight(_Triple):
    label_en: Text
    label_zh: Text
    label_es: Text
    value: Text

    def label(self, lang: Language | str) -> str:
        return self._pick("label", lang)


class OrderBreakdownRow(_Triple):
    channel_en: Text
    channel_zh: Text
    channel_es: Text
    orders: Text
    revenue: Text
    tips: Text
    is_total: Flag = False

    def channel(self, lang: Language | str) -> str:
        return self._pick("channel", lang)


class SectionItem(_Triple):
    label_en: Text
    label_zh: Text
    label_es: Text
    value: Text
    note_en: Text = ""
    note_zh: Text = ""
    note_es: Text = ""

    def label(self, lang: Language | str) -> str:
        return self._pick("label", lang)

    def note(self, lang: Language | str) -> str:
        return self._pick("note", lang)


class Section(_Triple):
    title_en: Text
    title_zh: Text
    title_es: Text
    items: Annotated[list[SectionItem], AsRows] = Field(default_factory=list)

    def title(self, lang: Language | str) -> str:
        return self._pick("title", lang)


class StatementData(_Lenient):
    """Structured statement produced by the analysis endpoint.

    Row order is preserved exactly as received; the total row of
    ``order_breakdown`` is expected last but is never reordered or
    recomputed here. Plain validation accepts any JSON object and fills gaps
    with blanks; ``validate_contract`` rejects anything off-contract.
    """

    period: Text
    restaurant_name: Text
    highlights: Annotated[list[Highlight], AsRows]
    order_breakdown: Annotated[list[OrderBreakdownRow], AsRows]
    sections: Annotated[list[Section], AsRows]
    insights_en: Text
    insights_zh: Text
    insights_es: Text

    @classmethod
    def validate_contract(cls, payload: Any) -> "StatementData":
        return cls.model_validate(payload, context={"strict_contract": True})

    def insights(self, lang: Language | str) -> str:
        return getattr(self, f"insights_{Language.coerce(lang).value}")

    def total_row(self) -> OrderBreakdownRow | None:
        totals = [row for row in self.order_breakdown if row.is_total]
        return totals[-1] if totals else None

    def channel_rows(self) -> list[OrderBreakdownRow]:
        return [row for row in self.order_breakdown if not row.is_total]


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


__all__ = [
    "CHANNELS",
    "CHANNELS_ES",
    "CHANNELS_ZH",
    "ChatMessage",
    "HIGHLIGHT_ORDER",
    "Highlight",
    "Language",
    "OrderBreakdownRow",
    "SECTION_ORDER",
    "Section",
    "SectionItem",
    "StatementData",
    "TOTAL_CHANNEL",
]
