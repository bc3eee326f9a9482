from __future__ import annotations

import pytest
from pydantic import ValidationError

from statement_lens.schemas.requests import AnalyzeStatementRequest, ChatStatementRequest
from statement_lens.schemas.statement import (
    CHANNELS,
    CHANNELS_ES,
    CHANNELS_ZH,
    ChatMessage,
    Language,
    StatementData,
)
from tests.helpers.stubs import sample_statement


def test_statement_round_trips_from_model_output() -> None:
    statement = StatementData.model_validate(sample_statement())

    assert statement.period == "January 2026"
    assert [highlight.label("en") for highlight in statement.highlights][0] == "Net Sales"
    assert statement.highlights[0].label(Language.ZH) == "净销售额"
    assert statement.sections[0].title("es") == "Comisiones y Pago"
    assert statement.insights("zh") == "堂食贡献了三分之二的收入。"


def test_missing_notes_default_to_empty() -> None:
    statement = StatementData.model_validate(sample_statement())

    item = statement.sections[0].items[1]
    assert item.note("en") == ""
    assert statement.sections[0].items[0].note("es") == "2.9% + $0.30"


def test_unknown_language_falls_back_to_english() -> None:
    statement = StatementData.model_validate(sample_statement())

    assert Language.coerce("fr") is Language.EN
    assert Language.coerce(None) is Language.EN
    assert Language.coerce(" ZH ") is Language.ZH
    assert statement.order_breakdown[0].channel("de") == "Dine In"


def test_extra_fields_are_preserved() -> None:
    payload = sample_statement()
    payload["currency"] = "USD"

    statement = StatementData.model_validate(payload)

    assert statement.model_dump()["currency"] == "USD"


def test_missing_field_is_rejected_only_by_contract_check() -> None:
    payload = sample_statement()
    del payload["order_breakdown"]

    assert StatementData.model_validate(payload).order_breakdown == []
    with pytest.raises(ValidationError):
        StatementData.validate_contract(payload)


def test_values_are_coerced_to_display_text() -> None:
    payload = sample_statement()
    payload["order_breakdown"][0].update({"orders": 10, "revenue": None, "is_total": "false"})
    payload["highlights"].append("Net Sales")

    statement = StatementData.model_validate(payload)

    row = statement.order_breakdown[0]
    assert (row.orders, row.revenue, row.is_total) == ("10", "", False)
    assert len(statement.highlights) == 4
    with pytest.raises(ValidationError):
        StatementData.validate_contract(payload)


def test_sample_statement_meets_contract() -> None:
    statement = StatementData.validate_contract(sample_statement())

    assert statement.total_row() is statement.order_breakdown[-1]


def test_channel_vocabularies_line_up() -> None:
    assert len(CHANNELS_ZH) == len(CHANNELS) + 1
    assert len(CHANNELS_ES) == len(CHANNELS) + 1
    assert CHANNELS_ZH[-1] == "合计"


def test_chat_message_rejects_unknown_role() -> None:
    with pytest.raises(ValidationError):
        ChatMessage(role="system", content="hi")  # type: ignore[arg-type]


def test_request_models_accept_wire_aliases() -> None:
    analyze = AnalyzeStatementRequest.model_validate({"pdfBase64": "QUJD", "filename": "jan.pdf"})
    chat = ChatStatementRequest.model_validate(
        {"pdfBase64": "QUJD", "messages": [{"role": "user", "content": "hi"}], "lang": "zh"}
    )

    assert analyze.pdf_base64 == "QUJD"
    assert chat.messages is not None and chat.messages[0].content == "hi"
    assert ChatStatementRequest.model_validate({}).pdf_base64 is None
