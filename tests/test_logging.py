from __future__ import annotations

from statement_lens.core.logging import _redact_document_payloads


def test_document_payloads_are_redacted() -> None:
    event = {"event": "statement_analysis_started", "pdf_base64": "QUJDRA==", "filename": "jan.pdf"}

    redacted = _redact_document_payloads(None, "info", event)

    assert redacted["pdf_base64"] == "<redacted 8 chars>"
    assert redacted["filename"] == "jan.pdf"


def test_non_string_payloads_are_redacted() -> None:
    redacted = _redact_document_payloads(None, "info", {"event": "x", "pdfBase64": None})

    assert redacted["pdfBase64"] == "<redacted>"
