from __future__ import annotations

import asyncio

import pytest

from statement_lens.client import ApiRequestError, AppState, ConversationClosed, IngestionStateMachine
from statement_lens.client.state import Error, FileReady, Summary, Upload
from statement_lens.core.exceptions import FileTooLarge, InvalidFileType
from statement_lens.services import encoder
from tests.helpers.stubs import PDF_BYTES, StubBackend, sample_document


@pytest.mark.asyncio
async def test_happy_path_reaches_summary_and_opens_chat() -> None:
    backend = StubBackend()
    machine = IngestionStateMachine(backend)
    assert isinstance(machine.state, Upload)

    document = sample_document()
    await machine.select_file(document)
    assert machine.app_state is AppState.FILE_READY
    assert machine.document is document

    state = await machine.analyze()

    assert isinstance(state, Summary)
    assert machine.statement is not None
    assert machine.statement.restaurant_name == "Golden Dragon"
    assert backend.analyze_calls == [document]
    assert machine.conversation.document is document
    assert machine.conversation.messages == []


@pytest.mark.asyncio
async def test_select_file_from_disk(tmp_path) -> None:
    path = tmp_path / "jan.pdf"
    path.write_bytes(PDF_BYTES)
    machine = IngestionStateMachine(StubBackend())

    state = await machine.select_file(path)

    assert isinstance(state, FileReady)
    assert state.document.filename == "jan.pdf"


@pytest.mark.asyncio
async def test_invalid_file_never_reaches_backend(tmp_path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("not a statement")
    backend = StubBackend()
    machine = IngestionStateMachine(backend, lang="es")

    with pytest.raises(InvalidFileType) as excinfo:
        await machine.select_file(path)

    assert excinfo.value.message == "Por favor sube un archivo PDF."
    assert machine.app_state is AppState.UPLOAD
    assert await machine.analyze() is machine.state
    assert backend.analyze_calls == []


@pytest.mark.asyncio
async def test_oversized_file_is_rejected(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(encoder, "MAX_DOCUMENT_BYTES", 8)
    path = tmp_path / "big.pdf"
    path.write_bytes(PDF_BYTES)
    machine = IngestionStateMachine(StubBackend())

    with pytest.raises(FileTooLarge):
        await machine.select_file(path)

    assert machine.app_state is AppState.UPLOAD


@pytest.mark.asyncio
async def test_analyze_while_loading_is_ignored() -> None:
    backend = StubBackend()
    backend.gate = asyncio.Event()
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document())

    first = asyncio.create_task(machine.analyze())
    await asyncio.sleep(0)
    assert machine.app_state is AppState.LOADING

    second = await machine.analyze()
    assert second.kind is AppState.LOADING

    backend.gate.set()
    await first

    assert machine.app_state is AppState.SUMMARY
    assert len(backend.analyze_calls) == 1


@pytest.mark.asyncio
async def test_concurrent_analyze_calls_share_one_request() -> None:
    backend = StubBackend()
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document())

    await asyncio.gather(machine.analyze(), machine.analyze())

    assert len(backend.analyze_calls) == 1
    assert machine.app_state is AppState.SUMMARY


@pytest.mark.asyncio
async def test_reset_during_loading_discards_late_result() -> None:
    backend = StubBackend()
    backend.gate = asyncio.Event()
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document())

    pending = asyncio.create_task(machine.analyze())
    await asyncio.sleep(0)
    machine.reset()
    backend.gate.set()
    await pending

    assert isinstance(machine.state, Upload)
    assert machine.statement is None
    assert machine.conversation.document is None


@pytest.mark.asyncio
async def test_backend_error_is_shown_and_retry_keeps_file() -> None:
    backend = StubBackend()
    backend.analyze_error = ApiRequestError(
        "Rate limit exceeded. Please wait a moment and try again.", status_code=429
    )
    machine = IngestionStateMachine(backend)
    document = sample_document()
    await machine.select_file(document)

    state = await machine.analyze()

    assert isinstance(state, Error)
    assert machine.error_message == "Rate limit exceeded. Please wait a moment and try again."
    assert machine.document is document

    retried = machine.retry()
    assert isinstance(retried, FileReady)
    assert retried.document is document

    backend.analyze_error = None
    assert isinstance(await machine.analyze(), Summary)
    assert len(backend.analyze_calls) == 2


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_error_state() -> None:
    backend = StubBackend()
    backend.analyze_error = RuntimeError("socket closed")
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document())

    await machine.analyze()

    assert machine.app_state is AppState.ERROR
    assert machine.error_message == "socket closed"


@pytest.mark.asyncio
async def test_unexpected_exception_without_message_uses_localized_fallback() -> None:
    backend = StubBackend()
    backend.analyze_error = RuntimeError()
    machine = IngestionStateMachine(backend, lang="zh")
    await machine.select_file(sample_document())

    await machine.analyze()

    assert machine.error_message == "发生了意外错误"


def test_retry_outside_error_is_a_no_op() -> None:
    machine = IngestionStateMachine(StubBackend())

    assert isinstance(machine.retry(), Upload)


@pytest.mark.asyncio
async def test_select_file_from_error_replaces_document() -> None:
    backend = StubBackend()
    backend.analyze_error = ApiRequestError("API error: 500", status_code=500)
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document("jan.pdf"))
    await machine.analyze()

    replacement = sample_document("feb.pdf")
    state = await machine.select_file(replacement)

    assert isinstance(state, FileReady)
    assert state.document is replacement


@pytest.mark.asyncio
async def test_select_file_is_ignored_once_summarised() -> None:
    machine = IngestionStateMachine(StubBackend())
    document = sample_document()
    await machine.select_file(document)
    await machine.analyze()

    state = await machine.select_file(sample_document("other.pdf"))

    assert isinstance(state, Summary)
    assert state.document is document


@pytest.mark.asyncio
async def test_reset_clears_file_statement_and_chat() -> None:
    backend = StubBackend()
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document())
    await machine.analyze()
    await machine.conversation.send("Net sales?")
    assert len(machine.conversation.messages) == 2

    machine.reset()

    assert isinstance(machine.state, Upload)
    assert machine.document is None
    assert machine.statement is None
    assert machine.conversation.messages == []
    with pytest.raises(ConversationClosed):
        await machine.conversation.send("Still there?")
    assert len(backend.chat_calls) == 1


@pytest.mark.asyncio
async def test_summary_keeps_total_row_last() -> None:
    machine = IngestionStateMachine(StubBackend())
    await machine.select_file(sample_document())
    await machine.analyze()

    statement = machine.statement
    assert statement is not None
    assert [row.channel("en") for row in statement.order_breakdown] == ["Dine In", "Carry Out", "Total"]
    total = statement.total_row()
    assert total is not None
    assert total.orders == "15"
    assert [row.channel("zh") for row in statement.channel_rows()] == ["堂食", "外带"]


@pytest.mark.asyncio
async def test_selecting_another_file_replaces_pending_one() -> None:
    backend = StubBackend()
    machine = IngestionStateMachine(backend)
    await machine.select_file(sample_document("jan.pdf"))

    replacement = sample_document("feb.pdf")
    state = await machine.select_file(replacement)
    await machine.analyze()

    assert isinstance(state, FileReady)
    assert backend.analyze_calls == [replacement]
