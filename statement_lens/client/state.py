"""Client-side lifecycle for a single statement.

Each state is its own frozen dataclass carrying only the data that is valid
while it is active; ``IngestionStateMachine`` swaps whole state values and
never mutates one in place.

    upload -> file-ready -> loading -> summary
                  ^            |
                  +-- error <--+
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from ..core.logging import get_logger
from ..schemas.statement import Language, StatementData
from ..services.encoder import EncodedDocument, encode_document
from .api import ApiRequestError, StatementBackend
from .conversation import ConversationController
from .messages import t

logger = get_logger(name=__name__)


class AppState(str, Enum):
    UPLOAD = "upload"
    FILE_READY = "file-ready"
    LOADING = "loading"
    SUMMARY = "summary"
    ERROR = "error"


@dataclass(frozen=True)
class Upload:
    kind: AppState = AppState.UPLOAD


@dataclass(frozen=True)
class FileReady:
    document: EncodedDocument
    kind: AppState = AppState.FILE_READY


@dataclass(frozen=True)
class Loading:
    document: EncodedDocument
    kind: AppState = AppState.LOADING


@dataclass(frozen=True)
class Summary:
    document: EncodedDocument
    statement: StatementData
    kind: AppState = AppState.SUMMARY


@dataclass(frozen=True)
class Error:
    message: str
    document: EncodedDocument | None = None
    kind: AppState = AppState.ERROR


State = Union[Upload, FileReady, Loading, Summary, Error]


class IngestionStateMachine:
    def __init__(self, backend: StatementBackend, *, lang: Language | str = Language.EN) -> None:
        self._backend = backend
        self._state: State = Upload()
        self.lang = Language.coerce(lang)
        self.conversation = ConversationController(backend)

    @property
    def state(self) -> State:
        return self._state

    @property
    def app_state(self) -> AppState:
        return self._state.kind

    @property
    def document(self) -> EncodedDocument | None:
        return getattr(self._state, "document", None)

    @property
    def statement(self) -> StatementData | None:
        if isinstance(self._state, Summary):
            return self._state.statement
        return None

    @property
    def error_message(self) -> str | None:
        if isinstance(self._state, Error):
            return self._state.message
        return None

    def _transition(self, new_state: State) -> None:
        logger.info("ingestion_transition", source=self._state.kind.value, target=new_state.kind.value)
        self._state = new_state

    async def select_file(self, source: str | Path | EncodedDocument) -> State:
        """Accept a new statement file; only valid before analysis starts.

        Encoder rejections propagate to the caller and leave the state as is.
        """
        if not isinstance(self._state, (Upload, FileReady, Error)):
            logger.info("ingestion_select_ignored", state=self._state.kind.value)
            return self._state
        if isinstance(source, EncodedDocument):
            document = source
        else:
            document = await encode_document(source, lang=self.lang)
        if not isinstance(self._state, (Upload, FileReady, Error)):
            return self._state
        self._transition(FileReady(document=document))
        return self._state

    async def analyze(self) -> State:
        """Run the analysis for the selected file.

        Only ``file-ready`` can start an analysis, so a second call while the
        first is in flight returns immediately without a backend call.
        """
        current = self._state
        if not isinstance(current, FileReady):
            logger.info("ingestion_analyze_ignored", state=current.kind.value)
            return current

        loading = Loading(document=current.document)
        self._transition(loading)
        try:
            statement = await self._backend.analyze(loading.document)
        except ApiRequestError as exc:
            outcome: State = Error(message=exc.message, document=loading.document)
        except Exception as exc:
            logger.exception("ingestion_analyze_failed", error=str(exc))
            outcome = Error(message=str(exc) or t(self.lang, "analysis_error"), document=loading.document)
        else:
            outcome = Summary(document=loading.document, statement=statement)

        if self._state is not loading:
            logger.info("ingestion_result_discarded", state=self._state.kind.value)
            return self._state
        self._transition(outcome)
        if isinstance(outcome, Summary):
            self.conversation.attach(outcome.document)
        return self._state

    def retry(self) -> State:
        """Leave the error state: back to the selected file, or to upload."""
        current = self._state
        if not isinstance(current, Error):
            return current
        if current.document is not None:
            self._transition(FileReady(document=current.document))
        else:
            self._transition(Upload())
        return self._state

    def reset(self) -> State:
        """Drop the file, the statement and the chat history."""
        self.conversation.reset()
        self._transition(Upload())
        return self._state


__all__ = [
    "AppState",
    "Error",
    "FileReady",
    "IngestionStateMachine",
    "Loading",
    "State",
    "Summary",
    "Upload",
]
