from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Protocol, Sequence

import httpx
from pydantic import ValidationError

from ..core.config import ClientSettings
from ..core.logging import get_logger
from ..schemas.statement import ChatMessage, Language, StatementData
from ..services.encoder import EncodedDocument

logger = get_logger(name=__name__)


class ApiRequestError(RuntimeError):
    """Raised when a proxy call fails for any reason."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StatementBackend(Protocol):
    async def analyze(self, document: EncodedDocument) -> StatementData:
        ...

    async def chat(
        self,
        document: EncodedDocument,
        messages: Sequence[ChatMessage],
        lang: Language,
    ) -> str:
        ...


class StatementApiClient:
    """HTTP client for the analyze-statement and chat-statement endpoints."""

    def __init__(self, settings: ClientSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings or ClientSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.api_url.rstrip("/"),
            timeout=httpx.Timeout(self._settings.timeout_seconds),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator["StatementApiClient"]:
        try:
            yield self
        finally:
            await self.aclose()

    async def analyze(self, document: EncodedDocument) -> StatementData:
        body = await self._post(
            "/analyze-statement",
            {"pdfBase64": document.data, "filename": document.filename},
        )
        data = body.get("data")
        if not data:
            raise ApiRequestError("No data returned from analysis")
        if not isinstance(data, dict):
            raise ApiRequestError("Analysis returned data in an unexpected shape")
        try:
            if self._settings.validate_schema:
                return StatementData.validate_contract(data)
            return StatementData.model_validate(data)
        except ValidationError as exc:
            logger.warning("statement_data_unreadable", error_count=exc.error_count())
            raise ApiRequestError("Analysis returned data in an unexpected shape") from exc

    async def chat(
        self,
        document: EncodedDocument,
        messages: Sequence[ChatMessage],
        lang: Language,
    ) -> str:
        body = await self._post(
            "/chat-statement",
            {
                "pdfBase64": document.data,
                "messages": [message.model_dump() for message in messages],
                "lang": Language.coerce(lang).value,
            },
        )
        reply = body.get("reply")
        if not isinstance(reply, str) or not reply:
            raise ApiRequestError("No reply returned from chat")
        return reply

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.RequestError as exc:
            logger.warning("statement_api_unreachable", path=path, error=str(exc))
            raise ApiRequestError(f"Function invocation failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise ApiRequestError(
                f"Unexpected response from {path} (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if body.get("error"):
            raise ApiRequestError(str(body["error"]), status_code=response.status_code)
        if not response.is_success:
            raise ApiRequestError(f"Request failed with HTTP {response.status_code}", status_code=response.status_code)
        return body


__all__ = ["ApiRequestError", "StatementApiClient", "StatementBackend"]
