from __future__ import annotations

from typing import Any, Awaitable, TypeVar

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response

from ..core import metrics
from ..core.exceptions import StatementLensError
from ..core.logging import get_logger
from ..dependencies import get_statement_analyzer, get_statement_chat
from ..schemas.requests import (
    AnalyzeStatementRequest,
    AnalyzeStatementResponse,
    ChatStatementRequest,
    ChatStatementResponse,
    ErrorResponse,
)
from ..services.analysis import StatementAnalyzer
from ..services.chat import StatementChat
from ..services.encoder import encode_upload

logger = get_logger(name=__name__)

router = APIRouter()

T = TypeVar("T")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, x-supabase-client-platform, "
        "x-supabase-client-platform-version, x-supabase-client-runtime, x-supabase-client-runtime-version"
    ),
}

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def json_response(content: Any, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


async def _proxy_call(endpoint: str, call: Awaitable[T]) -> T:
    try:
        result = await call
    except StatementLensError:
        raise
    except Exception as exc:
        logger.exception("proxy_unexpected_error", endpoint=endpoint, error=str(exc))
        raise StatementLensError(str(exc) or "Unknown error") from exc
    metrics.record_proxy_outcome(endpoint=endpoint, outcome="success")
    return result


@router.options("/analyze-statement", include_in_schema=False)
@router.options("/analyze-statement/upload", include_in_schema=False)
@router.options("/chat-statement", include_in_schema=False)
async def preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "/analyze-statement",
    response_model=AnalyzeStatementResponse,
    responses=ERROR_RESPONSES,
    tags=["statements"],
)
async def analyze_statement(
    payload: AnalyzeStatementRequest,
    analyzer: StatementAnalyzer = Depends(get_statement_analyzer),
) -> JSONResponse:
    data = await _proxy_call("analyze", analyzer.analyze(payload.pdf_base64, payload.filename))
    return json_response({"data": data})


@router.post(
    "/analyze-statement/upload",
    response_model=AnalyzeStatementResponse,
    responses={**ERROR_RESPONSES, 413: {"model": ErrorResponse}},
    tags=["statements"],
)
async def analyze_statement_upload(
    document: UploadFile = File(...),
    lang: str | None = Form(None),
    analyzer: StatementAnalyzer = Depends(get_statement_analyzer),
) -> JSONResponse:
    try:
        encoded = await encode_upload(document, lang=lang or "en")
    finally:
        await document.close()
    data = await _proxy_call("analyze_upload", analyzer.analyze(encoded.data, encoded.filename))
    return json_response({"data": data})


@router.post(
    "/chat-statement",
    response_model=ChatStatementResponse,
    responses=ERROR_RESPONSES,
    tags=["statements"],
)
async def chat_statement(
    payload: ChatStatementRequest,
    chat: StatementChat = Depends(get_statement_chat),
) -> JSONResponse:
    reply = await _proxy_call("chat", chat.reply(payload.pdf_base64, payload.messages, payload.lang))
    return json_response({"reply": reply})


__all__ = ["CORS_HEADERS", "json_response", "router"]
