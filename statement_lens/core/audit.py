from __future__ import annotations

import hashlib
from time import perf_counter
from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from .logging import get_logger


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one structured audit event per API request.

    The request body is hashed, never logged: it carries the whole statement.
    """

    def __init__(self, app: ASGIApp, *, include_prefixes: Iterable[str] = ("/api/",)) -> None:
        super().__init__(app)
        self._prefixes = tuple(include_prefixes)
        self._logger = get_logger(name="audit")

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        if self._prefixes and not any(request.url.path.startswith(prefix) for prefix in self._prefixes):
            return await call_next(request)

        start = perf_counter()
        payload_hash = None
        body = b""
        if request.method == "POST":
            body = await request.body()
            request._body = body  # type: ignore[attr-defined]
            if body:
                payload_hash = hashlib.sha256(body).hexdigest()

        response = await call_next(request)
        duration = perf_counter() - start

        self._logger.info(
            "audit_log",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            payload_hash=payload_hash,
            content_length=len(body),
            client_ip=(request.client.host if request.client else None),
            duration_ms=round(duration * 1000, 3),
        )
        return response


__all__ = ["AuditLoggingMiddleware"]
