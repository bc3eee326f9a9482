from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from .api.routes import json_response
from .api.routes import router as api_router
from .core import metrics
from .core.audit import AuditLoggingMiddleware
from .core.config import get_settings
from .core.exceptions import CATEGORY_THROTTLED, CATEGORY_VALIDATION, InvalidRequest, StatementLensError
from .core.logging import configure_logging, get_logger

settings = get_settings()
configure_logging(settings.observability.log_level)
logger = get_logger(name=__name__)


def _endpoint_label(request: Request) -> str:
    path = request.url.path
    if path.startswith(settings.api_v1_prefix):
        path = path[len(settings.api_v1_prefix):]
    return path.strip("/").replace("-", "_").replace("/", ".") or "root"


app = FastAPI(title="Statement Lens", version="0.1.0")
app.add_middleware(AuditLoggingMiddleware, include_prefixes=(settings.api_v1_prefix,))
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.exception_handler(StatementLensError)
async def statement_lens_exception_handler(request: Request, exc: StatementLensError) -> JSONResponse:
    endpoint = _endpoint_label(request)
    log = logger.warning if exc.category in {CATEGORY_VALIDATION, CATEGORY_THROTTLED} else logger.error
    log(
        "proxy_request_failed",
        endpoint=endpoint,
        error_type=type(exc).__name__,
        category=exc.category,
        status=exc.http_status,
        message=exc.message,
        details=exc.details,
    )
    metrics.record_proxy_outcome(endpoint=endpoint, outcome=exc.category)
    return json_response(exc.to_payload(), status_code=exc.http_status)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidRequest(details={"errors": [str(item.get("msg")) for item in exc.errors()]})
    return await statement_lens_exception_handler(request, error)


@app.get("/", tags=["health"])
async def root() -> dict[str, str]:
    return {"message": "Statement Lens backend running"}


if settings.observability.prometheus_enabled:

    @app.get("/metrics", tags=["observability"])
    async def metrics_endpoint() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
