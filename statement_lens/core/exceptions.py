"""Error taxonomy shared by the proxy endpoints and the client library.

Every failure the proxies can produce is a ``StatementLensError`` carrying the
HTTP status it maps to and a coarse category used for logging and metrics:

* ``configuration`` - the upstream credential is missing (operator-facing).
* ``validation`` - bad, missing or oversized input (user-recoverable).
* ``throttled`` - the upstream model rate-limited the request.
* ``upstream`` - any other upstream fault.
* ``contract`` - upstream text could not be read as the expected JSON.
"""

from __future__ import annotations

from typing import Any

CATEGORY_CONFIGURATION = "configuration"
CATEGORY_VALIDATION = "validation"
CATEGORY_THROTTLED = "throttled"
CATEGORY_UPSTREAM = "upstream"
CATEGORY_CONTRACT = "contract"


class StatementLensError(Exception):
    """Base class for all structured proxy failures."""

    http_status: int = 500
    category: str = CATEGORY_UPSTREAM
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message}


class UpstreamNotConfigured(StatementLensError):
    category = CATEGORY_CONFIGURATION
    default_message = "ANTHROPIC_API_KEY is not configured"


class MissingInput(StatementLensError):
    http_status = 400
    category = CATEGORY_VALIDATION
    default_message = "No PDF data provided"


class NoMessages(StatementLensError):
    http_status = 400
    category = CATEGORY_VALIDATION
    default_message = "No messages provided"


class InvalidRequest(StatementLensError):
    http_status = 400
    category = CATEGORY_VALIDATION
    default_message = "Request body must be a JSON object"


class InvalidFileType(StatementLensError):
    http_status = 400
    category = CATEGORY_VALIDATION
    default_message = "Please upload a PDF file."


class FileTooLarge(StatementLensError):
    http_status = 413
    category = CATEGORY_VALIDATION
    default_message = "File must be under 20MB."


class RateLimited(StatementLensError):
    http_status = 429
    category = CATEGORY_THROTTLED
    default_message = "Rate limit exceeded. Please wait a moment and try again."


class UpstreamError(StatementLensError):
    category = CATEGORY_UPSTREAM

    def __init__(self, upstream_status: int, *, details: dict[str, Any] | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(f"API error: {upstream_status}", details=details)


class EmptyUpstreamResponse(StatementLensError):
    category = CATEGORY_UPSTREAM
    default_message = "Empty response from the upstream model"


class MalformedSchema(StatementLensError):
    category = CATEGORY_CONTRACT
    default_message = "Analysis failed: the model did not return valid statement JSON"


__all__ = [
    "CATEGORY_CONFIGURATION",
    "CATEGORY_CONTRACT",
    "CATEGORY_THROTTLED",
    "CATEGORY_UPSTREAM",
    "CATEGORY_VALIDATION",
    "EmptyUpstreamResponse",
    "FileTooLarge",
    "InvalidFileType",
    "InvalidRequest",
    "MalformedSchema",
    "MissingInput",
    "NoMessages",
    "RateLimited",
    "StatementLensError",
    "UpstreamError",
    "UpstreamNotConfigured",
]
