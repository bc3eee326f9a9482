from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnthropicSettings(BaseModel):
    base_url: str = Field("https://api.anthropic.com", description="Base URL of the Anthropic Messages API.")
    api_version: str = Field("2023-06-01", description="Value sent in the anthropic-version header.")
    timeout_seconds: float = Field(120.0, ge=1.0, description="Per-request timeout for upstream model calls.")


class AnalysisSettings(BaseModel):
    model: str = Field("claude-sonnet-4-5", description="Model used to extract statement data from the PDF.")
    max_tokens: int = Field(4096, ge=256)
    validate_schema: bool = Field(
        False,
        description="Validate parsed model output against StatementData before returning it.",
    )


class ChatSettings(BaseModel):
    model: str = Field("claude-3-5-haiku-20241022", description="Model used for follow-up questions.")
    max_tokens: int = Field(2048, ge=128)


class ObservabilitySettings(BaseModel):
    prometheus_enabled: bool = Field(True)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class Settings(BaseSettings):
    environment: Literal["local", "test", "production"] = Field("local")
    api_v1_prefix: str = Field("/api/v1")

    anthropic_api_key: str | None = Field(
        default=None,
        description="Credential for the upstream model; read from ANTHROPIC_API_KEY.",
    )
    anthropic: AnthropicSettings = Field(default_factory=AnthropicSettings)  # type: ignore[arg-type]
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)  # type: ignore[arg-type]
    chat: ChatSettings = Field(default_factory=ChatSettings)  # type: ignore[arg-type]
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)  # type: ignore[arg-type]

    frontend_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins permitted to access the API via CORS.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


class ClientSettings(BaseSettings):
    """Settings for the statement client library and CLI."""

    api_url: str = Field("http://localhost:8000/api/v1", description="Base URL of the proxy endpoints.")
    timeout_seconds: float = Field(180.0, ge=1.0)
    validate_schema: bool = Field(
        False,
        description="Reject analysis results that do not match the StatementData contract exactly.",
    )

    model_config = SettingsConfigDict(
        env_prefix="STATEMENT_LENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def _get_cached_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def get_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Return settings, using cached defaults unless overrides are provided."""
    if overrides:
        return Settings(**dict(overrides))
    return _get_cached_settings()


__all__ = [
    "AnalysisSettings",
    "AnthropicSettings",
    "ChatSettings",
    "ClientSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
