"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the provider clients and
the helper scripts share a consistent configuration surface. Settings are read
once at startup and injected into the services; nothing reads the environment
mid-request.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file into ``os.environ``."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        os.environ[key] = value.strip().strip('"').strip("'")


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


class GeminiSettings(BaseSettings):
    """Configuration for direct Gemini model access."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    api_key: Optional[str] = Field(None, validation_alias="GEMINI_API_KEY")
    light_model_name: str = Field(
        "gemini-2.5-flash", validation_alias="GEMINI_LIGHT_MODEL_NAME"
    )
    capable_model_name: str = Field(
        "gemini-2.5-pro", validation_alias="GEMINI_CAPABLE_MODEL_NAME"
    )


class GatewaySettings(BaseSettings):
    """Configuration for the OpenAI-compatible AI gateway."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    api_key: Optional[str] = Field(None, validation_alias="AI_GATEWAY_API_KEY")
    base_url: str = Field(
        "https://ai.gateway.lovable.dev/v1",
        validation_alias="AI_GATEWAY_BASE_URL",
    )
    light_model_name: str = Field(
        "google/gemini-2.5-flash", validation_alias="AI_GATEWAY_LIGHT_MODEL"
    )
    capable_model_name: str = Field(
        "google/gemini-2.5-pro", validation_alias="AI_GATEWAY_CAPABLE_MODEL"
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    provider_order: Annotated[tuple[str, ...], NoDecode] = Field(
        ("gemini", "gateway"),
        validation_alias="AI_PROVIDER_ORDER",
        description="Providers to try, highest priority first.",
    )
    upstream_timeout_seconds: float = Field(
        60.0, gt=0, validation_alias="UPSTREAM_TIMEOUT_SECONDS"
    )
    cors_allow_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        ("*",), validation_alias="CORS_ALLOW_ORIGINS"
    )
    known_origin_hosts: Annotated[tuple[str, ...], NoDecode] = Field(
        ("localhost",),
        validation_alias="KNOWN_ORIGIN_HOSTS",
        description="Origins containing one of these fragments are not flagged.",
    )
    database_path: str = Field(
        "data/nutrisense.db", validation_alias="NUTRISENSE_DB_PATH"
    )
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)

    @field_validator(
        "provider_order", "cors_allow_origins", "known_origin_hosts", mode="before"
    )
    @classmethod
    def _split_lists(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing list settings as comma-separated strings."""
        return _split_csv(value)

    @field_validator("provider_order")
    @classmethod
    def _normalize_provider_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(name.lower() for name in value)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GatewaySettings",
    "GeminiSettings",
    "get_settings",
]
