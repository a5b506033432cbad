"""Key set settings, fetch options, and logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Literal, get_args

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_LOG_LEVELS = frozenset(get_args(LogLevel))

DEFAULT_USER_AGENT = "cognito-jwkset"


class RemoteFetchConfig(BaseModel):
    """Network and caching parameters for the remote key set."""

    model_config = ConfigDict(frozen=True)

    # AWS network latency
    timeout_seconds: float = Field(default=10.0, gt=0)
    cooldown_seconds: float = Field(default=300.0, ge=0)
    # Cognito keys rotate rarely
    cache_max_age_seconds: float = Field(default=3600.0, ge=0)
    headers: dict[str, str] = Field(default_factory=lambda: {"User-Agent": DEFAULT_USER_AGENT})


DEFAULT_REMOTE_CONFIG = RemoteFetchConfig()


class JWKSetOptions(BaseModel):
    """Caller-supplied identity and remote fetch overrides."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    region: str | None = None
    user_pool_id: str | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)
    cooldown_seconds: float | None = Field(default=None, ge=0)
    cache_max_age_seconds: float | None = Field(default=None, ge=0)
    headers: dict[str, str] | None = None

    def remote_overrides(self) -> dict[str, Any]:
        """Return supplied remote fetch fields, excluding identity coordinates."""
        return self.model_dump(exclude={"region", "user_pool_id"}, exclude_none=True)


class JWKSetSettings(BaseSettings):
    """Cognito key set settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    aws_region: str | None = None
    cognito_user_pool_id: str | None = None
    cognito_local_jwkset: str | None = Field(
        default=None, description="Raw JSON of a local JWK set used instead of Cognito."
    )


class LoggingSettings(BaseSettings):
    """Logging settings, read separately so key resolution never depends on them."""

    model_config = SettingsConfigDict(
        env_prefix="JWKSET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> str:
        """Accept any casing and fall back to INFO for unknown levels."""
        normalized = str(value).strip().upper()
        return normalized if normalized in _LOG_LEVELS else "INFO"


def _standard_log_fields(service: str) -> Callable[[Any, str, dict[str, Any]], dict[str, Any]]:
    """Build a processor injecting the service name and timestamp."""

    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("timestamp", datetime.now(UTC).isoformat())
        return event_dict

    return processor


def configure_structlog(
    settings: LoggingSettings | None = None, service: str = "cognito-jwkset"
) -> None:
    """Configure structlog for JSON output filtered at the configured level."""
    settings = settings or LoggingSettings()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _standard_log_fields(service),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
