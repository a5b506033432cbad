"""Unit tests for settings loading and structured logging setup."""

from __future__ import annotations

import json

import pytest
import structlog
from pydantic import ValidationError

from cognito_jwkset.config import (
    JWKSetOptions,
    JWKSetSettings,
    LoggingSettings,
    RemoteFetchConfig,
    configure_structlog,
)


def test_settings_read_cognito_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings map Cognito environment variables onto fields."""
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("COGNITO_USER_POOL_ID", "us-east-1_EXAMPLE123")
    monkeypatch.setenv("COGNITO_LOCAL_JWKSET", '{"keys": []}')

    settings = JWKSetSettings()

    assert settings.aws_region == "us-east-1"
    assert settings.cognito_user_pool_id == "us-east-1_EXAMPLE123"
    assert settings.cognito_local_jwkset == '{"keys": []}'


def test_settings_read_dotenv_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A .env file in the working directory supplies missing values."""
    (tmp_path / ".env").write_text(
        "AWS_REGION=eu-west-1\nCOGNITO_USER_POOL_ID=eu-west-1_ABC\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    settings = JWKSetSettings()

    assert settings.aws_region == "eu-west-1"
    assert settings.cognito_user_pool_id == "eu-west-1_ABC"


def test_options_reject_invalid_durations_and_unknown_fields() -> None:
    """Options validate duration bounds and reject unknown keys."""
    with pytest.raises(ValidationError):
        JWKSetOptions(timeout_seconds=0)
    with pytest.raises(ValidationError):
        JWKSetOptions(cooldown_seconds=-1)
    with pytest.raises(ValidationError):
        JWKSetOptions(userPoolId="pool")  # type: ignore[call-arg]


def test_options_remote_overrides_exclude_identity() -> None:
    """Only supplied tuning fields are reported as overrides."""
    options = JWKSetOptions(region="us-east-1", user_pool_id="pool", cache_max_age_seconds=30)

    assert options.remote_overrides() == {"cache_max_age_seconds": 30}


def test_remote_fetch_config_is_frozen() -> None:
    """Fetch configuration cannot be mutated after construction."""
    config = RemoteFetchConfig()

    with pytest.raises(ValidationError):
        config.timeout_seconds = 1  # type: ignore[misc]


def test_configure_structlog_emits_filtered_json(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    """Configured logger renders JSON with standard fields and honors the level."""
    monkeypatch.setenv("JWKSET_LOG_LEVEL", "warning")
    settings = LoggingSettings()
    assert settings.log_level == "WARNING"

    configure_structlog(settings, service="orders-api")
    try:
        logger = structlog.get_logger("cognito_jwkset.test")
        logger.info("dropped_event")
        logger.warning("jwkset_local_source_unusable", reason="invalid_json")
    finally:
        structlog.reset_defaults()

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert len(lines) == 1
    assert lines[0]["event"] == "jwkset_local_source_unusable"
    assert lines[0]["level"] == "warning"
    assert lines[0]["reason"] == "invalid_json"
    assert lines[0]["service"] == "orders-api"
    assert "timestamp" in lines[0]


def test_logging_settings_fall_back_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unknown or blank log levels resolve to INFO instead of failing validation."""
    for value in ("verbose", "", " debug "):
        monkeypatch.setenv("JWKSET_LOG_LEVEL", value)

        expected = "DEBUG" if value.strip() == "debug" else "INFO"
        assert LoggingSettings().log_level == expected


def test_configure_structlog_defaults_to_environment(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    """Called without settings, the level comes from the environment."""
    monkeypatch.setenv("JWKSET_LOG_LEVEL", "error")

    configure_structlog()
    try:
        logger = structlog.get_logger("cognito_jwkset.test")
        logger.warning("dropped_event")
        logger.error("jwks_fetch_failed", status_code=503)
    finally:
        structlog.reset_defaults()

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert [line["event"] for line in lines] == ["jwks_fetch_failed"]
    assert lines[0]["service"] == "cognito-jwkset"
