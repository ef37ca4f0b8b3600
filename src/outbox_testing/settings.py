"""Harness settings for the outbox test harness.

Settings describe the harness itself (where Kafka Connect lives, how long to
wait), as opposed to the datasource values read through
``outbox_testing.config``.

Environment Variables:
    OUTBOX_CONNECT_URL: Kafka Connect REST base URL
    OUTBOX_CONNECTOR_NAME: Name the outbox connector is registered under
    OUTBOX_TIMEOUT_SECONDS: Deadline for the connector to reach RUNNING
    OUTBOX_POLL_INTERVAL_SECONDS: Delay between status polls
    OUTBOX_REQUEST_TIMEOUT_SECONDS: Per-request HTTP timeout
    OUTBOX_CONFIG_FILE: Optional YAML file with datasource values
    OUTBOX_LOG_LEVEL: structlog level for the test session (unset leaves
        structlog alone)

Example:
    >>> settings = HarnessSettings()
    >>> settings.connect_url
    'http://localhost:8083'
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONNECT_URL = "http://localhost:8083"
CONNECTOR_NAME = "outbox-connector"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.1
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0


class HarnessSettings(BaseSettings):
    """Configuration for the connector lifecycle harness."""

    model_config = SettingsConfigDict(
        env_prefix="OUTBOX_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    connect_url: str = Field(
        default=DEFAULT_CONNECT_URL,
        min_length=1,
        description="Kafka Connect REST base URL",
    )
    connector_name: str = Field(
        default=CONNECTOR_NAME,
        min_length=1,
        description="Name the outbox connector is registered under",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        ge=0.0,
        description="Deadline for the connector to reach RUNNING",
    )
    poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        ge=0.1,
        description="Delay between status polls",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        gt=0.0,
        description="Per-request HTTP timeout",
    )
    config_file: Path | None = Field(
        default=None,
        description="Optional YAML file with datasource values",
    )
    log_level: str | None = Field(
        default=None,
        description="Log level the pytest plugin passes to configure_logging",
    )

    @field_validator("connect_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be appended."""
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str | None) -> str | None:
        """Accept standard level names, case-insensitively."""
        if value is None:
            return None
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level


__all__ = [
    "CONNECTOR_NAME",
    "DEFAULT_CONNECT_URL",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "HarnessSettings",
]
