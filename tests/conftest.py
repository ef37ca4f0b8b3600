"""Shared pytest configuration and fixtures for outbox-testing tests.

Provides:
- In-memory datasource configuration
- A scripted RemoteConnectorApi stub
- A fake monotonic clock so deadline tests run instantly
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import Any

import pytest

from outbox_testing.config import MappingConfigSource
from outbox_testing.models import ConnectorConfiguration, ConnectorStatus

pytest_plugins = ["pytester"]

JDBC_URL = "jdbc:postgresql://localhost:5432/inventory"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): Mark test with requirement ID for traceability",
    )


def make_status(state: str, name: str = "outbox-connector") -> ConnectorStatus:
    """Build a ConnectorStatus with the given connector state."""
    return ConnectorStatus.model_validate(
        {
            "name": name,
            "connector": {"state": state, "worker_id": "connect:8083"},
            "tasks": [{"id": 0, "state": state, "worker_id": "connect:8083"}],
            "type": "source",
        }
    )


class StubConnectorApi:
    """RemoteConnectorApi stub replaying scripted status responses.

    Each entry of ``statuses`` is either a state string or an exception to
    raise. Once the script is exhausted the last entry repeats.
    """

    def __init__(
        self,
        statuses: Iterable[str | Exception] = ("RUNNING",),
        register_error: Exception | None = None,
    ) -> None:
        self.statuses = list(statuses)
        self.register_error = register_error
        self.registered: list[ConnectorConfiguration] = []
        self.status_calls = 0
        self.closed = False

    def register_outbox_connector(self, configuration: ConnectorConfiguration) -> None:
        self.registered.append(configuration)
        if self.register_error is not None:
            raise self.register_error

    def outbox_connector_status(self) -> ConnectorStatus:
        index = min(self.status_calls, len(self.statuses) - 1)
        self.status_calls += 1
        entry = self.statuses[index]
        if isinstance(entry, Exception):
            raise entry
        return make_status(entry)

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Stand-in for the ``time`` module: sleep() advances monotonic()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def datasource_values() -> dict[str, Any]:
    """Datasource configuration for a local PostgreSQL instance."""
    return {
        "datasource.jdbc.url": JDBC_URL,
        "datasource.username": "postgres",
        "datasource.password": "postgres",
    }


@pytest.fixture
def config_source(datasource_values: dict[str, Any]) -> MappingConfigSource:
    """Configuration source over datasource_values."""
    return MappingConfigSource(datasource_values)


@pytest.fixture
def fake_clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Replace the clock used by the poll loop."""
    clock = FakeClock()
    monkeypatch.setattr("outbox_testing.polling.time", clock)
    return clock


@pytest.fixture(autouse=True)
def _clean_outbox_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of settings and config lookups."""
    for name in list(os.environ):
        if name.startswith(("OUTBOX_", "DATASOURCE_", "datasource")):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def stub_api_class() -> type[StubConnectorApi]:
    """The scripted RemoteConnectorApi stub class."""
    return StubConnectorApi


@pytest.fixture
def status_factory() -> Any:
    """Factory building ConnectorStatus values from a state string."""
    return make_status
