"""pytest plugin: register the outbox connector before each test.

Loaded automatically through the ``pytest11`` entry point. Tests opt in with
the ``outbox_connector`` marker, by requesting the ``outbox_connector``
fixture, or all at once with the ``outbox_connector_autouse`` ini option.

Usage:
    @pytest.mark.outbox_connector
    def test_order_event_is_published(kafka_consumer) -> None:
        ...

    # pytest.ini
    [pytest]
    outbox_connector_autouse = true
    outbox_log_level = DEBUG

The ``OUTBOX_LOG_LEVEL`` environment variable sets the level when the ini
option is absent.

Override ``outbox_connector_callback`` in a conftest.py to customize the
configuration source, settings or API factory.
"""

from __future__ import annotations

import pytest

from outbox_testing.callback import InitOutboxConnectorBeforeEachCallback
from outbox_testing.logging import configure_logging
from outbox_testing.models import ConnectorStatus
from outbox_testing.settings import HarnessSettings

MARKER_NAME = "outbox_connector"
AUTOUSE_INI = "outbox_connector_autouse"
LOG_LEVEL_INI = "outbox_log_level"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register ini options."""
    parser.addini(
        AUTOUSE_INI,
        type="bool",
        default=False,
        help="Register the outbox connector before every test",
    )
    parser.addini(
        LOG_LEVEL_INI,
        default="",
        help="Configure structlog at this level for the test session",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the marker and configure logging when requested."""
    config.addinivalue_line(
        "markers",
        f"{MARKER_NAME}: register the outbox connector before the test and wait until it runs",
    )
    log_level = config.getini(LOG_LEVEL_INI) or HarnessSettings().log_level
    if log_level:
        configure_logging(log_level=log_level)


@pytest.fixture(scope="session")
def outbox_connector_callback() -> InitOutboxConnectorBeforeEachCallback:
    """Callback used to provision the connector; override to customize."""
    return InitOutboxConnectorBeforeEachCallback()


@pytest.fixture
def outbox_connector(
    outbox_connector_callback: InitOutboxConnectorBeforeEachCallback,
) -> ConnectorStatus:
    """Provision the connector for this test and return its running status."""
    return outbox_connector_callback.provision()


@pytest.fixture(autouse=True)
def _outbox_connector_before_each(request: pytest.FixtureRequest) -> None:
    """Invoke the before-each callback for opted-in tests."""
    opted_in = (
        request.node.get_closest_marker(MARKER_NAME) is not None
        or request.config.getini(AUTOUSE_INI)
    )
    if opted_in and "outbox_connector" not in request.fixturenames:
        callback = request.getfixturevalue("outbox_connector_callback")
        callback.before_each(request.node)


__all__ = [
    "AUTOUSE_INI",
    "LOG_LEVEL_INI",
    "MARKER_NAME",
    "outbox_connector",
    "outbox_connector_callback",
]
