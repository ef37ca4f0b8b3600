"""Debezium outbox connector provisioning for integration tests.

Before each opted-in test, the harness reads the datasource from ambient
configuration, registers a Debezium outbox connector with Kafka Connect, and
blocks until Kafka Connect reports it RUNNING.

Components:
    config: Ambient configuration lookup (environment, YAML, mappings)
    resolver: Datasource URL resolution into ConnectionParameters
    remote: Kafka Connect REST client
    lifecycle: Registration plus bounded status polling
    callback: Before-each entry point used by the pytest plugin
    pytest_plugin: ``outbox_connector`` marker and fixtures

Usage:
    import pytest

    @pytest.mark.outbox_connector
    def test_order_created_event_is_routed() -> None:
        ...
"""

from __future__ import annotations

from outbox_testing.callback import InitOutboxConnectorBeforeEachCallback
from outbox_testing.errors import (
    ConfigurationError,
    ConnectorTimeoutError,
    OutboxTestingError,
    RegistrationError,
)
from outbox_testing.lifecycle import OutboxConnectorLifecycle, RegistrationState
from outbox_testing.models import ConnectionParameters, ConnectorConfiguration, ConnectorStatus
from outbox_testing.remote import HttpRemoteConnectorApi, RemoteConnectorApi
from outbox_testing.resolver import resolve_connection_parameters
from outbox_testing.settings import CONNECTOR_NAME, HarnessSettings

__version__ = "0.1.0"

__all__ = [
    "CONNECTOR_NAME",
    "ConfigurationError",
    "ConnectionParameters",
    "ConnectorConfiguration",
    "ConnectorStatus",
    "ConnectorTimeoutError",
    "HarnessSettings",
    "HttpRemoteConnectorApi",
    "InitOutboxConnectorBeforeEachCallback",
    "OutboxConnectorLifecycle",
    "OutboxTestingError",
    "RegistrationError",
    "RegistrationState",
    "RemoteConnectorApi",
    "resolve_connection_parameters",
    "__version__",
]
