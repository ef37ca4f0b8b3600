"""Before-each callback that provisions the outbox connector.

The callback resolves the database from ambient configuration, registers a
Debezium outbox connector with Kafka Connect, and blocks until the connector
is running. The pytest plugin invokes it before each opted-in test; other
runners can call before_each() directly.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from outbox_testing.config import ConfigSource, default_config_source
from outbox_testing.lifecycle import OutboxConnectorLifecycle
from outbox_testing.models import ConnectorStatus
from outbox_testing.polling import PollingConfig
from outbox_testing.remote import RemoteConnectorApi, create_remote_connector_api
from outbox_testing.resolver import resolve_connection_parameters
from outbox_testing.settings import HarnessSettings

logger = structlog.get_logger(__name__)

ApiFactory = Callable[[HarnessSettings], RemoteConnectorApi]


class InitOutboxConnectorBeforeEachCallback:
    """Registers the outbox connector before each test.

    Args:
        config_source: Datasource configuration lookup. Defaults to
            default_config_source(settings).
        settings: Harness settings. Loaded from the environment if omitted.
        api_factory: Creates the connector API for one invocation.
            Defaults to create_remote_connector_api.
    """

    def __init__(
        self,
        config_source: ConfigSource | None = None,
        settings: HarnessSettings | None = None,
        api_factory: ApiFactory | None = None,
    ) -> None:
        self._settings = settings or HarnessSettings()
        self._config_source = config_source or default_config_source(self._settings)
        self._api_factory = api_factory or create_remote_connector_api

    @property
    def settings(self) -> HarnessSettings:
        """Harness settings in effect."""
        return self._settings

    def before_each(self, context: Any) -> None:
        """Provision the connector before a test.

        Args:
            context: Test context supplied by the runner. Only logged.

        Raises:
            ConfigurationError: If datasource configuration is missing or invalid.
            RegistrationError: If Kafka Connect rejects the registration.
            ConnectorTimeoutError: If the connector is not running in time.
        """
        status = self.provision()
        logger.info(
            "outbox_connector_ready",
            connector=status.name,
            test=getattr(context, "nodeid", repr(context)),
        )

    def provision(self) -> ConnectorStatus:
        """Register the connector and wait until it is running.

        Returns:
            The first connector status reporting RUNNING.
        """
        parameters = resolve_connection_parameters(self._config_source)

        polling = PollingConfig(
            timeout=self._settings.timeout_seconds,
            interval=self._settings.poll_interval_seconds,
            description=f"connector '{self._settings.connector_name}' to reach RUNNING",
        )
        api = self._api_factory(self._settings)
        try:
            lifecycle = OutboxConnectorLifecycle(
                api,
                connector_name=self._settings.connector_name,
                polling=polling,
            )
            status = lifecycle.register_and_wait_until_running(parameters)
        finally:
            api.close()
        return status


__all__ = [
    "ApiFactory",
    "InitOutboxConnectorBeforeEachCallback",
]
