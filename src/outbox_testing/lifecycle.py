"""Register the outbox connector and wait for it to run.

One registration attempt moves through these states::

    NOT_REGISTERED -> REGISTERING -> REGISTRATION_FAILED
                                  -> POLLING -> RUNNING
                                             -> TIMED_OUT

Registration failures are fatal immediately. Failures while polling count as
"not yet running" until the deadline.

Example:
    >>> lifecycle = OutboxConnectorLifecycle(api)
    >>> status = lifecycle.register_and_wait_until_running(parameters)
    >>> lifecycle.state
    <RegistrationState.RUNNING: 'running'>
"""

from __future__ import annotations

import time
from enum import Enum

import structlog

from outbox_testing.errors import ConnectorTimeoutError, OutboxTestingError, RegistrationError
from outbox_testing.models import (
    ConnectionParameters,
    ConnectorConfiguration,
    ConnectorConfigurationConfig,
    ConnectorStatus,
)
from outbox_testing.polling import PollingConfig, PollingTimeoutError, wait_for_condition
from outbox_testing.remote import RemoteConnectorApi
from outbox_testing.settings import (
    CONNECTOR_NAME,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)

logger = structlog.get_logger(__name__)


class RegistrationState(Enum):
    """States of a single registration attempt."""

    NOT_REGISTERED = "not_registered"
    REGISTERING = "registering"
    REGISTRATION_FAILED = "registration_failed"
    POLLING = "polling"
    RUNNING = "running"
    TIMED_OUT = "timed_out"


class OutboxConnectorLifecycle:
    """Registers the outbox connector and blocks until Kafka Connect runs it.

    Args:
        api: Connector management API.
        connector_name: Name to register the connector under.
        polling: Deadline and interval for the status poll loop.
    """

    def __init__(
        self,
        api: RemoteConnectorApi,
        connector_name: str = CONNECTOR_NAME,
        polling: PollingConfig | None = None,
    ) -> None:
        self._api = api
        self._connector_name = connector_name
        self._polling = polling or PollingConfig(
            timeout=DEFAULT_TIMEOUT_SECONDS,
            interval=DEFAULT_POLL_INTERVAL_SECONDS,
            description=f"connector '{connector_name}' to reach RUNNING",
        )
        self._state = RegistrationState.NOT_REGISTERED
        self._log = logger.bind(connector=connector_name)

    @property
    def state(self) -> RegistrationState:
        """Current state of the registration attempt."""
        return self._state

    def _transition(self, state: RegistrationState) -> None:
        self._log.debug("connector_state_transition", source=self._state.value, target=state.value)
        self._state = state

    def build_configuration(self, parameters: ConnectionParameters) -> ConnectorConfiguration:
        """Build the registration request for the given database."""
        return ConnectorConfiguration(
            name=self._connector_name,
            config=ConnectorConfigurationConfig.from_connection_parameters(parameters),
        )

    def register_and_wait_until_running(self, parameters: ConnectionParameters) -> ConnectorStatus:
        """Register the connector, then poll until it reports RUNNING.

        Args:
            parameters: Database the connector captures from.

        Returns:
            The first status reporting RUNNING.

        Raises:
            RegistrationError: If the registration call fails.
            ConnectorTimeoutError: If RUNNING is not reported before the deadline.
        """
        configuration = self.build_configuration(parameters)

        self._transition(RegistrationState.REGISTERING)
        self._log.info(
            "connector_registering",
            hostname=parameters.hostname,
            port=parameters.port,
            database_name=parameters.database_name,
        )
        try:
            self._api.register_outbox_connector(configuration)
        except RegistrationError:
            self._transition(RegistrationState.REGISTRATION_FAILED)
            self._log.error("connector_registration_failed")
            raise
        except Exception as e:
            self._transition(RegistrationState.REGISTRATION_FAILED)
            self._log.error("connector_registration_failed", error=str(e))
            raise RegistrationError(self._connector_name, str(e), cause=e) from e

        self._log.info("connector_registered")
        self._transition(RegistrationState.POLLING)
        return self._wait_until_running()

    def _wait_until_running(self) -> ConnectorStatus:
        last_status: ConnectorStatus | None = None
        start_time = time.monotonic()

        def connector_running() -> bool:
            nonlocal last_status
            status = self._api.outbox_connector_status()
            last_status = status
            self._log.debug("connector_status_polled", state=status.state)
            return status.is_running()

        try:
            attempts = wait_for_condition(connector_running, config=self._polling)
        except PollingTimeoutError as e:
            self._transition(RegistrationState.TIMED_OUT)
            last_state = last_status.state if last_status else None
            self._log.error(
                "connector_wait_timeout",
                elapsed=round(e.elapsed, 3),
                attempts=e.attempts,
                last_state=last_state,
                last_error=str(e.last_error) if e.last_error else None,
            )
            raise ConnectorTimeoutError(
                self._connector_name,
                e.timeout,
                e.elapsed,
                last_state=last_state,
                last_error=e.last_error,
            ) from e

        if last_status is None:
            msg = f"Connector '{self._connector_name}' stopped polling without a status"
            raise OutboxTestingError(msg)

        self._transition(RegistrationState.RUNNING)
        self._log.info(
            "connector_running",
            attempts=attempts,
            elapsed=round(time.monotonic() - start_time, 3),
        )
        return last_status


__all__ = [
    "OutboxConnectorLifecycle",
    "RegistrationState",
]
