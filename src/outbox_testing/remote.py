"""Kafka Connect REST client for the outbox connector.

RemoteConnectorApi is the capability the lifecycle client depends on;
HttpRemoteConnectorApi is the httpx-backed implementation bound at harness
startup through create_remote_connector_api().

Endpoints used:
    PUT {connect_url}/connectors/{name}/config   create or replace the connector
    GET {connect_url}/connectors/{name}/status   connector and task states
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol, runtime_checkable

import httpx
import structlog

from outbox_testing.errors import RegistrationError
from outbox_testing.models import ConnectorConfiguration, ConnectorStatus
from outbox_testing.settings import CONNECTOR_NAME, DEFAULT_REQUEST_TIMEOUT_SECONDS, HarnessSettings

logger = structlog.get_logger(__name__)


@runtime_checkable
class RemoteConnectorApi(Protocol):
    """Operations the harness needs from the connector management API."""

    def register_outbox_connector(self, configuration: ConnectorConfiguration) -> None:
        """Create or replace the connector described by configuration."""
        ...

    def outbox_connector_status(self) -> ConnectorStatus:
        """Return the current status of the outbox connector."""
        ...

    def close(self) -> None:
        """Release transport resources."""
        ...


class HttpRemoteConnectorApi:
    """RemoteConnectorApi over the Kafka Connect REST API.

    Args:
        base_url: Kafka Connect REST base URL, e.g. ``http://localhost:8083``.
        connector_name: Connector whose status is polled.
        request_timeout: Per-request timeout in seconds.
        client: Optional preconfigured httpx.Client. When given, the caller
            owns it and close() leaves it open.

    Example:
        >>> with HttpRemoteConnectorApi("http://localhost:8083") as api:
        ...     api.register_outbox_connector(configuration)
        ...     api.outbox_connector_status().is_running()
    """

    def __init__(
        self,
        base_url: str,
        connector_name: str = CONNECTOR_NAME,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._connector_name = connector_name
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=request_timeout)
        self._log = logger.bind(connect_url=self._base_url, connector=connector_name)

    @property
    def base_url(self) -> str:
        """Kafka Connect REST base URL."""
        return self._base_url

    @property
    def connector_name(self) -> str:
        """Connector whose status is polled."""
        return self._connector_name

    def _connector_url(self, name: str, resource: str) -> str:
        return f"{self._base_url}/connectors/{name}/{resource}"

    def register_outbox_connector(self, configuration: ConnectorConfiguration) -> None:
        """Create or replace the connector.

        Raises:
            RegistrationError: On any non-2xx response or transport failure.
        """
        url = self._connector_url(configuration.name, "config")
        self._log.info("connector_register_request", url=url)
        try:
            response = self._client.put(url, json=configuration.to_payload())
        except httpx.HTTPError as e:
            self._log.error("connector_register_transport_error", error=str(e))
            raise RegistrationError(configuration.name, str(e), cause=e) from e

        if not response.is_success:
            detail = _error_detail(response)
            self._log.error(
                "connector_register_rejected",
                status_code=response.status_code,
                detail=detail,
            )
            raise RegistrationError(
                configuration.name,
                detail,
                status_code=response.status_code,
            )

        self._log.debug("connector_register_accepted", status_code=response.status_code)

    def outbox_connector_status(self) -> ConnectorStatus:
        """Fetch the connector status.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response.
            pydantic.ValidationError: If the body is not a connector status.
        """
        response = self._client.get(self._connector_url(self._connector_name, "status"))
        response.raise_for_status()
        return ConnectorStatus.model_validate(response.json())

    def close(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpRemoteConnectorApi:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def _error_detail(response: httpx.Response) -> str:
    """Extract Kafka Connect's ``message`` field, falling back to the body text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or response.reason_phrase


def create_remote_connector_api(settings: HarnessSettings | None = None) -> HttpRemoteConnectorApi:
    """Create the HTTP connector API from harness settings.

    Args:
        settings: Harness settings. Loaded from the environment if omitted.
    """
    if settings is None:
        settings = HarnessSettings()
    return HttpRemoteConnectorApi(
        settings.connect_url,
        connector_name=settings.connector_name,
        request_timeout=settings.request_timeout_seconds,
    )


__all__ = [
    "HttpRemoteConnectorApi",
    "RemoteConnectorApi",
    "create_remote_connector_api",
]
