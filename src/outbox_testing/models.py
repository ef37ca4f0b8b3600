"""Pydantic models exchanged with the Kafka Connect REST API.

Models:
    ConnectionParameters: Database coordinates the connector captures from
    ConnectorConfigurationConfig: Debezium outbox connector property map
    ConnectorConfiguration: Named connector registration request
    ConnectorStatus: Connector status reported by Kafka Connect

Example:
    >>> status = ConnectorStatus.model_validate(
    ...     {"name": "outbox-connector", "connector": {"state": "RUNNING"}}
    ... )
    >>> status.is_running()
    True
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, computed_field, field_serializer

RUNNING_STATE = "RUNNING"

POSTGRES_CONNECTOR_CLASS = "io.debezium.connector.postgresql.PostgresConnector"
OUTBOX_EVENT_ROUTER = "io.debezium.transforms.outbox.EventRouter"
OUTBOX_TABLE = "public.outboxevent"


class ConnectionParameters(BaseModel):
    """Database connection parameters resolved from ambient configuration.

    Attributes:
        hostname: Database host as seen from the Kafka Connect container.
        port: Database port.
        database_name: Database to capture changes from.
        username: Database user.
        password: Database password (SecretStr, never logged).
    """

    model_config = ConfigDict(frozen=True)

    hostname: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    database_name: str = Field(..., min_length=1)
    username: str
    password: SecretStr


class ConnectorConfigurationConfig(BaseModel):
    """Debezium outbox connector properties.

    Field aliases are the Kafka Connect property names. Every value is
    serialized as a string, which is what Kafka Connect expects.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    connector_class: str = Field(default=POSTGRES_CONNECTOR_CLASS, alias="connector.class")
    tasks_max: int = Field(default=1, ge=1, alias="tasks.max")
    plugin_name: str = Field(default="pgoutput", alias="plugin.name")
    database_hostname: str = Field(..., alias="database.hostname")
    database_port: int = Field(..., ge=1, le=65535, alias="database.port")
    database_user: str = Field(..., alias="database.user")
    database_password: SecretStr = Field(..., alias="database.password")
    database_dbname: str = Field(..., alias="database.dbname")
    database_server_name: str = Field(..., alias="database.server.name")
    table_include_list: str = Field(default=OUTBOX_TABLE, alias="table.include.list")
    tombstones_on_delete: bool = Field(default=False, alias="tombstones.on.delete")
    transforms: str = Field(default="outbox")
    transforms_outbox_type: str = Field(default=OUTBOX_EVENT_ROUTER, alias="transforms.outbox.type")

    @computed_field(alias="topic.prefix")  # type: ignore[prop-decorator]
    @property
    def topic_prefix(self) -> str:
        """Debezium 2.x topic prefix; mirrors the server name."""
        return self.database_server_name

    @field_serializer("database_password", when_used="json")
    def _reveal_password(self, value: SecretStr) -> str:
        return value.get_secret_value()

    @field_serializer("tasks_max", "database_port", when_used="json")
    def _int_as_string(self, value: int) -> str:
        return str(value)

    @field_serializer("tombstones_on_delete", when_used="json")
    def _bool_as_string(self, value: bool) -> str:
        return "true" if value else "false"

    @classmethod
    def from_connection_parameters(
        cls, parameters: ConnectionParameters
    ) -> ConnectorConfigurationConfig:
        """Build the property map for the given database.

        The server name (and therefore the topic prefix) is the database name.
        """
        return cls(
            database_hostname=parameters.hostname,
            database_port=parameters.port,
            database_user=parameters.username,
            database_password=parameters.password,
            database_dbname=parameters.database_name,
            database_server_name=parameters.database_name,
        )

    def to_properties(self) -> dict[str, str]:
        """Serialize to the Kafka Connect property map."""
        return self.model_dump(mode="json", by_alias=True)


class ConnectorConfiguration(BaseModel):
    """Named connector registration request.

    Attributes:
        name: Connector name.
        config: Connector properties.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    config: ConnectorConfigurationConfig

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the ``PUT /connectors/{name}/config`` request body.

        Kafka Connect accepts ``name`` inside the property map as long as it
        matches the connector name in the path.
        """
        return {"name": self.name, **self.config.to_properties()}


class ConnectorState(BaseModel):
    """State of the connector itself (not its tasks)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    state: str
    worker_id: str | None = None
    trace: str | None = None


class TaskState(BaseModel):
    """State of one connector task."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    state: str
    worker_id: str | None = None
    trace: str | None = None


class ConnectorStatus(BaseModel):
    """Connector status as reported by ``GET /connectors/{name}/status``.

    ``name`` and ``connector`` are required; validation fails without them.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    connector: ConnectorState
    tasks: list[TaskState] = Field(default_factory=list)
    type: str | None = None

    @property
    def state(self) -> str:
        """Connector state, e.g. ``RUNNING`` or ``UNASSIGNED``."""
        return self.connector.state

    def is_running(self) -> bool:
        """Return True only when the connector state is exactly ``RUNNING``."""
        return self.connector.state == RUNNING_STATE


__all__ = [
    "ConnectionParameters",
    "ConnectorConfiguration",
    "ConnectorConfigurationConfig",
    "ConnectorState",
    "ConnectorStatus",
    "OUTBOX_EVENT_ROUTER",
    "OUTBOX_TABLE",
    "POSTGRES_CONNECTOR_CLASS",
    "RUNNING_STATE",
    "TaskState",
]
