"""Resolve database connection parameters from ambient configuration.

The datasource URL is read from the first configured candidate key, adjusted
so that Kafka Connect (running in a container) can reach the database, and
parsed into host, port and database name. Credentials come from two required
keys.

Example:
    >>> from outbox_testing.config import MappingConfigSource
    >>> params = resolve_connection_parameters(MappingConfigSource({
    ...     "datasource.jdbc.url": "jdbc:postgresql://localhost:5432/inventory",
    ...     "datasource.username": "postgres",
    ...     "datasource.password": "postgres",
    ... }))
    >>> params.hostname, params.port, params.database_name
    ('host.docker.internal', 5432, 'inventory')
"""

from __future__ import annotations

from urllib.parse import urlsplit

import structlog

from outbox_testing.config import (
    JDBC_URL_KEY,
    PASSWORD_KEY,
    REACTIVE_URL_KEY,
    USERNAME_KEY,
    ConfigSource,
)
from outbox_testing.errors import ConfigurationError
from outbox_testing.models import ConnectionParameters

logger = structlog.get_logger(__name__)

DATASOURCE_URL_KEYS: tuple[str, ...] = (JDBC_URL_KEY, REACTIVE_URL_KEY)
REACTIVE_URL_PREFIX = "vertx-reactive:"
LOCALHOST = "localhost"
CONTAINER_HOST_ALIAS = "host.docker.internal"
# Length of the leading "jdbc:" marker dropped before URI parsing.
SCHEME_MARKER_LENGTH = 5


def resolve_datasource_url(config: ConfigSource) -> tuple[str, str]:
    """Return the first configured datasource URL and the key it came from.

    Raises:
        ConfigurationError: If none of the candidate keys has a value.
    """
    for key in DATASOURCE_URL_KEYS:
        value = config.get_optional_value(key)
        if value is not None:
            return key, value
    raise ConfigurationError(
        None,
        f"no datasource URL configured (tried {', '.join(DATASOURCE_URL_KEYS)})",
    )


def normalize_datasource_url(url: str) -> str:
    """Drop the reactive driver prefix and point localhost at the Docker host.

    Plain substring replacement: ``127.0.0.1`` and other hosts are untouched.
    """
    return url.replace(REACTIVE_URL_PREFIX, "").replace(LOCALHOST, CONTAINER_HOST_ALIAS)


def parse_datasource_url(url: str, key: str | None = None) -> tuple[str, int, str]:
    """Parse a normalized datasource URL into (hostname, port, database name).

    The first five characters are dropped and the remainder is parsed as a
    ``scheme://host:port/database`` URI. The hostname keeps its original case.

    Args:
        url: Normalized datasource URL.
        key: Configuration key the URL came from, for error messages.

    Raises:
        ConfigurationError: If the URL is malformed or lacks host, port or database.
    """
    remainder = url[SCHEME_MARKER_LENGTH:]
    try:
        parts = urlsplit(remainder)
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(key, f"malformed datasource URL {url!r}: {e}") from e

    hostname = _authority_host(parts.netloc)
    if not hostname:
        raise ConfigurationError(key, f"malformed datasource URL {url!r}: missing host")
    if not port:
        raise ConfigurationError(key, f"malformed datasource URL {url!r}: missing port")

    database_name = parts.path[1:] if parts.path.startswith("/") else parts.path
    if not database_name:
        raise ConfigurationError(key, f"malformed datasource URL {url!r}: missing database name")

    return hostname, port, database_name


def _authority_host(netloc: str) -> str:
    # urlsplit().hostname lower-cases, so take the host from the raw authority.
    host_port = netloc.rpartition("@")[2]
    if host_port.startswith("["):
        return host_port[1:].partition("]")[0]
    return host_port.partition(":")[0]


def resolve_connection_parameters(config: ConfigSource) -> ConnectionParameters:
    """Build ConnectionParameters from ambient configuration.

    Args:
        config: Configuration lookup capability.

    Returns:
        Connection parameters for the connector registration.

    Raises:
        ConfigurationError: If the URL or a credential is missing, or the
            URL cannot be parsed.
    """
    key, raw_url = resolve_datasource_url(config)
    url = normalize_datasource_url(raw_url)
    hostname, port, database_name = parse_datasource_url(url, key)

    parameters = ConnectionParameters(
        hostname=hostname,
        port=port,
        database_name=database_name,
        username=config.get_value(USERNAME_KEY),
        password=config.get_value(PASSWORD_KEY),
    )
    logger.debug(
        "datasource_url_resolved",
        key=key,
        hostname=hostname,
        port=port,
        database_name=database_name,
    )
    return parameters


__all__ = [
    "CONTAINER_HOST_ALIAS",
    "DATASOURCE_URL_KEYS",
    "LOCALHOST",
    "REACTIVE_URL_PREFIX",
    "normalize_datasource_url",
    "parse_datasource_url",
    "resolve_connection_parameters",
    "resolve_datasource_url",
]
