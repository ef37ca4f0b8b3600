"""Ambient configuration lookup for the outbox test harness.

A configuration source answers two questions about a dotted key such as
``datasource.jdbc.url``: "is there a value?" (optional lookup) and "give me
the value or fail" (required lookup). Sources can be chained; the first
source holding a value wins.

Sources:
    EnvironmentConfigSource: process environment, MicroProfile-style key mapping
    MappingConfigSource: in-memory dictionary (tests, programmatic setup)
    YamlConfigSource: YAML file, nested mappings flattened to dotted keys
    ChainedConfigSource: ordered chain of the above

Example:
    >>> source = MappingConfigSource({"datasource.username": "postgres"})
    >>> source.get_value("datasource.username")
    'postgres'
    >>> source.get_optional_value("datasource.password") is None
    True
"""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog
import yaml

from outbox_testing.errors import ConfigurationError
from outbox_testing.settings import HarnessSettings

logger = structlog.get_logger(__name__)

JDBC_URL_KEY = "datasource.jdbc.url"
REACTIVE_URL_KEY = "datasource.reactive.url"
USERNAME_KEY = "datasource.username"
PASSWORD_KEY = "datasource.password"

DEFAULT_YAML_FILE = "application.yaml"

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


@runtime_checkable
class ConfigSource(Protocol):
    """Key to optional-string lookup capability."""

    def get_optional_value(self, key: str) -> str | None:
        """Return the value for key, or None when absent."""
        ...

    def get_value(self, key: str) -> str:
        """Return the value for key, raising ConfigurationError when absent."""
        ...


class BaseConfigSource(ABC):
    """Base class deriving the required lookup from the optional one."""

    @abstractmethod
    def get_optional_value(self, key: str) -> str | None:
        """Return the value for key, or None when absent."""

    def get_value(self, key: str) -> str:
        """Return the value for key.

        Raises:
            ConfigurationError: If the key has no value.
        """
        value = self.get_optional_value(key)
        if value is None:
            raise ConfigurationError(key, "required configuration value is missing")
        return value


class MappingConfigSource(BaseConfigSource):
    """Configuration source backed by an in-memory mapping."""

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = {key: str(value) for key, value in values.items() if value is not None}

    def get_optional_value(self, key: str) -> str | None:
        return self._values.get(key)

    def __repr__(self) -> str:
        return f"MappingConfigSource(keys={sorted(self._values)})"


class EnvironmentConfigSource(BaseConfigSource):
    """Configuration source backed by environment variables.

    Keys are matched the way MicroProfile Config matches them:

    1. the exact key (``datasource.jdbc.url``),
    2. non-alphanumerics replaced by ``_`` (``datasource_jdbc_url``),
    3. the previous form upper-cased (``DATASOURCE_JDBC_URL``).
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    @staticmethod
    def candidate_names(key: str) -> list[str]:
        """Environment variable names tried for key, in order."""
        sanitized = _NON_ALPHANUMERIC.sub("_", key)
        names = [key, sanitized, sanitized.upper()]
        return list(dict.fromkeys(names))

    def get_optional_value(self, key: str) -> str | None:
        for name in self.candidate_names(key):
            value = self._environ.get(name)
            if value is not None:
                return value
        return None

    def __repr__(self) -> str:
        return "EnvironmentConfigSource()"


class YamlConfigSource(BaseConfigSource):
    """Configuration source backed by a YAML file.

    Nested mappings are flattened into dotted keys, so::

        datasource:
          jdbc:
            url: jdbc:postgresql://localhost:5432/inventory

    answers ``datasource.jdbc.url``. A missing file is an empty source.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._values = self._load(path)

    @staticmethod
    def _load(path: Path) -> dict[str, str]:
        if not path.exists():
            return {}
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(None, f"invalid YAML in {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(None, f"expected a mapping at top level of {path}")
        return _flatten(data)

    def get_optional_value(self, key: str) -> str | None:
        return self._values.get(key)

    def __repr__(self) -> str:
        return f"YamlConfigSource(path={str(self._path)!r})"


class ChainedConfigSource(BaseConfigSource):
    """Ordered chain of sources; the first source holding a value wins."""

    def __init__(self, *sources: ConfigSource) -> None:
        self._sources = sources

    @property
    def sources(self) -> tuple[ConfigSource, ...]:
        """Sources in lookup order."""
        return self._sources

    def get_optional_value(self, key: str) -> str | None:
        for source in self._sources:
            value = source.get_optional_value(key)
            if value is not None:
                return value
        return None

    def __repr__(self) -> str:
        return f"ChainedConfigSource({', '.join(repr(s) for s in self._sources)})"


def _flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{dotted}."))
        elif value is not None:
            flat[dotted] = str(value)
    return flat


def default_config_source(settings: HarnessSettings | None = None) -> ChainedConfigSource:
    """Build the default lookup chain.

    Order: process environment, the YAML file named by ``settings.config_file``
    (when set), then ``application.yaml`` in the working directory.

    Args:
        settings: Harness settings. Loaded from the environment if omitted.

    Returns:
        Chained configuration source.
    """
    if settings is None:
        settings = HarnessSettings()

    sources: list[ConfigSource] = [EnvironmentConfigSource()]
    if settings.config_file is not None:
        sources.append(YamlConfigSource(settings.config_file))
    sources.append(YamlConfigSource(Path.cwd() / DEFAULT_YAML_FILE))

    chain = ChainedConfigSource(*sources)
    logger.debug("config_source_created", sources=repr(chain))
    return chain


__all__ = [
    "BaseConfigSource",
    "ChainedConfigSource",
    "ConfigSource",
    "DEFAULT_YAML_FILE",
    "EnvironmentConfigSource",
    "JDBC_URL_KEY",
    "MappingConfigSource",
    "PASSWORD_KEY",
    "REACTIVE_URL_KEY",
    "USERNAME_KEY",
    "YamlConfigSource",
    "default_config_source",
]
