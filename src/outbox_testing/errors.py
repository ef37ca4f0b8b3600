"""Exception hierarchy for outbox-testing.

All harness exceptions inherit from OutboxTestingError, so a test suite can
catch every harness failure with a single except clause.

Exception Hierarchy:
    OutboxTestingError (base)
    ├── ConfigurationError      # Required ambient value missing or malformed
    ├── RegistrationError       # Kafka Connect rejected the registration
    └── ConnectorTimeoutError   # Connector never reported RUNNING in time

Example:
    >>> from outbox_testing.errors import ConfigurationError
    >>> raise ConfigurationError("datasource.username", "required value is missing")
    Traceback (most recent call last):
        ...
    ConfigurationError: datasource.username: required value is missing
"""

from __future__ import annotations


class OutboxTestingError(Exception):
    """Base exception for all outbox-testing errors."""

    pass


class ConfigurationError(OutboxTestingError):
    """Raised when ambient configuration is missing or invalid.

    Attributes:
        key: Configuration key that could not be resolved, if any.
        message: Human-readable description of the problem.
    """

    def __init__(self, key: str | None, message: str) -> None:
        """Initialize ConfigurationError.

        Args:
            key: Offending configuration key, or None when several keys apply.
            message: Description of the problem.
        """
        self.key = key
        self.message = message
        prefix = f"{key}: " if key else ""
        super().__init__(f"{prefix}{message}")


class RegistrationError(OutboxTestingError):
    """Raised when the connector registration request fails.

    Covers both an error response from Kafka Connect (including conflicts)
    and a transport failure while sending the request.

    Attributes:
        connector_name: Name of the connector being registered.
        status_code: HTTP status returned by Kafka Connect, if a response arrived.
        detail: Error detail reported by Kafka Connect or the transport.
        cause: Original exception, if any.
    """

    def __init__(
        self,
        connector_name: str,
        detail: str,
        *,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize RegistrationError.

        Args:
            connector_name: Name of the connector being registered.
            detail: Remote error detail.
            status_code: HTTP status code, if available.
            cause: Original exception, if any.
        """
        self.connector_name = connector_name
        self.detail = detail
        self.status_code = status_code
        self.cause = cause
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Failed to register connector '{connector_name}'{status}: {detail}")


class ConnectorTimeoutError(OutboxTestingError, TimeoutError):
    """Raised when the connector does not reach RUNNING before the deadline.

    Attributes:
        connector_name: Name of the connector being waited for.
        timeout: Configured deadline in seconds.
        elapsed: Seconds actually spent waiting.
        last_state: Last connector state reported by Kafka Connect, if any.
        last_error: Last exception raised while polling, if any.
    """

    def __init__(
        self,
        connector_name: str,
        timeout: float,
        elapsed: float,
        *,
        last_state: str | None = None,
        last_error: Exception | None = None,
    ) -> None:
        """Initialize ConnectorTimeoutError.

        Args:
            connector_name: Name of the connector being waited for.
            timeout: Configured deadline in seconds.
            elapsed: Seconds actually spent waiting.
            last_state: Last observed connector state.
            last_error: Last exception raised while polling.
        """
        self.connector_name = connector_name
        self.timeout = timeout
        self.elapsed = elapsed
        self.last_state = last_state
        self.last_error = last_error
        message = (
            f"Connector '{connector_name}' not RUNNING after {elapsed:.1f}s "
            f"(timeout {timeout:.1f}s, last state: {last_state or 'unknown'})"
        )
        if last_error:
            message += f" (last error: {last_error})"
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "ConnectorTimeoutError",
    "OutboxTestingError",
    "RegistrationError",
]
