"""Polling utilities for waiting on remote state.

This module provides a bounded wall-clock poll loop used to wait for Kafka
Connect to report a connector as running, instead of hardcoded time.sleep()
calls in test setup.

Functions:
    wait_for_condition: Poll until a condition is true or timeout

Example:
    from outbox_testing.polling import PollingConfig, wait_for_condition

    wait_for_condition(
        lambda: api.outbox_connector_status().is_running(),
        config=PollingConfig(timeout=30.0, interval=0.1, description="connector"),
    )
"""

from __future__ import annotations

import time
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field


class PollingConfig(BaseModel):
    """Configuration for polling utilities.

    Attributes:
        timeout: Maximum wait time in seconds. Defaults to 30.0.
        interval: Poll interval in seconds. Defaults to 0.1.
        description: Description for error messages. Defaults to "condition".

    Example:
        config = PollingConfig(timeout=60.0, interval=0.5)
        wait_for_condition(check, config=config)
    """

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(
        default=30.0,
        ge=0.0,
        description="Maximum wait time in seconds",
    )
    interval: float = Field(
        default=0.1,
        ge=0.1,
        description="Poll interval in seconds",
    )
    description: str = Field(
        default="condition",
        min_length=1,
        description="Description for error messages",
    )


class PollingTimeoutError(TimeoutError):
    """Raised when a polling operation times out.

    Attributes:
        description: What was being waited for
        timeout: How long we were allowed to wait
        elapsed: How long we actually waited
        attempts: Number of times the condition was evaluated
        last_error: Last exception encountered during polling (if any)
    """

    def __init__(
        self,
        description: str,
        timeout: float,
        elapsed: float,
        attempts: int,
        last_error: Exception | None = None,
    ) -> None:
        self.description = description
        self.timeout = timeout
        self.elapsed = elapsed
        self.attempts = attempts
        self.last_error = last_error
        message = (
            f"Timeout waiting for {description} after {elapsed:.1f}s "
            f"({attempts} attempts, timeout {timeout:.1f}s)"
        )
        if last_error:
            message += f" (last error: {last_error})"
        super().__init__(message)


def wait_for_condition(
    condition: Callable[[], bool],
    timeout: float = 30.0,
    interval: float = 0.1,
    description: str = "condition",
    *,
    config: PollingConfig | None = None,
) -> int:
    """Poll until condition is True or timeout.

    The condition is evaluated immediately, then every ``interval`` seconds.
    Exceptions raised by the condition count as "not yet" and are kept as
    ``last_error`` for the timeout message.

    Args:
        condition: Callable returning True when the condition is met.
        timeout: Maximum wait time in seconds. Defaults to 30.0.
        interval: Poll interval in seconds. Defaults to 0.1.
        description: Description for error messages. Defaults to "condition".
        config: Optional PollingConfig overriding timeout/interval/description.

    Returns:
        Number of attempts it took for the condition to become true.

    Raises:
        PollingTimeoutError: If condition not met within timeout.

    Example:
        attempts = wait_for_condition(
            lambda: job_status(job_id) == "complete",
            timeout=30.0,
            description="job completion",
        )
    """
    if config is not None:
        timeout = config.timeout
        interval = config.interval
        description = config.description

    start_time = time.monotonic()
    last_error: Exception | None = None
    attempts = 0

    while True:
        attempts += 1
        try:
            if condition():
                return attempts
        except Exception as e:  # noqa: BLE001
            last_error = e

        elapsed = time.monotonic() - start_time
        if elapsed >= timeout:
            raise PollingTimeoutError(description, timeout, elapsed, attempts, last_error)

        # Sleep for interval, but don't exceed remaining time
        sleep_time = min(interval, timeout - elapsed)
        if sleep_time > 0:
            time.sleep(sleep_time)


__all__ = [
    "PollingConfig",
    "PollingTimeoutError",
    "wait_for_condition",
]
