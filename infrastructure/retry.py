"""Bounded retry for transient gateway failures."""

from __future__ import annotations

from collections.abc import Callable
import time
from typing import TypeVar

from loguru import logger

T = TypeVar("T")


def retry_transient(
    func: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...],
    max_attempts: int = 2,
    delay_s: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "call",
) -> T:
    """Call `func`, retrying on `retry_on` exceptions with a fixed delay.

    Args:
        func: Zero-argument callable to invoke.
        retry_on: Exception types eligible for retry; anything else propagates at once.
        max_attempts: Total attempts including the first (>= 1).
        delay_s: Fixed pause between attempts.
        sleep: Sleep function (injectable for tests).
        label: Name used in log lines.

    Returns:
        The result of the first successful attempt. The last eligible
        exception is re-raised when every attempt fails.
    """
    attempts = max(1, int(max_attempts))
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except retry_on as ex:
            if attempt >= attempts:
                logger.error("{} failed after {} attempt(s): {}", label, attempt, ex)
                raise
            logger.warning(
                "{} transient failure (attempt {}/{}), retrying in {}s: {}",
                label,
                attempt,
                attempts,
                delay_s,
                ex,
            )
            sleep(delay_s)
    raise AssertionError("unreachable")
