from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable

from .errors import RetryTimeoutError

logger = logging.getLogger(__name__)

MAX_RETRY_ELAPSED_MS = 3 * 60 * 1000
MAX_JITTER_MS = 100

Sleeper = Callable[[int], int]
"""Sleeps for at least the requested milliseconds and returns the milliseconds slept."""

RetryOperation = Callable[[int, int], bool]
"""Called with ``(attempt, elapsed_ms)``; returns True once the work is done."""


def jitter_sleeper(
    *,
    max_jitter_ms: int = MAX_JITTER_MS,
    sleep: Callable[[float], None] = time.sleep,
    randrange: Callable[[int], int] = random.randrange,
) -> Sleeper:
    if max_jitter_ms <= 0:
        raise ValueError("max_jitter_ms must be > 0")

    def sleeper(requested_ms: int) -> int:
        actual_ms = max(0, requested_ms) + randrange(max_jitter_ms)
        sleep(actual_ms / 1000.0)
        return actual_ms

    return sleeper


class RetryExecutor:
    """Bounded-time retry loop.

    The operation raises to abort, returns False to be retried after a backoff
    sleep of ``elapsed_ms * attempt`` (plus whatever the sleeper adds), and
    returns True when finished. Only the time reported by the sleeper counts
    towards ``max_elapsed_ms``.
    """

    def __init__(
        self,
        *,
        sleeper: Sleeper | None = None,
        max_elapsed_ms: int = MAX_RETRY_ELAPSED_MS,
    ) -> None:
        if max_elapsed_ms <= 0:
            raise ValueError("max_elapsed_ms must be > 0")

        self._sleeper = sleeper or jitter_sleeper()
        self._max_elapsed_ms = max_elapsed_ms

    @property
    def max_elapsed_ms(self) -> int:
        return self._max_elapsed_ms

    def run(
        self,
        operation: RetryOperation,
        *,
        elapsed_ms: int = 0,
        table_name: str | None = None,
        operation_name: str | None = None,
    ) -> int:
        attempt = 0
        while elapsed_ms < self._max_elapsed_ms:
            if operation(attempt, elapsed_ms):
                return elapsed_ms

            slept = self._sleeper(elapsed_ms * attempt)
            elapsed_ms += slept
            attempt += 1
            logger.debug(
                "retrying %s on %s: slept %d ms (elapsed %d ms, attempt %d)",
                operation_name or "operation",
                table_name or "-",
                slept,
                elapsed_ms,
                attempt,
            )

        raise RetryTimeoutError(
            elapsed_ms=elapsed_ms,
            max_elapsed_ms=self._max_elapsed_ms,
            table_name=table_name,
            operation=operation_name,
        )
