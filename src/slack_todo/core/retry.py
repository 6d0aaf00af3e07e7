# src/slack_todo/core/retry.py

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable
from typing import TypeVar

from pymongo.errors import AutoReconnect, ExecutionTimeout

from .errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SQLITE_TRANSIENT = ("database is locked", "disk i/o error", "temporary failure")


class RetryManager:
    """Retry logic for store operations (exponential backoff, capped)."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 5.0,
        exponential_base: float = 2.0,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            max_retries: Total attempts before giving up (at least 1)
            base_delay: Delay after the first failed attempt (seconds)
            max_delay: Maximum delay between attempts (seconds)
            exponential_base: Exponential backoff multiplier
        """
        self.max_retries = max(1, int(max_retries))
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt number"""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)

    def is_retryable_error(self, error: BaseException) -> bool:
        """Check if error is transient."""
        # AutoReconnect covers NetworkTimeout and ServerSelectionTimeoutError.
        if isinstance(error, (AutoReconnect, ExecutionTimeout, TimeoutError)):
            return True

        if isinstance(error, sqlite3.OperationalError):
            msg = str(error).lower()
            return any(m in msg for m in _SQLITE_TRANSIENT)

        return False

    def call(self, op_name: str, fn: Callable[[], T]) -> T:
        """
        Run fn, retrying transient failures.

        Non-transient failures are raised immediately; the last transient failure
        is wrapped into StoreError.
        """
        for attempt in range(self.max_retries):
            try:
                return fn()
            except Exception as e:
                if not self.is_retryable_error(e):
                    raise
                if attempt + 1 >= self.max_retries:
                    logger.error("%s failed after %d attempts: %r", op_name, self.max_retries, e)
                    raise StoreError(f"{op_name} failed: {e}") from e

                delay = self.calculate_delay(attempt)
                logger.warning(
                    "%s transient failure (attempt %d/%d), retrying in %.2fs: %r",
                    op_name,
                    attempt + 1,
                    self.max_retries,
                    delay,
                    e,
                )
                self._sleep(delay)

        raise StoreError(f"{op_name} failed")  # unreachable: max_retries >= 1
