"""
Rate limiting and retry helpers for upstream API requests.
"""

import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..config import DELAY_BETWEEN_REQUESTS, MAX_RETRIES, RETRY_DELAY

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RateLimiter:
    """Enforces a minimum interval between requests. Thread-safe."""

    min_interval: float = DELAY_BETWEEN_REQUESTS
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep

    # Internal state
    _last_request: Optional[float] = field(default=None, init=False)
    _lock: Lock = field(default_factory=Lock, init=False)

    def wait(self):
        """Block until min_interval has elapsed since the previous request."""
        with self._lock:
            now = self.clock()
            if self._last_request is not None:
                remaining = self.min_interval - (now - self._last_request)
                if remaining > 0:
                    self.sleep(remaining)
                    now = self.clock()
            self._last_request = now


@dataclass
class RetryPolicy:
    """Retries an operation on selected exceptions with a fixed or growing delay.

    With backoff_factor=1.0 every wait is `delay`; larger factors grow the
    delay exponentially up to max_delay. After max_attempts the last error
    is re-raised.
    """

    max_attempts: int = MAX_RETRIES
    delay: float = RETRY_DELAY
    backoff_factor: float = 1.0
    max_delay: float = 300.0
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def get_delay(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        delay = self.delay * (self.backoff_factor ** (attempt - 1))
        return min(delay, self.max_delay)

    def call(self, operation: Callable[[], T], description: str = "request") -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    logger.warning(
                        "%s failed after %d attempts: %s", description, attempt, e
                    )
                    raise
                delay = self.get_delay(attempt)
                logger.warning(
                    "%s failed (%s), retrying in %.0fs (attempt %d/%d)",
                    description, e, delay, attempt, self.max_attempts,
                )
                self.sleep(delay)

        raise RuntimeError("unreachable")  # pragma: no cover
