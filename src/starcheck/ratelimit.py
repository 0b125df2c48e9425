"""
Request spacing shared by every outbound fetch.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL_S = 1.0


class RateLimiter:
    """
    Run tasks one at a time, at least ``interval_s`` apart.

    The gap is measured from the *end* of the previous task to the start of
    the next one. The end time is recorded even when the task raises.
    """

    def __init__(
        self,
        interval_s: float = DEFAULT_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval_s < 0:
            raise ValueError(f"interval_s must be >= 0, got {interval_s}")
        self.interval_s = interval_s
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_end: Optional[float] = None

    def schedule(self, task: Callable[[], T]) -> T:
        """Wait for the slot, run ``task`` and return its result."""
        with self._lock:
            if self._last_end is not None:
                wait = self.interval_s - (self._clock() - self._last_end)
                if wait > 0:
                    logger.debug("Rate limit: waiting %.3fs", wait)
                    self._sleep(wait)
            try:
                return task()
            finally:
                self._last_end = self._clock()
