"""Minimum spacing between searches, enforced by callers (CLI, UI)."""
from __future__ import annotations

import threading
import time
from typing import Callable


class SearchThrottle:
    def __init__(
        self,
        min_interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._last: float | None = None
        self._lock = threading.Lock()

    def remaining(self) -> float:
        """Seconds until the next search is allowed (0 when allowed now)."""
        with self._lock:
            if self._last is None:
                return 0.0
            return max(0.0, self.min_interval - (self._clock() - self._last))

    def try_acquire(self) -> bool:
        """Claim a search slot; False when the previous search was too recent."""
        with self._lock:
            now = self._clock()
            if self._last is not None and now - self._last < self.min_interval:
                return False
            self._last = now
            return True

    def wait(self, sleep: Callable[[float], None] = time.sleep) -> None:
        while not self.try_acquire():
            sleep(self.remaining() or 0.01)
