from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from jobsearch.models import SearchPage


class CancelToken:
    """Caller-side abort signal for an in-flight search."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        return self._event.wait(timeout)


class SearchSource(ABC):
    name: str = "source"

    @abstractmethod
    def search(
        self, query: str, max_results: int = 10, cancel: CancelToken | None = None
    ) -> SearchPage:
        pass

    def close(self) -> None:
        pass
