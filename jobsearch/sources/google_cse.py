"""Google Custom Search JSON API client."""
from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import requests

from jobsearch.config import GOOGLE_SEARCH_ENDPOINT, MAX_RESULTS_PER_REQUEST
from jobsearch.errors import (
    AccessDenied,
    Cancelled,
    SearchError,
    Timeout,
    Unknown,
    classify_exception,
    error_for_status,
)
from jobsearch.log import get_logger, redact
from jobsearch.metrics import MetricEvent, MetricsSink, emit
from jobsearch.models import QuotaInfo, SearchPage, SearchResultItem
from jobsearch.sources.base import CancelToken, SearchSource

log = get_logger(__name__)

_POLL_SECONDS = 0.05


def clamp_num(max_results: int) -> int:
    """The API serves at most 10 results per request; larger asks are clamped."""
    return max(1, min(int(max_results), MAX_RESULTS_PER_REQUEST))


def _total_results(data: dict[str, Any]) -> int:
    raw = (data.get("searchInformation") or {}).get("totalResults", "0")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


class GoogleSearchSource(SearchSource):
    name = "google"

    def __init__(
        self,
        api_key: str,
        engine_id: str,
        *,
        endpoint: str = GOOGLE_SEARCH_ENDPOINT,
        timeout: float = 30.0,
        metrics: MetricsSink | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key or not engine_id:
            raise AccessDenied(
                "Missing Google API key or Custom Search Engine ID — "
                "set GOOGLE_API_KEY and GOOGLE_CSE_ID in .env",
                details={"api_key": bool(api_key), "engine_id": bool(engine_id)},
            )
        self._api_key = api_key
        self.engine_id = engine_id
        self.endpoint = endpoint
        self.timeout = timeout
        self.metrics = metrics
        self.session = session or requests.Session()
        self._executor: ThreadPoolExecutor | None = None

    def __repr__(self) -> str:
        return f"GoogleSearchSource(engine_id={self.engine_id!r}, endpoint={self.endpoint!r})"

    def build_params(self, query: str, max_results: int) -> dict[str, Any]:
        return {
            "key": self._api_key,
            "cx": self.engine_id,
            "q": query,
            "num": clamp_num(max_results),
            "start": 1,
            "safe": "off",
            "sort": "date",
        }

    def _get(self, params: dict[str, Any]) -> requests.Response:
        return self.session.get(self.endpoint, params=params, timeout=self.timeout)

    def _get_with_deadline(self, params: dict[str, Any], cancel: CancelToken) -> requests.Response:
        """Run the request on a worker thread; stop waiting on cancel or after ``timeout`` seconds in total."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="search")
        future: Future = self._executor.submit(self._get, params)
        deadline = time.monotonic() + self.timeout
        while not future.done():
            if cancel.wait(_POLL_SECONDS):
                future.cancel()
                raise Cancelled()
            if time.monotonic() > deadline:
                future.cancel()
                raise Timeout(details={"timeout_seconds": self.timeout})
        return future.result()

    def search(
        self, query: str, max_results: int = 10, cancel: CancelToken | None = None
    ) -> SearchPage:
        params = self.build_params(query, max_results)
        log.debug("GET %s q=%r num=%d", self.endpoint, query, params["num"])
        started = time.monotonic()
        try:
            if cancel is not None and cancel.cancelled:
                raise Cancelled()
            response = self._get_with_deadline(params, cancel or CancelToken())
            error = error_for_status(response)
            if error is not None:
                raise error
            try:
                data = response.json()
            except ValueError as exc:
                raise Unknown("Search service returned a malformed response") from exc
        except SearchError as exc:
            self._record_failure(exc, query, started)
            raise
        except Exception as exc:
            error = classify_exception(exc)
            self._record_failure(error, query, started)
            raise error from exc

        elapsed_ms = (time.monotonic() - started) * 1000
        items = [SearchResultItem.from_api(raw) for raw in data.get("items") or []]
        quota = QuotaInfo.from_headers(response.headers)
        total = _total_results(data)
        for warning in quota.warnings():
            log.warning("Quota: %s", warning)
        log.info("Google search returned %d items (%d reported) in %.0fms", len(items), total, elapsed_ms)

        emit(self.metrics, MetricEvent(
            status="success",
            response_time_ms=elapsed_ms,
            query=query,
            total_results=total,
            result_count=len(items),
            quota_used=quota.used_percent(),
        ))
        return SearchPage(items=items, total_results=total, quota=quota, response_time_ms=elapsed_ms)

    def _record_failure(self, error: SearchError, query: str, started: float) -> None:
        elapsed_ms = (time.monotonic() - started) * 1000
        log.debug("Google search failed after %.0fms: %s", elapsed_ms, redact(error.message))
        emit(self.metrics, MetricEvent(
            status="error",
            response_time_ms=elapsed_ms,
            query=query,
            error_code=error.code,
            error_message=error.message,
            status_code=error.status_code,
            retryable=error.retryable,
        ))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self.session.close()
