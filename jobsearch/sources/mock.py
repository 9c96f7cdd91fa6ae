"""Offline search source with canned results, for demos and tests."""
from __future__ import annotations

from jobsearch.errors import Cancelled
from jobsearch.log import get_logger
from jobsearch.metrics import MetricEvent, MetricsSink, emit
from jobsearch.models import SearchPage, SearchResultItem
from jobsearch.sources.base import CancelToken, SearchSource
from jobsearch.sources.google_cse import clamp_num

log = get_logger(__name__)


class MockSource(SearchSource):
    name = "mock"

    def __init__(self, metrics: MetricsSink | None = None) -> None:
        self.metrics = metrics

    def _items(self, query: str) -> list[SearchResultItem]:
        role = query.split(" (")[0].replace('"', "").strip() or "Software Engineer"
        title = role.title()
        return [
            SearchResultItem(
                title=f"{title} - Apply Now",
                snippet="Join our team. 5+ years of experience, competitive salary and benefits.",
                url="https://www.linkedin.com/jobs/view/1001",
            ),
            SearchResultItem(
                title=f"{title} (Remote)",
                snippet="We are hiring a remote engineer. Requirements: 3-5 years experience.",
                url="https://weworkremotely.com/remote-jobs/acme-1002",
            ),
            SearchResultItem(
                title=f"Senior {title} job in Austin",
                snippet="Responsibilities include mentoring and design. Apply today.",
                url="https://www.indeed.com/viewjob?jk=1003",
            ),
            SearchResultItem(
                title=f"{title} — Wikipedia",
                snippet=f"{title} is a profession. From Wikipedia, the free encyclopedia.",
                url="https://en.wikipedia.org/wiki/Software_engineering",
            ),
            SearchResultItem(
                title="Acme Corp announces record earnings",
                snippet="Press release: quarterly results beat expectations.",
                url="https://news.example.com/acme-earnings",
            ),
        ]

    def search(
        self, query: str, max_results: int = 10, cancel: CancelToken | None = None
    ) -> SearchPage:
        if cancel is not None and cancel.cancelled:
            raise Cancelled()
        log.info("MockSource generating sample results")
        items = self._items(query)[: clamp_num(max_results)]
        emit(self.metrics, MetricEvent(
            status="success",
            response_time_ms=0.0,
            query=query,
            total_results=len(items),
            result_count=len(items),
        ))
        return SearchPage(items=items, total_results=len(items))
