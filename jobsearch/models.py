"""Data models for search filters, sites, results and pipeline responses."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from jobsearch.log import get_logger

if TYPE_CHECKING:
    from jobsearch.errors import SearchError

log = get_logger(__name__)

EXPERIENCE_LEVELS: tuple[str, ...] = ("entry", "mid", "senior")
JOB_TYPES: tuple[str, ...] = ("full-time", "part-time", "contract", "internship")
SITE_CATEGORIES: tuple[str, ...] = ("general", "tech", "remote", "startup", "executive")


@dataclass(frozen=True)
class SearchFilters:
    location: str | None = None
    experience_level: str | None = None
    job_types: tuple[str, ...] = ()
    selected_sites: tuple[str, ...] | None = None
    remote: bool = False

    def __post_init__(self) -> None:
        # accept lists/sets from callers but store immutable tuples
        if not isinstance(self.job_types, tuple):
            object.__setattr__(self, "job_types", tuple(self.job_types))
        if self.selected_sites is not None and not isinstance(self.selected_sites, tuple):
            object.__setattr__(self, "selected_sites", tuple(self.selected_sites))

    def has_non_default_filters(self) -> bool:
        return bool(
            (self.location or "").strip()
            or self.experience_level
            or self.job_types
            or self.selected_sites
            or self.remote
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "experience_level": self.experience_level,
            "job_types": list(self.job_types),
            "selected_sites": list(self.selected_sites) if self.selected_sites is not None else None,
            "remote": self.remote,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SearchFilters:
        data = data or {}
        job_types = data.get("job_types", data.get("jobType")) or ()
        if isinstance(job_types, str):
            job_types = (job_types,)
        sites = data.get("selected_sites", data.get("selectedSites"))
        return cls(
            location=data.get("location") or None,
            experience_level=data.get("experience_level", data.get("experienceLevel")) or None,
            job_types=tuple(job_types),
            selected_sites=tuple(sites) if sites is not None else None,
            remote=bool(data.get("remote", False)),
        )

    @classmethod
    def from_json(cls, payload: str | None) -> SearchFilters:
        """Parse filters handed back by a saved-search store; bad JSON yields defaults."""
        if not payload:
            return cls()
        try:
            data = json.loads(payload)
        except ValueError as exc:
            log.warning("Could not parse saved filters (%s); using defaults", exc)
            return cls()
        if not isinstance(data, dict):
            log.warning("Saved filters are not an object; using defaults")
            return cls()
        return cls.from_dict(data)


@dataclass(frozen=True)
class SiteConfig:
    domain: str
    display_name: str
    category: str
    enabled: bool = True
    priority: int = 3
    description: str = ""


@dataclass(frozen=True)
class SearchResultItem:
    title: str
    snippet: str
    url: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> SearchResultItem:
        return cls(
            title=raw.get("title") or "",
            snippet=raw.get("snippet") or "",
            url=raw.get("link") or raw.get("url") or "",
        )


@dataclass(frozen=True)
class ScoredResultItem:
    item: SearchResultItem
    relevance_score: float


@dataclass
class QuotaInfo:
    daily_quota_used: str | None = None
    rate_limit_remaining: str | None = None
    rate_limit_reset: str | None = None
    quota_limit: str | None = None
    requests_remaining: str | None = None

    @classmethod
    def from_headers(cls, headers: Any) -> QuotaInfo:
        return cls(
            daily_quota_used=headers.get("x-daily-quota-used"),
            rate_limit_remaining=headers.get("x-ratelimit-remaining"),
            rate_limit_reset=headers.get("x-ratelimit-reset"),
            quota_limit=headers.get("x-quota-limit"),
            requests_remaining=headers.get("x-requests-remaining"),
        )

    def used_percent(self) -> int | None:
        return _to_int(self.daily_quota_used)

    def warnings(self) -> list[str]:
        out: list[str] = []
        used = self.used_percent()
        if used is not None:
            if used > 90:
                out.append("Critical: Daily quota usage above 90%")
            elif used > 80:
                out.append("Warning: Daily quota usage above 80%")
        remaining = _to_int(self.requests_remaining)
        if remaining is not None and remaining < 10:
            out.append("Warning: Less than 10 requests remaining")
        return out


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip().rstrip("%"))
    except ValueError:
        return None


@dataclass
class SearchPage:
    items: list[SearchResultItem]
    total_results: int = 0
    quota: QuotaInfo = field(default_factory=QuotaInfo)
    response_time_ms: float = 0.0


@dataclass
class SearchResponse:
    items: list[SearchResultItem]
    total_results: int
    context: dict[str, Any] = field(default_factory=dict)
    quota: QuotaInfo = field(default_factory=QuotaInfo)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SearchOutcome:
    success: bool
    data: SearchResponse | None = None
    error: SearchError | None = None
    response_time_ms: float = 0.0
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    @classmethod
    def ok(cls, data: SearchResponse, response_time_ms: float = 0.0) -> SearchOutcome:
        return cls(success=True, data=data, response_time_ms=response_time_ms)

    @classmethod
    def failed(cls, error: SearchError, response_time_ms: float = 0.0) -> SearchOutcome:
        return cls(success=False, error=error, response_time_ms=response_time_ms)
