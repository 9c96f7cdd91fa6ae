"""
Job search pipeline.

Runs: validate + build query → resolve target sites → search API → filter/score.
Each call is independent; failures come back as a SearchOutcome, never raised.
Callers are expected to space searches out (see SearchThrottle).
"""
from __future__ import annotations

import time
from dataclasses import dataclass

from jobsearch.config import SearchSettings, load_settings
from jobsearch.errors import SearchError, Unknown
from jobsearch.log import get_logger
from jobsearch.metrics import MetricsSink
from jobsearch.models import SearchFilters, SearchOutcome, SearchResponse
from jobsearch.query_builder import QueryOptions, build_search_query, enhance_base_query, validate_search_query
from jobsearch.scorer import FilterConfig, filter_and_score
from jobsearch.sources import CancelToken, SearchSource, get_source
from jobsearch.tiers import UserTier, parse_tier, resolve_target_sites

log = get_logger(__name__)

_SEVERITY_LEVELS: dict[str, str] = {
    "low": "info",
    "medium": "warning",
    "high": "error",
    "critical": "error",
}


@dataclass(frozen=True)
class SearchConfig:
    tier: UserTier | str = UserTier.FREE
    max_results: int = 10
    custom_sites: tuple[str, ...] | None = None
    use_exclusions: bool = True
    custom_exclusions: tuple[str, ...] | None = None
    use_site_operator: bool = True
    strict_filtering: bool = False


@dataclass(frozen=True)
class PreparedQuery:
    sanitized: str
    enhanced: str
    final: str
    target_sites: tuple[str, ...]
    tier: UserTier


def prepare_query(
    query: str,
    filters: SearchFilters = SearchFilters(),
    config: SearchConfig = SearchConfig(),
    settings: SearchSettings | None = None,
) -> PreparedQuery:
    """Build everything needed for the API call; raises EmptyQuery/MalformedQuery."""
    settings = settings or load_settings()
    tier = parse_tier(config.tier)
    sanitized = validate_search_query(
        query, max_length=settings.max_query_length, min_length=settings.min_query_length
    )

    targets: tuple[str, ...] = ()
    if config.use_site_operator:
        targets = tuple(resolve_target_sites(
            tier,
            explicit_sites=filters.selected_sites,
            custom_sites=config.custom_sites,
            registry=settings.sites,
        ))

    options = QueryOptions.from_settings(
        settings, use_exclusions=config.use_exclusions, target_sites=targets
    )
    final = build_search_query(sanitized, filters, config.custom_exclusions, options)
    return PreparedQuery(
        sanitized=sanitized,
        enhanced=enhance_base_query(sanitized, options),
        final=final,
        target_sites=targets,
        tier=tier,
    )


def preview_query(
    query: str,
    filters: SearchFilters = SearchFilters(),
    config: SearchConfig = SearchConfig(),
    settings: SearchSettings | None = None,
) -> str:
    """The exact string that would be sent to the search API."""
    return prepare_query(query, filters, config, settings).final


def user_message(error: SearchError) -> str:
    """What to show the end user for a failed search."""
    if error.retryable:
        if error.retry_after:
            return f"{error.message.rstrip('.')}. Try again in about {error.retry_after:.0f} seconds."
        return f"{error.message.rstrip('.')}. Try again shortly."
    if error.kind in ("empty-query", "malformed-query"):
        return error.message
    if error.kind == "access-denied":
        return "Search is not configured correctly. Check the API key and search engine ID."
    if error.kind == "invalid-request":
        return "The search request was invalid. Please check your search terms and filters."
    if error.kind == "cancelled":
        return "Search was cancelled."
    return "Unable to perform search at this time. Please try again later."


def _log_error(error: SearchError, query: str) -> None:
    level = _SEVERITY_LEVELS.get(error.severity, "warning")
    getattr(log, level)(
        "Search failed [%s] for %r: %s (retryable=%s, retry_after=%s)",
        error.code, query, error.message, error.retryable, error.retry_after,
    )


def search_jobs(
    query: str,
    filters: SearchFilters = SearchFilters(),
    config: SearchConfig = SearchConfig(),
    *,
    source: SearchSource | None = None,
    metrics: MetricsSink | None = None,
    cancel: CancelToken | None = None,
    settings: SearchSettings | None = None,
) -> SearchOutcome:
    started = time.monotonic()
    settings = settings or load_settings()

    def elapsed_ms() -> float:
        return (time.monotonic() - started) * 1000

    owned: SearchSource | None = None
    try:
        prepared = prepare_query(query, filters, config, settings)
        log.info(
            "Searching tier=%s sites=%d max=%d: %s",
            prepared.tier.value, len(prepared.target_sites), config.max_results, prepared.final,
        )
        if source is None:
            source = owned = get_source(settings, metrics=metrics)
        page = source.search(prepared.final, config.max_results, cancel=cancel)
    except SearchError as exc:
        _log_error(exc, query)
        return SearchOutcome.failed(exc, elapsed_ms())
    except Exception as exc:
        error = Unknown(str(exc) or exc.__class__.__name__)
        log.exception("Unexpected search failure for %r", query)
        return SearchOutcome.failed(error, elapsed_ms())
    finally:
        if owned is not None:
            owned.close()

    items = filter_and_score(
        page.items, prepared.sanitized, FilterConfig(strict_mode=config.strict_filtering)
    )
    warnings = page.quota.warnings()
    response = SearchResponse(
        items=items,
        total_results=page.total_results,
        quota=page.quota,
        warnings=warnings,
        context={
            "query": query,
            "enhanced_query": prepared.enhanced,
            "final_query": prepared.final,
            "filters": filters.to_dict(),
            "target_sites": list(prepared.target_sites),
            "results_received": len(page.items),
            "results_filtered": len(page.items) - len(items),
            "tier": prepared.tier.value,
            "max_results": config.max_results,
            "api_response_time_ms": round(page.response_time_ms),
        },
    )
    log.info(
        "Search complete — received=%d, kept=%d, reported=%d",
        len(page.items), len(items), page.total_results,
    )
    return SearchOutcome.ok(response, elapsed_ms())
