"""Score and filter raw search results by job-posting relevance."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from jobsearch.log import get_logger
from jobsearch.models import ScoredResultItem, SearchResultItem
from jobsearch.vocabulary import (
    JOB_INDICATORS,
    JOB_SITE_PATTERNS,
    NON_JOB_INDICATORS,
    STOP_WORDS,
    TITLE_KEYWORDS,
)

log = get_logger(__name__)

QUERY_TERM_WEIGHT = 40.0
JOB_INDICATOR_POINTS = 5.0
JOB_INDICATOR_CAP = 30.0
KNOWN_SITE_BONUS = 20.0
TITLE_KEYWORD_BONUS = 10.0
NON_JOB_PENALTY = 15.0
STRICT_MIN_SCORE = 30.0


@dataclass(frozen=True)
class FilterConfig:
    strict_mode: bool = False
    custom_job_indicators: tuple[str, ...] = ()
    custom_non_job_indicators: tuple[str, ...] = ()
    enable_url_filtering: bool = True
    enable_content_filtering: bool = True


_TERM_PUNCTUATION = "\"'()[]{},.;:!?"


def extract_query_terms(query: str) -> list[str]:
    """Lowercase terms longer than two chars that are neither stop words nor numbers.

    Quotes and surrounding punctuation are stripped, so a quoted phrase
    scores the same as its bare words.
    """
    terms = (raw.strip(_TERM_PUNCTUATION) for raw in (query or "").lower().split())
    return [
        term
        for term in terms
        if len(term) > 2 and term not in STOP_WORDS and not term.isdigit()
    ]


def _texts(item: SearchResultItem) -> tuple[str, str, str]:
    title = (item.title or "").lower()
    snippet = (item.snippet or "").lower()
    url = (item.url or "").lower()
    return title, f"{title} {snippet}", url


def has_relevant_query_terms(combined: str, title: str, terms: Sequence[str]) -> bool:
    if not terms:
        return True
    return any(t in combined or t in title for t in terms)


def has_job_indicators(combined: str, url: str, extra: Iterable[str] = ()) -> bool:
    return any(i in combined or i in url for i in (*JOB_INDICATORS, *extra))


def has_non_job_indicators(combined: str, url: str, extra: Iterable[str] = ()) -> bool:
    return any(i in combined or i in url for i in (*NON_JOB_INDICATORS, *extra))


def is_from_known_job_site(url: str) -> bool:
    low = (url or "").lower()
    return any(p in low for p in JOB_SITE_PATTERNS)


def calculate_relevance_score(item: SearchResultItem, original_query: str) -> float:
    title, combined, url = _texts(item)
    score = 0.0

    # query term coverage, up to 40
    terms = extract_query_terms(original_query)
    matching = [t for t in terms if t in combined]
    score += (len(matching) / max(len(terms), 1)) * QUERY_TERM_WEIGHT

    # job indicator density, up to 30
    indicator_hits = sum(1 for i in JOB_INDICATORS if i in combined)
    score += min(indicator_hits * JOB_INDICATOR_POINTS, JOB_INDICATOR_CAP)

    if is_from_known_job_site(url):
        score += KNOWN_SITE_BONUS

    if any(k in title for k in TITLE_KEYWORDS):
        score += TITLE_KEYWORD_BONUS

    non_job_hits = sum(1 for i in NON_JOB_INDICATORS if i in combined)
    score -= non_job_hits * NON_JOB_PENALTY

    return max(0.0, min(100.0, score))


def _passes(
    scored: ScoredResultItem, terms: Sequence[str], config: FilterConfig
) -> bool:
    title, combined, url = _texts(scored.item)

    if config.strict_mode and not terms:
        return False
    if not has_relevant_query_terms(combined, title, terms):
        return False

    if config.enable_content_filtering:
        has_job_content = has_job_indicators(combined, url, config.custom_job_indicators)
        has_non_job = has_non_job_indicators(combined, url, config.custom_non_job_indicators)
    else:
        has_job_content, has_non_job = True, False
    from_job_site = config.enable_url_filtering and is_from_known_job_site(url)

    if not (has_job_content or from_job_site) or has_non_job:
        return False
    if config.strict_mode and scored.relevance_score < STRICT_MIN_SCORE:
        return False
    return True


def score_results(
    items: Sequence[SearchResultItem],
    original_query: str,
    config: FilterConfig | None = None,
) -> list[ScoredResultItem]:
    """Included items with their scores attached, best first."""
    if not items:
        return []
    config = config or FilterConfig()
    terms = extract_query_terms(original_query)
    scored = [ScoredResultItem(item, calculate_relevance_score(item, original_query)) for item in items]
    kept = [s for s in scored if _passes(s, terms, config)]
    kept.sort(key=lambda s: -s.relevance_score)
    log.debug(
        "Scored %d results → %d kept (strict=%s)", len(items), len(kept), config.strict_mode
    )
    return kept


def filter_and_score(
    items: Sequence[SearchResultItem],
    original_query: str,
    config: FilterConfig | dict | None = None,
) -> list[SearchResultItem]:
    """Relevant job postings, best first, without the transient score."""
    if isinstance(config, dict):
        config = FilterConfig(**config)
    return [s.item for s in score_results(items, original_query, config)]
