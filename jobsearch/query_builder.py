"""Build boosted boolean search queries for the web search API.

The final query is assembled from fixed-order parts:

    <query> [(job keywords)] (quality terms) [location] [remote]
    [experience level] [job types] [site restriction] [-exclusions]

Output is a pure function of the inputs, so the same query and filters
always produce a byte-identical string (used for previews and caching).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from jobsearch.config import SearchSettings, SpecificityRules
from jobsearch.errors import EmptyQuery, MalformedQuery
from jobsearch.log import get_logger
from jobsearch.models import SearchFilters
from jobsearch.vocabulary import (
    BROAD_EXCLUSIONS,
    EXPERIENCE_LEVEL_TERMS,
    JOB_KEYWORDS,
    JOB_QUALITY_INDICATORS,
    JOB_TYPE_TERMS,
    MINIMAL_EXCLUSIONS,
    REMOTE_WORK_TERMS,
)

log = get_logger(__name__)

_ANGLE_BRACKETS = re.compile(r"[<>]")


@dataclass(frozen=True)
class QueryOptions:
    enhance_job_terms: bool = True
    job_keyword_count: int = 5
    quality_term_count: int = 3
    custom_job_keywords: tuple[str, ...] = ()
    quote_location: bool = True
    strict_experience_level: bool = False
    use_exclusions: bool = True
    target_sites: tuple[str, ...] | None = None
    max_query_length: int = 200
    min_query_length: int = 2
    specificity: SpecificityRules = field(default_factory=SpecificityRules)

    @classmethod
    def from_settings(cls, settings: SearchSettings, **overrides) -> QueryOptions:
        return cls(
            max_query_length=settings.max_query_length,
            min_query_length=settings.min_query_length,
            specificity=settings.specificity,
            **overrides,
        )


def validate_search_query(
    query: str | None, *, max_length: int = 200, min_length: int = 2
) -> str:
    """Return the sanitized query or raise EmptyQuery / MalformedQuery."""
    sanitized = (query or "").strip()
    if not sanitized:
        raise EmptyQuery()

    sanitized = _ANGLE_BRACKETS.sub("", sanitized).strip()
    if not sanitized:
        raise EmptyQuery("Search query contains no searchable text")
    if len(sanitized) < min_length:
        raise MalformedQuery(f"Search query must be at least {min_length} characters long")

    if len(sanitized) > max_length:
        log.warning("Query truncated from %d to %d characters", len(sanitized), max_length)
        sanitized = sanitized[:max_length].rstrip()

    if sanitized.count('"') % 2:
        raise MalformedQuery("Unbalanced quotes in search query")
    return sanitized


def has_job_keywords(query: str) -> bool:
    low = query.lower()
    return any(k in low for k in JOB_KEYWORDS)


def _disjunction(terms: Sequence[str]) -> str:
    return "(" + " OR ".join(terms) + ")"


def enhance_base_query(query: str, options: QueryOptions = QueryOptions()) -> str:
    enhanced = query.strip()
    if not options.enhance_job_terms:
        return enhanced

    if not has_job_keywords(enhanced):
        pool = list(JOB_KEYWORDS) + list(options.custom_job_keywords)
        enhanced += " " + _disjunction(pool[: options.job_keyword_count])

    enhanced += " " + _disjunction(JOB_QUALITY_INDICATORS[: options.quality_term_count])
    return enhanced


def build_location_clause(location: str | None, quote: bool = True) -> str:
    loc = (location or "").strip()
    if not loc:
        return ""
    return f'location:"{loc}"' if quote else f"location:{loc}"


def build_remote_clause(remote: bool) -> str:
    if not remote:
        return ""
    return _disjunction([f'"{t}"' if " " in t else t for t in REMOTE_WORK_TERMS])


def build_experience_clause(level: str | None, strict: bool = False) -> str:
    if not level or level not in EXPERIENCE_LEVEL_TERMS:
        return ""
    terms = list(EXPERIENCE_LEVEL_TERMS[level])
    if strict:
        strict_terms = [t for t in terms if "level" in t or "years" in t]
        if strict_terms:
            terms = strict_terms
    return _disjunction([f'"{t}"' for t in terms])


def build_job_type_clause(job_types: Sequence[str]) -> str:
    if not job_types:
        return ""
    wanted = set(job_types)
    groups = [_disjunction(terms) for jt, terms in JOB_TYPE_TERMS.items() if jt in wanted]
    return _disjunction(groups) if groups else ""


def build_site_clause(sites: Sequence[str] | None) -> str:
    if not sites:
        return ""
    return _disjunction([f"site:{s}" for s in sites])


def is_specific_search(
    query: str,
    filters: SearchFilters,
    rules: SpecificityRules = SpecificityRules(),
) -> bool:
    if rules.quoted_phrase and '"' in query:
        return True
    if rules.location and (filters.location or "").strip():
        return True
    sites = filters.selected_sites
    return bool(sites) and len(sites) <= rules.max_selected_sites


def select_exclusions(
    specific: bool, custom_exclusions: Sequence[str] | None = None
) -> list[str]:
    exclusions = list(MINIMAL_EXCLUSIONS)
    if custom_exclusions:
        exclusions.extend(custom_exclusions)
    elif not specific:
        exclusions.extend(BROAD_EXCLUSIONS)
    return exclusions


def build_exclusion_clause(exclusions: Sequence[str]) -> str:
    return " ".join(f"-{term}" for term in exclusions)


def build_search_query(
    raw_query: str,
    filters: SearchFilters = SearchFilters(),
    exclusion_terms: Sequence[str] | None = None,
    options: QueryOptions = QueryOptions(),
) -> str:
    """Validate the raw query and assemble the final search string.

    ``exclusion_terms`` replace the broad exclusion set when given; the
    minimal set is always kept unless ``options.use_exclusions`` is off.
    Raises EmptyQuery / MalformedQuery before any other work.
    """
    query = validate_search_query(
        raw_query,
        max_length=options.max_query_length,
        min_length=options.min_query_length,
    )

    sites = options.target_sites if options.target_sites is not None else filters.selected_sites
    parts = [
        enhance_base_query(query, options),
        build_location_clause(filters.location, options.quote_location),
        build_remote_clause(filters.remote),
        build_experience_clause(filters.experience_level, options.strict_experience_level),
        build_job_type_clause(filters.job_types),
        build_site_clause(sites),
    ]
    if options.use_exclusions:
        specific = is_specific_search(query, filters, options.specificity)
        parts.append(build_exclusion_clause(select_exclusions(specific, exclusion_terms)))

    final = " ".join(p for p in parts if p)
    log.debug("Built query (%d chars): %s", len(final), final)
    return final
