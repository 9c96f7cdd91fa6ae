"""Shared search vocabulary used by both the query builder and the scorer.

Bump VOCABULARY_VERSION whenever a list changes so cached query previews
and stored scores can be invalidated.
"""
from __future__ import annotations

VOCABULARY_VERSION = "2"

# Terms that mark a query as already job-oriented.
JOB_KEYWORDS: tuple[str, ...] = (
    "job", "career", "position", "opening", "hiring", "employment", "vacancy",
)

# Appended to every enhanced query to favour real postings.
JOB_QUALITY_INDICATORS: tuple[str, ...] = (
    "apply", "job description", "requirements", "qualifications", "years of experience",
)

EXPERIENCE_LEVEL_TERMS: dict[str, tuple[str, ...]] = {
    "entry": ("entry level", "junior", "graduate", "new grad"),
    "mid": ("mid level", "experienced", "3-5 years"),
    "senior": ("senior", "lead", "5+ years", "principal"),
}

# Canonical order; query clauses are always emitted in this order.
JOB_TYPE_TERMS: dict[str, tuple[str, ...]] = {
    "full-time": ("full time", "fulltime", "permanent"),
    "part-time": ("part time", "parttime", "temporary"),
    "contract": ("contract", "contractor", "freelance", "consulting"),
    "internship": ("intern", "internship", "co-op", "co op"),
}

REMOTE_WORK_TERMS: tuple[str, ...] = (
    "remote", "work from home", "WFH", "telecommute", "distributed",
)

MINIMAL_EXCLUSIONS: tuple[str, ...] = ("wikipedia", '"about us"', '"our company"')
BROAD_EXCLUSIONS: tuple[str, ...] = (
    "blog", "news", '"press release"', '"company profile"', "investor",
)

_EXPERIENCE_PHRASES: tuple[str, ...] = tuple(
    term
    for terms in EXPERIENCE_LEVEL_TERMS.values()
    for term in terms
    if "level" in term or "years" in term or term == "new grad"
)

JOB_INDICATORS: tuple[str, ...] = (
    # core
    "job", "position", "career", "hiring", "employment", "vacancy", "opening",
    # application
    "apply", "application", "candidate", "qualifications", "requirements",
    "experience", "skills", "responsibilities", "duties", "salary", "benefits",
    # posting phrasing
    "join", "seeking", "looking for", "we are hiring", "job description",
    "years of experience", "full time", "part time", "remote", "onsite",
    "hire", "recruit", "team", "role", "opportunity",
) + _EXPERIENCE_PHRASES

NON_JOB_INDICATORS: tuple[str, ...] = (
    # company pages
    "wikipedia", "about us", "our company", "company history", "leadership team",
    # news and articles
    "news article", "press release", "blog post", "interview with", "profile of", "biography",
    # finance
    "stock price", "earnings", "financial", "quarterly results", "investor", "annual report",
    # generic site pages
    "home page", "contact us", "privacy policy", "terms of service", "cookie policy",
    "site map", "help center", "faq",
)

JOB_SITE_PATTERNS: tuple[str, ...] = (
    "linkedin.com/jobs", "indeed.com", "glassdoor.com", "monster.com",
    "dice.com", "ziprecruiter.com", "careerbuilder.com", "simplyhired.com",
    "remote.co", "weworkremotely.com", "stackoverflow.com/jobs",
    "angel.co", "wellfound.com", "jobs.", "careers.", "/careers/", "/jobs/",
    "workable.com", "greenhouse.io", "lever.co", "bamboohr.com",
)

STOP_WORDS: frozenset[str] = frozenset({
    "job", "position", "career", "and", "or", "the", "for", "in", "at",
    "with", "from", "by", "as", "to", "of", "a", "an", "is", "are", "was", "were",
})

TITLE_KEYWORDS: tuple[str, ...] = ("job", "position", "career")


def describe() -> dict[str, object]:
    """Every list in the table, keyed by name, for callers and tests."""
    return {
        "version": VOCABULARY_VERSION,
        "job_keywords": list(JOB_KEYWORDS),
        "quality_indicators": list(JOB_QUALITY_INDICATORS),
        "experience_levels": {k: list(v) for k, v in EXPERIENCE_LEVEL_TERMS.items()},
        "job_types": {k: list(v) for k, v in JOB_TYPE_TERMS.items()},
        "remote_terms": list(REMOTE_WORK_TERMS),
        "minimal_exclusions": list(MINIMAL_EXCLUSIONS),
        "broad_exclusions": list(BROAD_EXCLUSIONS),
        "job_indicators": list(JOB_INDICATORS),
        "non_job_indicators": list(NON_JOB_INDICATORS),
        "job_site_patterns": list(JOB_SITE_PATTERNS),
        "stop_words": sorted(STOP_WORDS),
    }
