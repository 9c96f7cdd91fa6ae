"""Registry of known job-board domains."""
from __future__ import annotations

from typing import Any, Iterable

from jobsearch.log import get_logger
from jobsearch.models import SITE_CATEGORIES, SiteConfig

log = get_logger(__name__)

DEFAULT_JOB_SITES: tuple[SiteConfig, ...] = (
    SiteConfig("linkedin.com", "LinkedIn", "general", True, 5,
               "Professional networking and job search platform"),
    SiteConfig("indeed.com", "Indeed", "general", True, 5,
               "One of the largest job search engines"),
    SiteConfig("glassdoor.com", "Glassdoor", "general", True, 4,
               "Job search with company reviews and salary info"),
    SiteConfig("monster.com", "Monster", "general", True, 3,
               "Global employment website"),
    SiteConfig("ziprecruiter.com", "ZipRecruiter", "general", True, 4,
               "Online employment marketplace"),
    SiteConfig("dice.com", "Dice", "tech", True, 5,
               "Technology professionals job board"),
    SiteConfig("stackoverflow.com/jobs", "Stack Overflow Jobs", "tech", True, 4,
               "Developer-focused job board"),
    SiteConfig("angel.co", "AngelList", "startup", True, 4,
               "Startup jobs and investment platform"),
    SiteConfig("remote.co", "Remote.co", "remote", True, 4,
               "Remote work job board"),
    SiteConfig("weworkremotely.com", "We Work Remotely", "remote", True, 4,
               "Remote-only job board"),
    SiteConfig("flexjobs.com", "FlexJobs", "remote", True, 3,
               "Flexible and remote job opportunities"),
    SiteConfig("simplyhired.com", "SimplyHired", "general", True, 3,
               "Job search engine aggregator"),
    SiteConfig("careerbuilder.com", "CareerBuilder", "general", True, 3,
               "Job search and career advice platform"),
    SiteConfig("themuse.com", "The Muse", "general", True, 3,
               "Career advice and job search platform"),
    SiteConfig("jobs.lever.co", "Lever Jobs", "startup", True, 3,
               "Modern companies using Lever ATS"),
)

# Shortcut site groups offered by the search form.
QUICK_FILTERS: dict[str, tuple[str, ...]] = {
    "linkedin_only": ("linkedin.com",),
    "indeed_only": ("indeed.com",),
    "tech_sites": ("dice.com", "stackoverflow.com/jobs"),
    "remote_sites": ("remote.co", "weworkremotely.com"),
    "all_sites": (),
}


def site_from_dict(data: dict[str, Any]) -> SiteConfig:
    category = str(data.get("category", "general")).lower()
    if category not in SITE_CATEGORIES:
        raise ValueError(f"Unknown site category {category!r} for {data.get('domain')!r}")
    priority = int(data.get("priority", 3))
    if not 1 <= priority <= 5:
        raise ValueError(f"Site priority must be 1-5, got {priority} for {data.get('domain')!r}")
    return SiteConfig(
        domain=str(data["domain"]).strip().lower(),
        display_name=str(data.get("name") or data.get("display_name") or data["domain"]),
        category=category,
        enabled=bool(data.get("enabled", True)),
        priority=priority,
        description=str(data.get("description", "")),
    )


def build_registry(entries: Iterable[dict[str, Any]]) -> tuple[SiteConfig, ...]:
    """Registry from config entries; duplicate domains keep the first entry."""
    seen: set[str] = set()
    sites: list[SiteConfig] = []
    for entry in entries:
        site = site_from_dict(entry)
        if site.domain in seen:
            log.warning("Duplicate site %s in registry config — keeping first entry", site.domain)
            continue
        seen.add(site.domain)
        sites.append(site)
    return tuple(sites)


def get_enabled_sites(sites: Iterable[SiteConfig] = DEFAULT_JOB_SITES) -> list[SiteConfig]:
    """Enabled sites, highest priority first; ties keep registry order."""
    return sorted((s for s in sites if s.enabled), key=lambda s: -s.priority)


def get_sites_by_category(
    category: str, sites: Iterable[SiteConfig] = DEFAULT_JOB_SITES
) -> list[SiteConfig]:
    return [s for s in sites if s.category == category and s.enabled]


def get_site_by_domain(
    domain: str, sites: Iterable[SiteConfig] = DEFAULT_JOB_SITES
) -> SiteConfig | None:
    for s in sites:
        if s.domain == domain:
            return s
    return None


def site_name_for_url(url: str, sites: Iterable[SiteConfig] = DEFAULT_JOB_SITES) -> str:
    """Display name of the registry site a URL belongs to, else the URL itself."""
    low = (url or "").lower()
    for s in sites:
        if s.domain.split("/")[0] in low:
            return s.display_name
    return url
