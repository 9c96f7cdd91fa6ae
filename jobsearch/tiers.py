"""User tiers and target-site resolution."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from jobsearch.errors import InvalidRequest
from jobsearch.log import get_logger
from jobsearch.models import SiteConfig
from jobsearch.sites import DEFAULT_JOB_SITES, get_enabled_sites

log = get_logger(__name__)


class UserTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class TierCapabilities:
    max_sites: int | None  # None = unlimited
    categories: frozenset[str] | None  # None = every category
    custom_sites: bool = False
    advanced_filters: bool = False
    export_results: bool = False


TIER_CAPABILITIES: dict[UserTier, TierCapabilities] = {
    UserTier.FREE: TierCapabilities(max_sites=5, categories=frozenset({"general"})),
    UserTier.PREMIUM: TierCapabilities(max_sites=10, categories=None, advanced_filters=True),
    UserTier.ENTERPRISE: TierCapabilities(
        max_sites=None, categories=None,
        custom_sites=True, advanced_filters=True, export_results=True,
    ),
}


def parse_tier(value: UserTier | str | None) -> UserTier:
    if value is None:
        return UserTier.FREE
    if isinstance(value, UserTier):
        return value
    try:
        return UserTier(str(value).strip().lower())
    except ValueError:
        raise InvalidRequest(
            f"Unknown user tier {value!r}; expected one of "
            + ", ".join(t.value for t in UserTier)
        ) from None


def capabilities(tier: UserTier | str | None) -> TierCapabilities:
    return TIER_CAPABILITIES[parse_tier(tier)]


def available_sites_for_tier(
    tier: UserTier | str | None = UserTier.FREE,
    registry: Iterable[SiteConfig] | None = None,
) -> list[SiteConfig]:
    caps = capabilities(tier)
    candidates = get_enabled_sites(DEFAULT_JOB_SITES if registry is None else registry)
    if caps.categories is not None:
        candidates = [s for s in candidates if s.category in caps.categories]
    if caps.max_sites is not None:
        candidates = candidates[: caps.max_sites]
    return candidates


def resolve_target_sites(
    tier: UserTier | str | None = UserTier.FREE,
    explicit_sites: Sequence[str] | None = None,
    custom_sites: Sequence[str] | None = None,
    registry: Iterable[SiteConfig] | None = None,
) -> list[str]:
    """Domains for the site restriction clause.

    Custom sites win over explicit picks, which win over the tier default.
    Overrides are used verbatim and are not capped.
    """
    if custom_sites:
        if not capabilities(tier).custom_sites:
            log.info("Custom site list supplied for tier %s", parse_tier(tier).value)
        return list(custom_sites)
    if explicit_sites:
        return list(explicit_sites)
    return [s.domain for s in available_sites_for_tier(tier, registry)]


def validate_sites_for_tier(
    selected_sites: Sequence[str],
    tier: UserTier | str | None = UserTier.FREE,
    registry: Iterable[SiteConfig] | None = None,
) -> bool:
    """True when every selected domain is part of the tier's default set."""
    allowed = {s.domain for s in available_sites_for_tier(tier, registry)}
    return all(site in allowed for site in selected_sites)


def tier_features(tier: UserTier | str | None) -> dict[str, Any]:
    caps = capabilities(tier)
    return {
        "tier": parse_tier(tier).value,
        "max_sites": "unlimited" if caps.max_sites is None else caps.max_sites,
        "custom_sites": caps.custom_sites,
        "advanced_filters": caps.advanced_filters,
        "export_results": caps.export_results,
    }
