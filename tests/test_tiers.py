import pytest

from jobsearch.errors import InvalidRequest
from jobsearch.models import SiteConfig
from jobsearch.sites import DEFAULT_JOB_SITES
from jobsearch.tiers import (
    UserTier,
    available_sites_for_tier,
    parse_tier,
    resolve_target_sites,
    tier_features,
    validate_sites_for_tier,
)


def _site(domain, priority=3, category="general", enabled=True):
    return SiteConfig(domain, domain, category, enabled, priority)


class TestAvailableSites:
    def test_free_tier_is_general_and_capped(self):
        sites = available_sites_for_tier(UserTier.FREE)
        assert len(sites) == 5
        assert all(s.category == "general" for s in sites)
        assert [s.domain for s in sites] == [
            "linkedin.com", "indeed.com", "glassdoor.com", "ziprecruiter.com", "monster.com",
        ]

    def test_premium_tier_caps_at_ten(self):
        sites = available_sites_for_tier("premium")
        assert len(sites) == 10
        assert {s.category for s in sites} > {"general"}

    def test_enterprise_gets_every_enabled_site(self):
        assert len(available_sites_for_tier(UserTier.ENTERPRISE)) == len(DEFAULT_JOB_SITES)

    def test_priority_descending(self):
        priorities = [s.priority for s in available_sites_for_tier(UserTier.ENTERPRISE)]
        assert priorities == sorted(priorities, reverse=True)

    def test_disabled_sites_never_selected(self):
        registry = [_site("a.com", 5, enabled=False), _site("b.com", 1)]
        for tier in UserTier:
            assert [s.domain for s in available_sites_for_tier(tier, registry)] == ["b.com"]

    def test_ties_keep_registry_order(self):
        registry = [_site(f"s{i}.com", 4) for i in range(8)]
        assert [s.domain for s in available_sites_for_tier(UserTier.FREE, registry)] == [
            "s0.com", "s1.com", "s2.com", "s3.com", "s4.com",
        ]


class TestResolveTargetSites:
    def test_tier_default(self):
        assert resolve_target_sites(UserTier.FREE)[:2] == ["linkedin.com", "indeed.com"]

    def test_explicit_sites_are_not_capped(self):
        explicit = [f"site{i}.com" for i in range(12)]
        assert resolve_target_sites(UserTier.FREE, explicit_sites=explicit) == explicit

    def test_custom_sites_win_over_explicit(self):
        out = resolve_target_sites(
            UserTier.ENTERPRISE, explicit_sites=["indeed.com"], custom_sites=["acme.com/careers"]
        )
        assert out == ["acme.com/careers"]

    def test_custom_sites_honoured_for_any_tier(self):
        assert resolve_target_sites(UserTier.FREE, custom_sites=["x.io"]) == ["x.io"]

    def test_empty_overrides_fall_back_to_tier(self):
        assert len(resolve_target_sites(UserTier.PREMIUM, explicit_sites=[], custom_sites=[])) == 10


class TestParseTier:
    @pytest.mark.parametrize("value, expected", [
        (None, UserTier.FREE),
        ("Premium", UserTier.PREMIUM),
        (" enterprise ", UserTier.ENTERPRISE),
        (UserTier.FREE, UserTier.FREE),
    ])
    def test_valid(self, value, expected):
        assert parse_tier(value) is expected

    def test_invalid(self):
        with pytest.raises(InvalidRequest):
            parse_tier("platinum")


def test_validate_sites_for_tier():
    assert validate_sites_for_tier(["linkedin.com"], UserTier.FREE)
    assert not validate_sites_for_tier(["dice.com"], UserTier.FREE)
    assert validate_sites_for_tier(["dice.com"], UserTier.PREMIUM)


def test_tier_features():
    assert tier_features("enterprise")["max_sites"] == "unlimited"
    free = tier_features(None)
    assert free["max_sites"] == 5
    assert not free["custom_sites"]
