"""Load search settings (YAML) and credentials (.env)."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobsearch.log import get_logger, mask_secret
from jobsearch.models import SiteConfig
from jobsearch.sites import DEFAULT_JOB_SITES, build_registry

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "search.yaml"
REPORTS_DIR: Path = ROOT_DIR / "reports"

GOOGLE_SEARCH_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
MAX_RESULTS_PER_REQUEST = 10


@dataclass(frozen=True)
class SpecificityRules:
    """Signals that mark a search as "specific" (minimal exclusions only)."""

    quoted_phrase: bool = True
    location: bool = True
    max_selected_sites: int = 2


@dataclass(frozen=True)
class AlertThresholds:
    """Limits that raise monitoring alerts when a metric event crosses them."""

    error_rate: float = 0.1
    critical_error_rate: float = 0.3
    min_requests: int = 10
    window_seconds: float = 3600.0
    response_time_ms: float = 5000.0
    critical_response_time_ms: float = 10000.0
    quota_usage: float = 90.0
    critical_quota_usage: float = 95.0
    active_seconds: float = 3600.0


@dataclass(frozen=True)
class SearchSettings:
    endpoint: str = GOOGLE_SEARCH_ENDPOINT
    timeout_seconds: float = 30.0
    default_max_results: int = 10
    min_search_interval_seconds: float = 2.0
    max_query_length: int = 200
    min_query_length: int = 2
    specificity: SpecificityRules = field(default_factory=SpecificityRules)
    metrics_max_events: int = 1000
    metrics_path: Path | None = None
    alerts: AlertThresholds = field(default_factory=AlertThresholds)
    sites: tuple[SiteConfig, ...] = DEFAULT_JOB_SITES


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _settings_path() -> Path:
    override = get_env("JOBSEARCH_SETTINGS")
    return Path(override) if override else SETTINGS_PATH


def _alert_thresholds(data: dict[str, Any]) -> AlertThresholds:
    d = AlertThresholds()
    return AlertThresholds(
        error_rate=float(data.get("error_rate", d.error_rate)),
        critical_error_rate=float(data.get("critical_error_rate", d.critical_error_rate)),
        min_requests=int(data.get("min_requests", d.min_requests)),
        window_seconds=float(data.get("window_seconds", d.window_seconds)),
        response_time_ms=float(data.get("response_time_ms", d.response_time_ms)),
        critical_response_time_ms=float(
            data.get("critical_response_time_ms", d.critical_response_time_ms)
        ),
        quota_usage=float(data.get("quota_usage", d.quota_usage)),
        critical_quota_usage=float(data.get("critical_quota_usage", d.critical_quota_usage)),
        active_seconds=float(data.get("active_seconds", d.active_seconds)),
    )


def settings_from_dict(data: dict[str, Any] | None) -> SearchSettings:
    data = data or {}
    search = data.get("search") or {}
    spec_cfg = data.get("specific_search") or {}
    metrics = data.get("metrics") or {}

    defaults = SearchSettings()
    specificity = SpecificityRules(
        quoted_phrase=bool(spec_cfg.get("quoted_phrase", True)),
        location=bool(spec_cfg.get("location", True)),
        max_selected_sites=int(spec_cfg.get("max_selected_sites", 2)),
    )
    metrics_path = metrics.get("path")
    alerts = _alert_thresholds(metrics.get("alerts") or {})
    sites = build_registry(data["sites"]) if data.get("sites") else DEFAULT_JOB_SITES

    return SearchSettings(
        endpoint=str(search.get("endpoint", defaults.endpoint)),
        timeout_seconds=float(search.get("timeout_seconds", defaults.timeout_seconds)),
        default_max_results=int(search.get("default_max_results", defaults.default_max_results)),
        min_search_interval_seconds=float(
            search.get("min_search_interval_seconds", defaults.min_search_interval_seconds)
        ),
        max_query_length=int(search.get("max_query_length", defaults.max_query_length)),
        min_query_length=int(search.get("min_query_length", defaults.min_query_length)),
        specificity=specificity,
        metrics_max_events=int(metrics.get("max_events", defaults.metrics_max_events)),
        metrics_path=(ROOT_DIR / metrics_path) if metrics_path else None,
        alerts=alerts,
        sites=sites,
    )


def load_settings(path: Path | None = None) -> SearchSettings:
    """Settings from YAML merged over built-in defaults; missing file means defaults."""
    path = path or _settings_path()
    if not path.exists():
        log.debug("No settings file at %s — using defaults", path)
        return SearchSettings()
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    settings = settings_from_dict(data)
    log.debug("Loaded settings from %s (%d sites)", path.name, len(settings.sites))
    return settings


def get_credentials(env_getter=get_env) -> tuple[str, str]:
    """(api_key, engine_id) from the environment; either may be empty."""
    api_key = env_getter("GOOGLE_API_KEY")
    engine_id = env_getter("GOOGLE_CSE_ID")
    if not api_key or not engine_id:
        log.warning(
            "Google search credentials incomplete: api_key=%s, engine_id=%s",
            mask_secret(api_key),
            "set" if engine_id else "<missing>",
        )
    return api_key, engine_id
