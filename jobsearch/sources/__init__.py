from .base import CancelToken, SearchSource
from .google_cse import GoogleSearchSource
from .mock import MockSource

from jobsearch.config import SearchSettings, get_credentials, get_env
from jobsearch.log import get_logger
from jobsearch.metrics import MetricsSink

log = get_logger(__name__)

__all__ = [
    "CancelToken", "SearchSource", "GoogleSearchSource", "MockSource",
    "get_source",
]


def get_source(
    settings: SearchSettings,
    env_getter=get_env,
    *,
    metrics: MetricsSink | None = None,
    offline: bool = False,
) -> SearchSource:
    """Google search when credentials exist; MockSource only when offline is requested.

    Missing credentials without offline mode raise AccessDenied.
    """
    if offline:
        log.info("Offline mode — using MockSource")
        return MockSource(metrics=metrics)

    api_key, engine_id = get_credentials(env_getter)
    source = GoogleSearchSource(
        api_key,
        engine_id,
        endpoint=settings.endpoint,
        timeout=settings.timeout_seconds,
        metrics=metrics,
    )
    log.info("Registered source: Google Custom Search")
    return source
