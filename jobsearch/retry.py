"""Caller-side retries for searches that fail with a retryable error.

The pipeline itself never retries; CLI and UI callers opt in here.
"""
from __future__ import annotations

import time
from typing import Callable

from jobsearch.errors import SearchError
from jobsearch.log import get_logger
from jobsearch.models import SearchOutcome

log = get_logger(__name__)


def backoff_delay(
    error: SearchError,
    attempt: int,
    *,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    backoff_factor: float = 2.0,
) -> float:
    """Seconds to wait before the next attempt; the error's hint wins when present."""
    if error.retry_after is not None:
        return min(error.retry_after, max_delay)
    return min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)


def retry_search(
    run: Callable[[], SearchOutcome],
    *,
    max_attempts: int = 3,
    max_delay: float = 60.0,
    sleep: Callable[[float], None] = time.sleep,
) -> SearchOutcome:
    """Re-run a pipeline call while its outcome carries a retryable error."""
    outcome = run()
    attempt = 1
    while not outcome.success and attempt < max_attempts:
        error = outcome.error
        if error is None or not error.retryable:
            break
        delay = backoff_delay(error, attempt, max_delay=max_delay)
        log.warning(
            "Search attempt %d/%d failed (%s), retrying in %.1fs",
            attempt, max_attempts, error.code, delay,
        )
        sleep(delay)
        attempt += 1
        outcome = run()
    return outcome
