from unittest.mock import MagicMock

from jobsearch.errors import AccessDenied, RateLimited, Timeout
from jobsearch.models import SearchOutcome, SearchResponse
from jobsearch.retry import backoff_delay, retry_search


def _ok():
    return SearchOutcome.ok(SearchResponse(items=[], total_results=0))


def test_retries_retryable_then_succeeds():
    run = MagicMock(side_effect=[SearchOutcome.failed(RateLimited(retry_after=5)), _ok()])
    sleep = MagicMock()
    outcome = retry_search(run, max_attempts=3, sleep=sleep)
    assert outcome.success
    assert run.call_count == 2
    sleep.assert_called_once_with(5)


def test_non_retryable_is_not_retried():
    run = MagicMock(return_value=SearchOutcome.failed(AccessDenied()))
    sleep = MagicMock()
    outcome = retry_search(run, sleep=sleep)
    assert not outcome.success
    run.assert_called_once()
    sleep.assert_not_called()


def test_gives_up_after_max_attempts():
    run = MagicMock(return_value=SearchOutcome.failed(Timeout()))
    sleep = MagicMock()
    outcome = retry_search(run, max_attempts=3, sleep=sleep)
    assert isinstance(outcome.error, Timeout)
    assert run.call_count == 3
    assert sleep.call_count == 2


def test_delay_capped():
    assert backoff_delay(RateLimited(retry_after=600), 1, max_delay=60) == 60


def test_exponential_when_no_hint():
    error = Timeout()
    error.retry_after = None
    assert [backoff_delay(error, n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]
