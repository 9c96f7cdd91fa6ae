import threading
from unittest.mock import MagicMock

import pytest
import requests

from jobsearch.errors import (
    AccessDenied,
    Cancelled,
    InvalidRequest,
    NetworkError,
    RateLimited,
    ServiceUnavailable,
    Timeout,
    Unknown,
)
from jobsearch.metrics import InMemoryMetricsSink
from jobsearch.sources import CancelToken, GoogleSearchSource, MockSource, get_source
from jobsearch.sources.google_cse import clamp_num

from tests.conftest import make_response

API_KEY = "SECRET-KEY-123"


def _source(session, **kwargs):
    return GoogleSearchSource(API_KEY, "engine-1", session=session, **kwargs)


def test_missing_credentials():
    with pytest.raises(AccessDenied):
        GoogleSearchSource("", "engine-1")
    with pytest.raises(AccessDenied):
        GoogleSearchSource(API_KEY, "")


@pytest.mark.parametrize("asked, sent", [(25, 10), (10, 10), (3, 3), (0, 1), (-4, 1)])
def test_num_is_clamped(asked, sent):
    assert clamp_num(asked) == sent


def test_request_parameters(session, api_body):
    session.get.return_value = make_response(200, api_body)
    _source(session, timeout=12).search("python jobs", max_results=25)

    args, kwargs = session.get.call_args
    assert args[0] == "https://www.googleapis.com/customsearch/v1"
    assert kwargs["timeout"] == 12
    assert kwargs["params"] == {
        "key": API_KEY, "cx": "engine-1", "q": "python jobs",
        "num": 10, "start": 1, "safe": "off", "sort": "date",
    }


def test_success_parses_items_and_quota(session, api_body):
    session.get.return_value = make_response(
        200, api_body, headers={"x-daily-quota-used": "95", "x-requests-remaining": "3"}
    )
    page = _source(session).search("software engineer")

    assert page.total_results == 1234
    assert [i.url for i in page.items] == [
        "https://linkedin.com/jobs/123",
        "https://en.wikipedia.org/wiki/Software_engineering",
    ]
    assert page.quota.warnings() == [
        "Critical: Daily quota usage above 90%",
        "Warning: Less than 10 requests remaining",
    ]


def test_missing_items_means_empty_page(session):
    session.get.return_value = make_response(200, {"searchInformation": {"totalResults": "0"}})
    page = _source(session).search("obscure query")
    assert page.items == []
    assert page.total_results == 0


def test_malformed_json(session):
    response = make_response(200)
    response._content = b"<html>not json</html>"
    session.get.return_value = response
    with pytest.raises(Unknown):
        _source(session).search("python")


class TestStatusClassification:
    def test_rate_limited_with_retry_after(self, session):
        session.get.return_value = make_response(429, headers={"Retry-After": "120"})
        with pytest.raises(RateLimited) as exc:
            _source(session).search("python")
        assert exc.value.retryable
        assert exc.value.retry_after == 120
        assert exc.value.status_code == 429

    def test_rate_limited_default_delay(self, session):
        session.get.return_value = make_response(429)
        with pytest.raises(RateLimited) as exc:
            _source(session).search("python")
        assert exc.value.retry_after == 60

    @pytest.mark.parametrize("status", [401, 403])
    def test_access_denied(self, session, status):
        session.get.return_value = make_response(
            status, {"error": {"message": "API key not valid"}}
        )
        with pytest.raises(AccessDenied) as exc:
            _source(session).search("python")
        assert not exc.value.retryable
        assert exc.value.retry_after is None
        assert exc.value.details["api_message"] == "API key not valid"
        assert exc.value.details["possible_causes"]

    def test_bad_request(self, session):
        session.get.return_value = make_response(400)
        with pytest.raises(InvalidRequest):
            _source(session).search("python")

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_server_errors(self, session, status):
        session.get.return_value = make_response(status)
        with pytest.raises(ServiceUnavailable) as exc:
            _source(session).search("python")
        assert exc.value.retry_after == 30

    def test_unexpected_client_error(self, session):
        session.get.return_value = make_response(404)
        with pytest.raises(Unknown):
            _source(session).search("python")


class TestTransportClassification:
    def test_timeout(self, session):
        session.get.side_effect = requests.Timeout("read timed out")
        with pytest.raises(Timeout) as exc:
            _source(session).search("python")
        assert exc.value.retry_after == 10

    def test_connection_error(self, session):
        session.get.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /customsearch/v1?key=SECRET-KEY-123&q=python"
        )
        with pytest.raises(NetworkError) as exc:
            _source(session).search("python")
        assert exc.value.retry_after == 5
        assert API_KEY not in str(exc.value)
        assert API_KEY not in repr(exc.value.to_dict())

    def test_invalid_url(self, session):
        session.get.side_effect = requests.exceptions.InvalidURL("bad url")
        with pytest.raises(InvalidRequest):
            _source(session).search("python")

    def test_unexpected_exception(self, session):
        session.get.side_effect = RuntimeError(f"boom ?key={API_KEY}")
        with pytest.raises(Unknown) as exc:
            _source(session).search("python")
        assert API_KEY not in exc.value.message


class TestCancellation:
    def test_already_cancelled(self, session):
        token = CancelToken()
        token.cancel()
        with pytest.raises(Cancelled):
            _source(session).search("python", cancel=token)
        session.get.assert_not_called()

    def test_cancel_in_flight(self, session):
        release = threading.Event()
        session.get.side_effect = lambda *a, **kw: release.wait(5)
        token = CancelToken()
        source = _source(session)
        timer = threading.Timer(0.1, token.cancel)
        timer.start()
        try:
            with pytest.raises(Cancelled):
                source.search("python", cancel=token)
        finally:
            release.set()
            timer.cancel()
            source.close()

    def test_deadline_with_token(self, session):
        release = threading.Event()
        session.get.side_effect = lambda *a, **kw: release.wait(5)
        source = _source(session, timeout=0.2)
        try:
            with pytest.raises(Timeout):
                source.search("python", cancel=CancelToken())
        finally:
            release.set()
            source.close()

    def test_deadline_without_token(self, session):
        release = threading.Event()
        session.get.side_effect = lambda *a, **kw: release.wait(5)
        sink = InMemoryMetricsSink()
        source = _source(session, timeout=0.2, metrics=sink)
        try:
            with pytest.raises(Timeout):
                source.search("python")
        finally:
            release.set()
            source.close()
        assert sink.events()[0].error_code == "TIMEOUT_ERROR"

    def test_token_not_cancelled_returns_page(self, session, api_body):
        session.get.return_value = make_response(200, api_body)
        source = _source(session)
        try:
            page = source.search("python", cancel=CancelToken())
        finally:
            source.close()
        assert len(page.items) == 2


class TestMetrics:
    def test_success_event(self, session, api_body):
        sink = InMemoryMetricsSink()
        session.get.return_value = make_response(200, api_body)
        _source(session, metrics=sink).search("python")

        (event,) = sink.events()
        assert event.status == "success"
        assert event.result_count == 2
        assert event.total_results == 1234
        assert event.response_time_ms >= 0

    def test_success_event_carries_quota_usage(self, session, api_body):
        sink = InMemoryMetricsSink()
        session.get.return_value = make_response(200, api_body, headers={"x-daily-quota-used": "92"})
        _source(session, metrics=sink).search("python")
        assert sink.events()[0].quota_used == 92

    def test_failure_event(self, session):
        sink = InMemoryMetricsSink()
        session.get.return_value = make_response(503)
        with pytest.raises(ServiceUnavailable):
            _source(session, metrics=sink).search("python")

        (event,) = sink.events()
        assert event.status == "error"
        assert event.error_code == "SERVICE_UNAVAILABLE"
        assert event.status_code == 503
        assert event.retryable is True

    def test_failing_sink_does_not_break_search(self, session, api_body):
        sink = MagicMock()
        sink.record.side_effect = OSError("disk full")
        session.get.return_value = make_response(200, api_body)
        page = _source(session, metrics=sink).search("python")
        assert len(page.items) == 2


class TestGetSource:
    def test_offline_uses_mock(self, settings):
        assert isinstance(get_source(settings, offline=True), MockSource)

    def test_missing_credentials_raise(self, settings):
        with pytest.raises(AccessDenied):
            get_source(settings, env_getter=lambda key, default="": "")

    def test_credentials_from_env_getter(self, settings):
        env = {"GOOGLE_API_KEY": API_KEY, "GOOGLE_CSE_ID": "engine-9"}
        source = get_source(settings, env_getter=lambda key, default="": env.get(key, default))
        try:
            assert isinstance(source, GoogleSearchSource)
            assert source.engine_id == "engine-9"
            assert API_KEY not in repr(source)
        finally:
            source.close()
