import logging

from jobsearch.errors import SearchError
from jobsearch.log import RedactingFilter, mask_secret, redact


def test_redacts_key_parameter():
    url = "https://www.googleapis.com/customsearch/v1?key=AIzaSyABC123&cx=1&q=python"
    assert redact(url) == "https://www.googleapis.com/customsearch/v1?key=***&cx=1&q=python"


def test_redacts_configured_secret(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "super-secret-value")
    assert redact("failed with super-secret-value") == "failed with ***"


def test_short_env_values_left_alone(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "abc")
    assert redact("abc def") == "abc def"


def test_error_messages_are_redacted():
    assert "leaky" not in SearchError("GET /v1?key=leaky failed").message


def test_mask_secret():
    assert mask_secret("") == "<missing>"
    assert mask_secret("abcdef") == "<set, 6 chars>"


def test_filter_rewrites_record():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "GET %s", ("/v1?key=leaky",), None)
    assert RedactingFilter().filter(record)
    assert record.getMessage() == "GET /v1?key=***"
