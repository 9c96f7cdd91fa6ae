"""Shared fixtures for the search pipeline tests."""
import json
import os
from unittest.mock import MagicMock

import pytest
import requests

os.environ.setdefault("JOBSEARCH_LOG_TO_FILE", "0")

from jobsearch.config import SearchSettings
from jobsearch.models import SearchResultItem


def make_response(status: int = 200, body=None, headers=None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r._content = json.dumps(body if body is not None else {}).encode()
    r.headers.update(headers or {})
    r.url = "https://www.googleapis.com/customsearch/v1?key=SECRET-KEY-123&q=test"
    return r


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings()


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api_body() -> dict:
    return {
        "searchInformation": {"totalResults": "1234"},
        "items": [
            {
                "title": "Software Engineer - Apply Now",
                "snippet": "5+ years experience, qualifications: Python",
                "link": "https://linkedin.com/jobs/123",
            },
            {
                "title": "Software Engineering — Wikipedia",
                "snippet": "Software engineering is...",
                "link": "https://en.wikipedia.org/wiki/Software_engineering",
            },
        ],
    }


@pytest.fixture
def job_item() -> SearchResultItem:
    return SearchResultItem(
        title="Software Engineer - Apply Now",
        snippet="5+ years experience, qualifications: ...",
        url="https://linkedin.com/jobs/123",
    )


@pytest.fixture
def wiki_item() -> SearchResultItem:
    return SearchResultItem(
        title="Software Engineering — Wikipedia",
        snippet="Software engineering is...",
        url="https://en.wikipedia.org/wiki/Software_engineering",
    )


@pytest.fixture(autouse=True)
def _no_credentials(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_CSE_ID", raising=False)
