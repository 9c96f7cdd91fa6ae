"""Search error taxonomy and transport error classification."""
from __future__ import annotations

from typing import Any

import requests

from jobsearch.log import redact


class SearchError(Exception):
    """Base class for every failure surfaced by the search pipeline.

    ``retry_after`` is a suggested delay in seconds and is only set for
    retryable kinds.
    """

    code: str = "UNKNOWN_ERROR"
    kind: str = "unknown"
    retryable: bool = False
    default_retry_after: float | None = None
    severity: str = "medium"
    default_message: str = "An unknown error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        retry_after: float | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = redact(message or self.default_message)
        super().__init__(self.message)
        self.status_code = status_code
        self.details = details or {}
        if self.retryable:
            self.retry_after = retry_after if retry_after is not None else self.default_retry_after
        else:
            self.retry_after = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
            "retry_after": self.retry_after,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyQuery(SearchError):
    code = "EMPTY_QUERY"
    kind = "empty-query"
    severity = "low"
    default_message = "Please enter a search term"


class MalformedQuery(SearchError):
    code = "MALFORMED_QUERY"
    kind = "malformed-query"
    severity = "low"
    default_message = "The search query is malformed"


class RateLimited(SearchError):
    code = "RATE_LIMIT_EXCEEDED"
    kind = "rate-limited"
    retryable = True
    default_retry_after = 60.0
    default_message = "Rate limit exceeded. Please wait before making another request."


class AccessDenied(SearchError):
    code = "API_ACCESS_DENIED"
    kind = "access-denied"
    severity = "high"
    default_message = "API access denied. Please check your API key and search engine configuration."


class InvalidRequest(SearchError):
    code = "INVALID_REQUEST"
    kind = "invalid-request"
    default_message = "Invalid search request. Please check your search terms and filters."


class NetworkError(SearchError):
    code = "NETWORK_ERROR"
    kind = "network"
    retryable = True
    default_retry_after = 5.0
    severity = "high"
    default_message = "Unable to connect to search service. Please check your internet connection."


class Timeout(SearchError):
    code = "TIMEOUT_ERROR"
    kind = "timeout"
    retryable = True
    default_retry_after = 10.0
    default_message = "Search request timed out. Please try again."


class ServiceUnavailable(SearchError):
    code = "SERVICE_UNAVAILABLE"
    kind = "service-unavailable"
    retryable = True
    default_retry_after = 30.0
    severity = "high"
    default_message = "Search service is temporarily unavailable. Please try again later."


class Cancelled(SearchError):
    code = "SEARCH_CANCELLED"
    kind = "cancelled"
    severity = "low"
    default_message = "Search was cancelled"


class Unknown(SearchError):
    pass


_ACCESS_DENIED_CAUSES: list[str] = [
    "API key is invalid or missing",
    "Custom Search Engine ID is invalid",
    "API key lacks Custom Search API permissions",
    "Daily quota exceeded",
    "Billing not enabled on Google Cloud project",
]


_BAD_REQUEST_EXCEPTIONS: tuple[type[requests.RequestException], ...] = (
    requests.exceptions.URLRequired,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def error_for_status(response: requests.Response) -> SearchError | None:
    """Map an HTTP response to a SearchError, or None for 2xx/3xx."""
    status = response.status_code
    if status < 400:
        return None
    try:
        body = response.json()
    except ValueError:
        body = {}
    api_error = body.get("error") if isinstance(body, dict) else None
    api_message = api_error.get("message", "") if isinstance(api_error, dict) else ""
    details: dict[str, Any] = {"api_message": api_message} if api_message else {}

    if status == 429:
        return RateLimited(
            retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            status_code=status,
            details=details,
        )
    if status in (401, 403):
        details["possible_causes"] = list(_ACCESS_DENIED_CAUSES)
        return AccessDenied(status_code=status, details=details)
    if status == 400:
        return InvalidRequest(status_code=status, details=details)
    if status >= 500:
        return ServiceUnavailable(status_code=status, details=details)
    return Unknown(api_message or f"Unexpected HTTP status {status}", status_code=status, details=details)


def classify_exception(exc: BaseException) -> SearchError:
    """Translate a transport-level exception into the search taxonomy."""
    if isinstance(exc, SearchError):
        return exc
    if isinstance(exc, requests.Timeout):
        return Timeout(details={"error": exc.__class__.__name__})
    if isinstance(exc, requests.ConnectionError):
        return NetworkError(details={"error": exc.__class__.__name__})
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return error_for_status(exc.response) or Unknown(str(exc))
    if isinstance(exc, _BAD_REQUEST_EXCEPTIONS):
        return InvalidRequest(str(exc))
    if isinstance(exc, requests.RequestException):
        return NetworkError(details={"error": exc.__class__.__name__})
    return Unknown(str(exc) or exc.__class__.__name__)
