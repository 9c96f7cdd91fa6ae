"""Search API metrics: one event per search call, recorded through an injected sink."""
from __future__ import annotations

import fcntl
import json
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from jobsearch.config import AlertThresholds, SearchSettings
from jobsearch.log import get_logger

log = get_logger(__name__)


@dataclass
class MetricEvent:
    status: str  # "success" | "error"
    response_time_ms: float
    query: str
    total_results: int = 0
    result_count: int = 0
    error_code: str | None = None
    error_message: str | None = None
    status_code: int | None = None
    retryable: bool | None = None
    quota_used: int | None = None  # daily quota used, percent
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    )


class MetricsSink(Protocol):
    def record(self, event: MetricEvent) -> None:
        ...


class NullMetricsSink:
    def record(self, event: MetricEvent) -> None:
        return None


class LoggingMetricsSink:
    def record(self, event: MetricEvent) -> None:
        if event.status == "success":
            log.info(
                "search ok in %.0fms, %d results (%d reported)",
                event.response_time_ms, event.result_count, event.total_results,
            )
        else:
            log.warning(
                "search failed in %.0fms: %s %s",
                event.response_time_ms, event.error_code, event.error_message,
            )


# ── Alerts ───────────────────────────────────────────────────────────────

_ERROR_RATE_ADVICE = (
    "Check API key validity",
    "Verify the Custom Search Engine configuration",
    "Check the daily quota",
    "Review recent query patterns",
)
_RESPONSE_TIME_ADVICE = (
    "Check network connectivity",
    "Simplify long or heavily filtered queries",
    "Check the Google API status page",
    "Consider caching repeated searches",
)
_QUOTA_ADVICE = (
    "Reduce search frequency",
    "Raise the daily quota in the Google Cloud console",
)


@dataclass
class MetricsAlert:
    type: str  # "error_rate" | "response_time" | "quota_usage"
    severity: str  # "medium" | "high" | "critical"
    message: str
    threshold: float
    current_value: float
    timestamp: str
    recommendations: tuple[str, ...] = ()


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def in_window(events: list[MetricEvent], end: MetricEvent, seconds: float) -> list[MetricEvent]:
    """Events no older than ``seconds`` before ``end`` and not after it."""
    now = _parse_ts(end.timestamp)
    return [e for e in events if 0 <= (now - _parse_ts(e.timestamp)).total_seconds() <= seconds]


def check_alerts(
    event: MetricEvent, window: list[MetricEvent], thresholds: AlertThresholds
) -> list[MetricsAlert]:
    """Alerts raised by ``event``.

    ``window`` holds the events of the error-rate window ending at ``event``,
    ``event`` included (see :func:`in_window`).
    """
    alerts: list[MetricsAlert] = []
    if len(window) >= thresholds.min_requests:
        rate = sum(1 for e in window if e.status != "success") / len(window)
        if rate > thresholds.error_rate:
            alerts.append(MetricsAlert(
                type="error_rate",
                severity="critical" if rate > thresholds.critical_error_rate else "high",
                message=f"Error rate is {rate:.1%} over the last {len(window)} requests",
                threshold=thresholds.error_rate,
                current_value=rate,
                timestamp=event.timestamp,
                recommendations=_ERROR_RATE_ADVICE,
            ))

    if event.status == "success" and event.response_time_ms > thresholds.response_time_ms:
        alerts.append(MetricsAlert(
            type="response_time",
            severity="critical" if event.response_time_ms > thresholds.critical_response_time_ms else "medium",
            message=f"Slow response: {event.response_time_ms:.0f}ms",
            threshold=thresholds.response_time_ms,
            current_value=event.response_time_ms,
            timestamp=event.timestamp,
            recommendations=_RESPONSE_TIME_ADVICE,
        ))

    if event.quota_used is not None and event.quota_used > thresholds.quota_usage:
        alerts.append(MetricsAlert(
            type="quota_usage",
            severity="critical" if event.quota_used > thresholds.critical_quota_usage else "high",
            message=f"Daily quota usage at {event.quota_used}%",
            threshold=thresholds.quota_usage,
            current_value=float(event.quota_used),
            timestamp=event.timestamp,
            recommendations=_QUOTA_ADVICE,
        ))
    return alerts


def find_alerts(events: list[MetricEvent], thresholds: AlertThresholds) -> list[MetricsAlert]:
    """Replay ``events`` oldest first and collect every alert they raise."""
    out: list[MetricsAlert] = []
    times = [_parse_ts(e.timestamp) for e in events]
    start = 0
    for i, event in enumerate(events):
        while (times[i] - times[start]).total_seconds() > thresholds.window_seconds:
            start += 1
        out.extend(check_alerts(event, events[start: i + 1], thresholds))
    return out


def active_alerts(
    alerts: list[MetricsAlert], active_seconds: float, now: datetime | None = None
) -> list[MetricsAlert]:
    now = now or datetime.now(timezone.utc)
    return [a for a in alerts if (now - _parse_ts(a.timestamp)).total_seconds() <= active_seconds]


def _log_alerts(alerts: list[MetricsAlert]) -> None:
    for alert in alerts:
        if alert.severity == "critical":
            log.error("ALERT %s: %s", alert.type, alert.message)
        elif alert.severity == "high":
            log.warning("ALERT %s: %s", alert.type, alert.message)
        else:
            log.info("ALERT %s: %s", alert.type, alert.message)


def summarize(
    events: list[MetricEvent],
    recent: int = 10,
    thresholds: AlertThresholds | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Totals over ``events``; with ``thresholds`` also the alerts still active at ``now``."""
    if not events:
        return {
            "total_requests": 0,
            "success_rate": 0.0,
            "avg_response_time_ms": 0,
            "last_error": None,
            "recent": [],
            "active_alerts": [],
        }
    successes = sum(1 for e in events if e.status == "success")
    errors = [e for e in events if e.status != "success"]
    return {
        "total_requests": len(events),
        "success_rate": successes / len(events) * 100,
        "avg_response_time_ms": round(sum(e.response_time_ms for e in events) / len(events)),
        "last_error": errors[-1] if errors else None,
        "recent": events[-recent:],
        "active_alerts": (
            active_alerts(find_alerts(events, thresholds), thresholds.active_seconds, now)
            if thresholds is not None else []
        ),
    }


class InMemoryMetricsSink:
    """Keeps the newest ``max_events`` events."""

    def __init__(self, max_events: int = 1000, alerts: AlertThresholds | None = None) -> None:
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        self.max_events = max_events
        self.alerts = alerts
        self._events: deque[MetricEvent] = deque(maxlen=max_events)

    def record(self, event: MetricEvent) -> None:
        self._events.append(event)
        if self.alerts is not None:
            window = in_window(list(self._events), event, self.alerts.window_seconds)
            _log_alerts(check_alerts(event, window, self.alerts))

    def events(self) -> list[MetricEvent]:
        return list(self._events)

    def recent(self, count: int = 10) -> list[MetricEvent]:
        return list(self._events)[-count:]

    def stats(self) -> dict[str, Any]:
        return summarize(list(self._events), thresholds=self.alerts)

    def clear(self) -> None:
        self._events.clear()


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


def _parse_lines(lines: list[str]) -> list[MetricEvent]:
    out: list[MetricEvent] = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            event = MetricEvent(**json.loads(line))
            _parse_ts(event.timestamp)
        except (ValueError, TypeError) as exc:
            log.debug("Skipping bad metrics line: %s", exc)
            continue
        out.append(event)
    return out


class JsonlMetricsSink:
    """Appends events to a JSON-lines file, trimming it to the newest ``max_events``."""

    def __init__(self, path: Path, max_events: int = 1000, alerts: AlertThresholds | None = None) -> None:
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        self.path = Path(path)
        self.max_events = max_events
        self.alerts = alerts

    def record(self, event: MetricEvent) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a+", encoding="utf-8") as f:
            _lock(f)
            f.write(json.dumps(asdict(event)) + "\n")
            f.flush()
            f.seek(0)
            lines = f.readlines()
            if len(lines) > self.max_events:
                f.seek(0)
                f.truncate()
                f.writelines(lines[-self.max_events:])
            _unlock(f)
        if self.alerts is not None:
            history = _parse_lines(lines[-self.max_events:])
            window = in_window(history, event, self.alerts.window_seconds)
            _log_alerts(check_alerts(event, window, self.alerts))

    def events(self) -> list[MetricEvent]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            lines = f.readlines()
            _unlock(f)
        return _parse_lines(lines)

    def stats(self) -> dict[str, Any]:
        return summarize(self.events(), thresholds=self.alerts)


def emit(sink: MetricsSink | None, event: MetricEvent) -> None:
    """Fire-and-forget: a failing sink never affects the search."""
    if sink is None:
        return
    try:
        sink.record(event)
    except Exception as exc:
        log.warning("Metrics sink %s failed: %s", sink.__class__.__name__, exc)


def sink_from_settings(settings: SearchSettings) -> MetricsSink:
    if settings.metrics_path is not None:
        return JsonlMetricsSink(settings.metrics_path, settings.metrics_max_events, settings.alerts)
    return InMemoryMetricsSink(settings.metrics_max_events, settings.alerts)
