"""Streamlit search page for the job search pipeline."""
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobsearch.config import get_env, load_settings
from jobsearch.errors import SearchError
from jobsearch.log import get_logger
from jobsearch.metrics import sink_from_settings
from jobsearch.models import EXPERIENCE_LEVELS, JOB_TYPES, SearchFilters
from jobsearch.pipeline import SearchConfig, preview_query, search_jobs, user_message
from jobsearch.report import format_search_metadata, result_card_html
from jobsearch.sites import QUICK_FILTERS
from jobsearch.sources import get_source
from jobsearch.throttle import SearchThrottle
from jobsearch.tiers import UserTier, available_sites_for_tier, tier_features

log = get_logger(__name__)

# ── Constants ────────────────────────────────────────────────────────────

_CSS = """
<style>
[data-testid="stAppViewContainer"] {
    background: linear-gradient(135deg, #e8eaf6 0%, #f3e5f5 40%, #e0f2f1 100%);
}
[data-testid="stMetric"] {
    background: rgba(255,255,255,0.6);
    padding: 0.75rem 1rem;
    border-radius: 12px;
    border: 1px solid rgba(255,255,255,0.4);
}
.result-card {
    padding: 0.75rem 1rem; margin-bottom: 0.6rem;
    background: rgba(255,255,255,0.65);
    border: 1px solid rgba(74,144,217,0.25);
    border-radius: 12px;
}
</style>
"""

_LEVEL_LABELS: dict[str, str] = {"": "Any level", "entry": "Entry level", "mid": "Mid level", "senior": "Senior level"}
_QUICK_LABELS: dict[str, str] = {
    "all_sites": "Tier default",
    "linkedin_only": "LinkedIn only",
    "indeed_only": "Indeed only",
    "tech_sites": "Tech boards",
    "remote_sites": "Remote boards",
}

# ── Helpers ──────────────────────────────────────────────────────────────


def _settings():
    if "_settings" not in st.session_state:
        st.session_state["_settings"] = load_settings()
    return st.session_state["_settings"]


def _metrics():
    if "_metrics" not in st.session_state:
        st.session_state["_metrics"] = sink_from_settings(_settings())
    return st.session_state["_metrics"]


def _throttle() -> SearchThrottle:
    if "_throttle" not in st.session_state:
        st.session_state["_throttle"] = SearchThrottle(_settings().min_search_interval_seconds)
    return st.session_state["_throttle"]


def _has_credentials() -> bool:
    return bool(get_env("GOOGLE_API_KEY") and get_env("GOOGLE_CSE_ID"))


def _render_results(outcome) -> None:
    if not outcome.success:
        err = outcome.error
        if err is not None and err.retryable:
            st.warning(user_message(err))
        else:
            st.error(user_message(err) if err is not None else "Search failed.")
        return

    data = outcome.data
    meta = format_search_metadata(data.context.get("results_received", 0), len(data.items))
    c1, c2, c3 = st.columns(3)
    c1.metric("Relevant", meta["filtered_count"])
    c2.metric("Received", meta["original_count"])
    c3.metric("Reported by API", data.total_results)
    for w in data.warnings:
        st.caption(w)

    if not data.items:
        st.info("No matching job postings. Try a broader query or fewer filters.")
        return
    for item in data.items:
        st.markdown(result_card_html(item), unsafe_allow_html=True)


# ── Page: Search ─────────────────────────────────────────────────────────


def page_search() -> None:
    st.header("Job Search")
    settings = _settings()

    with st.sidebar:
        tier = st.selectbox("Plan", [t.value for t in UserTier], index=0)
        features = tier_features(tier)
        st.caption(f"Sites per search: **{features['max_sites']}**")
        offline = st.toggle("Offline demo results", value=not _has_credentials())
        strict = st.toggle("Strict relevance filtering", value=False)
        use_exclusions = st.toggle("Exclude non-job content", value=True)

    available = [s.domain for s in available_sites_for_tier(
        UserTier.ENTERPRISE if features["advanced_filters"] else tier, settings.sites
    )]

    query = st.text_input("What job are you looking for?", placeholder="e.g. python developer")
    c1, c2 = st.columns(2)
    with c1:
        location = st.text_input("Location", placeholder="Anywhere")
        level = st.selectbox(
            "Experience", [""] + list(EXPERIENCE_LEVELS), format_func=lambda v: _LEVEL_LABELS[v]
        )
        remote = st.checkbox("Remote only")
    with c2:
        job_types = st.multiselect("Job type", list(JOB_TYPES))
        quick = st.radio("Sites", list(_QUICK_LABELS), format_func=lambda k: _QUICK_LABELS[k], horizontal=True)
        picked = st.multiselect(
            "Specific sites", available, default=[d for d in QUICK_FILTERS[quick] if d in available]
        )

    filters = SearchFilters(
        location=location or None,
        experience_level=level or None,
        job_types=tuple(job_types),
        selected_sites=tuple(picked) or None,
        remote=remote,
    )
    config = SearchConfig(
        tier=tier,
        max_results=settings.default_max_results,
        use_exclusions=use_exclusions,
        strict_filtering=strict,
    )

    if query.strip():
        try:
            with st.expander("Query preview"):
                st.code(preview_query(query, filters, config, settings), language=None)
        except SearchError as exc:
            st.caption(user_message(exc))

    if st.button("Search", type="primary", use_container_width=True):
        throttle = _throttle()
        if not throttle.try_acquire():
            st.warning(f"Please wait {throttle.remaining():.1f}s before searching again.")
            return
        try:
            source = get_source(settings, metrics=_metrics(), offline=offline)
        except SearchError as exc:
            st.error(user_message(exc))
            return
        try:
            with st.spinner("Searching…"):
                outcome = search_jobs(query, filters, config, source=source, settings=settings)
        finally:
            source.close()
        st.session_state["last_outcome"] = outcome

    if "last_outcome" in st.session_state:
        st.divider()
        _render_results(st.session_state["last_outcome"])


# ── Page: Monitoring ─────────────────────────────────────────────────────


def page_monitoring() -> None:
    st.header("API Monitoring")
    stats = _metrics().stats()
    c1, c2, c3 = st.columns(3)
    c1.metric("Requests", stats["total_requests"])
    c2.metric("Success rate", f"{stats['success_rate']:.0f}%")
    c3.metric("Avg response", f"{stats['avg_response_time_ms']} ms")
    for alert in stats["active_alerts"]:
        show = st.error if alert.severity in ("critical", "high") else st.warning
        show(f"**{alert.severity.upper()}**: {alert.message}")
        if alert.recommendations:
            st.caption(" · ".join(alert.recommendations))
    last = stats["last_error"]
    if last is not None:
        st.error(f"Last error: {last.error_code} at {last.timestamp}")
    rows = [
        {"time": e.timestamp, "status": e.status, "ms": round(e.response_time_ms), "results": e.result_count}
        for e in stats["recent"]
    ]
    if rows:
        st.dataframe(rows, use_container_width=True)


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_CSS, unsafe_allow_html=True)


def _wrap_search():
    _inject_css()
    page_search()


def _wrap_monitoring():
    _inject_css()
    page_monitoring()


pages = [
    st.Page(_wrap_search, title="Search", icon="🔎", url_path="search", default=True),
    st.Page(_wrap_monitoring, title="Monitoring", icon="📈", url_path="monitoring"),
]

nav = st.navigation(pages)
nav.run()
