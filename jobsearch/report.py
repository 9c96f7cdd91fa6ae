"""Render search outcomes as markdown (CLI output, saved reports) and UI result cards."""
from __future__ import annotations

import html
from datetime import datetime, timezone
from pathlib import Path

from jobsearch.config import REPORTS_DIR
from jobsearch.log import get_logger
from jobsearch.models import SearchOutcome, SearchResultItem
from jobsearch.pipeline import user_message
from jobsearch.sites import site_name_for_url

log = get_logger(__name__)


def _clip(text: str, limit: int) -> str:
    return text[:limit] + ("…" if len(text) > limit else "")


def format_search_metadata(original_count: int, filtered_count: int) -> dict[str, object]:
    efficiency = round(filtered_count / original_count * 100) if original_count else 0
    return {
        "original_count": original_count,
        "filtered_count": filtered_count,
        "efficiency": efficiency,
        "has_filtering": original_count != filtered_count,
    }


def result_card_html(item: SearchResultItem) -> str:
    """HTML card for one result; every value from the search API is escaped."""
    site = site_name_for_url(item.url)
    site_label = "" if site == item.url else f" · {html.escape(site)}"
    href = item.url if item.url.lower().startswith(("http://", "https://")) else "#"
    return (
        f'<div class="result-card"><strong>'
        f'<a href="{html.escape(href, quote=True)}" target="_blank">{html.escape(item.title)}</a>'
        f'</strong><span style="color:#666">{site_label}</span><br>'
        f'<span style="font-size:0.9rem">{html.escape(item.snippet)}</span></div>'
    )


def build_results_report(outcome: SearchOutcome, query: str) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M")
    lines: list[str] = [f"# Job Search — {query}", "", f"_{date} UTC_", ""]

    if not outcome.success or outcome.data is None:
        error = outcome.error
        lines.append("**Search failed.**")
        lines.append("")
        if error is not None:
            lines.append(f"- {user_message(error)}")
            lines.append(f"- Code: `{error.code}`")
        lines.append("")
        return "\n".join(lines)

    data = outcome.data
    ctx = data.context
    meta = format_search_metadata(ctx.get("results_received", 0), len(data.items))
    lines.append(
        f"**{meta['filtered_count']}** relevant of **{meta['original_count']}** received "
        f"({meta['efficiency']}%) | **{data.total_results}** reported by the search API"
    )
    lines.append("")
    lines.append(f"- **Tier:** {ctx.get('tier', '')}")
    sites = ctx.get("target_sites") or []
    lines.append(f"- **Sites:** {', '.join(sites) if sites else 'whole web'}")
    lines.append(f"- **Query:** `{ctx.get('final_query', '')}`")
    for warning in data.warnings:
        lines.append(f"- _{warning}_")
    lines.append("")

    if data.items:
        lines.append("| # | Title | Site | Link |")
        lines.append("|--:|-------|------|------|")
        for i, item in enumerate(data.items, 1):
            title = _clip(item.title.replace("|", "/"), 60)
            site = site_name_for_url(item.url)
            if site == item.url:
                site = "—"
            lines.append(f"| {i} | {title} | {site} | [Open]({item.url}) |")
        lines.append("")
        for item in data.items:
            lines.append(f"### {item.title}")
            lines.append(_clip(item.snippet, 200))
            lines.append("")
    else:
        lines.append("No matching job postings. Try a broader query or fewer filters.")
        lines.append("")

    log.debug("Built results report: %d items", len(data.items))
    return "\n".join(lines)


def write_results_report(content: str) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = REPORTS_DIR / f"search_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
