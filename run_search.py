#!/usr/bin/env python3
"""Command-line job search: build the query, call the search API, print ranked results."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobsearch.config import load_settings
from jobsearch.errors import SearchError
from jobsearch.log import get_logger
from jobsearch.metrics import sink_from_settings
from jobsearch.models import EXPERIENCE_LEVELS, JOB_TYPES, SearchFilters
from jobsearch.pipeline import SearchConfig, preview_query, search_jobs, user_message
from jobsearch.report import build_results_report, write_results_report
from jobsearch.retry import retry_search
from jobsearch.sources import get_source
from jobsearch.tiers import UserTier

log = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Search job boards through Google Custom Search.")
    p.add_argument("query", help="free-text query, e.g. 'python developer'")
    p.add_argument("--location")
    p.add_argument("--level", choices=EXPERIENCE_LEVELS, dest="experience_level")
    p.add_argument("--type", choices=JOB_TYPES, action="append", dest="job_types", default=[])
    p.add_argument("--site", action="append", dest="sites", default=[],
                   help="restrict to a domain (repeatable)")
    p.add_argument("--remote", action="store_true")
    p.add_argument("--tier", choices=[t.value for t in UserTier], default=UserTier.FREE.value)
    p.add_argument("--max-results", type=int, default=None)
    p.add_argument("--exclude", action="append", dest="exclusions", default=[],
                   help="custom exclusion term (repeatable); replaces the broad set")
    p.add_argument("--no-exclusions", action="store_true")
    p.add_argument("--strict", action="store_true", help="strict relevance filtering")
    p.add_argument("--preview", action="store_true", help="print the final query and exit")
    p.add_argument("--offline", action="store_true", help="use canned results, no API call")
    p.add_argument("--retries", type=int, default=1, help="attempts for retryable failures")
    p.add_argument("--save", action="store_true", help="write a markdown report to reports/")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = load_settings()

    filters = SearchFilters(
        location=args.location,
        experience_level=args.experience_level,
        job_types=tuple(args.job_types),
        selected_sites=tuple(args.sites) or None,
        remote=args.remote,
    )
    config = SearchConfig(
        tier=args.tier,
        max_results=args.max_results or settings.default_max_results,
        use_exclusions=not args.no_exclusions,
        custom_exclusions=tuple(args.exclusions) or None,
        strict_filtering=args.strict,
    )

    if args.preview:
        try:
            print(preview_query(args.query, filters, config, settings))
        except SearchError as exc:
            print(user_message(exc), file=sys.stderr)
            return 2
        return 0

    metrics = sink_from_settings(settings)
    try:
        source = get_source(settings, metrics=metrics, offline=args.offline)
    except SearchError as exc:
        print(user_message(exc), file=sys.stderr)
        return 2

    try:
        outcome = retry_search(
            lambda: search_jobs(
                args.query, filters, config, source=source, metrics=metrics, settings=settings,
            ),
            max_attempts=max(args.retries, 1),
        )
    finally:
        source.close()

    report = build_results_report(outcome, args.query)
    print(report)
    if args.save:
        log.info("Saved: %s", write_results_report(report))
    return 0 if outcome.success else 1


if __name__ == "__main__":
    sys.exit(main())
