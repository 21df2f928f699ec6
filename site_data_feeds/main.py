from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Any, Sequence

from site_data_feeds.config import FeedConfig, load_env_file, normalize_property_id
from site_data_feeds.errors import ConfigurationError
from site_data_feeds.pipelines import run_ga4_pipeline, run_sheets_pipeline, run_topics_pipeline


EXIT_CONFIG = 2

# argparse dest -> FeedConfig field
GA4_OVERRIDES = {
    "property_id": "ga4_property_id",
    "credentials_path": "ga4_credentials_path",
    "days": "ga4_lookback_days",
    "authors_dim": "ga4_authors_dim",
    "top_referrers": "ga4_top_referrers",
    "top_authors": "ga4_top_authors",
    "exclude_not_set_authors": "ga4_exclude_not_set_authors",
    "out": "ga4_output_path",
}
TOPICS_OVERRIDES = {
    "api": "content_api_url",
    "token": "content_api_token",
    "path": "content_api_path",
    "since_hours": "content_since_hours",
    "page_size": "content_page_size",
    "max_pages": "content_max_pages",
    "items_key": "content_items_key",
    "sample_size": "topics_sample_size",
    "out": "topics_output_path",
}
SHEETS_OVERRIDES = {
    "sheets_id": "sheets_id",
    "range": "sheets_range",
    "sa": "sheets_credentials_path",
    "out": "sheets_output_path",
}


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch analytics and content feeds for the static site.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ga4 = subparsers.add_parser("ga4", help="Daily GA4 KPIs with top referrers and authors.")
    ga4.add_argument("--property-id", dest="property_id", help="GA4 property ID (default: $GA4_PROPERTY_ID).")
    ga4.add_argument(
        "--credentials",
        dest="credentials_path",
        help="Service-account JSON path (default: $GA4_CREDENTIALS_PATH, or base64 $GCP_SA_JSON).",
    )
    ga4.add_argument("--days", type=int, help="Lookback window in days ending yesterday (default: 7).")
    ga4.add_argument("--authors-dim", dest="authors_dim", help="Preferred author custom dimension.")
    ga4.add_argument("--top-referrers", dest="top_referrers", type=int, help="Referrers kept per day.")
    ga4.add_argument("--top-authors", dest="top_authors", type=int, help="Authors kept per day.")
    not_set_group = ga4.add_mutually_exclusive_group()
    not_set_group.add_argument(
        "--exclude-not-set-authors",
        dest="exclude_not_set_authors",
        action="store_true",
        help="Drop the '(not set)' author value.",
    )
    not_set_group.add_argument(
        "--keep-not-set-authors",
        dest="exclude_not_set_authors",
        action="store_false",
        help="Keep the '(not set)' author value.",
    )
    ga4.set_defaults(exclude_not_set_authors=None)
    ga4.add_argument("--out", help="Output JSON path (default: data/ga4.json).")

    topics = subparsers.add_parser("topics", help="Tag counts over recently published articles.")
    topics.add_argument("--api", help="Base API URL (default: $CONTENT_API_URL).")
    topics.add_argument("--token", help="Bearer token (default: $CONTENT_API_TOKEN).")
    topics.add_argument("--path", help="Endpoint path (default: /articles).")
    topics.add_argument("--since-hours", dest="since_hours", type=float, help="Lookback in hours (default: 24).")
    topics.add_argument("--page-size", dest="page_size", type=int, help="Items per page (default: 100).")
    topics.add_argument("--max-pages", dest="max_pages", type=int, help="Page limit (default: 20).")
    topics.add_argument("--items-key", dest="items_key", help="Response key holding the article list.")
    topics.add_argument("--sample-size", dest="sample_size", type=int, help="Sample titles per topic (default: 3).")
    topics.add_argument("--out", help="Output JSON path (default: data/topics.json).")

    sheets = subparsers.add_parser("sheets", help="Rows of a Google Sheet keyed by header.")
    sheets.add_argument("--sheets-id", dest="sheets_id", help="Spreadsheet ID (default: $SHEETS_ID).")
    sheets.add_argument("--range", help="A1 range (default: A:Z).")
    sheets.add_argument("--sa", help="Service-account JSON path (default: ./service-account.json).")
    sheets.add_argument("--out", help="Output JSON path (default: data/sheets.json).")

    return parser.parse_args(argv)


def _apply_overrides(
    config: FeedConfig,
    args: argparse.Namespace,
    mapping: dict[str, str],
) -> FeedConfig:
    updates: dict[str, Any] = {}
    for dest, field_name in mapping.items():
        value = getattr(args, dest, None)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if field_name == "ga4_property_id":
                value = normalize_property_id(value)
        updates[field_name] = value
    return replace(config, **updates) if updates else config


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    load_env_file()

    try:
        config = FeedConfig.from_env()
        if args.command == "ga4":
            result = run_ga4_pipeline(_apply_overrides(config, args, GA4_OVERRIDES))
        elif args.command == "topics":
            result = run_topics_pipeline(_apply_overrides(config, args, TOPICS_OVERRIDES))
        else:
            result = run_sheets_pipeline(_apply_overrides(config, args, SHEETS_OVERRIDES))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
