from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from site_data_feeds.aggregation import summarize_topics
from site_data_feeds.clients.content_client import ContentClient
from site_data_feeds.clients.ga4_client import NOT_SET, GA4Client
from site_data_feeds.clients.sheets_client import SheetsClient
from site_data_feeds.config import FeedConfig
from site_data_feeds.daily_merge import group_by_day, merge_daily
from site_data_feeds.dimension_probe import probe_dimensions
from site_data_feeds.errors import ConfigurationError, TransportError
from site_data_feeds.fanout import run_branches
from site_data_feeds.models import DateWindow
from site_data_feeds.normalization import ArticleFields, normalize_article, zip_sheet_rows
from site_data_feeds.time_windows import resolve_date_window, resolve_since_window
from site_data_feeds.writer import updated_at, write_document


SAMPLE_ARTICLES = 20


@dataclass
class PipelineResult:
    path: Path
    payload: dict[str, Any]
    exit_code: int = 0
    warnings: list[str] = field(default_factory=list)


def _warn(result: PipelineResult, message: str) -> None:
    result.warnings.append(message)
    print(f"Warning: {message}", file=sys.stderr)


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _fetch_authors(
    client: GA4Client,
    window: DateWindow,
    config: FeedConfig,
) -> tuple[str | None, dict[str, list[Any]]]:
    exclude = config.ga4_exclude_not_set_authors

    def value_of(row: dict[str, Any]) -> str:
        value = client.author_value(row)
        return "" if exclude and value == NOT_SET else value

    probe = probe_dimensions(
        config.author_dimensions,
        fetch=lambda dimension: client.fetch_author_rows(window, dimension),
        value_of=value_of,
        label="Authors",
    )
    entries = client.to_author_entries(probe.rows, exclude_not_set=exclude)
    return probe.dimension, group_by_day(entries)


def _ga4_document(
    stamp: str,
    window: DateWindow,
    rows: list[dict[str, Any]],
    authors_dimension: str | None,
) -> dict[str, Any]:
    return {
        "updatedAt": stamp,
        "range": window.as_range(),
        "authorsDimension": authors_dimension,
        "rows": rows,
    }


def run_ga4_pipeline(
    config: FeedConfig,
    client: GA4Client | None = None,
    now: datetime | None = None,
    stamp: str | None = None,
) -> PipelineResult:
    """Daily KPIs for the lookback window with top referrers and authors per day."""
    config.require_ga4()
    window = resolve_date_window(now, config.ga4_lookback_days)
    client = client or GA4Client(
        property_id=config.ga4_property_id,
        credentials_path=config.ga4_credentials_path,
        credentials_b64=config.ga4_credentials_b64,
        timeout_sec=config.http_timeout_sec,
    )
    client.connect()
    print(f"GA4 pull (property={client.property_id}) {window.start_iso} -> {window.end_iso}")

    outcomes = run_branches(
        {
            "daily": lambda: client.fetch_daily_metrics(window),
            "referrers": lambda: group_by_day(client.fetch_referrers(window)),
            "authors": lambda: _fetch_authors(client, window, config),
        }
    )
    stamp = stamp or updated_at()
    out_path = Path(config.ga4_output_path)

    daily = outcomes["daily"]
    if not daily.ok:
        if isinstance(daily.error, ConfigurationError):
            raise daily.error
        _fail(f"GA4 daily metrics fetch failed: {daily.error}")
        payload = _ga4_document(stamp, window, [], None)
        write_document(out_path, payload)
        return PipelineResult(path=out_path, payload=payload, exit_code=1)

    result = PipelineResult(path=out_path, payload={})
    referrers = outcomes["referrers"]
    if not referrers.ok:
        _warn(result, f"GA4 referrers fetch failed, using empty lists: {referrers.error}")
    referrers_by_day = referrers.value_or({})
    if referrers.ok and not referrers_by_day:
        _warn(result, "GA4 referrers report returned no rows.")

    authors_dimension, authors_by_day = outcomes["authors"].value_or((None, {}))
    if not outcomes["authors"].ok:
        _warn(result, f"GA4 authors fetch failed, using empty lists: {outcomes['authors'].error}")
    elif authors_dimension is None:
        _warn(result, "No author dimension candidate returned rows.")

    rows = merge_daily(
        window.compact_days(),
        base=daily.value,
        breakdowns={"referrers": referrers_by_day, "authors": authors_by_day},
        limits={"referrers": config.ga4_top_referrers, "authors": config.ga4_top_authors},
    )
    result.payload = _ga4_document(
        stamp,
        window,
        [row.to_dict() for row in rows],
        authors_dimension,
    )
    write_document(out_path, result.payload)
    print(f"Wrote {out_path} (rows={len(rows)})")
    return result


def _article_fields(config: FeedConfig) -> ArticleFields:
    return ArticleFields().with_overrides(
        title=config.content_title_fields,
        slug=config.content_slug_fields,
        published_at=config.content_published_fields,
        section=config.content_section_fields,
        authors=config.content_author_fields,
        tags=config.content_tag_fields,
    )


def _topics_document(
    stamp: str,
    since_iso: str,
    until_iso: str,
    total_articles: int,
    topics: list[dict[str, Any]],
    sample_articles: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "updatedAt": stamp,
        "range": {"start": since_iso, "end": until_iso},
        "totalArticles": total_articles,
        "topics": topics,
        "sampleArticles": sample_articles,
    }


def run_topics_pipeline(
    config: FeedConfig,
    client: ContentClient | None = None,
    now: datetime | None = None,
    stamp: str | None = None,
) -> PipelineResult:
    """Tag counts over the articles published in the last ``content_since_hours``."""
    config.require_content()
    since_iso, until_iso = resolve_since_window(now, config.content_since_hours)
    client = client or ContentClient(
        api_url=config.content_api_url,
        token=config.content_api_token,
        path=config.content_api_path,
        page_size=config.content_page_size,
        max_pages=config.content_max_pages,
        items_key=config.content_items_key,
        timeout_sec=config.http_timeout_sec,
    )
    out_path = Path(config.topics_output_path)
    print(f"Content pull {since_iso} -> {until_iso}")

    try:
        fetched = client.fetch_since(since_iso)
    except TransportError as exc:
        _fail(f"Content fetch failed: {exc}")
        payload = _topics_document(stamp or updated_at(), since_iso, until_iso, 0, [], [])
        write_document(out_path, payload)
        return PipelineResult(path=out_path, payload=payload, exit_code=1)

    result = PipelineResult(path=out_path, payload={}, warnings=list(fetched.warnings))
    if fetched.truncated:
        _warn(result, f"Stopped after {client.max_pages} pages; older articles were not fetched.")

    fields = _article_fields(config)
    articles = [normalize_article(item, fields) for item in fetched.items]
    topics = summarize_topics(articles, sample_size=config.topics_sample_size)
    result.payload = _topics_document(
        stamp or updated_at(),
        since_iso,
        until_iso,
        len(articles),
        [topic.to_dict() for topic in topics],
        [
            {"title": article.title, "publishedAt": article.publishedAt, "section": article.section}
            for article in articles[:SAMPLE_ARTICLES]
        ],
    )
    write_document(out_path, result.payload)
    print(f"Wrote {out_path} with {len(articles)} articles and {len(topics)} tags")
    return result


def run_sheets_pipeline(
    config: FeedConfig,
    client: SheetsClient | None = None,
    stamp: str | None = None,
) -> PipelineResult:
    """Spreadsheet rows keyed by the header row."""
    config.require_sheets()
    client = client or SheetsClient(config.sheets_credentials_path)
    out_path = Path(config.sheets_output_path)

    try:
        values = client.fetch_values(config.sheets_id, config.sheets_range)
    except TransportError as exc:
        _fail(f"Sheets fetch failed: {exc}")
        payload = {
            "updatedAt": stamp or updated_at(),
            "sheet": config.sheets_range,
            "rowCount": 0,
            "data": [],
        }
        write_document(out_path, payload)
        return PipelineResult(path=out_path, payload=payload, exit_code=1)

    rows = zip_sheet_rows(values)
    payload = {
        "updatedAt": stamp or updated_at(),
        "sheet": config.sheets_range,
        "rowCount": len(rows),
        "data": rows,
    }
    write_document(out_path, payload)
    print(f"Wrote {out_path} ({len(rows)} rows)")
    return PipelineResult(path=out_path, payload=payload)
