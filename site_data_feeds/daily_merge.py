from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Sequence

from site_data_feeds.aggregation import top_n
from site_data_feeds.models import MetricRow


BREAKDOWN_FIELDS = ("referrers", "authors")


def group_by_day(entries: Sequence[tuple[str, Any]]) -> dict[str, list[Any]]:
    """Collect ``(compact_date, entry)`` pairs into per-day lists, keeping encounter order."""
    out: dict[str, list[Any]] = {}
    for day, entry in entries:
        if not day:
            continue
        out.setdefault(day, []).append(entry)
    return out


def merge_daily(
    days: Sequence[str],
    base: Mapping[str, MetricRow],
    breakdowns: Mapping[str, Mapping[str, Sequence[Any]]] | None = None,
    limits: Mapping[str, int] | None = None,
) -> list[MetricRow]:
    """One row per requested day with every breakdown attached as a ranked list.

    Days missing from ``base`` are filled with zero-valued rows and days
    missing from a breakdown get an empty list. Breakdown entries are ranked
    by ``users`` and capped by ``limits[name]`` when given.
    """
    breakdowns = breakdowns or {}
    limits = limits or {}
    for name in breakdowns:
        if name not in BREAKDOWN_FIELDS:
            raise ValueError(f"Unknown daily breakdown: {name}")

    rows: list[MetricRow] = []
    seen: set[str] = set()
    for day in days:
        if day in seen:
            continue
        seen.add(day)
        row = base.get(day) or MetricRow.empty(day)
        attached: dict[str, list[Any]] = {field_name: [] for field_name in BREAKDOWN_FIELDS}
        for name, series in breakdowns.items():
            entries = list((series or {}).get(day) or [])
            attached[name] = top_n(
                entries,
                key=lambda entry: getattr(entry, "users", 0),
                limit=limits.get(name),
            )
        rows.append(replace(row, date=day, **attached))
    return rows
