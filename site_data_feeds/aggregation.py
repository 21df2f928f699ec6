from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from site_data_feeds.models import Article, KeyAggregate, TopicSummary


T = TypeVar("T")
R = TypeVar("R")


def top_n(entries: Iterable[T], key: Callable[[T], float], limit: int | None = None) -> list[T]:
    """Sort descending by ``key``; ties keep input order (``sorted`` is stable)."""
    ranked = sorted(entries, key=lambda entry: -_as_number(key(entry)))
    if limit is None:
        return ranked
    return ranked[: max(0, int(limit))]


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _distinct_keys(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    out: list[str] = []
    for value in raw:
        text = str(value).strip() if value is not None else ""
        if text and text not in out:
            out.append(text)
    return out


def aggregate_by_key(
    records: Iterable[R],
    keys: Callable[[R], Iterable[str] | str | None],
    *,
    totals: Mapping[str, Callable[[R], Any]] | None = None,
    sample: Callable[[R], Any] | None = None,
    distinct: Mapping[str, Callable[[R], Any]] | None = None,
    sample_size: int = 3,
    rank_by: str | None = None,
) -> list[KeyAggregate]:
    """Group records by key and rank the groups.

    Each record contributes once to every distinct key it carries. ``samples``
    keeps the first ``sample_size`` distinct non-empty values in encounter
    order; ``distinct`` collections are unbounded and also first-seen ordered.
    The result is ordered by ``count`` (or ``totals[rank_by]``) descending.
    """
    totals = totals or {}
    distinct = distinct or {}
    limit = max(0, int(sample_size))
    groups: dict[str, KeyAggregate] = {}

    for record in records:
        try:
            record_keys = _distinct_keys(keys(record))
        except (KeyError, TypeError, AttributeError):
            continue
        if not record_keys:
            continue

        sample_value = sample(record) if sample is not None else None
        sample_text = str(sample_value).strip() if sample_value is not None else ""
        metric_values = {name: _as_number(extract(record)) for name, extract in totals.items()}
        distinct_values: dict[str, str] = {}
        for name, extract in distinct.items():
            value = extract(record)
            text = str(value).strip() if value is not None else ""
            if text:
                distinct_values[name] = text

        for key in record_keys:
            group = groups.get(key)
            if group is None:
                group = KeyAggregate(
                    key=key,
                    totals={name: 0.0 for name in totals},
                    distinct={name: [] for name in distinct},
                )
                groups[key] = group
            group.count += 1
            for name, value in metric_values.items():
                group.totals[name] += value
            if sample_text and len(group.samples) < limit and sample_text not in group.samples:
                group.samples.append(sample_text)
            for name, text in distinct_values.items():
                if text not in group.distinct[name]:
                    group.distinct[name].append(text)

    if rank_by:
        return top_n(groups.values(), key=lambda group: group.totals.get(rank_by, 0.0))
    return top_n(groups.values(), key=lambda group: group.count)


def summarize_topics(articles: Sequence[Article], sample_size: int = 3) -> list[TopicSummary]:
    groups = aggregate_by_key(
        articles,
        keys=lambda article: article.tags,
        sample=lambda article: article.title,
        distinct={"sections": lambda article: article.section},
        sample_size=sample_size,
    )
    return [
        TopicSummary(
            name=group.key,
            count=group.count,
            sampleTitles=tuple(group.samples),
            sections=tuple(group.distinct["sections"]),
        )
        for group in groups
    ]
