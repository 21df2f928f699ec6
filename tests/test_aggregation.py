from __future__ import annotations

from site_data_feeds.aggregation import aggregate_by_key, summarize_topics, top_n
from site_data_feeds.models import Article


def _article(title: str, tags: tuple[str, ...], section: str | None = None) -> Article:
    return Article(
        title=title,
        slug=title.lower(),
        publishedAt="2026-03-09T10:00:00Z",
        section=section,
        tags=tags,
    )


def test_topics_sorted_by_count_with_first_seen_ties() -> None:
    articles = [
        _article("One", ("a", "b")),
        _article("Two", ("a",)),
        _article("Three", ("c",)),
    ]
    topics = summarize_topics(articles)

    assert [(topic.name, topic.count) for topic in topics] == [("a", 2), ("b", 1), ("c", 1)]


def test_topic_samples_keep_first_three_unique_titles() -> None:
    articles = [
        _article("First", ("a",), "Politics"),
        _article("First", ("a",), "Politics"),
        _article("Second", ("a",), "World"),
        _article("Third", ("a",)),
        _article("Fourth", ("a",), "Business"),
    ]
    topic = summarize_topics(articles)[0]

    assert topic.count == 5
    assert topic.sampleTitles == ("First", "Second", "Third")
    assert topic.sections == ("Politics", "World", "Business")


def test_sample_size_is_configurable() -> None:
    articles = [_article(f"T{i}", ("a",)) for i in range(5)]
    assert summarize_topics(articles, sample_size=1)[0].sampleTitles == ("T0",)
    assert summarize_topics(articles, sample_size=0)[0].sampleTitles == ()


def test_duplicate_tags_inside_one_article_count_once() -> None:
    topics = summarize_topics([_article("One", ("a", "a", " a "))])
    assert [(topic.name, topic.count) for topic in topics] == [("a", 1)]


def test_counts_sum_to_membership_pairs_and_ranking_is_non_increasing() -> None:
    articles = [
        _article("1", ("x", "y", "z")),
        _article("2", ("y",)),
        _article("3", ()),
        _article("4", ("z", "y")),
        _article("5", ("w",)),
    ]
    topics = summarize_topics(articles)
    pairs = sum(len(set(article.tags)) for article in articles)

    assert sum(topic.count for topic in topics) == pairs
    counts = [topic.count for topic in topics]
    assert counts == sorted(counts, reverse=True)


def test_ranking_ignores_input_order_of_records() -> None:
    articles = [
        _article("1", ("rare",)),
        _article("2", ("common",)),
        _article("3", ("common",)),
    ]
    assert [topic.name for topic in summarize_topics(articles)] == ["common", "rare"]
    assert [topic.name for topic in summarize_topics(list(reversed(articles)))] == ["common", "rare"]


def test_aggregate_by_key_sums_totals_and_ranks_by_metric() -> None:
    records = [
        {"author": "Jane", "views": 5},
        {"author": "John", "views": 30},
        {"author": "Jane", "views": 10},
        {"author": "", "views": 100},
    ]
    groups = aggregate_by_key(
        records,
        keys=lambda row: row["author"],
        totals={"views": lambda row: row["views"]},
        rank_by="views",
    )

    assert [(group.key, group.count, group.totals["views"]) for group in groups] == [
        ("John", 1, 30.0),
        ("Jane", 2, 15.0),
    ]


def test_aggregate_by_key_skips_records_with_broken_keys() -> None:
    groups = aggregate_by_key([{"tags": ["a"]}, {}], keys=lambda row: row["tags"])
    assert [(group.key, group.count) for group in groups] == [("a", 1)]


def test_top_n_is_stable_and_caps() -> None:
    entries = [("a", 1), ("b", 3), ("c", 3), ("d", 2)]
    assert top_n(entries, key=lambda entry: entry[1], limit=3) == [("b", 3), ("c", 3), ("d", 2)]
    assert top_n(entries, key=lambda entry: entry[1], limit=0) == []
    assert top_n([], key=lambda entry: entry) == []
