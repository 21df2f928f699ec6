from __future__ import annotations

from site_data_feeds.models import Article
from site_data_feeds.normalization import (
    ArticleFields,
    coerce_name_list,
    first_present,
    normalize_article,
    resolve_items,
    zip_sheet_rows,
)


def test_resolve_items_accepts_bare_list() -> None:
    assert resolve_items([{"title": "a"}]) == [{"title": "a"}]


def test_resolve_items_uses_fallback_order() -> None:
    payload = {"results": [1], "data": [2]}
    assert resolve_items(payload) == [1]
    assert resolve_items({"data": [2]}) == [2]


def test_resolve_items_prefers_configured_key() -> None:
    payload = {"items": [1], "posts": [2]}
    assert resolve_items(payload, key="posts") == [2]
    assert resolve_items(payload, key="missing") == [1]


def test_resolve_items_never_raises_for_missing_list() -> None:
    assert resolve_items({"items": "not-a-list"}) == []
    assert resolve_items({"total": 0}) == []
    assert resolve_items(None) == []
    assert resolve_items("oops") == []


def test_first_present_skips_empty_values() -> None:
    item = {"title": "  ", "headline": "Budget vote"}
    assert first_present(item, ("title", "headline")) == "Budget vote"
    assert first_present(item, ("subtitle",), default="") == ""
    assert first_present("not-a-dict", ("title",), default=[]) == []


def test_first_present_accepts_accessor_functions() -> None:
    item = {"meta": {"byline": "Jane Roe"}}
    accessors = [
        lambda row: row["author"],
        lambda row: row["meta"]["byline"],
    ]
    assert first_present(item, accessors) == "Jane Roe"


def test_first_present_unwraps_rendered_fields() -> None:
    item = {"title": {"rendered": "Senate passes bill"}}
    assert first_present(item, ("title",)) == "Senate passes bill"


def test_coerce_name_list_from_array_and_csv() -> None:
    assert coerce_name_list([" Congress ", "", "Senate", None]) == ["Congress", "Senate"]
    assert coerce_name_list("Congress, Senate ,, ") == ["Congress", "Senate"]
    assert coerce_name_list([{"name": "Jane Roe"}, "John Doe"]) == ["Jane Roe", "John Doe"]
    assert coerce_name_list(None) == []
    assert coerce_name_list("") == []


def test_normalize_article_defaults_missing_fields() -> None:
    article = normalize_article({})
    assert article == Article(title="", slug="", publishedAt="", section=None, authors=(), tags=())


def test_normalize_article_resolves_fallback_names() -> None:
    article = normalize_article(
        {
            "headline": "Budget vote",
            "id": 42,
            "published_at": "2026-03-09T10:00:00Z",
            "channel": "Politics",
            "authors": [{"name": "Jane Roe"}],
            "tags": "budget, congress",
        }
    )
    assert article.title == "Budget vote"
    assert article.slug == "42"
    assert article.publishedAt == "2026-03-09T10:00:00Z"
    assert article.section == "Politics"
    assert article.authors == ("Jane Roe",)
    assert article.tags == ("budget", "congress")


def test_canonical_and_fallback_names_normalize_identically() -> None:
    canonical = {
        "title": "Budget vote",
        "slug": "budget-vote",
        "publishedAt": "2026-03-09T10:00:00Z",
        "section": "Politics",
        "authors": ["Jane Roe"],
        "tags": ["budget"],
    }
    fallback = {
        "headline": "Budget vote",
        "id": "budget-vote",
        "published_at": "2026-03-09T10:00:00Z",
        "channel": "Politics",
        "author": ["Jane Roe"],
        "tags": ["budget"],
    }
    assert normalize_article(canonical) == normalize_article(fallback)


def test_field_overrides_are_tried_first() -> None:
    fields = ArticleFields().with_overrides(title=("seo_title",), tags=("keywords",))
    assert fields.title == ("seo_title", "title", "headline")
    article = normalize_article(
        {"seo_title": "SEO", "title": "Plain", "keywords": "a,b", "tags": ["c"]},
        fields,
    )
    assert article.title == "SEO"
    assert article.tags == ("a", "b")


def test_zip_sheet_rows_fills_blank_headers_and_cells() -> None:
    values = [
        [" Name ", "", "Score"],
        ["Alice", "x", "10"],
        ["Bob"],
        [],
    ]
    assert zip_sheet_rows(values) == [
        {"Name": "Alice", "col2": "x", "Score": "10"},
        {"Name": "Bob", "col2": "", "Score": ""},
        {"Name": "", "col2": "", "Score": ""},
    ]


def test_zip_sheet_rows_handles_empty_sheet() -> None:
    assert zip_sheet_rows([]) == []
    assert zip_sheet_rows([["Only", "Header"]]) == []
    assert zip_sheet_rows(None) == []
