from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from site_data_feeds.models import Article


DEFAULT_LIST_KEYS = ("items", "results", "data")

Accessor = Callable[[dict[str, Any]], Any]


def resolve_items(
    payload: Any,
    key: str | None = None,
    fallbacks: Sequence[str] = DEFAULT_LIST_KEYS,
) -> list[Any]:
    """Find the item list in a response that is either a bare list or a keyed object."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for name in (key, *fallbacks):
        if not name:
            continue
        value = payload.get(name)
        if isinstance(value, list):
            return value
    return []


def _unwrap(value: Any) -> Any:
    # WordPress returns {"rendered": "..."} for title/excerpt and objects for terms.
    if isinstance(value, dict):
        for inner in ("rendered", "name", "value"):
            if inner in value:
                return value[inner]
        return None
    return value


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def field_accessors(candidates: Iterable[str]) -> list[Accessor]:
    return [lambda item, name=name: _unwrap(item.get(name)) for name in candidates]


def first_present(
    item: Any,
    candidates: Sequence[str] | Sequence[Accessor],
    default: Any = "",
) -> Any:
    """Return the first non-empty value among ordered candidate field names or accessors."""
    if not isinstance(item, dict):
        return default
    accessors = [
        candidate if callable(candidate) else field_accessors([candidate])[0]
        for candidate in candidates
    ]
    for accessor in accessors:
        try:
            value = accessor(item)
        except (KeyError, TypeError, AttributeError):
            continue
        if not _is_empty(value):
            return value
    return default


def coerce_name_list(value: Any) -> list[str]:
    """Accept an array or a comma-separated string; return trimmed, non-empty names."""
    if _is_empty(value):
        return []
    if isinstance(value, (list, tuple)):
        names: list[str] = []
        for element in value:
            element = _unwrap(element)
            if element is None:
                continue
            text = str(element).strip()
            if text:
                names.append(text)
        return names
    value = _unwrap(value)
    if value is None:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class ArticleFields:
    title: tuple[str, ...] = ("title", "headline")
    slug: tuple[str, ...] = ("slug", "id")
    published_at: tuple[str, ...] = ("publishedAt", "published_at", "date")
    section: tuple[str, ...] = ("section", "channel")
    authors: tuple[str, ...] = ("authors", "author")
    tags: tuple[str, ...] = ("tags",)

    def with_overrides(
        self,
        *,
        title: Sequence[str] = (),
        slug: Sequence[str] = (),
        published_at: Sequence[str] = (),
        section: Sequence[str] = (),
        authors: Sequence[str] = (),
        tags: Sequence[str] = (),
    ) -> "ArticleFields":
        def merged(overrides: Sequence[str], defaults: tuple[str, ...]) -> tuple[str, ...]:
            ordered: list[str] = []
            for name in (*overrides, *defaults):
                if name and name not in ordered:
                    ordered.append(name)
            return tuple(ordered)

        return ArticleFields(
            title=merged(title, self.title),
            slug=merged(slug, self.slug),
            published_at=merged(published_at, self.published_at),
            section=merged(section, self.section),
            authors=merged(authors, self.authors),
            tags=merged(tags, self.tags),
        )


def normalize_article(item: Any, fields: ArticleFields | None = None) -> Article:
    fields = fields or ArticleFields()
    section = _text(first_present(item, fields.section, None))
    return Article(
        title=_text(first_present(item, fields.title, "")),
        slug=_text(first_present(item, fields.slug, "")),
        publishedAt=_text(first_present(item, fields.published_at, "")),
        section=section or None,
        authors=tuple(coerce_name_list(first_present(item, fields.authors, []))),
        tags=tuple(coerce_name_list(first_present(item, fields.tags, []))),
    )


def zip_sheet_rows(values: Any) -> list[dict[str, str]]:
    """Zip the header row with each data row; blank headers become ``col{N}``."""
    if not isinstance(values, list) or not values:
        return []
    header_row = values[0] if isinstance(values[0], list) else []
    headers = [
        str(cell).strip() or f"col{index + 1}" for index, cell in enumerate(header_row)
    ]
    rows: list[dict[str, str]] = []
    for raw in values[1:]:
        cells = raw if isinstance(raw, list) else []
        row: dict[str, str] = {}
        for index, header in enumerate(headers):
            cell = cells[index] if index < len(cells) else ""
            row[header] = "" if cell is None else str(cell)
        rows.append(row)
    return rows
