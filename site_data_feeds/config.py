from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from site_data_feeds.errors import ConfigurationError


DEFAULT_AUTHOR_DIM_CANDIDATES = (
    "customEvent:authors",
    "customEvent:authorName",
    "customEvent:author",
    "customEvent:byline",
)


def load_env_file() -> None:
    load_dotenv(find_dotenv(usecwd=True), override=False)


def _env(name: str, default: str = "") -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default.strip()
    value = raw.strip()
    placeholder = f"{name}="
    unquoted = value.strip("'\"").strip()
    if unquoted.lower() == placeholder.lower():
        return default.strip()
    return value if value else default.strip()


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from exc


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if not raw:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str = "") -> tuple[str, ...]:
    raw = _env(name, default)
    values = [part.strip() for part in raw.split(",") if part.strip()]
    return tuple(values)


def normalize_property_id(raw: str) -> str:
    value = raw.strip()
    if value.startswith("properties/"):
        value = value.split("/", 1)[1]
    return value


@dataclass(frozen=True)
class FeedConfig:
    data_dir: str
    http_timeout_sec: int

    ga4_property_id: str
    ga4_credentials_path: str
    ga4_credentials_b64: str
    ga4_lookback_days: int
    ga4_authors_dim: str
    ga4_author_dim_candidates: tuple[str, ...]
    ga4_top_referrers: int
    ga4_top_authors: int
    ga4_exclude_not_set_authors: bool
    ga4_output_path: str

    content_api_url: str
    content_api_token: str
    content_api_path: str
    content_since_hours: float
    content_page_size: int
    content_max_pages: int
    content_items_key: str
    content_title_fields: tuple[str, ...]
    content_slug_fields: tuple[str, ...]
    content_published_fields: tuple[str, ...]
    content_section_fields: tuple[str, ...]
    content_author_fields: tuple[str, ...]
    content_tag_fields: tuple[str, ...]
    topics_sample_size: int
    topics_output_path: str

    sheets_id: str
    sheets_range: str
    sheets_credentials_path: str
    sheets_output_path: str

    @property
    def author_dimensions(self) -> tuple[str, ...]:
        ordered: list[str] = []
        for name in (self.ga4_authors_dim, *self.ga4_author_dim_candidates):
            if name and name not in ordered:
                ordered.append(name)
        return tuple(ordered)

    @classmethod
    def from_env(cls) -> "FeedConfig":
        data_dir = _env("DATA_DIR", "data")
        return cls(
            data_dir=data_dir,
            http_timeout_sec=_env_int("HTTP_TIMEOUT_SEC", 40),
            ga4_property_id=normalize_property_id(_env("GA4_PROPERTY_ID")),
            ga4_credentials_path=_env("GA4_CREDENTIALS_PATH"),
            ga4_credentials_b64=_env("GCP_SA_JSON"),
            ga4_lookback_days=_env_int("GA4_LOOKBACK_DAYS", 7),
            ga4_authors_dim=_env("GA4_AUTHORS_DIM", DEFAULT_AUTHOR_DIM_CANDIDATES[0]),
            ga4_author_dim_candidates=_env_csv(
                "GA4_AUTHOR_DIM_CANDIDATES",
                ",".join(DEFAULT_AUTHOR_DIM_CANDIDATES),
            ),
            ga4_top_referrers=_env_int("GA4_TOP_REFERRERS", 5),
            ga4_top_authors=_env_int("GA4_TOP_AUTHORS", 10),
            ga4_exclude_not_set_authors=_env_bool("GA4_EXCLUDE_NOT_SET_AUTHORS", True),
            ga4_output_path=_env("GA4_OUTPUT_PATH", str(Path(data_dir) / "ga4.json")),
            content_api_url=_env("CONTENT_API_URL"),
            content_api_token=_env("CONTENT_API_TOKEN"),
            content_api_path=_env("CONTENT_API_PATH", "/articles"),
            content_since_hours=_env_float("CONTENT_SINCE_HOURS", 24.0),
            content_page_size=_env_int("CONTENT_PAGE_SIZE", 100),
            content_max_pages=_env_int("CONTENT_MAX_PAGES", 20),
            content_items_key=_env("CONTENT_ITEMS_KEY"),
            content_title_fields=_env_csv("CONTENT_TITLE_FIELDS"),
            content_slug_fields=_env_csv("CONTENT_SLUG_FIELDS"),
            content_published_fields=_env_csv("CONTENT_PUBLISHED_FIELDS"),
            content_section_fields=_env_csv("CONTENT_SECTION_FIELDS"),
            content_author_fields=_env_csv("CONTENT_AUTHOR_FIELDS"),
            content_tag_fields=_env_csv("CONTENT_TAG_FIELDS"),
            topics_sample_size=_env_int("TOPICS_SAMPLE_SIZE", 3),
            topics_output_path=_env("TOPICS_OUTPUT_PATH", str(Path(data_dir) / "topics.json")),
            sheets_id=_env("SHEETS_ID"),
            sheets_range=_env("SHEETS_RANGE", "A:Z"),
            sheets_credentials_path=_env("SHEETS_CREDENTIALS_PATH", "./service-account.json"),
            sheets_output_path=_env("SHEETS_OUTPUT_PATH", str(Path(data_dir) / "sheets.json")),
        )

    def require_ga4(self) -> None:
        if not self.ga4_property_id:
            raise ConfigurationError("Missing GA4_PROPERTY_ID.")
        if not (self.ga4_credentials_path or self.ga4_credentials_b64):
            raise ConfigurationError(
                "Missing GA4 credentials: set GA4_CREDENTIALS_PATH or GCP_SA_JSON (base64)."
            )
        if self.ga4_lookback_days < 1:
            raise ConfigurationError(
                f"GA4 lookback must be at least 1 day, got {self.ga4_lookback_days}."
            )
        if self.ga4_top_referrers < 0 or self.ga4_top_authors < 0:
            raise ConfigurationError("GA4 top-N limits cannot be negative.")

    def require_content(self) -> None:
        if not self.content_api_url:
            raise ConfigurationError("Missing CONTENT_API_URL (or --api).")
        if not self.content_api_token:
            raise ConfigurationError("Missing CONTENT_API_TOKEN (or --token).")
        if self.content_since_hours <= 0:
            raise ConfigurationError(
                f"Content lookback must be positive, got {self.content_since_hours} hours."
            )
        if self.content_page_size < 1 or self.content_max_pages < 1:
            raise ConfigurationError("Content page size and max pages must be at least 1.")
        if self.topics_sample_size < 0:
            raise ConfigurationError("TOPICS_SAMPLE_SIZE cannot be negative.")

    def require_sheets(self) -> None:
        if not self.sheets_id:
            raise ConfigurationError("Missing SHEETS_ID (or --sheets-id).")
        if not self.sheets_credentials_path:
            raise ConfigurationError("Missing SHEETS_CREDENTIALS_PATH (or --sa).")
