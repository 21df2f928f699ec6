from __future__ import annotations

import pytest


FEED_ENV_VARS = (
    "DATA_DIR",
    "HTTP_TIMEOUT_SEC",
    "GA4_PROPERTY_ID",
    "GA4_CREDENTIALS_PATH",
    "GCP_SA_JSON",
    "GA4_LOOKBACK_DAYS",
    "GA4_AUTHORS_DIM",
    "GA4_AUTHOR_DIM_CANDIDATES",
    "GA4_TOP_REFERRERS",
    "GA4_TOP_AUTHORS",
    "GA4_EXCLUDE_NOT_SET_AUTHORS",
    "GA4_OUTPUT_PATH",
    "CONTENT_API_URL",
    "CONTENT_API_TOKEN",
    "CONTENT_API_PATH",
    "CONTENT_SINCE_HOURS",
    "CONTENT_PAGE_SIZE",
    "CONTENT_MAX_PAGES",
    "CONTENT_ITEMS_KEY",
    "CONTENT_TITLE_FIELDS",
    "CONTENT_SLUG_FIELDS",
    "CONTENT_PUBLISHED_FIELDS",
    "CONTENT_SECTION_FIELDS",
    "CONTENT_AUTHOR_FIELDS",
    "CONTENT_TAG_FIELDS",
    "TOPICS_SAMPLE_SIZE",
    "TOPICS_OUTPUT_PATH",
    "SHEETS_ID",
    "SHEETS_RANGE",
    "SHEETS_CREDENTIALS_PATH",
    "SHEETS_OUTPUT_PATH",
)


@pytest.fixture(autouse=True)
def clean_feed_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in FEED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep python-dotenv from picking up a developer .env during tests.
    monkeypatch.chdir(tmp_path)
