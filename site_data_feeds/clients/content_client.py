from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import requests

from site_data_feeds.errors import TransportError
from site_data_feeds.normalization import resolve_items


FIELDS = "title,slug,publishedAt,tags,authors,section"


@dataclass
class ContentPage:
    number: int
    items: list[Any]
    total: int = 0
    total_pages: int = 0


@dataclass
class ContentFetch:
    items: list[Any] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False
    warnings: list[str] = field(default_factory=list)


class ContentClient:
    """Paginated client for an article listing endpoint (WordPress-style REST)."""

    def __init__(
        self,
        *,
        api_url: str,
        token: str,
        path: str = "/articles",
        page_size: int = 100,
        max_pages: int = 20,
        items_key: str = "",
        fields: str = FIELDS,
        timeout_sec: int = 40,
    ) -> None:
        self.api_url = api_url.strip()
        self.token = token.strip()
        self.path = path.strip() or "/articles"
        self.page_size = max(1, int(page_size))
        self.max_pages = max(1, int(max_pages))
        self.items_key = items_key.strip()
        self.fields = fields
        self.timeout_sec = max(5, int(timeout_sec))

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    def build_url(self) -> str:
        base = self.api_url if self.api_url.endswith("/") else f"{self.api_url}/"
        return urljoin(base, self.path)

    @staticmethod
    def _as_int(raw: Any) -> int:
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            return 0

    def fetch_page(self, since_iso: str, page: int) -> ContentPage:
        params = {
            "since": since_iso,
            "limit": str(self.page_size),
            "page": str(page),
            "fields": self.fields,
        }
        try:
            response = requests.get(
                self.build_url(),
                params=params,
                headers=self._headers(),
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Content API request failed: {exc}") from exc
        if not response.ok:
            detail = response.text.strip()
            if len(detail) > 300:
                detail = detail[:297] + "..."
            raise TransportError(
                f"Content API HTTP {response.status_code} {response.reason or ''}".rstrip()
                + f": {detail or 'No response body.'}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Content API returned malformed JSON.") from exc

        items = [item for item in resolve_items(payload, self.items_key) if isinstance(item, dict)]
        total = 0
        if isinstance(payload, dict):
            total = self._as_int(payload.get("total") or payload.get("count"))
        total = total or self._as_int(response.headers.get("X-WP-Total"))
        total_pages = self._as_int(response.headers.get("X-WP-TotalPages"))
        return ContentPage(number=page, items=items, total=total, total_pages=total_pages)

    def fetch_since(self, since_iso: str) -> ContentFetch:
        """Walk pages until the listing is exhausted or ``max_pages`` is reached.

        A failure on the first page propagates. A failure on a later page keeps
        the items already collected and records a warning.
        """
        result = ContentFetch()
        page = 1
        while page <= self.max_pages:
            try:
                current = self.fetch_page(since_iso, page)
            except TransportError as exc:
                if not result.items:
                    raise
                message = f"Content API page {page} failed, keeping {len(result.items)} items: {exc}"
                print(f"Warning: {message}", file=sys.stderr)
                result.warnings.append(message)
                break

            if not current.items:
                break
            result.items.extend(current.items)
            result.pages = page

            if current.total and page * self.page_size >= current.total:
                break
            if current.total_pages and page >= current.total_pages:
                break
            if len(current.items) < self.page_size:
                break
            page += 1
        else:
            result.truncated = True
        return result
