from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any

from google.auth import exceptions as auth_exceptions
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from site_data_feeds.config import normalize_property_id
from site_data_feeds.errors import ConfigurationError, TransportError
from site_data_feeds.models import AuthorEntry, DateWindow, MetricRow, ReferrerEntry


DAILY_METRICS = (
    "totalUsers",
    "newUsers",
    "screenPageViews",
    "sessions",
    "bounceRate",
    "averageSessionDuration",
)
NOT_SET = "(not set)"


class GA4Client:
    """GA4 Data API client (REST runReport) for the daily site dashboard feed.

    Reports may run on several threads at once. Each report opens its own
    ``AuthorizedSession``; only the service-account credentials are shared.
    """

    SCOPES = ["https://www.googleapis.com/auth/analytics.readonly"]
    API_BASE = "https://analyticsdata.googleapis.com/v1beta"

    def __init__(
        self,
        property_id: str,
        credentials_path: str = "",
        credentials_b64: str = "",
        timeout_sec: int = 40,
    ) -> None:
        self.property_id = normalize_property_id(property_id)
        self.credentials_path = credentials_path.strip()
        self.credentials_b64 = credentials_b64.strip()
        self.timeout_sec = max(5, int(timeout_sec))
        self._credentials: service_account.Credentials | None = None

    def _load_credentials(self) -> service_account.Credentials:
        if self.credentials_path:
            return self._load_credentials_file()
        if not self.credentials_b64:
            raise ConfigurationError("GA4 credentials are missing.")
        try:
            info = json.loads(base64.b64decode(self.credentials_b64).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Failed to decode GCP_SA_JSON: {exc}") from exc
        if not isinstance(info, dict) or info.get("type") != "service_account":
            raise ConfigurationError("GCP_SA_JSON must hold a service-account JSON document.")
        try:
            return service_account.Credentials.from_service_account_info(info, scopes=self.SCOPES)
        except (ValueError, auth_exceptions.MalformedError) as exc:
            raise ConfigurationError(f"Invalid service-account key in GCP_SA_JSON: {exc}") from exc

    def _load_credentials_file(self) -> service_account.Credentials:
        path = Path(self.credentials_path)
        if not path.exists():
            raise ConfigurationError(f"GA4 credentials file not found: {self.credentials_path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Invalid JSON in GA4 credentials file: {self.credentials_path}"
            ) from exc
        if payload.get("type") != "service_account":
            raise ConfigurationError(
                "GA4 client expects service-account credentials (JSON with type=service_account)."
            )
        try:
            return service_account.Credentials.from_service_account_file(str(path), scopes=self.SCOPES)
        except (ValueError, auth_exceptions.MalformedError) as exc:
            raise ConfigurationError(
                f"Invalid service-account key in {self.credentials_path}: {exc}"
            ) from exc

    def _build_session(self) -> AuthorizedSession:
        if self._credentials is None:
            self._credentials = self._load_credentials()
        return AuthorizedSession(self._credentials)

    def connect(self) -> None:
        """Load credentials up front so a bad key fails before any report starts."""
        if not self.property_id:
            raise ConfigurationError("GA4 property ID is missing.")
        if self._credentials is None:
            self._credentials = self._load_credentials()

    def run_report(
        self,
        window: DateWindow,
        dimensions: list[str],
        metrics: list[str],
        limit: int = 100000,
        order_bys: list[dict[str, Any]] | None = None,
    ) -> list[dict[str, Any]]:
        if not self.property_id:
            raise ConfigurationError("GA4 property ID is missing.")
        body: dict[str, Any] = {
            "dateRanges": [{"startDate": window.start_iso, "endDate": window.end_iso}],
            "dimensions": [{"name": name} for name in dimensions],
            "metrics": [{"name": name} for name in metrics],
            "limit": max(1, int(limit)),
        }
        if order_bys:
            body["orderBys"] = order_bys

        session = self._build_session()
        url = f"{self.API_BASE}/properties/{self.property_id}:runReport"
        try:
            response = session.post(url, json=body, timeout=self.timeout_sec)
        except Exception as exc:  # noqa: BLE001
            raise TransportError(f"GA4 Data API request failed: {exc}") from exc
        finally:
            session.close()
        if not response.ok:
            detail = response.text.strip()
            if len(detail) > 400:
                detail = detail[:397] + "..."
            raise TransportError(
                f"GA4 Data API request failed ({response.status_code}): {detail or 'No response body.'}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("GA4 Data API returned malformed JSON.") from exc
        if not isinstance(payload, dict):
            raise TransportError("GA4 Data API returned non-object payload.")
        rows = payload.get("rows", [])
        if not isinstance(rows, list):
            return []
        return [row for row in rows if isinstance(row, dict)]

    @staticmethod
    def _dimension_value(row: dict[str, Any], index: int) -> str:
        values = row.get("dimensionValues", [])
        if not isinstance(values, list) or index >= len(values):
            return ""
        raw = values[index]
        if not isinstance(raw, dict):
            return ""
        return str(raw.get("value") or "").strip()

    @staticmethod
    def _metric_value(row: dict[str, Any], index: int) -> float:
        values = row.get("metricValues", [])
        if not isinstance(values, list) or index >= len(values):
            return 0.0
        raw = values[index]
        if not isinstance(raw, dict):
            return 0.0
        value = raw.get("value")
        if value in (None, ""):
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @classmethod
    def _count(cls, row: dict[str, Any], index: int) -> int:
        return max(0, int(round(cls._metric_value(row, index))))

    def fetch_daily_metrics(self, window: DateWindow) -> dict[str, MetricRow]:
        rows = self.run_report(window, dimensions=["date"], metrics=list(DAILY_METRICS))
        out: dict[str, MetricRow] = {}
        for row in rows:
            day = self._dimension_value(row, 0)
            if not day:
                continue
            out[day] = MetricRow(
                date=day,
                totalUsers=self._count(row, 0),
                newUsers=self._count(row, 1),
                pageviews=self._count(row, 2),
                sessions=self._count(row, 3),
                bounceRate=min(1.0, max(0.0, self._metric_value(row, 4))),
                averageSessionDuration=max(0.0, self._metric_value(row, 5)),
            )
        return out

    def fetch_referrers(self, window: DateWindow) -> list[tuple[str, ReferrerEntry]]:
        rows = self.run_report(
            window,
            dimensions=["date", "sessionSource"],
            metrics=["totalUsers"],
        )
        return [
            (
                self._dimension_value(row, 0),
                ReferrerEntry(
                    source=self._dimension_value(row, 1) or NOT_SET,
                    users=self._count(row, 0),
                ),
            )
            for row in rows
        ]

    def fetch_author_rows(self, window: DateWindow, dimension: str) -> list[dict[str, Any]]:
        return self.run_report(
            window,
            dimensions=["date", dimension],
            metrics=["totalUsers", "screenPageViews"],
        )

    def author_value(self, row: dict[str, Any]) -> str:
        return self._dimension_value(row, 1)

    def to_author_entries(
        self,
        rows: list[dict[str, Any]],
        exclude_not_set: bool = True,
    ) -> list[tuple[str, AuthorEntry]]:
        out: list[tuple[str, AuthorEntry]] = []
        for row in rows:
            author = self._dimension_value(row, 1)
            if not author:
                continue
            if exclude_not_set and author == NOT_SET:
                continue
            out.append(
                (
                    self._dimension_value(row, 0),
                    AuthorEntry(
                        author=author,
                        users=self._count(row, 0),
                        views=self._count(row, 1),
                    ),
                )
            )
        return out
