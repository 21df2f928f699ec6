from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httplib2
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from site_data_feeds.errors import ConfigurationError, TransportError


class SheetsClient:
    """Read-only Google Sheets values reader authenticated with a service account."""

    SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

    def __init__(self, credentials_path: str) -> None:
        self.credentials_path = credentials_path.strip()
        self._sheets = None

    def _load_credentials(self) -> service_account.Credentials:
        if not self.credentials_path:
            raise ConfigurationError("Sheets credentials path is missing.")
        path = Path(self.credentials_path)
        if not path.exists():
            raise ConfigurationError(f"Sheets credentials file not found: {self.credentials_path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Invalid JSON in Sheets credentials file: {self.credentials_path}"
            ) from exc
        if payload.get("type") != "service_account":
            raise ConfigurationError("Sheets credentials must be a service-account JSON file.")
        try:
            return service_account.Credentials.from_service_account_file(str(path), scopes=self.SCOPES)
        except (ValueError, auth_exceptions.MalformedError) as exc:
            raise ConfigurationError(
                f"Invalid service-account key in {self.credentials_path}: {exc}"
            ) from exc

    def _sheets_service(self):
        if self._sheets is None:
            self._sheets = build(
                "sheets",
                "v4",
                credentials=self._load_credentials(),
                cache_discovery=False,
            )
        return self._sheets

    def fetch_values(self, spreadsheet_id: str, range_name: str = "A:Z") -> list[list[Any]]:
        sheets = self._sheets_service()
        try:
            payload = sheets.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                majorDimension="ROWS",
            ).execute()
        except HttpError as exc:
            status = getattr(exc.resp, "status", "?")
            raise TransportError(f"Sheets API {status}: {exc}") from exc
        except auth_exceptions.GoogleAuthError as exc:
            raise TransportError(f"Sheets API authorization failed: {exc}") from exc
        except (httplib2.HttpLib2Error, OSError) as exc:
            raise TransportError(f"Sheets API request failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise TransportError("Sheets API returned non-object payload.")
        values = payload.get("values", [])
        if not isinstance(values, list):
            return []
        return [row for row in values if isinstance(row, list)]
