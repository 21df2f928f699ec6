from __future__ import annotations

import json
from typing import Any

import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from site_data_feeds.clients.sheets_client import SheetsClient
from site_data_feeds.errors import ConfigurationError, TransportError


class _Request:
    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome

    def execute(self) -> Any:
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeSheetsService:
    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome
        self.calls: list[dict[str, Any]] = []

    def spreadsheets(self) -> "FakeSheetsService":
        return self

    def values(self) -> "FakeSheetsService":
        return self

    def get(self, **kwargs: Any) -> _Request:
        self.calls.append(kwargs)
        return _Request(self.outcome)


def _client(monkeypatch: pytest.MonkeyPatch, outcome: Any) -> tuple[SheetsClient, FakeSheetsService]:
    client = SheetsClient("service-account.json")
    service = FakeSheetsService(outcome)
    monkeypatch.setattr(client, "_sheets_service", lambda: service)
    return client, service


def test_fetch_values_reads_rows(monkeypatch: pytest.MonkeyPatch) -> None:
    client, service = _client(monkeypatch, {"range": "Sheet1!A1:Z3", "values": [["h"], ["1"], "bad"]})

    assert client.fetch_values("sheet-123", "Sheet1!A:Z") == [["h"], ["1"]]
    assert service.calls == [
        {"spreadsheetId": "sheet-123", "range": "Sheet1!A:Z", "majorDimension": "ROWS"}
    ]


def test_fetch_values_without_values_key(monkeypatch: pytest.MonkeyPatch) -> None:
    client, _ = _client(monkeypatch, {"range": "Sheet1!A1:Z1"})
    assert client.fetch_values("sheet-123") == []


def test_http_error_becomes_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    error = HttpError(httplib2.Response({"status": 403}), json.dumps({"error": {"code": 403, "message": "denied"}}).encode("utf-8"))
    client, _ = _client(monkeypatch, error)

    with pytest.raises(TransportError, match="403"):
        client.fetch_values("sheet-123")


def test_refresh_error_becomes_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client, _ = _client(monkeypatch, RefreshError("invalid_grant: Invalid JWT Signature."))

    with pytest.raises(TransportError, match="invalid_grant"):
        client.fetch_values("sheet-123")


def test_unreachable_host_becomes_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client, _ = _client(monkeypatch, httplib2.ServerNotFoundError("Unable to find the server at sheets.googleapis.com"))

    with pytest.raises(TransportError, match="Unable to find the server"):
        client.fetch_values("sheet-123")


def test_missing_credentials_file(tmp_path) -> None:
    client = SheetsClient(str(tmp_path / "nope.json"))
    with pytest.raises(ConfigurationError, match="not found"):
        client.fetch_values("sheet-123")


def test_credentials_must_be_service_account(tmp_path) -> None:
    path = tmp_path / "sa.json"
    path.write_text(json.dumps({"type": "authorized_user"}), encoding="utf-8")
    with pytest.raises(ConfigurationError, match="service-account"):
        SheetsClient(str(path)).fetch_values("sheet-123")


def test_service_account_missing_key_fields_is_configuration_error(tmp_path) -> None:
    path = tmp_path / "sa.json"
    path.write_text(json.dumps({"type": "service_account", "client_email": "a@b"}), encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid service-account key"):
        SheetsClient(str(path)).fetch_values("sheet-123")
