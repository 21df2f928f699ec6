from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from site_data_feeds.time_windows import format_utc_timestamp


def updated_at(now: datetime | None = None) -> str:
    return format_utc_timestamp(now)


def render_document(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_document(path: str | Path, payload: dict[str, Any]) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_document(payload), encoding="utf-8")
    return out_path
