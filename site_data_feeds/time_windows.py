from __future__ import annotations

from datetime import datetime, timedelta, timezone

from site_data_feeds.models import DateWindow


def _as_utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def resolve_date_window(now: datetime | None = None, days: int = 7) -> DateWindow:
    """Closed window of ``days`` complete UTC days ending yesterday.

    Today is excluded because its numbers are still moving.
    """
    if int(days) < 1:
        raise ValueError(f"Lookback window must be at least 1 day, got {days}.")
    end = _as_utc(now).date() - timedelta(days=1)
    start = end - timedelta(days=int(days) - 1)
    return DateWindow(f"Last {int(days)} days", start, end)


def resolve_since_window(now: datetime | None = None, hours: float = 24) -> tuple[str, str]:
    """Instant range ``[now - hours, now]`` as ISO-8601 strings with a ``Z`` suffix."""
    if float(hours) <= 0:
        raise ValueError(f"Lookback hours must be positive, got {hours}.")
    until = _as_utc(now)
    since = until - timedelta(hours=float(hours))
    return format_utc_timestamp(since), format_utc_timestamp(until)


def format_utc_timestamp(moment: datetime | None = None) -> str:
    value = _as_utc(moment)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
