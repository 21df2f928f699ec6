from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any, Iterator


@dataclass(frozen=True)
class DateWindow:
    name: str
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()

    @property
    def start_compact(self) -> str:
        return self.start.strftime("%Y%m%d")

    @property
    def end_compact(self) -> str:
        return self.end.strftime("%Y%m%d")

    def iter_days(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)

    def compact_days(self) -> list[str]:
        return [day.strftime("%Y%m%d") for day in self.iter_days()]

    def as_range(self) -> dict[str, str]:
        return {"start": self.start_iso, "end": self.end_iso}


@dataclass(frozen=True)
class ReferrerEntry:
    source: str
    users: int


@dataclass(frozen=True)
class AuthorEntry:
    author: str
    users: int
    views: int


@dataclass
class MetricRow:
    date: str
    totalUsers: int = 0
    newUsers: int = 0
    pageviews: int = 0
    sessions: int = 0
    bounceRate: float = 0.0
    averageSessionDuration: float = 0.0
    referrers: list[ReferrerEntry] = field(default_factory=list)
    authors: list[AuthorEntry] = field(default_factory=list)

    @classmethod
    def empty(cls, day: str) -> "MetricRow":
        return cls(date=day)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Article:
    title: str
    slug: str
    publishedAt: str
    section: str | None
    authors: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()


@dataclass
class KeyAggregate:
    key: str
    count: int = 0
    totals: dict[str, float] = field(default_factory=dict)
    samples: list[str] = field(default_factory=list)
    distinct: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class TopicSummary:
    name: str
    count: int
    sampleTitles: tuple[str, ...]
    sections: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "sampleTitles": list(self.sampleTitles),
            "sections": list(self.sections),
        }
