from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


@dataclass
class ProbeResult:
    dimension: str | None
    rows: list[Any] = field(default_factory=list)
    attempts: list[tuple[str, int]] = field(default_factory=list)


def probe_dimensions(
    candidates: Iterable[str],
    fetch: Callable[[str], list[Any]],
    value_of: Callable[[Any], Any],
    label: str = "Dimension",
) -> ProbeResult:
    """Try candidate dimension names in order; keep the first one that yields data.

    A candidate is accepted when at least one row carries a non-blank value.
    Blank rows are discarded from the accepted result. A failing candidate is
    reported and counted as zero rows.
    """
    result = ProbeResult(dimension=None)
    tried: list[str] = []
    for candidate in candidates:
        name = str(candidate or "").strip()
        if not name or name in tried:
            continue
        tried.append(name)
        try:
            rows = fetch(name) or []
        except Exception as exc:  # noqa: BLE001
            print(f"Warning: {label} probe failed for \"{name}\": {exc}", file=sys.stderr)
            result.attempts.append((name, 0))
            continue

        non_empty = [row for row in rows if str(value_of(row) or "").strip()]
        print(f"{label} probe using \"{name}\": {len(non_empty)} rows")
        result.attempts.append((name, len(non_empty)))
        if non_empty:
            result.dimension = name
            result.rows = non_empty
            return result

    return result
