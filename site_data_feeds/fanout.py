from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Mapping


@dataclass(frozen=True)
class BranchOutcome:
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: Any) -> Any:
        return self.value if self.error is None else default


def run_branches(branches: Mapping[str, Callable[[], Any]]) -> dict[str, BranchOutcome]:
    """Run a fixed set of independent fetches concurrently and wait for all of them.

    A failing branch does not cancel the others; its exception is returned in
    its ``BranchOutcome``.
    """
    if not branches:
        return {}
    outcomes: dict[str, BranchOutcome] = {}
    with ThreadPoolExecutor(max_workers=len(branches)) as executor:
        futures = {name: executor.submit(fn) for name, fn in branches.items()}
        for name, future in futures.items():
            try:
                outcomes[name] = BranchOutcome(value=future.result())
            except Exception as exc:  # noqa: BLE001
                outcomes[name] = BranchOutcome(error=exc)
    return outcomes
