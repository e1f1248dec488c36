from __future__ import annotations

from threading import Lock
from typing import Literal

IncrementPolicy = Literal["always", "on_request"]

UPDATE_TOTAL_HEADER = "x-update-total"


class VisitCounter:
    """Process-local monotonic counter."""

    def __init__(self, start: int = 0) -> None:
        self._lock = Lock()
        self._value = start

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def read(self) -> int:
        with self._lock:
            return self._value


def should_increment(policy: IncrementPolicy, update_total: str | None) -> bool:
    """Decide whether this request counts as a visit.

    ``always`` counts every request; ``on_request`` only counts requests that send
    ``x-update-total: true``.
    """

    if policy == "always":
        return True
    return (update_total or "").strip().lower() == "true"
