from __future__ import annotations

from typing import Any

from visitor_counter.services.counter import VisitCounter
from visitor_counter.services.registry import ActiveVisitorRegistry
from visitor_counter.storage.base import VisitStore


class MemoryVisitStore(VisitStore):
    """In-process state; resets on restart."""

    failure_payload: dict[str, Any] = {}

    def __init__(
        self,
        registry: ActiveVisitorRegistry | None = None,
        counter: VisitCounter | None = None,
    ) -> None:
        self.registry = registry or ActiveVisitorRegistry()
        self.counter = counter or VisitCounter()

    def upsert_active(self, client_id: str, now: int) -> None:
        self.registry.upsert(client_id, now)

    def sweep_inactive(self, now: int, threshold_ms: int) -> int:
        return self.registry.sweep(now, threshold_ms)

    def count_active(self) -> int:
        return self.registry.count()

    def increment_visits(self) -> int:
        return self.counter.increment()

    def read_visits(self) -> int:
        return self.counter.read()
