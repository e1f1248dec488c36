from __future__ import annotations

import abc
from typing import Any


class VisitStore(abc.ABC):
    """Backing state for active visitors and the total-visit counter."""

    #: Extra keys merged into a 500 body; the in-process store reports a bare error.
    failure_payload: dict[str, Any] = {"totalVisits": 0, "activeUsers": 0}

    @abc.abstractmethod
    def upsert_active(self, client_id: str, now: int) -> None: ...

    @abc.abstractmethod
    def sweep_inactive(self, now: int, threshold_ms: int) -> int: ...

    @abc.abstractmethod
    def count_active(self) -> int: ...

    @abc.abstractmethod
    def increment_visits(self) -> int: ...

    @abc.abstractmethod
    def read_visits(self) -> int: ...
