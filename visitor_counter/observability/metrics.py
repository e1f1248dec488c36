from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass
class _LatencyAgg:
    count: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, elapsed_ms: float) -> None:
        self.count += 1
        self.sum_ms += float(elapsed_ms)
        if elapsed_ms > self.max_ms:
            self.max_ms = float(elapsed_ms)


class InMemoryMetrics:
    """Thread-safe, process-local metrics (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.http_requests_total: int = 0
        self.visits_recorded_total: int = 0
        self.visits_counted_total: int = 0
        self.store_failures_total: int = 0
        self.http_request_ms = _LatencyAgg()
        self.record_visit_ms = _LatencyAgg()

    def observe_http_request(self, elapsed_ms: float) -> None:
        with self._lock:
            self.http_requests_total += 1
            self.http_request_ms.observe(elapsed_ms)

    def observe_visit(self, elapsed_ms: float, counted: bool) -> None:
        with self._lock:
            self.visits_recorded_total += 1
            if counted:
                self.visits_counted_total += 1
            self.record_visit_ms.observe(elapsed_ms)

    def observe_store_failure(self) -> None:
        with self._lock:
            self.store_failures_total += 1

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {
                    "http_requests_total": self.http_requests_total,
                    "visits_recorded_total": self.visits_recorded_total,
                    "visits_counted_total": self.visits_counted_total,
                    "store_failures_total": self.store_failures_total,
                },
                "latency_ms": {
                    "http_request_ms": asdict(self.http_request_ms),
                    "record_visit_ms": asdict(self.record_visit_ms),
                },
            }

    def reset(self) -> None:
        with self._lock:
            self.http_requests_total = 0
            self.visits_recorded_total = 0
            self.visits_counted_total = 0
            self.store_failures_total = 0
            self.http_request_ms = _LatencyAgg()
            self.record_visit_ms = _LatencyAgg()


_METRICS: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = InMemoryMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Reset metrics counters/aggregates (used by tests)."""

    get_metrics().reset()
