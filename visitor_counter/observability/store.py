from __future__ import annotations

from time import perf_counter
from typing import Callable

import structlog

from visitor_counter.observability.metrics import get_metrics
from visitor_counter.services.visit_service import VisitSnapshot


def instrument_visit(*, backend: str, counted: bool, fn: Callable[[], VisitSnapshot]) -> VisitSnapshot:
    """Time a visit round trip against the store, update metrics, and log failures."""

    start = perf_counter()
    try:
        snapshot = fn()
    except Exception:
        elapsed_ms = (perf_counter() - start) * 1000.0
        get_metrics().observe_store_failure()
        structlog.get_logger("store").exception(
            "store.failure",
            backend=backend,
            elapsed_ms=round(elapsed_ms, 2),
        )
        raise

    elapsed_ms = (perf_counter() - start) * 1000.0
    get_metrics().observe_visit(elapsed_ms=elapsed_ms, counted=counted)
    return snapshot
