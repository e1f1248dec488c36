from __future__ import annotations

import time
from dataclasses import dataclass

import structlog

from visitor_counter.storage.base import VisitStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VisitSnapshot:
    client_id: str
    total_visits: int
    active_users: int


def now_ms() -> int:
    return int(time.time() * 1000)


def record_visit(
    store: VisitStore,
    *,
    client_id: str,
    now: int,
    count_visit: bool,
    threshold_ms: int,
) -> VisitSnapshot:
    """Register activity for ``client_id`` and return the post-sweep totals.

    Order matters: upsert, then sweep, then count, so the reported active count
    always reflects this request's eviction pass.
    """

    store.upsert_active(client_id, now)
    evicted = store.sweep_inactive(now, threshold_ms)
    if count_visit:
        store.increment_visits()

    snapshot = VisitSnapshot(
        client_id=client_id,
        total_visits=store.read_visits(),
        active_users=store.count_active(),
    )
    logger.info(
        "visit.recorded",
        client_id=client_id,
        counted=count_visit,
        total_visits=snapshot.total_visits,
        active_users=snapshot.active_users,
        evicted=evicted,
    )
    return snapshot
