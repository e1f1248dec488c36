from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from visitor_counter.config import Settings
from visitor_counter.db.models import VISIT_STATS_ID, ActiveUserRow, Base, VisitStatsRow
from visitor_counter.db.session import get_engine, get_session_factory
from visitor_counter.errors import PersistenceError
from visitor_counter.storage.base import VisitStore

logger = logging.getLogger(__name__)

# Dialects with native INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlVisitStore(VisitStore):
    """SQLAlchemy-backed store: ``active_users`` keyed by client id, ``stats`` with one counter row."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = get_session_factory(engine)
        self._insert = _UPSERT_INSERTS.get(engine.dialect.name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqlVisitStore":
        return cls(get_engine(settings.database_url, settings))

    def ensure_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError("schema setup failed") from exc

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        try:
            with self._session_factory.begin() as db:
                yield db
        except SQLAlchemyError as exc:
            logger.warning("store.operation_failed", extra={"operation": operation, "error": exc.__class__.__name__})
            raise PersistenceError(f"{operation} failed") from exc

    def upsert_active(self, client_id: str, now: int) -> None:
        with self._transaction("upsert_active") as db:
            if self._insert is not None:
                stmt = self._insert(ActiveUserRow).values(client_id=client_id, last_active=now, first_seen=now)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["client_id"],
                    set_={"last_active": stmt.excluded.last_active},
                )
                db.execute(stmt)
                return

            row = db.get(ActiveUserRow, client_id, with_for_update=True)
            if row is None:
                db.add(ActiveUserRow(client_id=client_id, last_active=now, first_seen=now))
            else:
                row.last_active = now

    def sweep_inactive(self, now: int, threshold_ms: int) -> int:
        # now - last_active > threshold  <=>  last_active < now - threshold
        with self._transaction("sweep_inactive") as db:
            result = db.execute(
                delete(ActiveUserRow).where(ActiveUserRow.last_active < now - threshold_ms),
                execution_options={"synchronize_session": False},
            )
            return int(result.rowcount or 0)

    def count_active(self) -> int:
        with self._transaction("count_active") as db:
            return int(db.execute(select(func.count()).select_from(ActiveUserRow)).scalar_one())

    def increment_visits(self) -> int:
        with self._transaction("increment_visits") as db:
            if self._insert is not None:
                stmt = self._insert(VisitStatsRow).values(id=VISIT_STATS_ID, total_visits=1)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["id"],
                    set_={"total_visits": VisitStatsRow.total_visits + 1},
                )
                db.execute(stmt)
            else:
                result = db.execute(
                    update(VisitStatsRow)
                    .where(VisitStatsRow.id == VISIT_STATS_ID)
                    .values(total_visits=VisitStatsRow.total_visits + 1),
                    execution_options={"synchronize_session": False},
                )
                if not result.rowcount:
                    db.add(VisitStatsRow(id=VISIT_STATS_ID, total_visits=1))
                    db.flush()

            return int(
                db.execute(select(VisitStatsRow.total_visits).where(VisitStatsRow.id == VISIT_STATS_ID)).scalar_one()
            )

    def read_visits(self) -> int:
        with self._transaction("read_visits") as db:
            total = db.execute(
                select(VisitStatsRow.total_visits).where(VisitStatsRow.id == VISIT_STATS_ID)
            ).scalar_one_or_none()
            return int(total or 0)
