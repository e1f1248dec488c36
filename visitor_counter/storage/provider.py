from __future__ import annotations

import logging
from threading import Lock

from visitor_counter.config import Settings
from visitor_counter.errors import PersistenceError, PersistenceNotConfiguredError
from visitor_counter.storage.base import VisitStore
from visitor_counter.storage.database import SqlVisitStore
from visitor_counter.storage.memory import MemoryVisitStore

logger = logging.getLogger(__name__)


def build_visit_store(settings: Settings) -> VisitStore:
    if settings.storage_backend == "memory":
        return MemoryVisitStore()

    if not settings.database_url:
        raise PersistenceNotConfiguredError("DATABASE_URL is not set")

    store = SqlVisitStore.from_settings(settings)
    try:
        store.ensure_schema()
    except PersistenceError:
        store.engine.dispose()
        raise
    return store


class VisitStoreProvider:
    """Lazily builds the configured store on first use.

    A missing configuration is remembered and logged once; every later call
    re-raises it without logging. Transient failures while building are not
    cached, so the next request tries again.
    """

    def __init__(self, settings: Settings, store: VisitStore | None = None) -> None:
        self._settings = settings
        self._lock = Lock()
        self._store = store
        self._config_error: PersistenceNotConfiguredError | None = None

    def get(self) -> VisitStore:
        with self._lock:
            if self._store is not None:
                return self._store
            if self._config_error is not None:
                raise self._config_error

            try:
                self._store = build_visit_store(self._settings)
            except PersistenceNotConfiguredError as exc:
                self._config_error = exc
                logger.error("store.not_configured", extra={"reason": str(exc)})
                raise

            logger.info("store.ready", extra={"backend": self._settings.storage_backend})
            return self._store
