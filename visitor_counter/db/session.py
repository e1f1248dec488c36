from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.engine import URL
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from visitor_counter.config import Settings


def is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def get_engine(database_url: str, settings: Settings) -> Engine:
    url = make_url(database_url)
    kwargs: dict[str, Any] = {"pool_pre_ping": True}

    if is_memory_sqlite(url):
        # One shared connection, otherwise every checkout sees an empty database.
        # StaticPool takes no checkout timeout.
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_timeout"] = settings.db_pool_timeout_seconds
        if url.get_backend_name() == "postgresql":
            # psycopg3 driver uses `postgresql+psycopg://...`
            kwargs["connect_args"] = {"connect_timeout": settings.db_connect_timeout_seconds}

    return create_engine(url, **kwargs)


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
