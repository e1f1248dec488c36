from __future__ import annotations

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

VISIT_STATS_ID = "visits"


class Base(DeclarativeBase):
    pass


class ActiveUserRow(Base):
    __tablename__ = "active_users"

    client_id: Mapped[str] = mapped_column(Text, primary_key=True)
    last_active: Mapped[int] = mapped_column(BigInteger, index=True, nullable=False)
    first_seen: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class VisitStatsRow(Base):
    """Single-row table; the only row has ``id == VISIT_STATS_ID``."""

    __tablename__ = "stats"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    total_visits: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
