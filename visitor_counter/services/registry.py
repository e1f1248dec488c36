from __future__ import annotations

from dataclasses import dataclass, replace
from threading import Lock

DEFAULT_INACTIVITY_THRESHOLD_MS = 2 * 60 * 1000


@dataclass
class ActiveUser:
    client_id: str
    last_active: int
    first_seen: int | None = None


class ActiveVisitorRegistry:
    """Thread-safe map of client id -> last activity (epoch ms)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: dict[str, ActiveUser] = {}

    def upsert(self, client_id: str, now: int) -> None:
        with self._lock:
            user = self._users.get(client_id)
            if user is None:
                self._users[client_id] = ActiveUser(client_id=client_id, last_active=now, first_seen=now)
            else:
                user.last_active = now

    def sweep(self, now: int, threshold_ms: int = DEFAULT_INACTIVITY_THRESHOLD_MS) -> int:
        """Evict entries idle for strictly longer than ``threshold_ms``; return how many."""

        with self._lock:
            expired = [cid for cid, user in self._users.items() if now - user.last_active > threshold_ms]
            for cid in expired:
                del self._users[cid]
            return len(expired)

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def get(self, client_id: str) -> ActiveUser | None:
        with self._lock:
            user = self._users.get(client_id)
            return replace(user) if user is not None else None
