# manage_backend/adapters/outbound/cache/memory_session_store.py

import threading
import time
from datetime import timedelta
from typing import Callable, Dict, Optional, Tuple

from manage_backend.application.ports.outbound import ISessionStore

SWEEP_INTERVAL_SECONDS = 60.0


class InMemorySessionStore(ISessionStore):
    """
    Process-local session store with per-key expiry.

    Used for single-process deployments (``CACHE_BACKEND=memory``) and tests.
    Expired entries are dropped when read, and writes sweep the whole map
    at most once per ``sweep_interval`` seconds, so keys that are never
    read again (blacklisted token ids, mostly) do not accumulate.

    Args:
        clock: monotonic seconds source, replaceable to simulate time passing
        sweep_interval: minimum seconds between two full sweeps
    """

    def __init__(
            self,
            clock: Callable[[], float] = time.monotonic,
            sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ):
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._data: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _live_value(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self.clock():
            del self._data[key]
            return None
        return value

    def _sweep_if_due(self) -> None:
        now = self.clock()
        if now < self._next_sweep:
            return
        expired = [key for key, (_, expires_at) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]
        self._next_sweep = now + self.sweep_interval

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        with self._lock:
            self._sweep_if_due()
            self._data[key] = (value, self.clock() + ttl.total_seconds())

    async def replace(self, key: str, value: str, ttl: timedelta) -> bool:
        with self._lock:
            if self._live_value(key) is None:
                return False
            self._data[key] = (value, self.clock() + ttl.total_seconds())
            return True

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._live_value(key)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_value(key) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        with self._lock:
            self._data.clear()
