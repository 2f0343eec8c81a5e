"""In-memory fixed-window counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: ``hit`` and ``sweep`` share one lock around the mapping.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from buyer_leads.adapters.rate_limit.base import AbstractRateLimitStore, RateLimitEntry


@dataclass
class _WindowState:
    count: int
    window_end: float


class InMemoryRateLimitStore(AbstractRateLimitStore):
    """Counter store backed by a dict guarded by a re-entrant lock.

    Important:
        Entries live only as long as the process. Each Uvicorn/Gunicorn
        worker holds its own store and enforces its own limits.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def hit(self, key: str, *, now: float, window_seconds: int) -> RateLimitEntry:
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            state = self._state_by_key.get(key)
            if state is None or state.window_end <= now:
                state = _WindowState(count=1, window_end=now + window_seconds)
                self._state_by_key[key] = state
            else:
                state.count += 1
            return RateLimitEntry(key=key, count=state.count, window_end=state.window_end)

    def sweep(self, *, now: float) -> int:
        with self._lock:
            expired = [
                key for key, state in self._state_by_key.items() if state.window_end <= now
            ]
            for key in expired:
                del self._state_by_key[key]
            return len(expired)

    def get(self, key: str) -> RateLimitEntry | None:
        with self._lock:
            state = self._state_by_key.get(key)
            if state is None:
                return None
            return RateLimitEntry(key=key, count=state.count, window_end=state.window_end)

    def clear(self) -> None:
        """Drop every entry (used on shutdown and in tests)."""
        with self._lock:
            self._state_by_key.clear()

    def close(self) -> None:
        self.clear()
