"""Rate limit store interfaces.

The limiter depends on this abstraction (not the concrete implementation)
so the counter storage can move to a shared backend (e.g., Redis) later
without touching the admission logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitEntry:
    """Snapshot of the counter for one (client, route) key.

    Attributes:
        key: Composite identity, ``"<client_id>:<route_key>"``.
        count: Requests observed in the current window (always >= 1).
        window_end: UNIX epoch seconds at which the current window expires.
    """

    key: str
    count: int
    window_end: float

    def is_expired(self, now: float) -> bool:
        return self.window_end <= now


class AbstractRateLimitStore(ABC):
    """Interface for fixed-window counter stores."""

    @abstractmethod
    def hit(self, key: str, *, now: float, window_seconds: int) -> RateLimitEntry:
        """Record one request for ``key`` and return the updated entry.

        Must be atomic with respect to other calls for the same key: when no
        entry exists or the stored one has expired, it is replaced with
        ``count=1`` and ``window_end=now + window_seconds``; otherwise its
        count is incremented.

        Args:
            key: Composite limiter key.
            now: Current UNIX time in seconds.
            window_seconds: Window length used when a new window starts.

        Returns:
            Snapshot of the entry after the update.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self, *, now: float) -> int:
        """Delete every entry whose window has ended.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> RateLimitEntry | None:
        """Return a snapshot of the entry for ``key``, if present."""
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources. No-op by default."""
