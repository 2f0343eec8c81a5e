"""Fixed-window admission control per (client, route).

Each distinct ``"<client_id>:<route_key>"`` key gets a counter that starts
with the first request and lives for ``window_seconds``. Requests beyond
``limit`` inside the window are rejected, and rejected requests keep
counting against the window.

Known and accepted behavior:
- Fixed window, not sliding: a client may send up to ``2 * limit`` requests
  in a short span straddling a window boundary.
- Fail open: if the counter store raises, the request is admitted and the
  failure is logged.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from buyer_leads.adapters.rate_limit.base import AbstractRateLimitStore
from buyer_leads.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"
UNKNOWN_ROUTE = "unknown"
DEFAULT_WINDOW_SECONDS = 60


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check.

    Attributes:
        admitted: Whether the request may proceed.
        limit: Max requests per window for this route.
        count: Requests counted in the current window, this one included
            (0 when the limiter was bypassed).
        window_end: UNIX epoch seconds when the window resets (None when the
            store was bypassed or unavailable).
        retry_after_seconds: Suggested wait when rejected, else None.
    """

    admitted: bool
    limit: int
    count: int = 0
    window_end: float | None = None
    retry_after_seconds: int | None = None

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


def build_limit_key(client_id: str, route_key: str) -> str:
    """Compose the store key, substituting sentinels for missing parts."""
    return f"{client_id or UNKNOWN_CLIENT}:{route_key or UNKNOWN_ROUTE}"


class FixedWindowRateLimiter:
    """Admission decisions backed by an ``AbstractRateLimitStore``.

    The limiter owns its store: construct one per application instance and
    call ``close()`` on shutdown.
    """

    def __init__(
        self,
        store: AbstractRateLimitStore,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Counter store holding one entry per key.
            enabled: When False every check is admitted without touching the
                store (e.g., local development).
            clock: Time source returning UNIX time in seconds.
        """
        self._store = store
        self._clock = clock
        self.enabled = enabled

    @property
    def store(self) -> AbstractRateLimitStore:
        return self._store

    def check_limit(
        self,
        client_id: str,
        route_key: str,
        limit: int,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ) -> RateLimitDecision:
        """Count one request for (client_id, route_key) and decide admission.

        Args:
            client_id: Client address; empty values share the "unknown" bucket.
            route_key: Route identity; empty values share the "unknown" bucket.
            limit: Maximum admitted requests per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitDecision for this request.

        Raises:
            ValueError: If limit or window_seconds is not positive.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        if not self.enabled:
            return RateLimitDecision(admitted=True, limit=limit)

        key = build_limit_key(client_id, route_key)
        now = self._clock()

        try:
            entry = self._store.hit(key, now=now, window_seconds=window_seconds)
        except Exception as exc:
            logger.error(
                "rate_limit.store_error",
                extra={
                    "key_hash": hash_identifier(key),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return RateLimitDecision(admitted=True, limit=limit)

        if entry.count <= limit:
            return RateLimitDecision(
                admitted=True,
                limit=limit,
                count=entry.count,
                window_end=entry.window_end,
            )

        retry_after = max(1, int(math.ceil(entry.window_end - now)))
        return RateLimitDecision(
            admitted=False,
            limit=limit,
            count=entry.count,
            window_end=entry.window_end,
            retry_after_seconds=retry_after,
        )

    def sweep_expired(self) -> int:
        """Purge expired entries from the store.

        Only bounds memory; admission decisions never depend on it.

        Returns:
            Number of entries removed (0 if the store failed).
        """
        try:
            return self._store.sweep(now=self._clock())
        except Exception as exc:
            logger.error(
                "rate_limit.sweep_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            return 0

    def close(self) -> None:
        self._store.close()
