"""Rate limiting dependency for FastAPI routes.

This module wires the fixed-window limiter into the HTTP layer.

Design goals:
- Minimal coupling: routes declare ``Depends(RateLimit("read"))`` only.
- App-owned state: the limiter lives on ``app.state.rate_limiter`` and is
  built/closed by the application factory.
- Differentiated budgets: reads get a larger budget than mutations.

Rate limiting strategy:
- Fixed window per (client IP, method + route template).
- Client IP is the first X-Forwarded-For entry, else the socket peer, else
  the shared "unknown" bucket.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Literal

from fastapi import Request

from buyer_leads.adapters.rate_limit.in_memory import InMemoryRateLimitStore
from buyer_leads.core.config import Settings, rate_limiting_active, settings
from buyer_leads.core.errors import RateLimitAppError
from buyer_leads.core.logging import hash_identifier
from buyer_leads.services.rate_limiter import UNKNOWN_CLIENT, FixedWindowRateLimiter

logger = logging.getLogger(__name__)

RateLimitScope = Literal["read", "write"]

FORWARDED_FOR_HEADER = "X-Forwarded-For"


def build_rate_limiter(cfg: Settings | None = None) -> FixedWindowRateLimiter:
    """Create the limiter for one application instance.

    Args:
        cfg: Settings to read the enable flags from; defaults to global settings.

    Returns:
        FixedWindowRateLimiter over a fresh in-memory store.
    """

    cfg = cfg or settings
    enabled = rate_limiting_active(cfg)
    if not enabled:
        logger.info(
            "rate_limit.disabled",
            extra={"app_env": cfg.app_env, "rate_limit_enabled": cfg.app.rate_limit_enabled},
        )
    return FixedWindowRateLimiter(InMemoryRateLimitStore(), enabled=enabled)


def get_client_ip(request: Request) -> str:
    """Extract the client address used as limiter identity.

    Args:
        request: FastAPI request.

    Returns:
        First X-Forwarded-For hop, the peer host, or "unknown".
    """

    forwarded_for = request.headers.get(FORWARDED_FOR_HEADER)
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def get_route_key(request: Request) -> str:
    """Return ``"<METHOD> <path template>"`` for the matched route.

    Using the template keeps ``/v1/buyers/{buyer_id}`` as one bucket no matter
    which id is requested.
    """

    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return f"{request.method} {path}"


def _limit_for_scope(scope: RateLimitScope) -> int:
    if scope == "write":
        return settings.app.rate_limit_write_requests
    return settings.app.rate_limit_read_requests


class RateLimit:
    """FastAPI dependency enforcing the per-route request budget.

    Usage:
        @router.post("/buyers", dependencies=[Depends(RateLimit("write"))])
    """

    def __init__(self, scope: RateLimitScope = "read") -> None:
        self.scope = scope

    async def __call__(self, request: Request) -> None:
        """Consume one unit of the caller's budget.

        Raises:
            RateLimitAppError: 429 when the window's budget is exhausted.
        """

        limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
        if not limiter.enabled:
            return

        client_ip = get_client_ip(request)
        route_key = get_route_key(request)
        limit = _limit_for_scope(self.scope)
        window_seconds = settings.app.rate_limit_window_seconds

        decision = limiter.check_limit(client_ip, route_key, limit, window_seconds)
        if decision.admitted:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "client_hash": hash_identifier(client_ip),
                    "route": route_key,
                    "scope": self.scope,
                    "limit": decision.limit,
                    "remaining": decision.remaining,
                },
            )
            return

        retry_after = decision.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "client_hash": hash_identifier(client_ip),
                "route": route_key,
                "scope": self.scope,
                "limit": decision.limit,
                "count": decision.count,
                "window_s": window_seconds,
                "retry_after_s": retry_after,
            },
        )

        headers: dict[str, str] | None = None
        if settings.app.rate_limit_include_headers:
            headers = {
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(decision.limit),
                "X-RateLimit-Remaining": str(decision.remaining),
                "X-RateLimit-Reset": str(int(decision.window_end or 0)),
            }

        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message="Too many requests. Please try again later.",
            details={"retry_after": retry_after, "limit": decision.limit},
            headers=headers,
        )


async def run_sweeper(limiter: FixedWindowRateLimiter, interval_seconds: float) -> None:
    """Periodically purge expired limiter entries until cancelled.

    Args:
        limiter: Limiter whose store should be swept.
        interval_seconds: Delay between sweeps.
    """

    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.sweep_expired()
        if removed:
            logger.debug("rate_limit.swept", extra={"removed": removed})
