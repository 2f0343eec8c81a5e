from __future__ import annotations

from fastapi import APIRouter, Request

from buyer_leads.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check used by load balancers and monitoring.

    Not authenticated and not rate limited.

    Returns:
        dict: ``status`` plus the running environment and whether rate
            limiting is active.
    """

    limiter = request.app.state.rate_limiter
    return {
        "status": "ok",
        "environment": settings.app_env,
        "rate_limiting": limiter.enabled,
    }
