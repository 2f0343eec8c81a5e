"""Application factory for the FastAPI app.

Builds the app-owned state (buyer repository, rate limiter), middleware,
exception handlers and routers. The lifespan runs the rate limit sweeper
and closes the limiter on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from buyer_leads.adapters.buyers.base import AbstractBuyerRepository
from buyer_leads.adapters.buyers.in_memory import InMemoryBuyerRepository
from buyer_leads.api.routes import auth_router, buyers_router, health_router
from buyer_leads.core.config import settings
from buyer_leads.core.exception_handlers import setup_exception_handlers
from buyer_leads.core.logging import configure_logging
from buyer_leads.core.middleware import request_id_middleware
from buyer_leads.core.openapi import apply_openapi_customizations
from buyer_leads.core.rate_limit import build_rate_limiter, run_sweeper
from buyer_leads.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    limiter: FixedWindowRateLimiter = app.state.rate_limiter
    sweeper: asyncio.Task | None = None
    if limiter.enabled:
        sweeper = asyncio.create_task(
            run_sweeper(limiter, settings.app.rate_limit_sweep_interval_seconds)
        )
    logger.info("app.startup", extra={"app_env": settings.app_env, "rate_limiting": limiter.enabled})
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        limiter.close()
        logger.info("app.shutdown")


def create_app(
    *,
    buyer_repository: AbstractBuyerRepository | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        buyer_repository: Storage for buyers; a fresh in-memory repository by default.
        rate_limiter: Limiter instance; built from settings by default.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Buyer Leads API",
        description=(
            "Manage real-estate buyer leads: contact details, budget, property "
            "preferences and pipeline status. Requires X-API-Key; every buyer "
            "endpoint is rate limited per client IP and route."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.state.buyer_repository = buyer_repository or InMemoryBuyerRepository()
    app.state.rate_limiter = rate_limiter or build_rate_limiter(settings)

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(buyers_router, prefix="/v1")
    app.include_router(auth_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
