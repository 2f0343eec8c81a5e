from __future__ import annotations

from buyer_leads.api.routes.auth import router as auth_router
from buyer_leads.api.routes.buyers import router as buyers_router
from buyer_leads.api.routes.health import router as health_router

__all__ = ["auth_router", "buyers_router", "health_router"]
