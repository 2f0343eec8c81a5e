from __future__ import annotations

from fastapi import Request

from buyer_leads.services.buyer_service import BuyerService


def get_buyer_service(request: Request) -> BuyerService:
    """Build the buyer service over the app-owned repository."""
    return BuyerService(request.app.state.buyer_repository)
