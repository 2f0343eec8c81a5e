from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from buyer_leads.core.auth import CurrentUser, get_current_user
from buyer_leads.core.rate_limit import RateLimit

router = APIRouter(prefix="/auth", tags=["Auth"])


class MeResponse(BaseModel):
    user: CurrentUser


@router.get(
    "/me",
    response_model=MeResponse,
    dependencies=[Depends(RateLimit("read"))],
)
async def read_current_user(
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MeResponse:
    """Return the identity bound to the supplied API key."""
    return MeResponse(user=user)
