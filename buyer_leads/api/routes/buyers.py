from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from buyer_leads.api.deps import get_buyer_service
from buyer_leads.core.auth import CurrentUser, get_current_user
from buyer_leads.core.config import settings
from buyer_leads.core.file_validation import ensure_csv_upload, read_upload_file_limited
from buyer_leads.core.rate_limit import RateLimit
from buyer_leads.schemas.buyer import (
    Buyer,
    BuyerCreate,
    BuyerFilter,
    BuyerImportResponse,
    BuyerListResponse,
    BuyerStatus,
    BuyerUpdate,
    DeleteBuyerResponse,
    PropertyType,
)
from buyer_leads.services.buyer_service import BuyerService

router = APIRouter(prefix="/buyers", tags=["Buyers"])

UserDep = Annotated[CurrentUser, Depends(get_current_user)]
ServiceDep = Annotated[BuyerService, Depends(get_buyer_service)]


@router.get(
    "",
    response_model=BuyerListResponse,
    dependencies=[Depends(RateLimit("read"))],
)
async def list_buyers(
    user: UserDep,
    service: ServiceDep,
    search: str | None = Query(None, description="Matches name, email or phone (case-insensitive)."),
    status_filter: BuyerStatus | None = Query(None, alias="status"),
    property_type: PropertyType | None = Query(None),
    location: str | None = Query(None),
    min_budget: float | None = Query(None),
    max_budget: float | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=settings.app.max_page_size),
) -> BuyerListResponse:
    """List the caller's buyers, newest first, with pagination."""
    filters = BuyerFilter(
        search=search or None,
        status=status_filter,
        property_type=property_type,
        location=location or None,
        min_budget=min_budget,
        max_budget=max_budget,
        page=page,
        limit=limit or settings.app.default_page_size,
    )
    return service.list_buyers(user.id, filters)


@router.post(
    "",
    response_model=Buyer,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("write"))],
)
async def create_buyer(payload: BuyerCreate, user: UserDep, service: ServiceDep) -> Buyer:
    return service.create_buyer(user.id, payload)


@router.post(
    "/import",
    response_model=BuyerImportResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("write"))],
)
async def import_buyers(
    user: UserDep,
    service: ServiceDep,
    file: UploadFile = File(..., description="CSV file with a header row of buyer fields"),
) -> BuyerImportResponse:
    """Bulk-create buyers from a CSV upload.

    Valid rows are stored; invalid rows are returned in ``errors`` with their
    line numbers and field messages.
    """
    ensure_csv_upload(file)
    file_bytes = await read_upload_file_limited(file)
    return service.import_buyers(user.id, file_bytes, max_rows=settings.app.max_import_rows)


@router.get(
    "/{buyer_id}",
    response_model=Buyer,
    dependencies=[Depends(RateLimit("read"))],
)
async def get_buyer(buyer_id: str, user: UserDep, service: ServiceDep) -> Buyer:
    return service.get_owned_buyer(user.id, buyer_id)


@router.put(
    "/{buyer_id}",
    response_model=Buyer,
    dependencies=[Depends(RateLimit("write"))],
)
async def update_buyer(
    buyer_id: str,
    payload: BuyerUpdate,
    user: UserDep,
    service: ServiceDep,
) -> Buyer:
    return service.update_buyer(user.id, buyer_id, payload)


@router.delete(
    "/{buyer_id}",
    response_model=DeleteBuyerResponse,
    dependencies=[Depends(RateLimit("write"))],
)
async def delete_buyer(buyer_id: str, user: UserDep, service: ServiceDep) -> DeleteBuyerResponse:
    service.delete_buyer(user.id, buyer_id)
    return DeleteBuyerResponse()
