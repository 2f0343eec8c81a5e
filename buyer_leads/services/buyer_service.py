"""Buyer management: CRUD, ownership checks and CSV import.

Every operation is scoped to the calling user. Records owned by someone
else are reported as forbidden, missing ones as not found.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Callable, TypeVar

from buyer_leads.adapters.buyers.base import AbstractBuyerRepository
from buyer_leads.core.errors import AuthorizationAppError, NotFoundAppError, StorageAppError
from buyer_leads.schemas.buyer import (
    Buyer,
    BuyerCreate,
    BuyerFilter,
    BuyerImportResponse,
    BuyerListResponse,
    BuyerUpdate,
    Pagination,
)
from buyer_leads.services.csv_import import parse_buyers_csv

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps (common in spreadsheet exports) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _write(operation: str, buyer_id: str, write: Callable[[], T]) -> T:
    """Run a repository write, reporting backend rejections as storage errors."""
    try:
        return write()
    except ValueError as exc:
        logger.error(
            "buyer.write_failed",
            extra={"operation": operation, "buyer_id": buyer_id, "error_type": type(exc).__name__},
        )
        raise StorageAppError(
            code="buyer_write_failed",
            message="Buyer could not be saved",
            details={"buyer_id": buyer_id},
        ) from exc


class BuyerService:
    """Application service over a buyer repository."""

    def __init__(
        self,
        repository: AbstractBuyerRepository,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    def list_buyers(self, user_id: str, filters: BuyerFilter) -> BuyerListResponse:
        """Return one page of the user's buyers with pagination metadata."""
        buyers, total = self._repository.list_for_user(user_id, filters)
        return BuyerListResponse(
            data=buyers,
            pagination=Pagination(
                page=filters.page,
                limit=filters.limit,
                total=total,
                total_pages=math.ceil(total / filters.limit),
            ),
        )

    def get_owned_buyer(self, user_id: str, buyer_id: str) -> Buyer:
        """Fetch a buyer the user owns.

        Raises:
            NotFoundAppError: No buyer with this id.
            AuthorizationAppError: The buyer belongs to another user.
        """
        buyer = self._repository.get(buyer_id)
        if buyer is None:
            raise NotFoundAppError(
                code="buyer_not_found",
                message="Buyer not found",
                details={"buyer_id": buyer_id},
            )
        if buyer.user_id != user_id:
            logger.warning(
                "buyer.access_denied",
                extra={"buyer_id": buyer_id, "user_id": user_id},
            )
            raise AuthorizationAppError(
                code="buyer_forbidden",
                message="Not authorized to access this buyer",
                details={"buyer_id": buyer_id},
            )
        return buyer

    def create_buyer(self, user_id: str, payload: BuyerCreate) -> Buyer:
        now = self._clock()
        buyer = Buyer(
            **payload.model_dump(),
            id=self._id_factory(),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        _write("create", buyer.id, lambda: self._repository.add(buyer))
        logger.info("buyer.created", extra={"buyer_id": buyer.id, "user_id": user_id})
        return buyer

    def update_buyer(self, user_id: str, buyer_id: str, payload: BuyerUpdate) -> Buyer:
        """Apply the fields present in ``payload`` to an owned buyer."""
        self.get_owned_buyer(user_id, buyer_id)

        changes = payload.model_dump(exclude_unset=True)
        changes["updated_at"] = self._clock()

        updated = _write("update", buyer_id, lambda: self._repository.update(buyer_id, changes))
        if updated is None:
            # Deleted between the ownership check and the write
            raise NotFoundAppError(
                code="buyer_not_found",
                message="Buyer not found",
                details={"buyer_id": buyer_id},
            )
        logger.info(
            "buyer.updated",
            extra={"buyer_id": buyer_id, "user_id": user_id, "fields": sorted(changes)},
        )
        return updated

    def delete_buyer(self, user_id: str, buyer_id: str) -> None:
        self.get_owned_buyer(user_id, buyer_id)
        self._repository.delete(buyer_id)
        logger.info("buyer.deleted", extra={"buyer_id": buyer_id, "user_id": user_id})

    def import_buyers(self, user_id: str, file_bytes: bytes, *, max_rows: int) -> BuyerImportResponse:
        """Create buyers from a CSV upload; invalid rows are reported, not stored."""
        parsed = parse_buyers_csv(file_bytes, max_rows=max_rows)

        created: list[Buyer] = []
        for row in parsed.rows:
            now = self._clock()
            fields = row.model_dump(exclude={"created_at", "updated_at"})
            created_at = _as_utc(row.created_at) or now
            buyer = Buyer(
                **fields,
                id=self._id_factory(),
                user_id=user_id,
                created_at=created_at,
                updated_at=_as_utc(row.updated_at) or created_at,
            )
            created.append(_write("import", buyer.id, lambda: self._repository.add(buyer)))

        logger.info(
            "buyer.imported",
            extra={"user_id": user_id, "imported": len(created), "failed": len(parsed.errors)},
        )
        return BuyerImportResponse(
            imported=len(created),
            failed=len(parsed.errors),
            buyers=created,
            errors=parsed.errors,
        )
