"""Buyer repository interface.

Services depend on this abstraction so the in-memory store can be replaced
by a database-backed repository without changing the API layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from buyer_leads.schemas.buyer import Buyer, BuyerFilter


class AbstractBuyerRepository(ABC):
    """Persistence operations for buyer records."""

    @abstractmethod
    def list_for_user(self, user_id: str, filters: BuyerFilter) -> tuple[list[Buyer], int]:
        """Return one page of the user's buyers, newest first.

        Args:
            user_id: Owner whose buyers are listed.
            filters: Search, filter and pagination options.

        Returns:
            Tuple of (buyers on the requested page, total matching count).
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, buyer_id: str) -> Buyer | None:
        """Fetch a buyer by id regardless of owner, or None."""
        raise NotImplementedError

    @abstractmethod
    def add(self, buyer: Buyer) -> Buyer:
        """Insert a new buyer record.

        Raises:
            ValueError: A buyer with the same id already exists.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, buyer_id: str, changes: dict[str, Any]) -> Buyer | None:
        """Apply field changes to a buyer; None if it no longer exists.

        Raises:
            ValueError: The changes would produce an invalid record.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, buyer_id: str) -> bool:
        """Delete a buyer; returns whether a record was removed."""
        raise NotImplementedError
