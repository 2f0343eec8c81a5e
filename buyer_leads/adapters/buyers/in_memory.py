"""In-memory buyer repository.

Data lives only as long as the process; suitable for local development,
tests and single-instance demos.
"""

from __future__ import annotations

import re
import threading
from typing import Any

from buyer_leads.adapters.buyers.base import AbstractBuyerRepository
from buyer_leads.schemas.buyer import Buyer, BuyerFilter

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_budget(budget: str | None) -> float | None:
    """Extract a numeric amount from a free-form budget string.

    Currency symbols, thousands separators and spaces are ignored; a trailing
    ``k`` or ``m`` multiplies by one thousand or one million. Ranges and other
    strings holding more than one number are not parsed.

    Examples:
        >>> parse_budget("$450,000")
        450000.0
        >>> parse_budget("1.2m")
        1200000.0
        >>> parse_budget("$450k-$500k") is None
        True
    """
    if not budget:
        return None

    text = budget.strip().lower().replace(",", "").replace(" ", "")
    multiplier = 1.0
    if text.endswith("k"):
        multiplier = 1_000.0
    elif text.endswith("m"):
        multiplier = 1_000_000.0

    numbers = _NUMBER.findall(text)
    if len(numbers) != 1:
        return None
    return float(numbers[0]) * multiplier


def _matches(buyer: Buyer, filters: BuyerFilter) -> bool:
    if filters.search:
        needle = filters.search.lower()
        haystacks = (buyer.name, buyer.email, buyer.phone or "")
        if not any(needle in value.lower() for value in haystacks):
            return False
    if filters.status is not None and buyer.status != filters.status:
        return False
    if filters.property_type is not None and buyer.property_type != filters.property_type:
        return False
    if filters.location and filters.location.lower() not in (buyer.location or "").lower():
        return False
    if filters.min_budget is not None or filters.max_budget is not None:
        amount = parse_budget(buyer.budget)
        if amount is None:
            return False
        if filters.min_budget is not None and amount < filters.min_budget:
            return False
        if filters.max_budget is not None and amount > filters.max_budget:
            return False
    return True


class InMemoryBuyerRepository(AbstractBuyerRepository):
    """Thread-safe dict-backed repository."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._buyers: dict[str, Buyer] = {}

    def list_for_user(self, user_id: str, filters: BuyerFilter) -> tuple[list[Buyer], int]:
        with self._lock:
            owned = [b for b in self._buyers.values() if b.user_id == user_id]

        matching = [b for b in owned if _matches(b, filters)]
        matching.sort(key=lambda b: b.created_at, reverse=True)

        offset = (filters.page - 1) * filters.limit
        return matching[offset : offset + filters.limit], len(matching)

    def get(self, buyer_id: str) -> Buyer | None:
        with self._lock:
            return self._buyers.get(buyer_id)

    def add(self, buyer: Buyer) -> Buyer:
        with self._lock:
            if buyer.id in self._buyers:
                raise ValueError(f"buyer {buyer.id} already exists")
            self._buyers[buyer.id] = buyer
        return buyer

    def update(self, buyer_id: str, changes: dict[str, Any]) -> Buyer | None:
        with self._lock:
            current = self._buyers.get(buyer_id)
            if current is None:
                return None
            # Re-validate so a bad change can never leave an invalid record behind
            updated = Buyer.model_validate({**current.model_dump(), **changes})
            self._buyers[buyer_id] = updated
            return updated

    def delete(self, buyer_id: str) -> bool:
        with self._lock:
            return self._buyers.pop(buyer_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._buyers.clear()
