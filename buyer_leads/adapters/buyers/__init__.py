"""Buyer storage adapters."""

from buyer_leads.adapters.buyers.base import AbstractBuyerRepository
from buyer_leads.adapters.buyers.in_memory import InMemoryBuyerRepository

__all__ = [
    "AbstractBuyerRepository",
    "InMemoryBuyerRepository",
]
