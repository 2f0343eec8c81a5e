"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV=testing so rate limiting stays active (it is disabled in
development) and configures two API keys for two distinct users.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "user-1:test-api-key-123,user-2:test-api-key-456")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Iterator  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from buyer_leads.adapters.rate_limit.in_memory import InMemoryRateLimitStore  # noqa: E402
from buyer_leads.core.app_factory import create_app  # noqa: E402
from buyer_leads.services.rate_limiter import FixedWindowRateLimiter  # noqa: E402


@pytest.fixture
def clock() -> Mock:
    """Deterministic UNIX clock; set ``clock.return_value`` to move time."""
    return Mock(return_value=1_000.0)


@pytest.fixture
def store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore()


@pytest.fixture
def limiter(store: InMemoryRateLimitStore, clock: Mock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(store, clock=clock)


@pytest.fixture
def app() -> FastAPI:
    """Fresh app per test so buyer data and limiter counters never leak."""
    return create_app()


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user1_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}


@pytest.fixture
def user2_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-456"}


@pytest.fixture
def buyer_payload() -> dict:
    return {
        "name": "John Doe",
        "email": "john@example.com",
        "phone": "555-1234",
        "budget": "500000",
        "location": "New York",
        "property_type": "Residential",
        "bedrooms": 3,
        "bathrooms": 2,
        "notes": "Looking for a family home",
        "status": "New",
    }
