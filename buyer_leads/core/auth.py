"""API key authentication.

Each configured key identifies one user. Keys come from ``APP_API_KEYS`` as
a comma-separated list of ``user_id:api_key`` pairs; a bare key (no
``user_id:`` prefix) is accepted and mapped to a user id derived from its
hash.

Design principles:
- Single Responsibility: resolves the caller's identity, nothing more
- Dependency Injection: used via FastAPI Depends() for loose coupling
- Configuration-driven: keys managed via env vars, not hardcoded
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Header
from pydantic import BaseModel, Field

from buyer_leads.core.config import settings
from buyer_leads.core.errors import AuthenticationAppError
from buyer_leads.core.logging import hash_identifier

logger = logging.getLogger(__name__)

ANONYMOUS_USER_ID = "anonymous"


class CurrentUser(BaseModel):
    """Identity resolved from the request credentials."""

    id: str = Field(..., description="Stable user identifier owning buyer records.")


def parse_api_keys(keys_string: str | None) -> dict[str, str]:
    """Parse ``user_id:key`` pairs into a key -> user id mapping.

    Args:
        keys_string: Comma-separated entries, or None.

    Returns:
        Mapping of trimmed API keys to user ids.

    Examples:
        >>> parse_api_keys("alice:key1, bob:key2")
        {'key1': 'alice', 'key2': 'bob'}
        >>> parse_api_keys(None)
        {}
    """
    if not keys_string:
        return {}

    keys: dict[str, str] = {}
    for raw_entry in keys_string.split(","):
        entry = raw_entry.strip()
        if not entry:
            continue
        user_id, sep, key = entry.partition(":")
        if sep and user_id.strip() and key.strip():
            keys[key.strip()] = user_id.strip()
        else:
            keys[entry] = f"user-{hash_identifier(entry)}"
    return keys


def resolve_user(provided_key: str) -> CurrentUser:
    """Map an API key to its user.

    Pure validation logic without FastAPI dependencies for easy testing.

    Args:
        provided_key: API key to validate.

    Returns:
        CurrentUser owning the key (anonymous when auth is disabled).

    Raises:
        AuthenticationAppError: If the key is unknown or no keys are configured.
    """
    if not settings.app.api_key_required:
        return CurrentUser(id=ANONYMOUS_USER_ID)

    valid_keys = parse_api_keys(settings.app.api_keys)

    if not valid_keys:
        logger.error(
            "auth.keys_not_configured",
            extra={"auth_required": settings.app.api_key_required},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    user_id = valid_keys.get(provided_key)
    if user_id is None:
        logger.warning(
            "auth.invalid_key",
            extra={"api_key_hash": hash_identifier(provided_key)},
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )

    return CurrentUser(id=user_id)


async def get_current_user(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> CurrentUser:
    """FastAPI dependency returning the authenticated user.

    Usage:
        @router.get("/buyers")
        async def list_buyers(user: Annotated[CurrentUser, Depends(get_current_user)]):
            ...

    Args:
        x_api_key: API key from X-API-Key header (injected by FastAPI).

    Raises:
        AuthenticationAppError: 401 when the caller is not authenticated.
    """
    if not settings.app.api_key_required:
        logger.debug("auth.skipped", extra={"reason": "auth_required_false"})
        return CurrentUser(id=ANONYMOUS_USER_ID)

    if not x_api_key:
        logger.warning("auth.missing_key", extra={"api_key_present": False})
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Not authenticated. Provide X-API-Key header.",
        )

    user = resolve_user(x_api_key)
    logger.debug(
        "auth.success",
        extra={"user_id": user.id, "api_key_hash": hash_identifier(x_api_key)},
    )
    return user
