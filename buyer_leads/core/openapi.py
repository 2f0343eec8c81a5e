"""OpenAPI document for the buyer leads API.

Declares the ``X-API-Key`` scheme as the default requirement, documents the
rate limit responses and exempts public paths from authentication.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

TAGS_METADATA = [
    {
        "name": "Buyers",
        "description": "Create, list, update, delete and import buyer leads.",
    },
    {
        "name": "Auth",
        "description": "Identity of the calling API key.",
    },
    {
        "name": "Health",
        "description": "Liveness check (no authentication, no rate limit).",
    },
]

PUBLIC_PATHS = {"/health"}

API_KEY_SCHEME = {
    "type": "apiKey",
    "in": "header",
    "name": "X-API-Key",
    "description": "Key issued per user; configured through APP_API_KEYS.",
}

RATE_LIMITED_RESPONSE = {
    "description": "Too many requests for this client and route in the current window.",
    "headers": {
        "Retry-After": {"schema": {"type": "integer"}},
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {"schema": {"type": "integer"}},
    },
}


def build_openapi_schema(app: FastAPI) -> Dict[str, Any]:
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=TAGS_METADATA,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})["ApiKeyAuth"] = API_KEY_SCHEME
    schema["security"] = [{"ApiKeyAuth": []}]

    for path, operations in schema.get("paths", {}).items():
        for operation in operations.values():
            if not isinstance(operation, dict):
                continue
            if path in PUBLIC_PATHS:
                operation["security"] = []
            else:
                operation.setdefault("responses", {}).setdefault("429", RATE_LIMITED_RESPONSE)
    return schema


def apply_openapi_customizations(app: FastAPI) -> None:
    """Serve the customized document from ``/openapi.json``, built once."""

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema is None:
            app.openapi_schema = build_openapi_schema(app)
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[assignment]
