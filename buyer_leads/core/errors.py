"""Domain errors raised by services and dependencies.

Each subclass fixes the HTTP status it maps to; ``exception_handlers``
renders all of them in the same JSON envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Optional structured context returned under ``error.details``."""

    code: str
    message: str
    hint: str
    buyer_id: str
    max_value: int
    actual_value: int
    retry_after: int
    limit: int
    file_type: str
    fields: list[dict[str, Any]]
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base class for expected failures surfaced to API clients.

    Attributes:
        code: Machine-readable error code, stable across releases.
        message: Message safe to show to the caller.
        details: Extra context for the caller (limits, offending fields, ...).
        headers: Response headers to send with the error, e.g. ``Retry-After``.
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    status_code = 400

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input is rejected."""

    status_code = 400


class AuthenticationAppError(AppError):
    """Raised when the caller cannot be identified."""

    status_code = 401


class AuthorizationAppError(AppError):
    """Raised when the caller may not access a resource."""

    status_code = 403


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404


class PayloadTooLargeAppError(AppError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget."""

    status_code = 429


class StorageAppError(AppError):
    """Raised when a storage backend operation fails."""

    status_code = 500
