"""Upload validation utilities for CSV imports."""
from __future__ import annotations

import logging
from pathlib import PurePath

from fastapi import UploadFile

from buyer_leads.core.config import settings
from buyer_leads.core.errors import PayloadTooLargeAppError, ValidationAppError

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPES = {"text/csv", "application/csv", "application/vnd.ms-excel"}
_CHUNK_SIZE = 8192


def ensure_csv_upload(file: UploadFile) -> None:
    """Reject uploads that are neither named ``*.csv`` nor typed as CSV.

    Raises:
        ValidationAppError: If the upload does not look like a CSV file.
    """
    suffix = PurePath(file.filename or "").suffix.lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if suffix == ".csv" or content_type in CSV_CONTENT_TYPES:
        return

    logger.warning(
        "file_validation.unsupported_type",
        extra={"suffix": suffix, "content_type": content_type},
    )
    raise ValidationAppError(
        code="unsupported_file_type",
        message="Only CSV files can be imported",
        details={"file_type": suffix or content_type or "unknown"},
    )


def _reject(size: int, max_bytes: int, *, stage: str) -> PayloadTooLargeAppError:
    logger.warning(
        "file_validation.too_large",
        extra={"size": size, "max_bytes": max_bytes, "stage": stage},
    )
    return PayloadTooLargeAppError(
        code="file_too_large",
        message=f"File too large. Maximum size: {settings.app.max_upload_size_mb}MB",
        details={"actual_value": size, "max_value": max_bytes},
    )


async def read_upload_file_limited(file: UploadFile) -> bytes:
    """Read an upload into memory, refusing anything over the size limit.

    The declared multipart size is checked first; the limit is enforced again
    while reading because that size is not always present.

    Raises:
        PayloadTooLargeAppError: If the file exceeds ``APP_MAX_UPLOAD_SIZE_MB``.
    """
    max_bytes = settings.app.max_upload_size_mb * 1024 * 1024

    declared = getattr(file, "size", None)
    if declared is not None and declared > max_bytes:
        raise _reject(declared, max_bytes, stage="declared")

    buffer = bytearray()
    while True:
        chunk = await file.read(_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise _reject(len(buffer), max_bytes, stage="read")
    return bytes(buffer)
