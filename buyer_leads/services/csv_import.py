"""CSV parsing for bulk buyer imports.

Turns raw upload bytes into validated ``BuyerImportRow`` objects plus a list
of per-row errors. Storage is left to ``BuyerService``.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from buyer_leads.core.errors import ValidationAppError
from buyer_leads.schemas.buyer import BuyerImportRow, ImportFieldError, ImportRowError

logger = logging.getLogger(__name__)


@dataclass
class ParsedImport:
    """Rows that validated and rows that did not."""

    rows: list[BuyerImportRow] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)


def _decode(file_bytes: bytes) -> str:
    try:
        # utf-8-sig drops the BOM spreadsheet tools like to prepend
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationAppError(
            code="invalid_encoding",
            message="CSV file must be UTF-8 encoded",
            details={"hint": f"Decoding failed at byte {exc.start}"},
        ) from exc


def _normalize_row(raw: dict[str | None, str | list[str] | None]) -> dict[str, str]:
    """Lower-case headers and drop empty cells so optional fields stay unset."""
    row: dict[str, str] = {}
    for key, value in raw.items():
        # Extra cells beyond the header are collected under the None key
        if key is None or not isinstance(value, str):
            continue
        name = key.strip().lower()
        cell = value.strip()
        if name and cell:
            row[name] = cell
    return row


def _field_errors(exc: ValidationError) -> list[ImportFieldError]:
    return [
        ImportFieldError(
            field=".".join(str(part) for part in err["loc"]) or "row",
            message=err["msg"],
        )
        for err in exc.errors()
    ]


def parse_buyers_csv(file_bytes: bytes, *, max_rows: int) -> ParsedImport:
    """Parse and validate a buyers CSV export.

    Args:
        file_bytes: Raw upload content.
        max_rows: Maximum number of data rows allowed.

    Returns:
        ParsedImport with validated rows and per-row errors.

    Raises:
        ValidationAppError: Empty file, bad encoding, missing header or too
            many rows.
    """
    if not file_bytes.strip():
        raise ValidationAppError(code="empty_file", message="Uploaded CSV file is empty")

    reader = csv.DictReader(io.StringIO(_decode(file_bytes)))
    if not reader.fieldnames:
        raise ValidationAppError(code="missing_header", message="CSV file has no header row")

    parsed = ParsedImport()
    data_rows = 0

    for raw in reader:
        row = _normalize_row(raw)
        if not row:
            continue

        data_rows += 1
        if data_rows > max_rows:
            raise ValidationAppError(
                code="too_many_rows",
                message=f"CSV import is limited to {max_rows} rows",
                details={"max_value": max_rows},
            )

        try:
            parsed.rows.append(BuyerImportRow.model_validate(row))
        except ValidationError as exc:
            parsed.errors.append(ImportRowError(row=reader.line_num, errors=_field_errors(exc)))

    logger.info(
        "csv_import.parsed",
        extra={"valid_rows": len(parsed.rows), "invalid_rows": len(parsed.errors)},
    )
    return parsed
