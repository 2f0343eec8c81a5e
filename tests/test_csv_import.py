"""Tests for bulk buyer import from CSV: parser, service and route."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from buyer_leads.adapters.buyers.in_memory import InMemoryBuyerRepository
from buyer_leads.core.config import settings
from buyer_leads.core.errors import ValidationAppError
from buyer_leads.schemas.buyer import BuyerFilter
from buyer_leads.services.buyer_service import BuyerService
from buyer_leads.services.csv_import import parse_buyers_csv

HEADER = "name,email,phone,budget,location,property_type,bedrooms,bathrooms,notes,status\n"

VALID_ROW = "Jane Roe,jane@example.com,555-0101,450k,Austin,Residential,3,2,Near schools,New\n"
OTHER_VALID_ROW = "Mark Poe,mark@example.com,,,,Land,,,,Contacted\n"
INVALID_ROW = "X,not-an-email,,,,Castle,-1,,,New\n"


def _csv(*rows: str) -> bytes:
    return (HEADER + "".join(rows)).encode("utf-8")


class TestParseBuyersCsv:
    def test_valid_rows(self) -> None:
        parsed = parse_buyers_csv(_csv(VALID_ROW, OTHER_VALID_ROW), max_rows=10)

        assert [row.name for row in parsed.rows] == ["Jane Roe", "Mark Poe"]
        assert parsed.errors == []
        assert parsed.rows[0].bedrooms == 3
        assert parsed.rows[1].phone is None

    def test_invalid_row_reports_line_and_fields(self) -> None:
        parsed = parse_buyers_csv(_csv(VALID_ROW, INVALID_ROW), max_rows=10)

        assert len(parsed.rows) == 1
        [error] = parsed.errors
        assert error.row == 3
        assert {e.field for e in error.errors} == {"name", "email", "property_type", "bedrooms"}

    def test_header_case_and_bom_are_tolerated(self) -> None:
        content = "\ufeffName,EMAIL,Property_Type,Status\nJane Roe,jane@example.com,Land,Lost\n"

        parsed = parse_buyers_csv(content.encode("utf-8"), max_rows=10)

        assert parsed.rows[0].email == "jane@example.com"

    def test_blank_lines_are_skipped(self) -> None:
        parsed = parse_buyers_csv(_csv(VALID_ROW, "\n", ",,,,,,,,,\n", OTHER_VALID_ROW), max_rows=2)

        assert len(parsed.rows) == 2

    def test_empty_file(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            parse_buyers_csv(b"  \n", max_rows=10)

        assert exc_info.value.code == "empty_file"

    def test_invalid_encoding(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            parse_buyers_csv(HEADER.encode() + "Jürgen,j@example.com".encode("latin-1"), max_rows=10)

        assert exc_info.value.code == "invalid_encoding"

    def test_too_many_rows(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            parse_buyers_csv(_csv(VALID_ROW, VALID_ROW, VALID_ROW), max_rows=2)

        assert exc_info.value.code == "too_many_rows"
        assert exc_info.value.details == {"max_value": 2}


class TestImportService:
    def test_stores_valid_rows_for_caller(self) -> None:
        repository = InMemoryBuyerRepository()
        service = BuyerService(repository)

        result = service.import_buyers("u1", _csv(VALID_ROW, INVALID_ROW, OTHER_VALID_ROW), max_rows=10)

        assert result.imported == 2
        assert result.failed == 1
        assert all(b.user_id == "u1" for b in result.buyers)
        assert service.list_buyers("u1", BuyerFilter()).pagination.total == 2
        assert service.list_buyers("u2", BuyerFilter()).pagination.total == 0

    def test_keeps_supplied_timestamps(self) -> None:
        service = BuyerService(InMemoryBuyerRepository())
        content = (
            "name,email,property_type,status,created_at\n"
            "Jane Roe,jane@example.com,Land,New,2023-05-01T12:00:00\n"
        ).encode()

        [buyer] = service.import_buyers("u1", content, max_rows=10).buyers

        expected = datetime(2023, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert buyer.created_at == expected
        assert buyer.updated_at == expected


class TestImportRoute:
    def test_import_csv(self, client: TestClient, user1_headers: dict[str, str]) -> None:
        resp = client.post(
            "/v1/buyers/import",
            files={"file": ("buyers.csv", _csv(VALID_ROW, INVALID_ROW), "text/csv")},
            headers=user1_headers,
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["imported"] == 1
        assert body["failed"] == 1
        assert body["errors"][0]["row"] == 3

        listed = client.get("/v1/buyers", headers=user1_headers).json()
        assert [b["name"] for b in listed["data"]] == ["Jane Roe"]

    def test_rejects_non_csv_upload(self, client: TestClient, user1_headers: dict[str, str]) -> None:
        resp = client.post(
            "/v1/buyers/import",
            files={"file": ("buyers.pdf", b"%PDF-1.4", "application/pdf")},
            headers=user1_headers,
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "unsupported_file_type"

    def test_rejects_oversized_upload(
        self,
        client: TestClient,
        user1_headers: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings.app, "max_upload_size_mb", 1)
        content = HEADER.encode() + b"x" * (1024 * 1024)

        resp = client.post(
            "/v1/buyers/import",
            files={"file": ("buyers.csv", content, "text/csv")},
            headers=user1_headers,
        )

        assert resp.status_code == 413
        assert resp.json()["error"]["code"] == "file_too_large"

    def test_row_limit_from_settings(
        self,
        client: TestClient,
        user1_headers: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings.app, "max_import_rows", 1)

        resp = client.post(
            "/v1/buyers/import",
            files={"file": ("buyers.csv", _csv(VALID_ROW, OTHER_VALID_ROW), "text/csv")},
            headers=user1_headers,
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "too_many_rows"

    def test_requires_auth(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/buyers/import",
            files={"file": ("buyers.csv", _csv(VALID_ROW), "text/csv")},
        )

        assert resp.status_code == 401
