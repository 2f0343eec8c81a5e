"""Validation rules for buyer payloads."""

import pytest
from pydantic import ValidationError

from buyer_leads.schemas.buyer import (
    BuyerCreate,
    BuyerImportRow,
    BuyerStatus,
    BuyerUpdate,
    PropertyType,
)


def _error_fields(exc_info: pytest.ExceptionInfo[ValidationError]) -> set[str]:
    return {str(err["loc"][0]) for err in exc_info.value.errors()}


class TestCreateBuyer:
    def test_accepts_valid_buyer(self, buyer_payload: dict) -> None:
        buyer = BuyerCreate.model_validate(buyer_payload)

        assert buyer.status is BuyerStatus.NEW
        assert buyer.property_type is PropertyType.RESIDENTIAL
        assert buyer.bedrooms == 3

    def test_minimal_buyer(self) -> None:
        buyer = BuyerCreate(
            name="Jo",
            email="jo@example.com",
            property_type="Land",
            status="Viewing Scheduled",
        )

        assert buyer.phone is None
        assert buyer.status is BuyerStatus.VIEWING_SCHEDULED

    def test_rejects_invalid_email(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerCreate(name="John Doe", email="not-an-email", property_type="Residential", status="New")

        assert "email" in _error_fields(exc_info)

    @pytest.mark.parametrize("name", ["J", "x" * 101, "  J  "])
    def test_rejects_name_length(self, name: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerCreate(name=name, email="john@example.com", property_type="Residential", status="New")

        assert "name" in _error_fields(exc_info)

    def test_rejects_unknown_property_type(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerCreate(name="John Doe", email="john@example.com", property_type="Invalid", status="New")

        assert "property_type" in _error_fields(exc_info)

    def test_rejects_unknown_status(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerCreate(name="John Doe", email="john@example.com", property_type="Residential", status="Invalid")

        assert "status" in _error_fields(exc_info)

    def test_rejects_negative_rooms(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerCreate(
                name="John Doe",
                email="john@example.com",
                property_type="Residential",
                status="New",
                bedrooms=-1,
                bathrooms=-0.5,
            )

        assert _error_fields(exc_info) == {"bedrooms", "bathrooms"}

    def test_coerces_numeric_strings(self) -> None:
        buyer = BuyerCreate(
            name="John Doe",
            email="john@example.com",
            property_type="Commercial",
            status="Closed",
            bedrooms="4",
            bathrooms="2.5",
        )

        assert buyer.bedrooms == 4
        assert buyer.bathrooms == 2.5


class TestUpdateBuyer:
    def test_partial_update(self) -> None:
        update = BuyerUpdate(name="Updated Name", email="updated@example.com")

        assert update.model_dump(exclude_unset=True) == {
            "name": "Updated Name",
            "email": "updated@example.com",
        }

    def test_empty_update(self) -> None:
        assert BuyerUpdate().model_dump(exclude_unset=True) == {}

    def test_rejects_invalid_supplied_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerUpdate(email="not-an-email")

        assert "email" in _error_fields(exc_info)

    @pytest.mark.parametrize("field", ["name", "email", "property_type", "status"])
    def test_rejects_null_for_required_field(self, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BuyerUpdate.model_validate({field: None})

        assert _error_fields(exc_info) == {field}

    def test_null_clears_optional_field(self) -> None:
        update = BuyerUpdate.model_validate({"phone": None, "notes": None})

        assert update.model_dump(exclude_unset=True) == {"phone": None, "notes": None}


class TestImportRow:
    def test_parses_timestamps(self) -> None:
        row = BuyerImportRow.model_validate(
            {
                "name": "Ann Smith",
                "email": "ann@example.com",
                "property_type": "Industrial",
                "status": "Lost",
                "created_at": "2024-03-01T10:00:00+00:00",
            }
        )

        assert row.created_at is not None
        assert row.created_at.year == 2024
        assert row.updated_at is None
