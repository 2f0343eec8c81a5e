"""Pydantic schemas for buyer records, filters and list responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, NonNegativeFloat, NonNegativeInt, field_validator


class BuyerStatus(str, Enum):
    """Pipeline stage of a buyer lead."""

    NEW = "New"
    CONTACTED = "Contacted"
    VIEWING_SCHEDULED = "Viewing Scheduled"
    OFFER_MADE = "Offer Made"
    CLOSED = "Closed"
    LOST = "Lost"


class PropertyType(str, Enum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"
    LAND = "Land"
    INDUSTRIAL = "Industrial"


class BuyerBase(BaseModel):
    """Fields shared by every buyer payload."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Buyer's full name (2-100 characters).",
    )
    email: EmailStr = Field(..., description="Contact email address.")
    phone: str | None = Field(default=None, description="Contact phone number.")
    budget: str | None = Field(
        default=None,
        description="Budget as entered by the agent (e.g. '500000' or '$450k').",
    )
    location: str | None = Field(default=None, description="Preferred location.")
    property_type: PropertyType = Field(..., description="Type of property sought.")
    bedrooms: NonNegativeInt | None = Field(default=None, description="Desired bedrooms.")
    bathrooms: NonNegativeFloat | None = Field(default=None, description="Desired bathrooms.")
    notes: str | None = Field(default=None, description="Free-form notes.")
    status: BuyerStatus = Field(..., description="Current pipeline status.")


class BuyerCreate(BuyerBase):
    """Payload for creating a buyer."""


class BuyerUpdate(BaseModel):
    """Partial update; only supplied fields are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: EmailStr | None = None
    phone: str | None = None
    budget: str | None = None
    location: str | None = None
    property_type: PropertyType | None = None
    bedrooms: NonNegativeInt | None = None
    bathrooms: NonNegativeFloat | None = None
    notes: str | None = None
    status: BuyerStatus | None = None

    @field_validator("name", "email", "property_type", "status")
    @classmethod
    def _required_fields_not_null(cls, value: object) -> object:
        # omitted means unchanged; null is never a valid value for these
        if value is None:
            raise ValueError("field is required and cannot be null")
        return value


class BuyerImportRow(BuyerBase):
    """One CSV row; may carry the original timestamps."""

    created_at: datetime | None = None
    updated_at: datetime | None = None


class Buyer(BuyerBase):
    """Stored buyer record."""

    id: str = Field(..., description="Buyer identifier (UUID).")
    user_id: str = Field(..., description="Owner of the record.")
    created_at: datetime
    updated_at: datetime


class BuyerFilter(BaseModel):
    """Query options for listing buyers."""

    search: str | None = None
    status: BuyerStatus | None = None
    property_type: PropertyType | None = None
    min_budget: float | None = None
    max_budget: float | None = None
    location: str | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class BuyerListResponse(BaseModel):
    data: list[Buyer]
    pagination: Pagination


class DeleteBuyerResponse(BaseModel):
    success: bool = True


class ImportFieldError(BaseModel):
    field: str
    message: str


class ImportRowError(BaseModel):
    row: int = Field(..., description="1-based line number in the CSV file (header is line 1).")
    errors: list[ImportFieldError]


class BuyerImportResponse(BaseModel):
    """Outcome of a CSV import."""

    imported: int
    failed: int
    buyers: list[Buyer] = Field(default_factory=list)
    errors: list[ImportRowError] = Field(default_factory=list)
