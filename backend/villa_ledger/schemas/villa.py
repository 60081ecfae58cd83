"""Pydantic v2 request/response schemas for villa endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class VillaCreate(BaseModel):
    """Schema for listing a new villa."""

    name: str = Field(..., min_length=1, max_length=255)
    location: str | None = Field(None, max_length=255)
    description: str | None = None
    price_per_night: Decimal = Field(..., ge=0)
    capacity: int = Field(..., ge=1)
    minimum_stay: int = Field(1, ge=1)
    cleaning_fee: Decimal = Field(Decimal("0"), ge=0)
    service_fee: Decimal = Field(Decimal("0"), ge=0)
    is_available: bool = True


class VillaUpdate(BaseModel):
    """Schema for partially updating a villa. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, max_length=255)
    description: str | None = None
    price_per_night: Decimal | None = Field(None, ge=0)
    capacity: int | None = Field(None, ge=1)
    minimum_stay: int | None = Field(None, ge=1)
    cleaning_fee: Decimal | None = Field(None, ge=0)
    service_fee: Decimal | None = Field(None, ge=0)
    is_available: bool | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VillaResponse(BaseModel):
    """Public villa information."""

    id: uuid.UUID
    name: str
    location: str | None = None
    description: str | None = None
    price_per_night: Decimal
    capacity: int
    minimum_stay: int
    cleaning_fee: Decimal
    service_fee: Decimal
    is_available: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VillaListResponse(BaseModel):
    items: list[VillaResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Whether a villa can be booked for a stay, and why not."""

    villa_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    available: bool
    reason: str | None = None
    conflicting_dates: list[date] = []

    model_config = ConfigDict(from_attributes=True)


class QuoteResponse(BaseModel):
    """Price breakdown for a prospective stay."""

    villa_id: uuid.UUID
    check_in: date
    check_out: date
    nightly_rate: Decimal
    nights: int
    base_price: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    discount_amount: Decimal
    total: Decimal
