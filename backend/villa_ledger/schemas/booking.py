"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for a guest booking request.

    Guests never set the price or the status: their bookings start as
    ``pending`` at the villa's list price, and unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    villa_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int = Field(1, ge=1)
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: str | None = Field(None, max_length=64)
    special_requests: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class StaffBookingCreate(BookingCreate):
    """Booking taken by staff (phone, walk-in), optionally confirmed and discounted."""

    status: str = Field("pending", pattern="^(pending|confirmed)$")
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    discount_code: str | None = Field(None, max_length=64)


class BookingStatusUpdate(BaseModel):
    """Admin status change; ``override`` allows moves outside the normal flow."""

    status: str = Field(..., pattern="^(pending|confirmed|completed|cancelled)$")
    override: bool = False


class GuestCancelRequest(BaseModel):
    """Guest self-service cancellation; the email must match the booking."""

    guest_email: EmailStr


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Booking as returned to guests and staff."""

    id: uuid.UUID
    villa_id: uuid.UUID
    reference_code: str
    check_in: date
    check_out: date
    guests: int
    nights: int
    status: str
    base_price: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    discount_amount: Decimal
    discount_code: str | None = None
    total_price: Decimal
    guest_name: str
    guest_email: str
    guest_phone: str | None = None
    special_requests: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
