"""Bookings API router.

Guests create pending bookings at list price, look them up by reference code
(with their email for the full lookup) and cancel their own booking by
reference. Staff book on a guest's behalf, list, inspect, cancel and re-state
any booking. All writes go through :class:`~villa_ledger.services.ledger.BookingLedger`.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import EmailStr
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from villa_ledger.api.deps import get_current_staff, get_db, get_ledger
from villa_ledger.models.booking import Booking
from villa_ledger.models.user import AdminUser
from villa_ledger.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    GuestCancelRequest,
    StaffBookingCreate,
)
from villa_ledger.services.ledger import BookingDraft, BookingLedger

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Guest endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a villa",
)
async def create_booking(
    body: BookingCreate,
    ledger: BookingLedger = Depends(get_ledger),
) -> Booking:
    """Create a booking after re-checking availability at write time.

    Returns 409 when any night is already taken and 422 when the request breaks
    a villa rule (capacity, minimum stay, past check-in).
    """
    return await ledger.create(BookingDraft(**body.model_dump()))


@router.get(
    "/lookup",
    response_model=BookingResponse,
    summary="Find your booking by reference code and email",
)
async def lookup_booking(
    reference_code: str = Query(..., min_length=1, description="Reference code from the confirmation"),
    email: EmailStr = Query(..., description="Email used when booking"),
    ledger: BookingLedger = Depends(get_ledger),
) -> Booking:
    """Both must match; a wrong email is a 404 like an unknown reference."""
    return await ledger.find_for_guest(reference_code, email)


@router.get(
    "/reference/{reference_code}",
    response_model=BookingResponse,
    summary="Get a booking by its reference code",
)
async def get_booking_by_reference(
    reference_code: str,
    ledger: BookingLedger = Depends(get_ledger),
) -> Booking:
    return await ledger.get_by_reference(reference_code)


@router.post(
    "/reference/{reference_code}/cancel",
    response_model=BookingResponse,
    summary="Cancel your own booking",
)
async def cancel_booking_by_reference(
    reference_code: str,
    body: GuestCancelRequest,
    ledger: BookingLedger = Depends(get_ledger),
) -> Booking:
    """Cancel a booking as the guest; repeating the call is harmless."""
    return await ledger.cancel_by_reference(reference_code, body.guest_email)


# ---------------------------------------------------------------------------
# Staff endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/staff",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a villa on behalf of a guest",
)
async def create_staff_booking(
    body: StaffBookingCreate,
    ledger: BookingLedger = Depends(get_ledger),
    current_user: AdminUser = Depends(get_current_staff),
) -> Booking:
    """Like the guest endpoint, but staff may confirm straight away and apply a discount."""
    return await ledger.create(BookingDraft(**body.model_dump()))


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings (staff)",
)
async def list_bookings(
    villa_id: uuid.UUID | None = Query(None, description="Filter by villa"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    guest_email: str | None = Query(None, description="Filter by guest email"),
    check_in_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    check_in_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: AdminUser = Depends(get_current_staff),
) -> dict:
    """Return a paginated list of bookings, newest first."""
    filters = []
    if villa_id is not None:
        filters.append(Booking.villa_id == villa_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if guest_email is not None:
        filters.append(Booking.guest_email == guest_email.strip().lower())
    if check_in_from is not None:
        filters.append(Booking.check_in >= check_in_from)
    if check_in_to is not None:
        filters.append(Booking.check_in <= check_in_to)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    items_query = select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking (staff)",
)
async def get_booking(
    booking_id: uuid.UUID,
    ledger: BookingLedger = Depends(get_ledger),
    current_user: AdminUser = Depends(get_current_staff),
) -> Booking:
    return await ledger.get(booking_id)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking (staff)",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    ledger: BookingLedger = Depends(get_ledger),
    current_user: AdminUser = Depends(get_current_staff),
) -> Booking:
    """Cancel a booking and release its nights. Already-cancelled bookings are returned unchanged."""
    return await ledger.cancel(booking_id)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change a booking's status (staff)",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    ledger: BookingLedger = Depends(get_ledger),
    current_user: AdminUser = Depends(get_current_staff),
) -> Booking:
    """Move a booking along pending, confirmed, completed.

    ``override`` (admin role only) allows moves outside that order, but a
    cancelled booking can never be reopened.
    """
    if body.override and current_user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required for override")
    return await ledger.update_status(booking_id, body.status, override=body.override)
