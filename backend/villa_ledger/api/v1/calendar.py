"""Calendar API router: manual blocking of villa nights (staff)."""

import uuid

from fastapi import APIRouter, Depends, status

from villa_ledger.api.deps import get_current_staff, get_ledger
from villa_ledger.models.user import AdminUser
from villa_ledger.schemas.calendar import BlockDatesRequest, BlockedDateResponse, UnblockResponse
from villa_ledger.services.ledger import BookingLedger

router = APIRouter(prefix="/api/v1/villas", tags=["calendar"])


@router.post(
    "/{villa_id}/blocks",
    response_model=list[BlockedDateResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Block nights for maintenance or owner use",
)
async def block_dates(
    villa_id: uuid.UUID,
    body: BlockDatesRequest,
    ledger: BookingLedger = Depends(get_ledger),
    current_user: AdminUser = Depends(get_current_staff),
) -> list[BlockedDateResponse]:
    """Block every requested night or none; 409 if any is already blocked."""
    rows = await ledger.block_dates(villa_id, body.dates, body.reason)
    return [BlockedDateResponse.model_validate(r) for r in rows]


@router.post(
    "/{villa_id}/unblock",
    response_model=UnblockResponse,
    summary="Remove manual blocks",
)
async def unblock_dates(
    villa_id: uuid.UUID,
    body: BlockDatesRequest,
    ledger: BookingLedger = Depends(get_ledger),
    current_user: AdminUser = Depends(get_current_staff),
) -> UnblockResponse:
    """Nights held by bookings are not touched; cancel the booking instead."""
    removed = await ledger.unblock_dates(villa_id, body.dates)
    return UnblockResponse(villa_id=villa_id, removed=removed)
