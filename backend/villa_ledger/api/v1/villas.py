"""Villas API router: public catalogue, availability and quotes; admin edits."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from villa_ledger.api.deps import (
    get_availability_index,
    get_current_admin,
    get_repository,
)
from villa_ledger.models.user import AdminUser
from villa_ledger.models.villa import Villa
from villa_ledger.schemas.calendar import BlockedDateResponse, CalendarResponse
from villa_ledger.schemas.villa import (
    AvailabilityResponse,
    QuoteResponse,
    VillaCreate,
    VillaListResponse,
    VillaResponse,
    VillaUpdate,
)
from villa_ledger.services.availability import AvailabilityIndex
from villa_ledger.services.pricing import quote
from villa_ledger.services.repository import LedgerRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/villas", tags=["villas"])

_MAX_CALENDAR_DAYS = 366
_NULLABLE_FIELDS = {"location", "description"}


@router.get("", response_model=VillaListResponse, summary="List villas")
async def list_villas(
    include_unavailable: bool = Query(False, description="Include villas that are not taking bookings"),
    repository: LedgerRepository = Depends(get_repository),
) -> VillaListResponse:
    """Return villas in name order; unlisted villas are hidden unless asked for."""
    villas = await repository.list_villas(only_available=not include_unavailable)
    return VillaListResponse(
        items=[VillaResponse.model_validate(v) for v in villas],
        total=len(villas),
    )


@router.get("/{villa_id}", response_model=VillaResponse, summary="Get a villa")
async def get_villa(
    villa_id: uuid.UUID,
    repository: LedgerRepository = Depends(get_repository),
) -> Villa:
    return await repository.get_villa(villa_id)


@router.get(
    "/{villa_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a stay can be booked",
)
async def check_availability(
    villa_id: uuid.UUID,
    check_in: date = Query(..., description="First night of the stay"),
    check_out: date = Query(..., description="Departure day (not a night of the stay)"),
    repository: LedgerRepository = Depends(get_repository),
    index: AvailabilityIndex = Depends(get_availability_index),
) -> AvailabilityResponse:
    villa = await repository.get_villa(villa_id)
    outcome = await index.check(villa, check_in, check_out)
    return AvailabilityResponse.model_validate(outcome)


@router.get("/{villa_id}/quote", response_model=QuoteResponse, summary="Price a stay")
async def get_quote(
    villa_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    discount_amount: Decimal = Query(Decimal("0"), ge=0),
    repository: LedgerRepository = Depends(get_repository),
) -> QuoteResponse:
    villa = await repository.get_villa(villa_id)
    price = quote(villa, check_in, check_out, discount_amount)
    return QuoteResponse(
        villa_id=villa.id,
        check_in=check_in,
        check_out=check_out,
        nightly_rate=price.nightly_rate,
        nights=price.nights,
        base_price=price.base_price,
        cleaning_fee=price.cleaning_fee,
        service_fee=price.service_fee,
        discount_amount=price.discount_amount,
        total=price.total,
    )


@router.get(
    "/{villa_id}/calendar",
    response_model=CalendarResponse,
    summary="Blocked nights of a villa",
)
async def get_calendar(
    villa_id: uuid.UUID,
    start: date = Query(..., description="First day shown"),
    end: date = Query(..., description="Day after the last day shown"),
    repository: LedgerRepository = Depends(get_repository),
) -> CalendarResponse:
    """Return the villa's blocked nights within ``[start, end)``."""
    if end <= start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must be after start",
        )
    if (end - start).days > _MAX_CALENDAR_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Calendar range is limited to {_MAX_CALENDAR_DAYS} days",
        )
    await repository.get_villa(villa_id)
    rows = await repository.blocked_dates(villa_id, start, end)
    return CalendarResponse(
        villa_id=villa_id,
        start=start,
        end=end,
        blocked=[BlockedDateResponse.model_validate(r) for r in rows],
    )


@router.post(
    "",
    response_model=VillaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a new villa",
)
async def create_villa(
    body: VillaCreate,
    repository: LedgerRepository = Depends(get_repository),
    current_user: AdminUser = Depends(get_current_admin),
) -> Villa:
    villa = Villa(**body.model_dump())
    repository.add(villa)
    await repository.flush("insert villa")
    await repository.refresh(villa)
    logger.info("Villa %s (%s) created by %s", villa.id, villa.name, current_user.email)
    return villa


@router.put("/{villa_id}", response_model=VillaResponse, summary="Update a villa")
async def update_villa(
    villa_id: uuid.UUID,
    body: VillaUpdate,
    repository: LedgerRepository = Depends(get_repository),
    current_user: AdminUser = Depends(get_current_admin),
) -> Villa:
    """Partially update a villa. Existing bookings keep the price they were made at."""
    villa = await repository.get_villa(villa_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field not in _NULLABLE_FIELDS:
            continue
        setattr(villa, field, value)
    await repository.flush("update villa")
    await repository.refresh(villa)
    logger.info("Villa %s updated by %s", villa.id, current_user.email)
    return villa
