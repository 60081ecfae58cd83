"""Shared API dependencies: single import point for all routers.

Wires the ledger's collaborators per request so that routers can ask for
exactly what they need::

    from villa_ledger.api.deps import get_db, get_ledger, get_current_staff

Tests override ``get_db`` and ``get_clock``; everything else follows.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from villa_ledger.auth.dependencies import get_current_admin, get_current_staff
from villa_ledger.clock import Clock, SystemClock
from villa_ledger.config import settings
from villa_ledger.database import get_db
from villa_ledger.services.availability import AvailabilityIndex
from villa_ledger.services.ledger import BookingLedger
from villa_ledger.services.occupancy import OccupancyAggregator
from villa_ledger.services.repository import LedgerRepository


def get_clock() -> Clock:
    """Wall clock in the property's time zone."""
    return SystemClock(settings.property_timezone)


def get_repository(db: AsyncSession = Depends(get_db)) -> LedgerRepository:
    return LedgerRepository(db)


def get_availability_index(
    repository: LedgerRepository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
) -> AvailabilityIndex:
    """A fresh, empty index per request; it fills lazily from the store."""
    return AvailabilityIndex(repository, clock)


def get_ledger(
    repository: LedgerRepository = Depends(get_repository),
    index: AvailabilityIndex = Depends(get_availability_index),
    clock: Clock = Depends(get_clock),
) -> BookingLedger:
    return BookingLedger(
        repository,
        index,
        clock,
        reference_prefix=settings.reference_prefix,
        reference_length=settings.reference_length,
    )


def get_aggregator(
    repository: LedgerRepository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
) -> OccupancyAggregator:
    return OccupancyAggregator(repository, clock)


__all__ = [
    "get_db",
    "get_clock",
    "get_repository",
    "get_availability_index",
    "get_ledger",
    "get_aggregator",
    "get_current_staff",
    "get_current_admin",
]
