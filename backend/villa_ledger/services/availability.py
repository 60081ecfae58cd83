"""Availability index: per-villa blocked nights, cached per request.

The index holds no data of its own. It is a read-through cache over the
``blocked_dates`` table and must be refreshed or invalidated after any write;
the ledger does that for every mutation it performs.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from villa_ledger.clock import Clock
from villa_ledger.dates import expand_range, night_count
from villa_ledger.models.villa import Villa
from villa_ledger.services.repository import LedgerRepository

logger = logging.getLogger(__name__)

REASON_VILLA_UNAVAILABLE = "villa_unavailable"
REASON_PAST_CHECK_IN = "past_check_in"
REASON_MINIMUM_STAY = "minimum_stay"
REASON_DATES_BLOCKED = "dates_blocked"


@dataclass(frozen=True)
class AvailabilityCheck:
    """Outcome of an availability check for one villa and stay."""

    villa_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    reason: str | None = None
    conflicting_dates: tuple[date, ...] = field(default_factory=tuple)

    @property
    def available(self) -> bool:
        return self.reason is None


class AvailabilityIndex:
    """Blocked-night sets keyed by villa id."""

    def __init__(self, repository: LedgerRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock
        self._blocked: dict[uuid.UUID, frozenset[date]] = {}

    async def refresh(self, villa_id: uuid.UUID) -> frozenset[date]:
        """Reload the villa's blocked nights from the store."""
        rows = await self._repository.blocked_dates(villa_id)
        blocked = frozenset(row.blocked_date for row in rows)
        self._blocked[villa_id] = blocked
        logger.debug("Refreshed availability for villa %s: %d blocked nights", villa_id, len(blocked))
        return blocked

    async def blocked_set(self, villa_id: uuid.UUID) -> frozenset[date]:
        """Return the cached blocked nights, loading them on first use."""
        cached = self._blocked.get(villa_id)
        if cached is None:
            cached = await self.refresh(villa_id)
        return cached

    def invalidate(self, villa_id: uuid.UUID | None = None) -> None:
        """Drop one villa's cached set, or every set when ``villa_id`` is None."""
        if villa_id is None:
            self._blocked.clear()
        else:
            self._blocked.pop(villa_id, None)

    def is_cached(self, villa_id: uuid.UUID) -> bool:
        return villa_id in self._blocked

    async def check(self, villa: Villa, check_in: date, check_out: date) -> AvailabilityCheck:
        """Evaluate a stay against listing status, today, minimum stay and blocked nights.

        Raises:
            InvalidRangeError: If ``check_out`` is not after ``check_in``.
        """
        nights = night_count(check_in, check_out)

        def result(reason: str | None, conflicts: tuple[date, ...] = ()) -> AvailabilityCheck:
            return AvailabilityCheck(villa.id, check_in, check_out, nights, reason, conflicts)

        if not villa.is_available:
            return result(REASON_VILLA_UNAVAILABLE)
        if check_in < self._clock.today():
            return result(REASON_PAST_CHECK_IN)
        if nights < villa.minimum_stay:
            return result(REASON_MINIMUM_STAY)

        blocked = await self.blocked_set(villa.id)
        conflicts = tuple(night for night in expand_range(check_in, check_out) if night in blocked)
        if conflicts:
            return result(REASON_DATES_BLOCKED, conflicts)
        return result(None)

    async def is_available(self, villa_id: uuid.UUID, check_in: date, check_out: date) -> bool:
        """True when the villa can be booked for ``[check_in, check_out)``.

        Raises:
            NotFoundError: If the villa does not exist.
            InvalidRangeError: If ``check_out`` is not after ``check_in``.
        """
        villa = await self._repository.get_villa(villa_id)
        outcome = await self.check(villa, check_in, check_out)
        return outcome.available
