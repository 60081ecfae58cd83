"""Booking ledger: the only writer of bookings and blocked dates.

Every mutation is a single unit of work on the session: the booking row and
the nights it owns are written (or released) together and committed once. If
any step fails the whole transaction is rolled back, so a booking never
exists without its blocked nights or the other way round. The unique index on
(villa_id, blocked_date) turns a lost race between two writers into an
``AvailabilityConflictError`` instead of a double booking.
"""

from __future__ import annotations

import logging
import secrets
import string
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from villa_ledger.clock import Clock
from villa_ledger.dates import expand_range, night_count
from villa_ledger.errors import (
    AvailabilityConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from villa_ledger.models.blocked_date import BlockedDate
from villa_ledger.models.booking import BOOKING_STATUSES, Booking
from villa_ledger.models.villa import Villa
from villa_ledger.services.availability import (
    REASON_DATES_BLOCKED,
    REASON_MINIMUM_STAY,
    REASON_PAST_CHECK_IN,
    AvailabilityIndex,
)
from villa_ledger.services.pricing import quote
from villa_ledger.services.repository import LedgerRepository

logger = logging.getLogger(__name__)

INITIAL_STATUSES = ("pending", "confirmed")

# Forward moves allowed without an admin override. ``cancelled`` is reached
# only through ``cancel`` and is terminal.
_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed"}),
    "confirmed": frozenset({"completed"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
_REFERENCE_ATTEMPTS = 5


@dataclass
class BookingDraft:
    """A guest's booking request before it is validated and priced."""

    villa_id: uuid.UUID
    check_in: date
    check_out: date
    guest_name: str
    guest_email: str
    guests: int = 1
    status: str = "pending"
    guest_phone: str | None = None
    special_requests: str | None = None
    discount_amount: Decimal = Decimal("0")
    discount_code: str | None = None


class BookingLedger:
    """Creates, cancels and re-states bookings while keeping blocked nights consistent."""

    def __init__(
        self,
        repository: LedgerRepository,
        index: AvailabilityIndex,
        clock: Clock,
        reference_prefix: str = "SU-",
        reference_length: int = 8,
    ) -> None:
        self._repository = repository
        self._index = index
        self._clock = clock
        self._reference_prefix = reference_prefix
        self._reference_length = reference_length

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get(self, booking_id: uuid.UUID) -> Booking:
        return await self._repository.get_booking(booking_id)

    async def get_by_reference(self, reference_code: str) -> Booking:
        booking = await self._repository.find_booking_by_reference(reference_code)
        if booking is None:
            raise NotFoundError("Booking", reference_code.strip().upper())
        return booking

    async def find_for_guest(self, reference_code: str, guest_email: str) -> Booking:
        """The booking with this reference, if it was made with ``guest_email``.

        A wrong email is reported exactly like an unknown reference.
        """
        booking = await self.get_by_reference(reference_code)
        if booking.guest_email != guest_email.strip().lower():
            raise NotFoundError("Booking", reference_code.strip().upper())
        return booking

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, draft: BookingDraft) -> Booking:
        """Validate, re-check availability, and persist a booking with its nights.

        Raises:
            NotFoundError: Unknown villa.
            ValidationError: Bad guest count, stay length, status, dates or discount.
            AvailabilityConflictError: One or more nights are already blocked.
            PersistenceError: The store failed; nothing was written.
        """
        villa = await self._repository.get_villa(draft.villa_id)
        villa_id = villa.id
        nights = night_count(draft.check_in, draft.check_out)
        self._validate_draft(villa, draft, nights)

        # Never trust an earlier read: reload the villa's nights before writing.
        await self._index.refresh(villa_id)
        outcome = await self._index.check(villa, draft.check_in, draft.check_out)
        if outcome.reason == REASON_DATES_BLOCKED:
            raise AvailabilityConflictError(villa_id, outcome.conflicting_dates)
        if not outcome.available:
            raise ValidationError(f"Villa cannot be booked for these dates ({outcome.reason})")

        price = quote(villa, draft.check_in, draft.check_out, draft.discount_amount)
        reference_code = await self._allocate_reference()
        booking_id = uuid.uuid4()
        stay = expand_range(draft.check_in, draft.check_out)

        booking = Booking(
            id=booking_id,
            villa_id=villa_id,
            reference_code=reference_code,
            check_in=draft.check_in,
            check_out=draft.check_out,
            guests=draft.guests,
            nights=nights,
            status=draft.status,
            base_price=price.base_price,
            cleaning_fee=price.cleaning_fee,
            service_fee=price.service_fee,
            discount_amount=price.discount_amount,
            discount_code=draft.discount_code,
            total_price=price.total,
            guest_name=draft.guest_name.strip(),
            guest_email=draft.guest_email.strip().lower(),
            guest_phone=draft.guest_phone,
            special_requests=draft.special_requests,
            created_at=self._clock.now(),
        )
        blocks = [BlockedDate(villa_id=villa_id, blocked_date=night, booking_id=booking_id) for night in stay]

        step = "insert booking"
        try:
            self._repository.add(booking)
            await self._repository.flush(step)
            step = "insert blocked dates"
            self._repository.add(*blocks)
            await self._repository.flush(step)
            step = "commit booking"
            await self._repository.commit(step)
        except IntegrityError as exc:
            await self._repository.rollback()
            self._index.invalidate(villa_id)
            if step != "insert blocked dates":
                logger.error("Booking %s rolled back at step '%s': %s", booking_id, step, exc.orig)
                raise PersistenceError(step, booking_id=booking_id, detail=str(exc.orig)) from exc
            blocked = await self._index.refresh(villa_id)
            taken = [night for night in stay if night in blocked]
            logger.warning(
                "Booking %s for villa %s lost a concurrent write on %s; rolled back",
                booking_id,
                villa_id,
                ", ".join(night.isoformat() for night in taken) or "unknown nights",
            )
            raise AvailabilityConflictError(villa_id, taken) from exc
        except PersistenceError as exc:
            await self._repository.rollback()
            self._index.invalidate(villa_id)
            logger.error("Booking %s rolled back at step '%s': %s", booking_id, step, exc.message)
            raise PersistenceError(step, booking_id=booking_id, detail=exc.message) from exc

        self._index.invalidate(villa_id)
        await self._repository.refresh(booking)
        logger.info(
            "Created booking %s (%s) for villa %s: %s..%s, %d nights, total %s",
            reference_code,
            booking_id,
            villa_id,
            draft.check_in,
            draft.check_out,
            nights,
            price.total,
        )
        return booking

    def _validate_draft(self, villa: Villa, draft: BookingDraft, nights: int) -> None:
        if draft.status not in INITIAL_STATUSES:
            raise ValidationError(f"New bookings must be one of: {', '.join(INITIAL_STATUSES)}")
        if draft.guests < 1:
            raise ValidationError("A booking needs at least one guest")
        if draft.guests > villa.capacity:
            raise ValidationError(f"{villa.name} sleeps at most {villa.capacity} guests")
        if nights < villa.minimum_stay:
            raise ValidationError(
                f"{villa.name} requires a minimum stay of {villa.minimum_stay} nights ({REASON_MINIMUM_STAY})"
            )
        if draft.check_in < self._clock.today():
            raise ValidationError(f"Check-in {draft.check_in.isoformat()} is in the past ({REASON_PAST_CHECK_IN})")
        if not draft.guest_name.strip():
            raise ValidationError("guest_name is required")

    async def _allocate_reference(self) -> str:
        for _ in range(_REFERENCE_ATTEMPTS):
            suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(self._reference_length))
            candidate = f"{self._reference_prefix}{suffix}"
            if not await self._repository.reference_exists(candidate):
                return candidate
        raise PersistenceError("allocate reference code", detail=f"{_REFERENCE_ATTEMPTS} collisions in a row")

    # ------------------------------------------------------------------
    # Cancel / status
    # ------------------------------------------------------------------

    async def cancel(self, booking_id: uuid.UUID) -> Booking:
        """Cancel a booking and release its nights in one transaction.

        Cancelling an already-cancelled booking is a no-op that returns it.

        Raises:
            NotFoundError: Unknown booking.
            InvalidStatusTransitionError: The booking is completed.
            PersistenceError: The store failed; nothing was changed.
        """
        booking = await self._repository.get_booking(booking_id)
        if booking.status == "cancelled":
            logger.info("Booking %s is already cancelled; nothing to do", booking_id)
            return booking
        if booking.status == "completed":
            raise InvalidStatusTransitionError(booking.status, "cancelled")

        villa_id = booking.villa_id
        step = "mark booking cancelled"
        try:
            booking.status = "cancelled"
            await self._repository.flush(step)
            step = "release booking dates"
            released = await self._repository.delete_booking_blocks(booking_id)
            step = "commit cancellation"
            await self._repository.commit(step)
        except PersistenceError as exc:
            await self._repository.rollback()
            self._index.invalidate(villa_id)
            logger.error("Cancellation of booking %s rolled back at step '%s': %s", booking_id, step, exc.message)
            raise PersistenceError(step, booking_id=booking_id, detail=exc.message) from exc

        self._index.invalidate(villa_id)
        await self._repository.refresh(booking)
        logger.info("Cancelled booking %s; released %d nights of villa %s", booking_id, released, villa_id)
        return booking

    async def cancel_by_reference(self, reference_code: str, guest_email: str) -> Booking:
        """Guest self-service cancellation; the email must match the booking."""
        booking = await self.find_for_guest(reference_code, guest_email)
        return await self.cancel(booking.id)

    async def update_status(self, booking_id: uuid.UUID, status: str, override: bool = False) -> Booking:
        """Move a booking along ``pending -> confirmed -> completed``.

        ``override`` lets an admin move between any two non-cancelled states.
        Nothing ever leaves ``cancelled``.
        """
        if status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown booking status '{status}'")
        if status == "cancelled":
            return await self.cancel(booking_id)

        booking = await self._repository.get_booking(booking_id)
        current = booking.status
        if current == status:
            return booking
        if current == "cancelled":
            raise InvalidStatusTransitionError(current, status)
        if not override and status not in _TRANSITIONS[current]:
            raise InvalidStatusTransitionError(current, status)

        step = "update booking status"
        try:
            booking.status = status
            await self._repository.commit(step)
        except PersistenceError as exc:
            await self._repository.rollback()
            logger.error("Status change of booking %s rolled back: %s", booking_id, exc.message)
            raise PersistenceError(step, booking_id=booking_id, detail=exc.message) from exc

        await self._repository.refresh(booking)
        logger.info(
            "Booking %s moved %s -> %s%s", booking_id, current, status, " (admin override)" if override else ""
        )
        return booking

    # ------------------------------------------------------------------
    # Manual blocks
    # ------------------------------------------------------------------

    async def block_dates(
        self,
        villa_id: uuid.UUID,
        dates: Iterable[date],
        reason: str | None = None,
    ) -> list[BlockedDate]:
        """Block nights that no booking owns (maintenance, owner use).

        Raises:
            NotFoundError: Unknown villa.
            ValidationError: No dates given, or a date in the past.
            AvailabilityConflictError: A night is already blocked.
        """
        await self._repository.get_villa(villa_id)
        nights = sorted(set(dates))
        if not nights:
            raise ValidationError("No dates to block")
        today = self._clock.today()
        if nights[0] < today:
            raise ValidationError(f"Cannot block {nights[0].isoformat()}: date is in the past")

        blocked = await self._index.refresh(villa_id)
        already = [night for night in nights if night in blocked]
        if already:
            raise AvailabilityConflictError(villa_id, already)

        rows = [BlockedDate(villa_id=villa_id, blocked_date=night, reason=reason) for night in nights]
        step = "insert manual blocks"
        try:
            self._repository.add(*rows)
            await self._repository.flush(step)
            await self._repository.commit(step)
        except IntegrityError as exc:
            await self._repository.rollback()
            blocked = await self._index.refresh(villa_id)
            raise AvailabilityConflictError(villa_id, [n for n in nights if n in blocked]) from exc
        except PersistenceError as exc:
            await self._repository.rollback()
            self._index.invalidate(villa_id)
            logger.error("Manual block of villa %s rolled back: %s", villa_id, exc.message)
            raise

        self._index.invalidate(villa_id)
        logger.info("Blocked %d nights of villa %s (%s)", len(rows), villa_id, reason or "no reason given")
        return rows

    async def unblock_dates(self, villa_id: uuid.UUID, dates: Iterable[date]) -> int:
        """Remove manual blocks; nights owned by bookings are left alone."""
        await self._repository.get_villa(villa_id)
        nights = sorted(set(dates))
        if not nights:
            return 0

        step = "remove manual blocks"
        try:
            removed = await self._repository.delete_manual_blocks(villa_id, nights)
            await self._repository.commit(step)
        except PersistenceError as exc:
            await self._repository.rollback()
            self._index.invalidate(villa_id)
            logger.error("Unblock of villa %s rolled back: %s", villa_id, exc.message)
            raise

        self._index.invalidate(villa_id)
        logger.info("Unblocked %d of %d requested nights of villa %s", removed, len(nights), villa_id)
        return removed
