"""Persistence collaborator for the ledger.

Wraps an ``AsyncSession`` with the handful of typed reads and writes the
availability index, the ledger and the aggregator need. Store failures are
re-raised as :class:`~villa_ledger.errors.PersistenceError`; unique-index
violations are left as ``IntegrityError`` so the ledger can treat them as
booking conflicts.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from villa_ledger.errors import NotFoundError, PersistenceError
from villa_ledger.models.blocked_date import BlockedDate
from villa_ledger.models.booking import Booking
from villa_ledger.models.villa import Villa


class LedgerRepository:
    """Typed access to villas, bookings and blocked dates."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Villas
    # ------------------------------------------------------------------

    async def get_villa(self, villa_id: uuid.UUID) -> Villa:
        villa = await self._scalar(select(Villa).where(Villa.id == villa_id), step="load villa")
        if villa is None:
            raise NotFoundError("Villa", villa_id)
        return villa

    async def list_villas(self, only_available: bool = False) -> list[Villa]:
        query = select(Villa).order_by(Villa.name)
        if only_available:
            query = query.where(Villa.is_available.is_(True))
        return await self._scalars(query, step="list villas")

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    async def get_booking(self, booking_id: uuid.UUID) -> Booking:
        booking = await self._scalar(select(Booking).where(Booking.id == booking_id), step="load booking")
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    async def find_booking_by_reference(self, reference_code: str) -> Booking | None:
        return await self._scalar(
            select(Booking).where(Booking.reference_code == reference_code.strip().upper()),
            step="load booking by reference",
        )

    async def reference_exists(self, reference_code: str) -> bool:
        found = await self._scalar(
            select(Booking.id).where(Booking.reference_code == reference_code),
            step="check reference code",
        )
        return found is not None

    async def active_bookings(self, villa_ids: Sequence[uuid.UUID]) -> list[Booking]:
        query = select(Booking).where(Booking.villa_id.in_(villa_ids), Booking.status != "cancelled")
        return await self._scalars(query, step="load active bookings")

    async def active_bookings_overlapping(
        self,
        villa_ids: Sequence[uuid.UUID],
        period_start: date,
        period_end: date,
    ) -> list[Booking]:
        """Non-cancelled bookings whose stay shares a night with ``[period_start, period_end)``."""
        query = select(Booking).where(
            Booking.villa_id.in_(villa_ids),
            Booking.status != "cancelled",
            Booking.check_in < period_end,
            Booking.check_out > period_start,
        )
        return await self._scalars(query, step="load overlapping bookings")

    async def active_bookings_created_between(
        self,
        villa_ids: Sequence[uuid.UUID],
        created_from: datetime,
        created_before: datetime,
    ) -> list[Booking]:
        """Non-cancelled bookings with ``created_from <= created_at < created_before``."""
        query = select(Booking).where(
            Booking.villa_id.in_(villa_ids),
            Booking.status != "cancelled",
            Booking.created_at >= created_from,
            Booking.created_at < created_before,
        )
        return await self._scalars(query, step="load bookings by creation date")

    async def active_bookings_checking_in(self, check_in_from: date, check_in_to: date) -> list[Booking]:
        """Confirmed bookings arriving in ``[check_in_from, check_in_to]``, soonest first."""
        query = (
            select(Booking)
            .where(
                Booking.status == "confirmed",
                Booking.check_in >= check_in_from,
                Booking.check_in <= check_in_to,
            )
            .order_by(Booking.check_in)
        )
        return await self._scalars(query, step="load upcoming check-ins")

    # ------------------------------------------------------------------
    # Blocked dates
    # ------------------------------------------------------------------

    async def blocked_dates(
        self,
        villa_id: uuid.UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[BlockedDate]:
        query = select(BlockedDate).where(BlockedDate.villa_id == villa_id)
        if start is not None:
            query = query.where(BlockedDate.blocked_date >= start)
        if end is not None:
            query = query.where(BlockedDate.blocked_date < end)
        return await self._scalars(query.order_by(BlockedDate.blocked_date), step="load blocked dates")

    async def delete_booking_blocks(self, booking_id: uuid.UUID) -> int:
        result = await self._execute(
            delete(BlockedDate).where(BlockedDate.booking_id == booking_id),
            step="release booking dates",
        )
        return result.rowcount or 0

    async def delete_manual_blocks(self, villa_id: uuid.UUID, dates: Iterable[date]) -> int:
        result = await self._execute(
            delete(BlockedDate).where(
                BlockedDate.villa_id == villa_id,
                BlockedDate.booking_id.is_(None),
                BlockedDate.blocked_date.in_(list(dates)),
            ),
            step="remove manual blocks",
        )
        return result.rowcount or 0

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def add(self, *records: object) -> None:
        self.session.add_all(records)

    async def flush(self, step: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            raise PersistenceError(step, detail=str(exc)) from exc

    async def commit(self, step: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            raise PersistenceError(step, detail=str(exc)) from exc

    async def rollback(self) -> None:
        await self.session.rollback()

    async def refresh(self, record: object) -> None:
        await self.session.refresh(record)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _execute(self, statement, step: str):
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as exc:
            raise PersistenceError(step, detail=str(exc)) from exc

    async def _scalar(self, statement, step: str):
        result = await self._execute(statement, step)
        return result.scalar_one_or_none()

    async def _scalars(self, statement, step: str) -> list:
        result = await self._execute(statement, step)
        return list(result.scalars().all())
