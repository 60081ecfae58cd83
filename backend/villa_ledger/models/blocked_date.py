"""BlockedDate model: one unavailable night of one villa."""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from villa_ledger.database import Base, UUIDPrimaryKeyMixin


class BlockedDate(UUIDPrimaryKeyMixin, Base):
    """A blocked night.

    Rows carrying a ``booking_id`` belong to that booking and are deleted when
    it is cancelled. Rows without one are manual blocks (maintenance, owner
    use). The unique constraint on (villa_id, blocked_date) is what stops two
    concurrent writers from booking the same night.
    """

    __tablename__ = "blocked_dates"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    blocked_date: Mapped[date] = mapped_column(Date, nullable=False)
    booking_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (UniqueConstraint("villa_id", "blocked_date", name="uq_blocked_dates_villa_date"),)

    def __repr__(self) -> str:
        return f"<BlockedDate(villa_id={self.villa_id}, date={self.blocked_date}, booking_id={self.booking_id})>"
