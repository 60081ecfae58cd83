"""Booking model: a guest's stay at a villa."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from villa_ledger.database import Base, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
ACTIVE_STATUSES = ("pending", "confirmed", "completed")


class Booking(UUIDPrimaryKeyMixin, Base):
    """A reservation of a villa for the nights ``[check_in, check_out)``."""

    __tablename__ = "bookings"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reference_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
    )  # pending, confirmed, completed, cancelled

    # Price breakdown, fixed at creation time
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    service_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    discount_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Guest details
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    guest_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    villa: Mapped["Villa"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_check_out_after_check_in"),
        Index("ix_bookings_check_in", "check_in"),
        Index("ix_bookings_created_at", "created_at"),
    )

    @property
    def is_active(self) -> bool:
        """Whether the booking still holds its nights."""
        return self.status != "cancelled"

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, ref={self.reference_code}, villa_id={self.villa_id}, "
            f"{self.check_in}..{self.check_out}, status={self.status})>"
        )
