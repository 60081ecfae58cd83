"""Villa model: a rentable villa and its pricing rules."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from villa_ledger.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Villa(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A villa listed on the site.

    Rates, fees and the minimum stay are read when a booking is priced and
    validated; editing them never touches existing bookings.
    """

    __tablename__ = "villas"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    minimum_stay: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    service_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_villas_capacity_positive"),
        CheckConstraint("minimum_stay >= 1", name="ck_villas_minimum_stay_positive"),
    )

    def __repr__(self) -> str:
        return f"<Villa(id={self.id}, name={self.name!r}, min_stay={self.minimum_stay})>"
