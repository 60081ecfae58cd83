"""Stay pricing: nightly rate times nights, plus fixed fees, minus discount."""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from villa_ledger.dates import night_count
from villa_ledger.errors import ValidationError
from villa_ledger.models.villa import Villa

_CENTS = Decimal("0.01")


def _money(value: Decimal | int | str | None) -> Decimal:
    return Decimal(value or 0).quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceQuote:
    """Price breakdown for one stay."""

    nightly_rate: Decimal
    nights: int
    base_price: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    discount_amount: Decimal
    total: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.base_price + self.cleaning_fee + self.service_fee


def quote(
    villa: Villa,
    check_in: date,
    check_out: date,
    discount_amount: Decimal | int = 0,
) -> PriceQuote:
    """Price a stay at ``villa``.

    Raises:
        InvalidRangeError: If ``check_out`` is not after ``check_in``.
        ValidationError: If the discount is negative or exceeds the subtotal.
    """
    nights = night_count(check_in, check_out)
    rate = _money(villa.price_per_night)
    base = _money(rate * nights)
    cleaning = _money(villa.cleaning_fee)
    service = _money(villa.service_fee)
    discount = _money(discount_amount)

    if discount < 0:
        raise ValidationError("discount_amount cannot be negative")
    subtotal = base + cleaning + service
    if discount > subtotal:
        raise ValidationError(f"discount_amount {discount} exceeds the stay subtotal {subtotal}")

    return PriceQuote(
        nightly_rate=rate,
        nights=nights,
        base_price=base,
        cleaning_fee=cleaning,
        service_fee=service,
        discount_amount=discount,
        total=subtotal - discount,
    )
