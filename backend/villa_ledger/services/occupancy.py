"""Occupancy and revenue reporting over the booking set.

Every period is half-open, ``[period_start, period_end)``: pass the first day
of the period and the day after its last (for May, 05-01 and 06-01). What is
counted inside the period differs:

* occupancy is **stay based**: a booking counts for the nights of
  ``[check_in, check_out)`` that fall inside the period;
* revenue is **creation based**: a booking's whole ``total_price`` counts in
  the period that contains its ``created_at`` date.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from villa_ledger.clock import Clock
from villa_ledger.dates import month_bounds, overlap_nights, previous_month
from villa_ledger.errors import InvalidRangeError
from villa_ledger.models.booking import Booking
from villa_ledger.models.villa import Villa
from villa_ledger.services.repository import LedgerRepository

_ZERO = Decimal("0.00")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def period_nights(period_start: date, period_end: date) -> int:
    """Nights in ``[period_start, period_end)``; an empty period has 0."""
    if period_end < period_start:
        raise InvalidRangeError(period_start, period_end)
    return (period_end - period_start).days


def booked_nights_in(bookings: Iterable[Booking], period_start: date, period_end: date) -> int:
    """Sum of each non-cancelled booking's nights inside the period."""
    return sum(
        overlap_nights(b.check_in, b.check_out, period_start, period_end) for b in bookings if b.status != "cancelled"
    )


def rate_percent(booked: int, total: int) -> int:
    """``booked / total * 100`` rounded half-up; 0 for an empty period."""
    if total <= 0:
        return 0
    rate = (Decimal(booked) * 100 / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(rate)


def created_window(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Timestamp window covering the days ``[period_start, period_end)``."""
    if period_end < period_start:
        raise InvalidRangeError(period_start, period_end)
    return datetime.combine(period_start, time.min), datetime.combine(period_end, time.min)


def revenue_in(bookings: Iterable[Booking], period_start: date, period_end: date) -> Decimal:
    """Total price of non-cancelled bookings created on a day inside ``[period_start, period_end)``."""
    start, end = created_window(period_start, period_end)
    total = sum(
        (Decimal(b.total_price) for b in bookings if b.status != "cancelled" and start <= b.created_at < end),
        _ZERO,
    )
    return total.quantize(Decimal("0.01"))


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VillaReport:
    """One villa's figures for one period."""

    villa_id: uuid.UUID
    villa_name: str
    period_start: date
    period_end: date
    total_nights: int
    booked_nights: int
    occupancy_rate: int
    revenue: Decimal
    bookings: int


@dataclass(frozen=True)
class Kpi:
    value: Decimal | int
    previous_value: Decimal | int


@dataclass(frozen=True)
class UpcomingCheckIn:
    booking_id: uuid.UUID
    reference_code: str
    guest_name: str
    guest_phone: str | None
    villa_name: str
    check_in: date
    guests: int


@dataclass(frozen=True)
class MonthlyRevenue:
    month: date
    revenue: Decimal


@dataclass(frozen=True)
class Dashboard:
    """Back-office overview for the month containing ``today``."""

    today: date
    month_start: date
    total_bookings: Kpi
    revenue: Kpi
    occupancy_rate: Kpi
    active_villas: int
    total_villas: int
    average_booking_value: Decimal
    average_length_of_stay: Decimal
    villa_performance: list[VillaReport] = field(default_factory=list)
    upcoming_check_ins: list[UpcomingCheckIn] = field(default_factory=list)
    revenue_by_month: list[MonthlyRevenue] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class OccupancyAggregator:
    """Read-only reporting over villas and bookings.

    ``period_end`` is exclusive for occupancy and revenue alike; a report for
    one month takes its first day and the first day of the next month.
    """

    def __init__(self, repository: LedgerRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock

    async def booked_nights(self, villa_id: uuid.UUID, period_start: date, period_end: date) -> int:
        period_nights(period_start, period_end)
        bookings = await self._repository.active_bookings_overlapping([villa_id], period_start, period_end)
        return booked_nights_in(bookings, period_start, period_end)

    async def occupancy_rate(self, villa_id: uuid.UUID, period_start: date, period_end: date) -> int:
        total = period_nights(period_start, period_end)
        if total == 0:
            return 0
        return rate_percent(await self.booked_nights(villa_id, period_start, period_end), total)

    async def revenue(self, villa_id: uuid.UUID, period_start: date, period_end: date) -> Decimal:
        start, end = created_window(period_start, period_end)
        bookings = await self._repository.active_bookings_created_between([villa_id], start, end)
        return revenue_in(bookings, period_start, period_end)

    async def villa_report(self, villa_id: uuid.UUID, period_start: date, period_end: date) -> VillaReport:
        villa = await self._repository.get_villa(villa_id)
        reports = await self._reports([villa], period_start, period_end)
        return reports[0]

    async def period_reports(self, period_start: date, period_end: date) -> list[VillaReport]:
        """Reports for every villa, in name order."""
        villas = await self._repository.list_villas()
        return await self._reports(villas, period_start, period_end)

    async def _reports(self, villas: list[Villa], period_start: date, period_end: date) -> list[VillaReport]:
        total = period_nights(period_start, period_end)
        villa_ids = [v.id for v in villas]
        created_from, created_before = created_window(period_start, period_end)
        staying = await self._repository.active_bookings_overlapping(villa_ids, period_start, period_end)
        created = await self._repository.active_bookings_created_between(villa_ids, created_from, created_before)
        return [
            _report(villa, staying, created, period_start, period_end, total)
            for villa in villas
        ]

    async def dashboard(self, today: date | None = None, upcoming_days: int = 7, months: int = 12) -> Dashboard:
        """Month-to-date KPIs against the previous month, plus lists for the overview page."""
        today = today or self._clock.today()
        month_start, next_month = month_bounds(today)
        last_month_start = previous_month(today)

        villas = await self._repository.list_villas()
        villa_ids = [v.id for v in villas]
        bookings = await self._repository.active_bookings(villa_ids)

        def created_in(start: date, end: date) -> list[Booking]:
            lower, upper = created_window(start, end)
            return [b for b in bookings if lower <= b.created_at < upper]

        def portfolio_rate(start: date, end: date) -> int:
            return rate_percent(booked_nights_in(bookings, start, end), len(villas) * period_nights(start, end))

        current = created_in(month_start, next_month)
        previous = created_in(last_month_start, month_start)

        performance = [
            _report(villa, bookings, current, month_start, next_month, period_nights(month_start, next_month))
            for villa in villas
        ]
        performance.sort(key=lambda r: r.revenue, reverse=True)

        names = {v.id: v.name for v in villas}
        arrivals = await self._repository.active_bookings_checking_in(today, today + timedelta(days=upcoming_days))
        upcoming = [
            UpcomingCheckIn(
                booking_id=b.id,
                reference_code=b.reference_code,
                guest_name=b.guest_name,
                guest_phone=b.guest_phone,
                villa_name=names.get(b.villa_id, "Unknown villa"),
                check_in=b.check_in,
                guests=b.guests,
            )
            for b in arrivals
        ]

        total_value = sum((Decimal(b.total_price) for b in bookings), _ZERO)
        total_nights = sum(b.nights for b in bookings)
        count = len(bookings)

        return Dashboard(
            today=today,
            month_start=month_start,
            total_bookings=Kpi(len(current), len(previous)),
            revenue=Kpi(_sum_total(current), _sum_total(previous)),
            occupancy_rate=Kpi(portfolio_rate(month_start, next_month), portfolio_rate(last_month_start, month_start)),
            active_villas=sum(1 for v in villas if v.is_available),
            total_villas=len(villas),
            average_booking_value=(total_value / count).quantize(Decimal("0.01")) if count else _ZERO,
            average_length_of_stay=(Decimal(total_nights) / count).quantize(Decimal("0.1")) if count else Decimal("0.0"),
            villa_performance=performance,
            upcoming_check_ins=upcoming,
            revenue_by_month=_revenue_by_month(bookings, month_start, months),
        )


def _sum_total(bookings: Iterable[Booking]) -> Decimal:
    return sum((Decimal(b.total_price) for b in bookings), _ZERO).quantize(Decimal("0.01"))


def _report(
    villa: Villa,
    staying: list[Booking],
    created: list[Booking],
    period_start: date,
    period_end: date,
    total: int,
) -> VillaReport:
    own_stays = [b for b in staying if b.villa_id == villa.id]
    own_created = [b for b in created if b.villa_id == villa.id]
    booked = booked_nights_in(own_stays, period_start, period_end)
    return VillaReport(
        villa_id=villa.id,
        villa_name=villa.name,
        period_start=period_start,
        period_end=period_end,
        total_nights=total,
        booked_nights=booked,
        occupancy_rate=rate_percent(booked, total),
        revenue=_sum_total(own_created),
        bookings=sum(
            1 for b in own_stays if overlap_nights(b.check_in, b.check_out, period_start, period_end) > 0
        ),
    )


def _revenue_by_month(bookings: Iterable[Booking], current_month: date, months: int) -> list[MonthlyRevenue]:
    """Creation-based revenue for the ``months`` calendar months ending with ``current_month``, oldest first."""
    totals: dict[date, Decimal] = defaultdict(lambda: _ZERO)
    for booking in bookings:
        totals[booking.created_at.date().replace(day=1)] += Decimal(booking.total_price)

    series: list[MonthlyRevenue] = []
    month = current_month
    for _ in range(months):
        series.append(MonthlyRevenue(month=month, revenue=totals[month].quantize(Decimal("0.01"))))
        month = previous_month(month)
    series.reverse()
    return series
