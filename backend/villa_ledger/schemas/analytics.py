"""Pydantic v2 schemas for analytics endpoints."""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class OccupancyResponse(BaseModel):
    """Occupancy and revenue of a single villa over a period."""

    villa_id: uuid.UUID
    villa_name: str
    period_start: date
    period_end: date
    total_nights: int
    booked_nights: int
    occupancy_rate: int  # whole percent, 0-100
    revenue: Decimal  # bookings created in the period
    bookings: int

    model_config = ConfigDict(from_attributes=True)


class OccupancySummaryResponse(BaseModel):
    """Per-villa statistics plus the portfolio-wide rate."""

    period_start: date
    period_end: date
    villas: list[OccupancyResponse]
    overall_occupancy_rate: int
    total_revenue: Decimal


class KpiResponse(BaseModel):
    value: Decimal
    previous_value: Decimal

    model_config = ConfigDict(from_attributes=True)


class UpcomingCheckInResponse(BaseModel):
    booking_id: uuid.UUID
    reference_code: str
    guest_name: str
    guest_phone: str | None = None
    villa_name: str
    check_in: date
    guests: int

    model_config = ConfigDict(from_attributes=True)


class MonthlyRevenueResponse(BaseModel):
    month: date
    revenue: Decimal

    model_config = ConfigDict(from_attributes=True)


class DashboardResponse(BaseModel):
    """Back-office overview for the current month."""

    today: date
    month_start: date
    total_bookings: KpiResponse
    revenue: KpiResponse
    occupancy_rate: KpiResponse
    active_villas: int
    total_villas: int
    average_booking_value: Decimal
    average_length_of_stay: Decimal
    villa_performance: list[OccupancyResponse]
    upcoming_check_ins: list[UpcomingCheckInResponse]
    revenue_by_month: list[MonthlyRevenueResponse]

    model_config = ConfigDict(from_attributes=True)
