"""Analytics API router: occupancy, revenue and the back-office dashboard."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from villa_ledger.api.deps import get_aggregator, get_current_staff
from villa_ledger.config import settings
from villa_ledger.models.user import AdminUser
from villa_ledger.schemas.analytics import (
    DashboardResponse,
    OccupancyResponse,
    OccupancySummaryResponse,
)
from villa_ledger.services.occupancy import OccupancyAggregator, rate_percent

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


@router.get("/occupancy", response_model=OccupancySummaryResponse)
async def get_occupancy(
    period_start: date = Query(..., description="First night of the analysis period"),
    period_end: date = Query(..., description="Day after the last night of the period"),
    villa_id: uuid.UUID | None = Query(None, description="Filter by specific villa"),
    aggregator: OccupancyAggregator = Depends(get_aggregator),
    current_user: AdminUser = Depends(get_current_staff),
) -> OccupancySummaryResponse:
    """Occupancy (by stay nights) and revenue (by booking creation date) per villa.

    Both use the half-open period ``[period_start, period_end)``: occupancy
    counts the nights stayed in it, revenue the bookings created in it.
    """
    if period_end <= period_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="period_end must be after period_start",
        )

    if villa_id is not None:
        reports = [await aggregator.villa_report(villa_id, period_start, period_end)]
    else:
        reports = await aggregator.period_reports(period_start, period_end)

    booked = sum(r.booked_nights for r in reports)
    capacity = sum(r.total_nights for r in reports)

    return OccupancySummaryResponse(
        period_start=period_start,
        period_end=period_end,
        villas=[OccupancyResponse.model_validate(r) for r in reports],
        overall_occupancy_rate=rate_percent(booked, capacity),
        total_revenue=sum((r.revenue for r in reports), Decimal("0.00")),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    aggregator: OccupancyAggregator = Depends(get_aggregator),
    current_user: AdminUser = Depends(get_current_staff),
) -> DashboardResponse:
    """Month-to-date KPIs against last month, villa performance and upcoming arrivals."""
    dashboard = await aggregator.dashboard(
        upcoming_days=settings.upcoming_checkin_days,
        months=settings.revenue_chart_months,
    )
    return DashboardResponse.model_validate(dashboard)
