"""Pydantic v2 schemas for villa calendars and manual date blocks."""

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class BlockDatesRequest(BaseModel):
    """Nights to block (or unblock) by hand."""

    dates: list[date] = Field(..., min_length=1, max_length=366)
    reason: str | None = Field(None, max_length=255)


class BlockedDateResponse(BaseModel):
    villa_id: uuid.UUID
    blocked_date: date
    booking_id: uuid.UUID | None = None
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CalendarResponse(BaseModel):
    """Blocked nights of one villa within ``[start, end)``."""

    villa_id: uuid.UUID
    start: date
    end: date
    blocked: list[BlockedDateResponse]


class UnblockResponse(BaseModel):
    villa_id: uuid.UUID
    removed: int
