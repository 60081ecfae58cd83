"""Error taxonomy for the booking ledger.

Every error raised by the date utilities, the availability index, the ledger
and the occupancy aggregator derives from :class:`LedgerError`. The API layer
maps each family to one HTTP status (see ``villa_ledger.main``).
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import date


class LedgerError(Exception):
    """Base class for all booking-ledger errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Bad input shape or range; the caller can correct it and retry."""


class InvalidRangeError(ValidationError):
    """A date range whose end is not after its start."""

    def __init__(self, start: date, end: date, message: str | None = None) -> None:
        super().__init__(message or f"Invalid date range: {end.isoformat()} is not after {start.isoformat()}")
        self.start = start
        self.end = end


class InvalidStatusTransitionError(ValidationError):
    """A booking status change the state machine does not allow."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot move booking from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class AvailabilityConflictError(LedgerError):
    """The requested nights are no longer free."""

    def __init__(self, villa_id: uuid.UUID, dates: Iterable[date] = ()) -> None:
        self.villa_id = villa_id
        self.dates = tuple(sorted(dates))
        if self.dates:
            listed = ", ".join(d.isoformat() for d in self.dates)
            message = f"Dates conflict with existing bookings or blocks: {listed}"
        else:
            message = "Dates conflict with existing bookings or blocks"
        super().__init__(message)


class NotFoundError(LedgerError):
    """Unknown villa or booking."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class PersistenceError(LedgerError):
    """The store failed; nothing was written and the caller cannot fix it locally."""

    def __init__(self, step: str, booking_id: uuid.UUID | None = None, detail: str = "") -> None:
        message = f"Persistence failure during {step}"
        if booking_id is not None:
            message += f" (booking {booking_id})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.step = step
        self.booking_id = booking_id
