"""Half-open calendar date ranges.

A stay is the range ``[check_in, check_out)``: the check-in night is occupied,
the check-out day is not. That is what lets one guest leave on the morning
another arrives.
"""

from datetime import date, timedelta

from villa_ledger.errors import InvalidRangeError

_ONE_DAY = timedelta(days=1)


def night_count(check_in: date, check_out: date) -> int:
    """Return the number of nights between two dates.

    Raises:
        InvalidRangeError: If ``check_out`` is not after ``check_in``.
    """
    nights = (check_out - check_in).days
    if nights <= 0:
        raise InvalidRangeError(check_in, check_out)
    return nights


def expand_range(check_in: date, check_out: date) -> tuple[date, ...]:
    """Return every occupied night of a stay, ascending, excluding check-out."""
    nights = night_count(check_in, check_out)
    return tuple(check_in + timedelta(days=offset) for offset in range(nights))


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """True when two half-open ranges share at least one night."""
    return a_start < b_end and b_start < a_end


def overlap_nights(a_start: date, a_end: date, b_start: date, b_end: date) -> int:
    """Number of nights two half-open ranges share (0 when disjoint)."""
    start = max(a_start, b_start)
    end = min(a_end, b_end)
    if start >= end:
        return 0
    return (end - start).days


def month_bounds(day: date) -> tuple[date, date]:
    """Return ``(first_day, first_day_of_next_month)`` for the month containing ``day``."""
    first = day.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first


def previous_month(day: date) -> date:
    """Return the first day of the month before the one containing ``day``."""
    return (day.replace(day=1) - _ONE_DAY).replace(day=1)
