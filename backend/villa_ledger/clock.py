"""Injectable clock so no ledger logic reads the wall clock directly."""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of "now" for past-date checks and booking timestamps."""

    def now(self) -> datetime:
        """Current instant as a naive UTC datetime (matches the DB columns)."""
        ...

    def today(self) -> date:
        """Current calendar date at the property."""
        ...


class SystemClock:
    """Wall-clock time, with "today" evaluated in the property's time zone."""

    def __init__(self, timezone_name: str = "UTC") -> None:
        self._tz: tzinfo = timezone.utc if timezone_name.upper() == "UTC" else ZoneInfo(timezone_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self) -> date:
        return datetime.now(self._tz).date()


class FixedClock:
    """A clock frozen at a given instant; used by tests and seed scripts."""

    def __init__(self, now: datetime, today: date | None = None) -> None:
        self._now = now
        self._today = today or now.date()

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._today

    def advance(self, delta: timedelta) -> None:
        """Move the frozen instant (and today) forward by ``delta``."""
        self._now += delta
        self._today = (datetime.combine(self._today, datetime.min.time()) + delta).date()
