"""Logical calendar - day windows offset from midnight in a fixed timezone.

Pure functions - no I/O.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ValidationFailure

DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_DAY_START_HOUR = 3

# Canonical within-day hour for tasks scheduled onto a date
SCHEDULE_HOUR = 12


@dataclass(frozen=True)
class DayWindow:
    """A logical day: [start, end) in the configured timezone."""

    key: date
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    @property
    def midpoint(self) -> datetime:
        """Instant halfway through the window, in real elapsed time."""
        start_utc = self.start.astimezone(timezone.utc)
        end_utc = self.end.astimezone(timezone.utc)
        return (start_utc + (end_utc - start_utc) / 2).astimezone(self.start.tzinfo)


@dataclass(frozen=True)
class LogicalCalendar:
    """
    Converts instants to logical days.

    A logical day starts at `day_start_hour` local time, so an instant at
    01:30 belongs to the previous calendar date.
    """

    timezone: str = DEFAULT_TIMEZONE
    day_start_hour: int = DEFAULT_DAY_START_HOUR

    def __post_init__(self):
        if not 0 <= self.day_start_hour <= SCHEDULE_HOUR:
            raise ValidationFailure(
                f"Day start hour must be between 0 and {SCHEDULE_HOUR}, got {self.day_start_hour}"
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationFailure(f"Unknown timezone: {self.timezone}")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def to_local(self, instant: datetime) -> datetime:
        """Convert to the configured zone. Naive datetimes are taken as local wall time."""
        if instant.tzinfo is None:
            return instant.replace(tzinfo=self.zone)
        return instant.astimezone(self.zone)

    def day_key(self, instant: datetime) -> date:
        """Logical date an instant belongs to."""
        local = self.to_local(instant)
        if local.hour < self.day_start_hour:
            return local.date() - timedelta(days=1)
        return local.date()

    def window_for_key(self, key: date) -> DayWindow:
        """Window for a logical date. Ends at the start hour of the next calendar date."""
        start_hour = time(self.day_start_hour, 0)
        start = datetime.combine(key, start_hour, tzinfo=self.zone)
        end = datetime.combine(key + timedelta(days=1), start_hour, tzinfo=self.zone)
        return DayWindow(key=key, start=start, end=end)

    def day_window(self, instant: datetime) -> DayWindow:
        """Window of the logical day containing an instant."""
        return self.window_for_key(self.day_key(instant))

    def tomorrow_window(self, instant: datetime) -> DayWindow:
        """Window of the logical day after the one containing an instant."""
        return self.window_for_key(self.day_key(instant) + timedelta(days=1))

    def schedule_instant(self, key: date) -> datetime:
        """Canonical instant (local noon) for a task scheduled onto a date."""
        return datetime.combine(key, time(SCHEDULE_HOUR, 0), tzinfo=self.zone)

    def today(self, now: datetime | None = None) -> date:
        return self.day_key(now or datetime.now(self.zone))


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD string into a day key."""
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise ValidationFailure(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
