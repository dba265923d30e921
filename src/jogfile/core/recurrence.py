"""Recurring templates and pattern evaluation - no I/O dependencies."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import ClassVar, Union

from .errors import AmbiguousSchedule, ValidationFailure

# Covers one full yearly cycle plus a leap day
NEXT_OCCURRENCE_HORIZON = 400

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MONTH_NAMES = [
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

LAST_DAY = -1


@dataclass(frozen=True)
class Daily:
    kind: ClassVar[str] = "daily"


@dataclass(frozen=True)
class Weekly:
    """Listed weekdays (0 = Sunday), optionally every N weeks from an anchor."""

    kind: ClassVar[str] = "weekly"

    days_of_week: frozenset[int]
    interval: int = 1
    anchor: date | None = None

    def __post_init__(self):
        object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))
        if not self.days_of_week:
            raise ValidationFailure("Weekly pattern needs at least one day of the week")
        if any(d not in range(7) for d in self.days_of_week):
            raise ValidationFailure(f"Days of week must be 0-6, got {sorted(self.days_of_week)}")
        if self.interval < 1:
            raise ValidationFailure(f"Weekly interval must be at least 1, got {self.interval}")


@dataclass(frozen=True)
class Monthly:
    """Day of month 1-31, or -1 for the last day."""

    kind: ClassVar[str] = "monthly"

    day_of_month: int

    def __post_init__(self):
        if self.day_of_month != LAST_DAY and not 1 <= self.day_of_month <= 31:
            raise ValidationFailure(f"Day of month must be 1-31 or -1, got {self.day_of_month}")


@dataclass(frozen=True)
class Yearly:
    kind: ClassVar[str] = "yearly"

    month: int
    day: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationFailure(f"Month must be 1-12, got {self.month}")
        if not 1 <= self.day <= 31:
            raise ValidationFailure(f"Day must be 1-31, got {self.day}")


@dataclass(frozen=True)
class Interval:
    """Every N days counted from an anchor date."""

    kind: ClassVar[str] = "interval"

    days: int
    anchor: date

    def __post_init__(self):
        if self.days < 1:
            raise ValidationFailure(f"Interval must be at least 1 day, got {self.days}")
        if self.anchor is None:
            raise ValidationFailure("Interval pattern needs an anchor date")


Pattern = Union[Daily, Weekly, Monthly, Yearly, Interval]


@dataclass
class RecurringTemplate:
    """A rule that prompts creation of a task on the days it is due."""

    id: str
    title: str
    pattern: Pattern
    description: str = ""
    url: str = ""
    is_active: bool = True
    paused_until: date | None = None
    last_generated_for: date | None = None
    created_at: datetime | None = None

    def is_resolved_for(self, day: date) -> bool:
        """True once the template has fired or been skipped for `day` (or later)."""
        return self.last_generated_for is not None and self.last_generated_for >= day

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "pattern": pattern_to_dict(self.pattern),
            "isActive": self.is_active,
            "pausedUntil": _iso(self.paused_until),
            "lastGeneratedFor": _iso(self.last_generated_for),
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RecurringTemplate":
        created = data.get("createdAt")
        return cls(
            id=data["id"],
            title=data["title"],
            pattern=pattern_from_dict(data["pattern"]),
            description=data.get("description", ""),
            url=data.get("url", ""),
            is_active=data.get("isActive", True),
            paused_until=_parse_day(data.get("pausedUntil")),
            last_generated_for=_parse_day(data.get("lastGeneratedFor")),
            created_at=datetime.fromisoformat(created) if created else None,
        )


@dataclass
class TemplateFields:
    """User-editable template fields, before the store assigns an id."""

    title: str
    pattern: Pattern
    description: str = ""
    url: str = ""
    is_active: bool = True
    paused_until: date | None = None
    created_at: datetime | None = None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    # Accept full instants written by older records; keep the date part
    return date.fromisoformat(value[:10])


def pattern_to_dict(pattern: Pattern) -> dict:
    """Serialize a pattern as a tagged dict."""
    match pattern:
        case Daily():
            return {"type": "daily"}
        case Weekly(days_of_week=days, interval=interval, anchor=anchor):
            return {
                "type": "weekly",
                "daysOfWeek": sorted(days),
                "weeklyInterval": interval,
                "weeklyAnchor": _iso(anchor),
            }
        case Monthly(day_of_month=day):
            return {"type": "monthly", "dayOfMonth": day}
        case Yearly(month=month, day=day):
            return {"type": "yearly", "yearlyMonth": month, "yearlyDay": day}
        case Interval(days=days, anchor=anchor):
            return {"type": "interval", "intervalDays": days, "intervalAnchor": _iso(anchor)}
    raise ValidationFailure(f"Unknown pattern: {pattern!r}")


def pattern_from_dict(data: dict) -> Pattern:
    """
    Build a pattern from a tagged dict.

    Raises ValidationFailure for an unknown tag or a variant missing its fields.
    """
    kind = data.get("type")
    try:
        match kind:
            case "daily":
                return Daily()
            case "weekly":
                return Weekly(
                    days_of_week=frozenset(int(d) for d in data.get("daysOfWeek") or []),
                    interval=int(1 if data.get("weeklyInterval") is None else data["weeklyInterval"]),
                    anchor=_parse_day(data.get("weeklyAnchor")),
                )
            case "monthly":
                return Monthly(day_of_month=int(data["dayOfMonth"]))
            case "yearly":
                return Yearly(month=int(data["yearlyMonth"]), day=int(data["yearlyDay"]))
            case "interval":
                anchor = _parse_day(data.get("intervalAnchor"))
                if anchor is None:
                    raise ValidationFailure("Interval pattern needs an anchor date")
                return Interval(days=int(data["intervalDays"]), anchor=anchor)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationFailure(f"Pattern {kind!r} is missing or has invalid fields: {e}")
    raise ValidationFailure(f"Unknown pattern type: {kind!r}")


def require_unambiguous(pattern: Pattern) -> Pattern:
    """Reject patterns that could only be evaluated by inventing data."""
    if isinstance(pattern, Weekly) and pattern.interval > 1 and pattern.anchor is None:
        raise AmbiguousSchedule(
            f"Every-{pattern.interval}-weeks pattern needs an anchor date to count weeks from"
        )
    return pattern


def _last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _weekday(day: date) -> int:
    """Weekday with 0 = Sunday."""
    return (day.weekday() + 1) % 7


def pattern_matches(pattern: Pattern, day: date) -> bool:
    """
    Check whether a pattern falls on a date, ignoring active/paused state.

    Pure function - no I/O.
    """
    match pattern:
        case Daily():
            return True

        case Weekly():
            if _weekday(day) not in pattern.days_of_week:
                return False
            if pattern.interval == 1:
                return True
            # Never invent an anchor
            if pattern.anchor is None:
                return False
            weeks = (day - pattern.anchor).days // 7
            return weeks >= 0 and weeks % pattern.interval == 0

        case Monthly():
            last_day = _last_day_of_month(day.year, day.month)
            if pattern.day_of_month == LAST_DAY:
                return day.day == last_day
            return day.day == min(pattern.day_of_month, last_day)

        case Yearly():
            if day.month != pattern.month:
                return False
            last_day = _last_day_of_month(day.year, day.month)
            return day.day == min(pattern.day, last_day)

        case Interval():
            distance = (day - pattern.anchor).days
            return distance >= 0 and distance % pattern.days == 0

    raise ValidationFailure(f"Unknown pattern: {pattern!r}")


def is_due(template: RecurringTemplate, day: date) -> bool:
    """
    Check whether a template is due on a logical date.

    Inactive templates and templates paused past `day` are never due.
    Pure function - no I/O.
    """
    if not template.is_active:
        return False
    if template.paused_until and day < template.paused_until:
        return False
    return pattern_matches(template.pattern, day)


def next_occurrence(
    template: RecurringTemplate,
    start: date,
    horizon: int = NEXT_OCCURRENCE_HORIZON,
) -> date | None:
    """
    First date on or after `start` (or the pause end, if later) the template is due.

    Returns None when nothing matches within `horizon` days.
    """
    if not template.is_active:
        return None

    check = start
    if template.paused_until and template.paused_until > check:
        check = template.paused_until

    for _ in range(horizon):
        if is_due(template, check):
            return check
        check += timedelta(days=1)
    return None


def describe_pattern(pattern: Pattern) -> str:
    """Human-readable description of a pattern."""
    match pattern:
        case Daily():
            return "Daily"
        case Weekly():
            days = ", ".join(DAY_NAMES[d] for d in sorted(pattern.days_of_week))
            if pattern.interval == 1:
                return f"Every {days}"
            if pattern.interval == 2:
                return f"Every other {days}"
            return f"Every {pattern.interval} weeks on {days}"
        case Monthly():
            if pattern.day_of_month == LAST_DAY:
                return "Monthly on the last day"
            return f"Monthly on day {pattern.day_of_month}"
        case Yearly():
            return f"Yearly on {MONTH_NAMES[pattern.month]} {pattern.day}"
        case Interval():
            return f"Every {pattern.days} days"
    raise ValidationFailure(f"Unknown pattern: {pattern!r}")
