"""Functional core - pure scheduling logic with no I/O."""

from .errors import AmbiguousSchedule, JogFileError, NotFound, StoreFailure, ValidationFailure
from .dates import DayWindow, LogicalCalendar, parse_date_key
from .recurrence import (
    Daily,
    Interval,
    Monthly,
    Pattern,
    RecurringTemplate,
    TemplateFields,
    Weekly,
    Yearly,
    describe_pattern,
    is_due,
    next_occurrence,
)
from .tasks import ChecklistItem, Task, TaskFields, TaskStatus
from .ordering import Bucket, Direction, next_position
from .rollover import DueTemplateItem, OverdueItem, RolloverQueue, build_rollover
from .advancement import BulkAction, TaskAction, TemplateAction

__all__ = [
    # Errors
    "JogFileError",
    "NotFound",
    "ValidationFailure",
    "AmbiguousSchedule",
    "StoreFailure",
    # Calendar
    "DayWindow",
    "LogicalCalendar",
    "parse_date_key",
    # Recurrence
    "Pattern",
    "Daily",
    "Weekly",
    "Monthly",
    "Yearly",
    "Interval",
    "RecurringTemplate",
    "TemplateFields",
    "describe_pattern",
    "is_due",
    "next_occurrence",
    # Tasks
    "Task",
    "TaskFields",
    "TaskStatus",
    "ChecklistItem",
    # Ordering
    "Bucket",
    "Direction",
    "next_position",
    # Rollover
    "RolloverQueue",
    "OverdueItem",
    "DueTemplateItem",
    "build_rollover",
    # Advancement
    "TaskAction",
    "TemplateAction",
    "BulkAction",
]
