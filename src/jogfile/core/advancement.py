"""Advancement resolutions - what the user can do with each rollover item."""

from datetime import date, datetime
from enum import Enum

from .errors import ValidationFailure
from .recurrence import RecurringTemplate
from .tasks import TaskFields


class TaskAction(Enum):
    """Resolutions for an overdue task."""

    COMPLETE = "complete"
    MOVE_TO_TODAY = "today"
    DEFER_TO_DATE = "defer"
    MOVE_TO_SCRATCH = "scratch"
    ARCHIVE = "archive"

    @property
    def needs_date(self) -> bool:
        return self == TaskAction.DEFER_TO_DATE


class TemplateAction(Enum):
    """Resolutions for a due recurring template."""

    GENERATE_TODAY = "today"
    GENERATE_ON_DATE = "date"
    SKIP = "skip"

    @property
    def needs_date(self) -> bool:
        return self == TemplateAction.GENERATE_ON_DATE


class BulkAction(Enum):
    """Resolutions applied to every overdue task at once."""

    # Declare bankruptcy: archive everything overdue
    ARCHIVE_ALL = "bankrupt"
    # Best guess: pull everything overdue onto today
    RESCHEDULE_ALL_TO_TODAY = "best-guess"


def require_target_date(target: date | None, today: date) -> date:
    """A target day for deferral or generation: required, and not in the past."""
    if target is None:
        raise ValidationFailure("A target date is required")
    if target < today:
        raise ValidationFailure(f"Cannot schedule onto {target.isoformat()}, which is before today")
    return target


def task_fields_from_template(
    template: RecurringTemplate,
    scheduled_for: datetime,
    position: int,
    now: datetime,
) -> TaskFields:
    """Fields of the pending task a template generates."""
    return TaskFields(
        title=template.title,
        description=template.description,
        url=template.url,
        scheduled_for=scheduled_for,
        position=position,
        created_at=now,
        generated_from=template.id,
    )


def mark_template_resolved(template: RecurringTemplate, today: date) -> RecurringTemplate:
    """Record that a template fired or was skipped for `today`."""
    if template.is_resolved_for(today):
        raise ValidationFailure(f"'{template.title}' was already resolved for {today.isoformat()}")
    template.last_generated_for = today
    return template
