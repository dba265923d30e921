"""Rollover collection - overdue tasks and due templates for a logical day.

Pure functions - no I/O. The workflow layer fetches candidates from the
stores and hands them in.
"""

from dataclasses import dataclass, field
from datetime import date

from .dates import DayWindow
from .recurrence import RecurringTemplate, is_due
from .tasks import Task, sort_overdue


@dataclass(frozen=True)
class OverdueItem:
    """A pending task scheduled before today."""

    task: Task


@dataclass(frozen=True)
class DueTemplateItem:
    """A template due today that has not been fired or skipped yet."""

    template: RecurringTemplate


RolloverItem = OverdueItem | DueTemplateItem


@dataclass
class RolloverQueue:
    """Work the user must resolve before seeing the day view."""

    today: DayWindow
    overdue_tasks: list[Task] = field(default_factory=list)
    due_templates: list[RecurringTemplate] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.overdue_tasks and not self.due_templates

    def items(self) -> list[RolloverItem]:
        """Overdue tasks first, then due templates."""
        return [OverdueItem(t) for t in self.overdue_tasks] + [
            DueTemplateItem(t) for t in self.due_templates
        ]

    def head(self) -> RolloverItem | None:
        items = self.items()
        return items[0] if items else None

    def __len__(self) -> int:
        return len(self.overdue_tasks) + len(self.due_templates)


def filter_overdue(tasks: list[Task], today: DayWindow) -> list[Task]:
    """Pending, dated tasks scheduled strictly before today's window, oldest first."""
    return sort_overdue(
        [
            t
            for t in tasks
            if t.is_pending and t.scheduled_for is not None and t.scheduled_for < today.start
        ]
    )


def filter_due_templates(templates: list[RecurringTemplate], today: date) -> list[RecurringTemplate]:
    """Templates due on `today` that have not been resolved for it yet."""
    return [t for t in templates if is_due(t, today) and not t.is_resolved_for(today)]


def build_rollover(
    tasks: list[Task],
    templates: list[RecurringTemplate],
    today: DayWindow,
) -> RolloverQueue:
    """Assemble the rollover queue for a logical day."""
    return RolloverQueue(
        today=today,
        overdue_tasks=filter_overdue(tasks, today),
        due_templates=filter_due_templates(templates, today.key),
    )
