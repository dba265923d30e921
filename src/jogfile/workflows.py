"""Shared workflow layer between the CLI and any other front end.

Each Planner method is one request-scoped read-decide-write sequence against
the stores. Nothing is held between calls: the rollover queue is re-collected
from the stores every time, so the advancement workflow survives restarts
between steps.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from .adapters.json_store import JsonTaskStore, JsonTemplateStore
from .config import Config
from .core.advancement import (
    BulkAction,
    TaskAction,
    TemplateAction,
    mark_template_resolved,
    require_target_date,
    task_fields_from_template,
)
from .core.dates import DayWindow, LogicalCalendar
from .core.errors import NotFound, ValidationFailure
from .core.ordering import (
    Bucket,
    Direction,
    bucket_of,
    find_swap_partner,
    next_position,
    swap_positions,
)
from .core.recurrence import (
    Pattern,
    RecurringTemplate,
    TemplateFields,
    describe_pattern,
    is_due,
    next_occurrence,
    require_unambiguous,
)
from .core.rollover import RolloverItem, RolloverQueue, build_rollover
from .core import tasks as task_rules
from .core.tasks import Task, TaskFields, validate_title
from .ports import TaskStore, TemplateStore

logger = logging.getLogger(__name__)


@dataclass
class DayView:
    """What the normal view shows once advancement is clear."""

    window: DayWindow
    today: list[Task] = field(default_factory=list)
    later: list[Task] = field(default_factory=list)
    scratch_pad: list[Task] = field(default_factory=list)


@dataclass
class UpcomingTemplate:
    template: RecurringTemplate
    next_date: date | None
    description: str


class Planner:
    """
    Day planner operations over a task store and a template store.

    Every method takes an optional `now`; it defaults to the current time in
    the calendar's zone.
    """

    def __init__(self, tasks: TaskStore, templates: TemplateStore, calendar: LogicalCalendar):
        self.tasks = tasks
        self.templates = templates
        self.calendar = calendar

    def _now(self, now: datetime | None) -> datetime:
        return self.calendar.to_local(now) if now else datetime.now(self.calendar.zone)

    def _today(self, now: datetime | None) -> DayWindow:
        return self.calendar.day_window(self._now(now))

    def _bucket_for_day(self, day: date) -> Bucket:
        return Bucket.for_window(self.calendar.window_for_key(day))

    def _next_position(self, bucket: Bucket) -> int:
        # Always re-read; bulk operations must never reuse a stale maximum
        return next_position(self.tasks.find_max_position_in_bucket(bucket))

    def _placement(self, day: date | None) -> tuple[datetime | None, int]:
        """Scheduled instant and end-of-bucket position for a day (None = scratch pad)."""
        if day is None:
            return None, self._next_position(Bucket.scratch())
        return self.calendar.schedule_instant(day), self._next_position(self._bucket_for_day(day))

    def get_task(self, task_id: str) -> Task:
        task = self.tasks.find_by_id(task_id)
        if task is None:
            raise NotFound("Task", task_id)
        return task

    def get_template(self, template_id: str) -> RecurringTemplate:
        template = self.templates.find_by_id(template_id)
        if template is None:
            raise NotFound("Template", template_id)
        return template

    # ============== Rollover / advancement ==============

    def collect(self, now: datetime | None = None) -> RolloverQueue:
        """Overdue tasks and unresolved due templates for today."""
        today = self._today(now)
        overdue = self.tasks.find_pending_overdue(today.start)
        templates = self.templates.find_all_active()
        return build_rollover(overdue, templates, today)

    def needs_advancement(self, now: datetime | None = None) -> bool:
        return not self.collect(now).is_empty

    def next_item(self, now: datetime | None = None) -> RolloverItem | None:
        """The rollover item to present next, or None once advancement is clear."""
        return self.collect(now).head()

    def resolve_task(
        self,
        task_id: str,
        action: TaskAction,
        now: datetime | None = None,
        target: date | None = None,
    ) -> Task:
        """Resolve one overdue task. Moves onto a day count as a rollover."""
        now = self._now(now)
        today = self._today(now)
        task = self.get_task(task_id)
        if not (task.is_pending and task.scheduled_for is not None and task.scheduled_for < today.start):
            raise ValidationFailure(f"'{task.title}' is not overdue on {today.key.isoformat()}")

        match action:
            case TaskAction.COMPLETE:
                task_rules.complete(task, now)
            case TaskAction.ARCHIVE:
                task_rules.archive(task)
            case TaskAction.MOVE_TO_TODAY:
                position = self._next_position(Bucket.for_window(today))
                task_rules.reschedule(task, today.midpoint, position, rollover_at=now)
            case TaskAction.DEFER_TO_DATE:
                day = require_target_date(target, today.key)
                scheduled_for, position = self._placement(day)
                task_rules.reschedule(task, scheduled_for, position, rollover_at=now)
            case TaskAction.MOVE_TO_SCRATCH:
                _, position = self._placement(None)
                task_rules.move_to_scratch(task, position)

        self.tasks.save(task)
        logger.info(f"Resolved task {task.id} ({task.title!r}) with {action.value}")
        return task

    def resolve_template(
        self,
        template_id: str,
        action: TemplateAction,
        now: datetime | None = None,
        target: date | None = None,
    ) -> Task | None:
        """
        Resolve a due template for today.

        Generating creates a pending task at the end of the target day; skipping
        creates nothing. Either way the template is marked resolved for today.
        """
        now = self._now(now)
        today = self._today(now)
        template = self.get_template(template_id)

        if not is_due(template, today.key):
            raise ValidationFailure(f"'{template.title}' is not due on {today.key.isoformat()}")
        mark_template_resolved(template, today.key)

        task = None
        match action:
            case TemplateAction.GENERATE_TODAY:
                position = self._next_position(Bucket.for_window(today))
                task = self.tasks.create(
                    task_fields_from_template(template, today.midpoint, position, now)
                )
            case TemplateAction.GENERATE_ON_DATE:
                day = require_target_date(target, today.key)
                scheduled_for, position = self._placement(day)
                task = self.tasks.create(
                    task_fields_from_template(template, scheduled_for, position, now)
                )

        self.templates.save(template)
        if task:
            logger.info(f"Generated task {task.id} from template {template.id} ({template.title!r})")
        else:
            logger.info(f"Skipped template {template.id} ({template.title!r}) for {today.key}")
        return task

    def resolve_bulk(self, action: BulkAction, now: datetime | None = None) -> list[Task]:
        """Apply one resolution to every overdue task."""
        now = self._now(now)
        today = self._today(now)
        overdue = self.tasks.find_pending_overdue(today.start)
        today_bucket = Bucket.for_window(today)

        resolved = []
        for task in overdue:
            if action == BulkAction.ARCHIVE_ALL:
                task_rules.archive(task)
            else:
                position = self._next_position(today_bucket)
                task_rules.reschedule(task, today.midpoint, position, rollover_at=now)
            self.tasks.save(task)
            resolved.append(task)

        logger.info(f"Applied {action.value} to {len(resolved)} overdue tasks")
        return resolved

    # ============== Day view ==============

    def day_view(self, now: datetime | None = None) -> DayView:
        today = self._today(now)
        tomorrow = self.calendar.tomorrow_window(today.start)
        later = self.tasks.find_pending_by_date_range(tomorrow.start, None)
        return DayView(
            window=today,
            today=self.tasks.find_pending_by_date_range(today.start, today.end),
            later=sorted(later, key=lambda t: (t.scheduled_for, t.position)),
            scratch_pad=self.tasks.find_pending_with_no_date(),
        )

    # ============== Tasks ==============

    def create_task(
        self,
        title: str,
        description: str = "",
        url: str = "",
        day: date | None = None,
        scratch: bool = False,
        now: datetime | None = None,
    ) -> Task:
        """Create a pending task on `day` (default today) or on the scratch pad."""
        title = validate_title(title)
        now = self._now(now)
        if scratch:
            scheduled_for, position = self._placement(None)
        elif day is None:
            today = self._today(now)
            scheduled_for = today.midpoint
            position = self._next_position(Bucket.for_window(today))
        else:
            scheduled_for, position = self._placement(day)

        task = self.tasks.create(
            TaskFields(
                title=title,
                description=description.strip(),
                url=url.strip(),
                scheduled_for=scheduled_for,
                position=position,
                created_at=now,
            )
        )
        logger.info(f"Created task {task.id} ({task.title!r})")
        return task

    def update_task(
        self,
        task_id: str,
        title: str | None = None,
        description: str | None = None,
        url: str | None = None,
    ) -> Task:
        task = self.get_task(task_id)
        if title is not None:
            task.title = validate_title(title)
        if description is not None:
            task.description = description.strip()
        if url is not None:
            task.url = url.strip()
        self.tasks.save(task)
        return task

    def move_task(self, task_id: str, day: date | None) -> Task:
        """Plain move onto a day (None = scratch pad). Not a rollover."""
        task = self.get_task(task_id)
        current = bucket_of(task, self.calendar)
        if current.key == day and task.is_pending:
            return task

        scheduled_for, position = self._placement(day)
        if day is None:
            task_rules.move_to_scratch(task, position)
        else:
            task_rules.reschedule(task, scheduled_for, position)
        self.tasks.save(task)
        return task

    def complete_task(self, task_id: str, now: datetime | None = None) -> Task:
        task = task_rules.complete(self.get_task(task_id), self._now(now))
        self.tasks.save(task)
        return task

    def archive_task(self, task_id: str) -> Task:
        task = task_rules.archive(self.get_task(task_id))
        self.tasks.save(task)
        return task

    def restore_task(self, task_id: str, now: datetime | None = None) -> Task:
        """Bring a completed or archived task back as pending, onto today."""
        task = self.get_task(task_id)
        today = self._today(now)
        position = self._next_position(Bucket.for_window(today))
        task_rules.restore(task, today.midpoint, position)
        self.tasks.save(task)
        return task

    def swap_task(self, task_id: str, direction: Direction) -> Task | None:
        """
        Exchange positions with the nearest pending neighbour in the same bucket.

        Both records are saved as one unit. Returns the neighbour, or None when
        the task is already first (UP) or last (DOWN).
        """
        task = self.get_task(task_id)
        if not task.is_pending:
            raise ValidationFailure(f"Cannot reorder a {task.status.value} task")

        bucket = bucket_of(task, self.calendar)
        if bucket.is_scratch:
            siblings = self.tasks.find_pending_with_no_date()
        else:
            siblings = self.tasks.find_pending_by_date_range(bucket.window.start, bucket.window.end)

        partner = find_swap_partner(task, siblings, direction)
        if partner is None:
            return None
        swap_positions(task, partner)
        self.tasks.save_all([task, partner])
        return partner

    def add_checklist_item(self, task_id: str, text: str) -> Task:
        task = task_rules.add_checklist_item(self.get_task(task_id), text)
        self.tasks.save(task)
        return task

    def toggle_checklist_item(self, task_id: str, index: int) -> Task:
        task = task_rules.toggle_checklist_item(self.get_task(task_id), index)
        self.tasks.save(task)
        return task

    def remove_checklist_item(self, task_id: str, index: int) -> Task:
        task = task_rules.remove_checklist_item(self.get_task(task_id), index)
        self.tasks.save(task)
        return task

    # ============== Recurring templates ==============

    def create_template(
        self,
        title: str,
        pattern: Pattern,
        description: str = "",
        url: str = "",
        now: datetime | None = None,
    ) -> RecurringTemplate:
        template = self.templates.create(
            TemplateFields(
                title=validate_title(title),
                pattern=require_unambiguous(pattern),
                description=description.strip(),
                url=url.strip(),
                created_at=self._now(now),
            )
        )
        logger.info(f"Created template {template.id} ({template.title!r}): {describe_pattern(pattern)}")
        return template

    def update_template(
        self,
        template_id: str,
        title: str | None = None,
        pattern: Pattern | None = None,
        description: str | None = None,
        url: str | None = None,
    ) -> RecurringTemplate:
        template = self.get_template(template_id)
        if title is not None:
            template.title = validate_title(title)
        if pattern is not None:
            template.pattern = require_unambiguous(pattern)
        if description is not None:
            template.description = description.strip()
        if url is not None:
            template.url = url.strip()
        self.templates.save(template)
        return template

    def delete_template(self, template_id: str) -> None:
        """Delete a template. Tasks it generated keep their dangling reference."""
        self.get_template(template_id)
        self.templates.delete(template_id)
        logger.info(f"Deleted template {template_id}")

    def pause_template(self, template_id: str, until: date) -> RecurringTemplate:
        template = self.get_template(template_id)
        template.paused_until = until
        self.templates.save(template)
        return template

    def resume_template(self, template_id: str) -> RecurringTemplate:
        template = self.get_template(template_id)
        template.paused_until = None
        template.is_active = True
        self.templates.save(template)
        return template

    def set_template_active(self, template_id: str, active: bool) -> RecurringTemplate:
        template = self.get_template(template_id)
        template.is_active = active
        self.templates.save(template)
        return template

    def upcoming_templates(self, now: datetime | None = None) -> list[UpcomingTemplate]:
        """Every template with its next due date, soonest first; inactive ones last."""
        today = self._today(now).key
        upcoming = [
            UpcomingTemplate(
                template=t,
                next_date=next_occurrence(t, today),
                description=describe_pattern(t.pattern),
            )
            for t in self.templates.find_all()
        ]
        return sorted(upcoming, key=lambda u: (u.next_date is None, u.next_date or today, u.template.title))


def get_planner(config: Config) -> Planner:
    """Planner over the JSON stores in the configured data directory."""
    return Planner(
        tasks=JsonTaskStore(config.data_dir),
        templates=JsonTemplateStore(config.data_dir),
        calendar=config.calendar(),
    )
