"""In-memory store adapters."""

import copy
import uuid

from jogfile.core.errors import NotFound
from jogfile.core.ordering import Bucket, sort_by_position
from jogfile.core.recurrence import RecurringTemplate, TemplateFields
from jogfile.core.tasks import Task, TaskFields, TaskStatus, sort_overdue


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class InMemoryTaskStore:
    """
    Dict-backed task storage.

    Implements TaskStore protocol. Records are copied on the way in and out,
    so unsaved edits to a returned Task never leak into the store.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: dict[str, Task] = {t.id: copy.deepcopy(t) for t in tasks or []}

    def _read(self) -> dict[str, Task]:
        return self._tasks

    def _write(self, tasks: dict[str, Task]) -> None:
        self._tasks = tasks

    def _pending(self) -> list[Task]:
        return [copy.deepcopy(t) for t in self._read().values() if t.is_pending]

    def find_pending_by_date_range(self, start, end) -> list[Task]:
        return sort_by_position(
            [
                t
                for t in self._pending()
                if t.scheduled_for is not None
                and start <= t.scheduled_for
                and (end is None or t.scheduled_for < end)
            ]
        )

    def find_pending_with_no_date(self) -> list[Task]:
        return sort_by_position([t for t in self._pending() if t.scheduled_for is None])

    def find_pending_overdue(self, before) -> list[Task]:
        return sort_overdue(
            [t for t in self._pending() if t.scheduled_for is not None and t.scheduled_for < before]
        )

    def find_by_id(self, task_id: str) -> Task | None:
        task = self._read().get(task_id)
        return copy.deepcopy(task) if task else None

    def create(self, fields: TaskFields) -> Task:
        task = Task(
            id=new_id(),
            title=fields.title,
            description=fields.description,
            url=fields.url,
            checklist=list(fields.checklist),
            scheduled_for=fields.scheduled_for,
            status=TaskStatus.PENDING,
            position=fields.position,
            created_at=fields.created_at,
            generated_from=fields.generated_from,
        )
        tasks = dict(self._read())
        tasks[task.id] = task
        self._write(tasks)
        return copy.deepcopy(task)

    def save(self, task: Task) -> None:
        self.save_all([task])

    def save_all(self, tasks: list[Task]) -> None:
        current = dict(self._read())
        for task in tasks:
            if task.id not in current:
                raise NotFound("Task", task.id)
        for task in tasks:
            current[task.id] = copy.deepcopy(task)
        self._write(current)

    def find_max_position_in_bucket(self, bucket: Bucket) -> int | None:
        positions = [t.position for t in self._pending() if bucket.holds(t.scheduled_for)]
        return max(positions, default=None)


class InMemoryTemplateStore:
    """Dict-backed recurring template storage. Implements TemplateStore protocol."""

    def __init__(self, templates: list[RecurringTemplate] | None = None):
        self._templates: dict[str, RecurringTemplate] = {
            t.id: copy.deepcopy(t) for t in templates or []
        }

    def _read(self) -> dict[str, RecurringTemplate]:
        return self._templates

    def _write(self, templates: dict[str, RecurringTemplate]) -> None:
        self._templates = templates

    def find_all(self) -> list[RecurringTemplate]:
        return [copy.deepcopy(t) for t in self._read().values()]

    def find_all_active(self) -> list[RecurringTemplate]:
        return [t for t in self.find_all() if t.is_active]

    def find_by_id(self, template_id: str) -> RecurringTemplate | None:
        template = self._read().get(template_id)
        return copy.deepcopy(template) if template else None

    def create(self, fields: TemplateFields) -> RecurringTemplate:
        template = RecurringTemplate(
            id=new_id(),
            title=fields.title,
            pattern=fields.pattern,
            description=fields.description,
            url=fields.url,
            is_active=fields.is_active,
            paused_until=fields.paused_until,
            created_at=fields.created_at,
        )
        templates = dict(self._read())
        templates[template.id] = template
        self._write(templates)
        return copy.deepcopy(template)

    def save(self, template: RecurringTemplate) -> None:
        templates = dict(self._read())
        if template.id not in templates:
            raise NotFound("Template", template.id)
        templates[template.id] = copy.deepcopy(template)
        self._write(templates)

    def delete(self, template_id: str) -> None:
        templates = dict(self._read())
        if templates.pop(template_id, None) is not None:
            self._write(templates)
