"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .errors import ValidationFailure


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"


@dataclass
class ChecklistItem:
    text: str
    done: bool = False


@dataclass
class TaskFields:
    """Fields for a new task, before the store assigns an id."""

    title: str
    description: str = ""
    url: str = ""
    checklist: list[ChecklistItem] = field(default_factory=list)
    scheduled_for: datetime | None = None
    position: int = 0
    created_at: datetime | None = None
    generated_from: str | None = None


@dataclass
class Task:
    """A task on a logical day, or on the scratch pad when `scheduled_for` is None."""

    id: str
    title: str
    scheduled_for: datetime | None
    created_at: datetime
    description: str = ""
    url: str = ""
    checklist: list[ChecklistItem] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    position: int = 0
    completed_at: datetime | None = None
    rollovers: int = 0
    last_rollover_date: datetime | None = None
    # Weak reference: the template may since have been deleted
    generated_from: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING

    @property
    def on_scratch_pad(self) -> bool:
        return self.scheduled_for is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "checklist": [{"text": i.text, "done": i.done} for i in self.checklist],
            "scheduledFor": _iso(self.scheduled_for),
            "status": self.status.value,
            "position": self.position,
            "createdAt": _iso(self.created_at),
            "completedAt": _iso(self.completed_at),
            "rollovers": self.rollovers,
            "lastRolloverDate": _iso(self.last_rollover_date),
            "generatedFrom": self.generated_from,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            url=data.get("url", ""),
            checklist=[
                ChecklistItem(text=i["text"], done=i.get("done", False))
                for i in data.get("checklist", [])
            ],
            scheduled_for=_parse(data.get("scheduledFor")),
            status=TaskStatus(data.get("status", "pending")),
            position=data.get("position", 0),
            created_at=_parse(data["createdAt"]),
            completed_at=_parse(data.get("completedAt")),
            rollovers=data.get("rollovers", 0),
            last_rollover_date=_parse(data.get("lastRolloverDate")),
            generated_from=data.get("generatedFrom"),
        )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def validate_title(title: str | None) -> str:
    """Strip a title, rejecting blank ones."""
    if title is None or not title.strip():
        raise ValidationFailure("Title is required")
    return title.strip()


def _require_pending(task: Task, action: str) -> None:
    if not task.is_pending:
        raise ValidationFailure(f"Cannot {action} a {task.status.value} task")


# ============== Status transitions ==============


def complete(task: Task, now: datetime) -> Task:
    """pending -> completed."""
    _require_pending(task, "complete")
    task.status = TaskStatus.COMPLETED
    task.completed_at = now
    return task


def archive(task: Task) -> Task:
    """pending -> archived."""
    _require_pending(task, "archive")
    task.status = TaskStatus.ARCHIVED
    return task


def restore(task: Task, scheduled_for: datetime, position: int) -> Task:
    """completed|archived -> pending, placed on the given day."""
    if task.is_pending:
        raise ValidationFailure("Task is already pending")
    task.status = TaskStatus.PENDING
    task.completed_at = None
    task.scheduled_for = scheduled_for
    task.position = position
    return task


# ============== Date transitions ==============


def reschedule(
    task: Task,
    scheduled_for: datetime,
    position: int,
    rollover_at: datetime | None = None,
) -> Task:
    """
    Move a pending task onto a day.

    Pass `rollover_at` when the move resolves an overdue task during
    advancement; that counts as a rollover. Plain moves leave the count alone.
    """
    _require_pending(task, "reschedule")
    task.scheduled_for = scheduled_for
    task.position = position
    if rollover_at is not None:
        task.rollovers += 1
        task.last_rollover_date = rollover_at
    return task


def move_to_scratch(task: Task, position: int) -> Task:
    """Clear a pending task's date. Never counts as a rollover."""
    _require_pending(task, "move")
    task.scheduled_for = None
    task.position = position
    return task


# ============== Checklist ==============


def add_checklist_item(task: Task, text: str) -> Task:
    if not text or not text.strip():
        raise ValidationFailure("Checklist item text is required")
    task.checklist.append(ChecklistItem(text=text.strip()))
    return task


def _checklist_index(task: Task, index: int) -> int:
    if not 0 <= index < len(task.checklist):
        raise ValidationFailure(
            f"Checklist item {index} out of range (task has {len(task.checklist)} items)"
        )
    return index


def toggle_checklist_item(task: Task, index: int) -> Task:
    item = task.checklist[_checklist_index(task, index)]
    item.done = not item.done
    return task


def remove_checklist_item(task: Task, index: int) -> Task:
    del task.checklist[_checklist_index(task, index)]
    return task


def sort_overdue(tasks: list[Task]) -> list[Task]:
    """Oldest scheduled day first, then oldest created."""
    return sorted(tasks, key=lambda t: (t.scheduled_for, t.created_at))
