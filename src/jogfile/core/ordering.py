"""Position ordering within a day bucket or the scratch pad."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .dates import DayWindow, LogicalCalendar
from .tasks import Task


class Direction(Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Bucket:
    """
    Group of pending tasks sharing a logical day, or the scratch pad.

    `key` is None for the scratch pad, otherwise the logical date; `window`
    is the matching day window.
    """

    key: date | None
    window: DayWindow | None = None

    @classmethod
    def scratch(cls) -> "Bucket":
        return cls(key=None)

    @classmethod
    def for_window(cls, window: DayWindow) -> "Bucket":
        return cls(key=window.key, window=window)

    @property
    def is_scratch(self) -> bool:
        return self.key is None

    def label(self) -> str:
        return "scratch" if self.key is None else self.key.isoformat()

    def holds(self, scheduled_for: datetime | None) -> bool:
        if self.window is None:
            return scheduled_for is None
        return scheduled_for is not None and self.window.contains(scheduled_for)


def bucket_of(task: Task, calendar: LogicalCalendar) -> Bucket:
    """Bucket a task belongs to, from the day window of its scheduled instant."""
    if task.scheduled_for is None:
        return Bucket.scratch()
    return Bucket.for_window(calendar.day_window(task.scheduled_for))


def next_position(max_position: int | None) -> int:
    """Position for a task appended to a bucket: 0 when empty, else max + 1."""
    if max_position is None:
        return 0
    return max_position + 1


def find_swap_partner(task: Task, siblings: list[Task], direction: Direction) -> Task | None:
    """
    Nearest pending sibling strictly above (UP) or below (DOWN) a task.

    Pure function - no I/O. `siblings` are the pending tasks in the task's bucket.
    """
    others = [t for t in siblings if t.id != task.id and t.is_pending]
    if direction == Direction.UP:
        above = [t for t in others if t.position < task.position]
        return max(above, key=lambda t: t.position, default=None)
    below = [t for t in others if t.position > task.position]
    return min(below, key=lambda t: t.position, default=None)


def swap_positions(a: Task, b: Task) -> tuple[Task, Task]:
    a.position, b.position = b.position, a.position
    return a, b


def sort_by_position(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: (t.position, t.created_at))
