"""Task store interface."""

from datetime import datetime
from typing import Protocol

from jogfile.core.ordering import Bucket
from jogfile.core.tasks import Task, TaskFields


class TaskStore(Protocol):
    """Interface for reading and writing tasks in any backend."""

    def find_pending_by_date_range(self, start: datetime, end: datetime | None) -> list[Task]:
        """Pending tasks scheduled in [start, end), ordered by position. No end = open-ended."""
        ...

    def find_pending_with_no_date(self) -> list[Task]:
        """Pending scratch pad tasks, ordered by position."""
        ...

    def find_pending_overdue(self, before: datetime) -> list[Task]:
        """Pending tasks scheduled before an instant, oldest scheduled then oldest created."""
        ...

    def find_by_id(self, task_id: str) -> Task | None:
        """Fetch a task. Returns None if not found."""
        ...

    def create(self, fields: TaskFields) -> Task:
        """Create a pending task and return it with its assigned id."""
        ...

    def save(self, task: Task) -> None:
        """Persist changes to an existing task."""
        ...

    def save_all(self, tasks: list[Task]) -> None:
        """Persist several tasks as one unit: all writes apply or none do."""
        ...

    def find_max_position_in_bucket(self, bucket: Bucket) -> int | None:
        """Highest position among pending tasks in a bucket, or None if it is empty."""
        ...
