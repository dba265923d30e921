"""Tests for rollover collection."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from jogfile.core.dates import LogicalCalendar
from jogfile.core.recurrence import Daily, Monthly, RecurringTemplate
from jogfile.core.rollover import DueTemplateItem, OverdueItem, build_rollover
from jogfile.core.tasks import Task, TaskStatus

LA = ZoneInfo("America/Los_Angeles")


@pytest.fixture
def calendar():
    return LogicalCalendar(timezone="America/Los_Angeles", day_start_hour=3)


@pytest.fixture
def today(calendar):
    return calendar.day_window(datetime(2026, 1, 22, 10, tzinfo=LA))


@pytest.fixture
def make_task(today):
    def _make(task_id, scheduled_for, status=TaskStatus.PENDING, created_at=None) -> Task:
        return Task(
            id=task_id,
            title=f"Task {task_id}",
            scheduled_for=scheduled_for,
            created_at=created_at or today.start - timedelta(days=30),
            status=status,
        )

    return _make


class TestOverdue:
    def test_only_pending_before_window_start(self, make_task, today):
        tasks = [
            make_task("old", today.start - timedelta(days=2)),
            make_task("just-before", today.start - timedelta(seconds=1)),
            make_task("at-start", today.start),
            make_task("today", today.midpoint),
            make_task("scratch", None),
            make_task("done", today.start - timedelta(days=1), status=TaskStatus.COMPLETED),
            make_task("archived", today.start - timedelta(days=1), status=TaskStatus.ARCHIVED),
        ]
        queue = build_rollover(tasks, [], today)
        assert [t.id for t in queue.overdue_tasks] == ["old", "just-before"]

    def test_task_at_2am_belongs_to_yesterday(self, make_task, today):
        # 02:00 on the 22nd is still the logical 21st
        task = make_task("late-night", datetime(2026, 1, 22, 2, tzinfo=LA))
        assert build_rollover([task], [], today).overdue_tasks == [task]

    def test_ordered_by_schedule_then_creation(self, make_task, today):
        day = today.start - timedelta(days=1)
        tasks = [
            make_task("b", day, created_at=today.start - timedelta(days=3)),
            make_task("c", today.start - timedelta(days=5)),
            make_task("a", day, created_at=today.start - timedelta(days=7)),
        ]
        queue = build_rollover(tasks, [], today)
        assert [t.id for t in queue.overdue_tasks] == ["c", "a", "b"]


class TestDueTemplates:
    def test_due_and_unresolved(self, today):
        template = RecurringTemplate(id="r1", title="Daily", pattern=Daily())
        assert build_rollover([], [template], today).due_templates == [template]

    def test_resolved_today_is_excluded(self, today):
        template = RecurringTemplate(
            id="r1", title="Daily", pattern=Daily(), last_generated_for=today.key
        )
        assert build_rollover([], [template], today).due_templates == []

    def test_resolved_yesterday_is_due_again(self, today):
        template = RecurringTemplate(
            id="r1", title="Daily", pattern=Daily(), last_generated_for=today.key - timedelta(days=1)
        )
        assert build_rollover([], [template], today).due_templates == [template]

    def test_not_due_today(self, today):
        template = RecurringTemplate(id="r1", title="Monthly", pattern=Monthly(day_of_month=1))
        assert build_rollover([], [template], today).due_templates == []

    def test_uses_logical_day_key(self, calendar):
        # 01:00 on Feb 1 is still the logical January 31
        window = calendar.day_window(datetime(2026, 2, 1, 1, tzinfo=LA))
        template = RecurringTemplate(id="r1", title="Month end", pattern=Monthly(day_of_month=-1))
        assert window.key == date(2026, 1, 31)
        assert build_rollover([], [template], window).due_templates == [template]


class TestQueue:
    def test_empty(self, today):
        queue = build_rollover([], [], today)
        assert queue.is_empty
        assert queue.head() is None
        assert len(queue) == 0

    def test_tasks_before_templates(self, make_task, today):
        task = make_task("t", today.start - timedelta(days=1))
        template = RecurringTemplate(id="r1", title="Daily", pattern=Daily())
        queue = build_rollover([task], [template], today)
        assert queue.items() == [OverdueItem(task), DueTemplateItem(template)]
        assert queue.head() == OverdueItem(task)
        assert len(queue) == 2
        assert not queue.is_empty
