"""Tests for the command-line interface."""

import json
from datetime import date, timedelta
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from jogfile.cli import _parse_days, _pattern_from_options, main
from jogfile.config import Config
from jogfile.core.errors import ValidationFailure
from jogfile.core.recurrence import Daily, Interval, Monthly, Weekly, Yearly
from jogfile.workflows import get_planner


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=tmp_path)


@pytest.fixture
def planner(config):
    return get_planner(config)


@pytest.fixture
def run(config):
    """Invoke the CLI against a temporary data directory."""
    runner = CliRunner()

    def _run(*args, input=None):
        with patch("jogfile.cli.load_config", return_value=config):
            return runner.invoke(main, list(args), input=input)

    return _run


def added_id(result) -> str:
    # "Added <id>: <title>"
    return result.output.split()[1].rstrip(":")


class TestToday:
    def test_empty(self, run):
        result = run("today")
        assert result.exit_code == 0
        assert "Nothing scheduled for today." in result.output

    def test_sections(self, run, planner):
        tomorrow = planner.calendar.today() + timedelta(days=1)
        run("add", "Today thing")
        run("add", "Later thing", "--date", tomorrow.isoformat())
        run("add", "Someday thing", "--scratch")

        result = run("today")
        assert result.exit_code == 0
        assert "Today thing" in result.output
        assert "### Later" in result.output
        assert "### Scratch Pad" in result.output

    def test_json(self, run):
        run("add", "Today thing")
        data = json.loads(run("today", "--json").output)
        assert [t["title"] for t in data["today"]] == ["Today thing"]
        assert data["scratch_pad"] == []

    def test_blocked_by_overdue(self, run, planner):
        yesterday = planner.calendar.today() - timedelta(days=1)
        planner.create_task("Old", day=yesterday)
        result = run("today")
        assert "1 item(s) need attention first" in result.output

    def test_blocked_json_stays_json(self, run, planner):
        yesterday = planner.calendar.today() - timedelta(days=1)
        planner.create_task("Old", day=yesterday)
        result = run("today", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output) == {"needs_advancement": 1}


class TestTaskCommands:
    def test_add_and_done(self, run, planner):
        result = run("add", "Buy milk")
        assert result.exit_code == 0
        task_id = added_id(result)

        result = run("done", task_id)
        assert result.output.strip() == "✓ Buy milk"
        assert planner.day_view().today == []

    def test_add_blank_title(self, run):
        result = run("add", "  ")
        assert result.exit_code == 1
        assert "Title is required" in result.output

    def test_add_bad_date(self, run):
        result = run("add", "Thing", "--date", "tomorrow")
        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_unknown_task(self, run):
        result = run("done", "missing")
        assert result.exit_code == 1
        assert "Task not found: missing" in result.output

    def test_archive_and_restore(self, run, planner):
        task_id = added_id(run("add", "Maybe"))
        assert "Archived Maybe" in run("archive", task_id).output
        assert planner.day_view().today == []
        assert "Restored Maybe" in run("restore", task_id).output
        assert [t.title for t in planner.day_view().today] == ["Maybe"]

    def test_move(self, run, planner):
        task_id = added_id(run("add", "Movable"))
        result = run("move", task_id, "--scratch")
        assert "Moved Movable to scratch pad" in result.output
        assert planner.get_task(task_id).scheduled_for is None

        result = run("move", task_id, "--tomorrow")
        assert result.exit_code == 0
        assert planner.get_task(task_id).scheduled_for is not None

    def test_move_needs_one_target(self, run):
        task_id = added_id(run("add", "Movable"))
        result = run("move", task_id, "--today", "--scratch")
        assert result.exit_code == 1
        assert "exactly one" in result.output

    def test_up_and_down(self, run, planner):
        first = added_id(run("add", "First"))
        second = added_id(run("add", "Second"))

        assert "Already at the top." in run("up", first).output
        assert "Swapped with First" in run("up", second).output
        assert [t.title for t in planner.day_view().today] == ["Second", "First"]
        assert "Already at the bottom." in run("down", first).output

    def test_checklist(self, run, planner):
        task_id = added_id(run("add", "Groceries"))
        run("check", task_id, "--add", "eggs")
        run("check", task_id, "--add", "milk")
        result = run("check", task_id, "2")
        assert "2. [x] milk" in result.output

        run("check", task_id, "1", "--remove")
        assert [i.text for i in planner.get_task(task_id).checklist] == ["milk"]

    def test_checklist_bad_index(self, run):
        task_id = added_id(run("add", "Groceries"))
        result = run("check", task_id, "3")
        assert result.exit_code == 1
        assert "out of range" in result.output


class TestAdvance:
    def test_nothing_to_do(self, run):
        result = run("advance")
        assert "All caught up." in result.output

    def test_walks_items_in_order(self, run, planner):
        yesterday = planner.calendar.today() - timedelta(days=1)
        task = planner.create_task("Old", day=yesterday)
        template = planner.create_template("Stretch", Daily())

        result = run("advance", input="today\nskip\n")
        assert result.exit_code == 0
        assert "Overdue since" in result.output
        assert "Recurring: Stretch" in result.output
        assert "All caught up." in result.output

        assert planner.get_task(task.id).rollovers == 1
        assert planner.get_template(template.id).last_generated_for == planner.calendar.today()

    def test_quit_keeps_progress(self, run, planner):
        yesterday = planner.calendar.today() - timedelta(days=1)
        planner.create_task("First", day=yesterday)
        planner.create_task("Second", day=yesterday)

        run("advance", input="complete\nquit\n")
        assert len(planner.collect()) == 1

    def test_bankrupt(self, run, planner):
        yesterday = planner.calendar.today() - timedelta(days=1)
        for i in range(3):
            planner.create_task(f"Old {i}", day=yesterday)

        result = run("advance", "--bankrupt")
        assert "bankrupt: 3 task(s)" in result.output
        assert "All caught up." in result.output
        assert planner.collect().is_empty

    def test_bankrupt_and_best_guess_conflict(self, run, planner):
        yesterday = planner.calendar.today() - timedelta(days=1)
        task = planner.create_task("Old", day=yesterday)

        result = run("advance", "--bankrupt", "--best-guess")
        assert result.exit_code == 1
        assert "at most one" in result.output
        assert planner.get_task(task.id).is_pending

    def test_defer_prompts_for_date(self, run, planner):
        today = planner.calendar.today()
        task = planner.create_task("Old", day=today - timedelta(days=1))
        target = today + timedelta(days=3)

        run("advance", input=f"defer\n{target.isoformat()}\n")
        assert planner.calendar.day_key(planner.get_task(task.id).scheduled_for) == target


class TestRecurringCommands:
    def test_add_and_list(self, run):
        run("recurring", "add", "Gym", "--weekly", "mon,thu")
        run("recurring", "add", "Rent", "--monthly", "1")

        data = json.loads(run("recurring", "list", "--json").output)
        assert {d["title"]: d["pattern"] for d in data} == {
            "Gym": "Every Monday, Thursday",
            "Rent": "Monthly on day 1",
        }

    def test_add_ambiguous(self, run):
        result = run("recurring", "add", "Biweekly", "--weekly", "mon", "--every", "2")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_pause_resume_delete(self, run, planner):
        template_id = added_id(run("recurring", "add", "Daily"))
        until = planner.calendar.today() + timedelta(days=7)

        assert "Paused Daily" in run("recurring", "pause", template_id, until.isoformat()).output
        assert planner.get_template(template_id).paused_until == until
        assert "Resumed Daily" in run("recurring", "resume", template_id).output
        assert planner.get_template(template_id).paused_until is None

        assert run("recurring", "delete", template_id).exit_code == 0
        assert run("recurring", "list").output.strip() == "No recurring templates."


class TestPatternOptions:
    def test_parse_days(self):
        assert _parse_days("mon, Thursday,0") == frozenset({1, 4, 0})

    def test_parse_unknown_day(self):
        with pytest.raises(ValidationFailure):
            _parse_days("funday")

    @pytest.mark.parametrize(
        "options,expected",
        [
            ((None, 1, None, None, None, None), Daily()),
            (("tue", 2, None, None, None, "2026-01-06"), Weekly(days_of_week={2}, interval=2, anchor=date(2026, 1, 6))),
            ((None, 1, -1, None, None, None), Monthly(day_of_month=-1)),
            ((None, 1, None, "07-04", None, None), Yearly(month=7, day=4)),
            ((None, 1, None, None, 3, "2026-01-05"), Interval(days=3, anchor=date(2026, 1, 5))),
        ],
    )
    def test_patterns(self, options, expected):
        assert _pattern_from_options(*options) == expected

    def test_interval_needs_anchor(self):
        with pytest.raises(ValidationFailure, match="--anchor"):
            _pattern_from_options(None, 1, None, None, 3, None)

    def test_only_one_pattern(self):
        with pytest.raises(ValidationFailure):
            _pattern_from_options("mon", 1, 5, None, None, None)
