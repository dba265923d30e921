"""JogFile CLI - day planner."""

import json
import logging
import sys
from datetime import date, timedelta

import click

from .config import load_config
from .core.advancement import BulkAction, TaskAction, TemplateAction
from .core.dates import parse_date_key
from .core.errors import JogFileError, ValidationFailure
from .core.ordering import Direction
from .core.recurrence import DAY_NAMES, Daily, Interval, Monthly, Pattern, Weekly, Yearly
from .core.rollover import OverdueItem
from .core.tasks import Task
from .workflows import Planner, get_planner

DAY_ABBREVIATIONS = {name[:3].lower(): i for i, name in enumerate(DAY_NAMES)}


def _planner() -> Planner:
    return get_planner(load_config())


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _task_line(task: Task) -> str:
    checklist = ""
    if task.checklist:
        done = sum(1 for i in task.checklist if i.done)
        checklist = f" [{done}/{len(task.checklist)}]"
    rollovers = f" (rolled over {task.rollovers}x)" if task.rollovers else ""
    return f"  {task.id}  {task.title}{checklist}{rollovers}"


def _serialize_task(t: Task) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "scheduled_for": t.scheduled_for.isoformat() if t.scheduled_for else None,
        "position": t.position,
        "rollovers": t.rollovers,
        "checklist": [{"text": i.text, "done": i.done} for i in t.checklist],
    }


@click.group()
@click.version_option(package_name="jogfile")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """JogFile - day planner with recurring prompts."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def today(as_json: bool):
    """Show today's tasks, later tasks and the scratch pad."""
    try:
        planner = _planner()
        queue = planner.collect()
        if not queue.is_empty:
            if as_json:
                click.echo(json.dumps({"needs_advancement": len(queue)}))
            else:
                click.echo(f"{len(queue)} item(s) need attention first. Run 'jogfile advance'.")
            return
        view = planner.day_view()
    except JogFileError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "date": view.window.key.isoformat(),
                    "today": [_serialize_task(t) for t in view.today],
                    "later": [_serialize_task(t) for t in view.later],
                    "scratch_pad": [_serialize_task(t) for t in view.scratch_pad],
                },
                indent=2,
            )
        )
        return

    click.echo(f"### {view.window.key.strftime('%A, %B %d')}")
    if view.today:
        for task in view.today:
            click.echo(_task_line(task))
    else:
        click.echo("  Nothing scheduled for today.")

    if view.later:
        click.echo("\n### Later")
        for task in view.later:
            click.echo(f"{_task_line(task)}  ({task.scheduled_for.date().isoformat()})")

    if view.scratch_pad:
        click.echo("\n### Scratch Pad")
        for task in view.scratch_pad:
            click.echo(_task_line(task))


@main.command()
@click.argument("title")
@click.option("--date", "-d", "target_date", default=None, help="Day to schedule on (YYYY-MM-DD)")
@click.option("--scratch", is_flag=True, help="Put on the scratch pad (no date)")
@click.option("--description", default="", help="Longer description")
@click.option("--url", default="", help="Quick-action URL")
def add(title: str, target_date: str | None, scratch: bool, description: str, url: str):
    """Add a task (today by default)."""
    try:
        day = parse_date_key(target_date) if target_date else None
        task = _planner().create_task(title, description=description, url=url, day=day, scratch=scratch)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Added {task.id}: {task.title}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Mark a task completed."""
    try:
        task = _planner().complete_task(task_id)
    except JogFileError as e:
        _fail(e)
    click.echo(f"✓ {task.title}")


@main.command("archive")
@click.argument("task_id")
def archive_cmd(task_id: str):
    """Archive a task."""
    try:
        task = _planner().archive_task(task_id)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Archived {task.title}")


@main.command()
@click.argument("task_id")
def restore(task_id: str):
    """Bring a completed or archived task back onto today."""
    try:
        task = _planner().restore_task(task_id)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Restored {task.title}")


@main.command()
@click.argument("task_id")
@click.option("--today", "to_today", is_flag=True, help="Move to today")
@click.option("--tomorrow", is_flag=True, help="Move to tomorrow")
@click.option("--date", "-d", "target_date", default=None, help="Move to a day (YYYY-MM-DD)")
@click.option("--scratch", is_flag=True, help="Move to the scratch pad")
def move(task_id: str, to_today: bool, tomorrow: bool, target_date: str | None, scratch: bool):
    """Move a pending task to another day or the scratch pad."""
    if sum([to_today, tomorrow, target_date is not None, scratch]) != 1:
        _fail(ValidationFailure("Pick exactly one of --today, --tomorrow, --date, --scratch"))

    try:
        planner = _planner()
        current = planner.calendar.today()
        if scratch:
            day = None
        elif to_today:
            day = current
        elif tomorrow:
            day = current + timedelta(days=1)
        else:
            day = parse_date_key(target_date)
        task = planner.move_task(task_id, day)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Moved {task.title} to {day.isoformat() if day else 'scratch pad'}")


def _swap(task_id: str, direction: Direction) -> None:
    try:
        partner = _planner().swap_task(task_id, direction)
    except JogFileError as e:
        _fail(e)
    if partner is None:
        click.echo(f"Already at the {'top' if direction == Direction.UP else 'bottom'}.")
    else:
        click.echo(f"Swapped with {partner.title}")


@main.command()
@click.argument("task_id")
def up(task_id: str):
    """Move a task up within its day."""
    _swap(task_id, Direction.UP)


@main.command()
@click.argument("task_id")
def down(task_id: str):
    """Move a task down within its day."""
    _swap(task_id, Direction.DOWN)


@main.command()
@click.argument("task_id")
@click.argument("index", type=int, required=False)
@click.option("--add", "text", default=None, help="Add a checklist item")
@click.option("--remove", is_flag=True, help="Remove the item at INDEX")
def check(task_id: str, index: int | None, text: str | None, remove: bool):
    """Toggle, add or remove checklist items (INDEX counts from 1)."""
    try:
        planner = _planner()
        if text is not None:
            task = planner.add_checklist_item(task_id, text)
        elif index is None:
            task = planner.get_task(task_id)
        elif remove:
            task = planner.remove_checklist_item(task_id, index - 1)
        else:
            task = planner.toggle_checklist_item(task_id, index - 1)
    except JogFileError as e:
        _fail(e)

    click.echo(task.title)
    for i, item in enumerate(task.checklist, start=1):
        click.echo(f"  {i}. [{'x' if item.done else ' '}] {item.text}")


# ============== Advancement ==============


def _prompt_date(today: date) -> date:
    while True:
        raw = click.prompt("Date (YYYY-MM-DD)", default=(today + timedelta(days=1)).isoformat())
        try:
            return parse_date_key(raw)
        except ValidationFailure as e:
            click.echo(f"Error: {e}", err=True)


@main.command()
@click.option("--bankrupt", is_flag=True, help="Archive every overdue task")
@click.option("--best-guess", is_flag=True, help="Move every overdue task to today")
def advance(bankrupt: bool, best_guess: bool):
    """Resolve overdue tasks and due recurring prompts, one at a time."""
    if bankrupt and best_guess:
        _fail(ValidationFailure("Pick at most one of --bankrupt, --best-guess"))

    try:
        planner = _planner()
        if bankrupt or best_guess:
            action = BulkAction.ARCHIVE_ALL if bankrupt else BulkAction.RESCHEDULE_ALL_TO_TODAY
            resolved = planner.resolve_bulk(action)
            click.echo(f"{action.value}: {len(resolved)} task(s)")

        while True:
            # Re-collect after every step; the stores hold all progress
            queue = planner.collect()
            item = queue.head()
            if item is None:
                click.echo("All caught up.")
                return

            click.echo(f"\n[{len(queue)} left]")
            if isinstance(item, OverdueItem):
                task = item.task
                click.echo(f"Overdue since {task.scheduled_for.date().isoformat()}: {task.title}")
                choices = [a.value for a in TaskAction] + [a.value for a in BulkAction] + ["quit"]
                choice = click.prompt("Action", type=click.Choice(choices), default=TaskAction.MOVE_TO_TODAY.value)
                if choice == "quit":
                    return
                if choice in {a.value for a in BulkAction}:
                    resolved = planner.resolve_bulk(BulkAction(choice))
                    click.echo(f"{choice}: {len(resolved)} task(s)")
                    continue
                action = TaskAction(choice)
                target = _prompt_date(queue.today.key) if action.needs_date else None
                try:
                    planner.resolve_task(task.id, action, target=target)
                except ValidationFailure as e:
                    click.echo(f"Error: {e}", err=True)
            else:
                template = item.template
                click.echo(f"Recurring: {template.title}")
                choices = [a.value for a in TemplateAction] + ["quit"]
                choice = click.prompt("Action", type=click.Choice(choices), default=TemplateAction.GENERATE_TODAY.value)
                if choice == "quit":
                    return
                action = TemplateAction(choice)
                target = _prompt_date(queue.today.key) if action.needs_date else None
                try:
                    planner.resolve_template(template.id, action, target=target)
                except ValidationFailure as e:
                    click.echo(f"Error: {e}", err=True)
    except JogFileError as e:
        _fail(e)


# ============== Recurring templates ==============


def _parse_days(value: str) -> frozenset[int]:
    days = set()
    for part in value.split(","):
        part = part.strip().lower()
        if not part:
            continue
        if part.isdigit():
            days.add(int(part))
        elif part[:3] in DAY_ABBREVIATIONS:
            days.add(DAY_ABBREVIATIONS[part[:3]])
        else:
            raise ValidationFailure(f"Unknown day of week: {part!r}")
    return frozenset(days)


def _pattern_from_options(
    weekly: str | None,
    every: int,
    monthly: int | None,
    yearly: str | None,
    interval: int | None,
    anchor: str | None,
) -> Pattern:
    chosen = [o for o in (weekly, monthly, yearly, interval) if o is not None]
    if len(chosen) > 1:
        raise ValidationFailure("Pick one of --weekly, --monthly, --yearly, --interval")

    anchor_day = parse_date_key(anchor) if anchor else None
    if weekly is not None:
        return Weekly(days_of_week=_parse_days(weekly), interval=every, anchor=anchor_day)
    if monthly is not None:
        return Monthly(day_of_month=monthly)
    if yearly is not None:
        month, _, day = yearly.partition("-")
        try:
            return Yearly(month=int(month), day=int(day))
        except ValueError:
            raise ValidationFailure(f"Yearly date must be MM-DD, got {yearly!r}")
    if interval is not None:
        if anchor_day is None:
            raise ValidationFailure("--interval needs --anchor")
        return Interval(days=interval, anchor=anchor_day)
    return Daily()


@main.group()
def recurring():
    """Manage recurring templates."""
    pass


@recurring.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def recurring_list(as_json: bool):
    """List templates with their next occurrence."""
    try:
        upcoming = _planner().upcoming_templates()
    except JogFileError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": u.template.id,
                        "title": u.template.title,
                        "pattern": u.description,
                        "active": u.template.is_active,
                        "paused_until": u.template.paused_until.isoformat() if u.template.paused_until else None,
                        "next": u.next_date.isoformat() if u.next_date else None,
                    }
                    for u in upcoming
                ],
                indent=2,
            )
        )
        return

    if not upcoming:
        click.echo("No recurring templates.")
        return

    for u in upcoming:
        nxt = u.next_date.isoformat() if u.next_date else "never"
        paused = f", paused until {u.template.paused_until}" if u.template.paused_until else ""
        click.echo(f"  {u.template.id}  {u.template.title} ({u.description}{paused}) next: {nxt}")


@recurring.command("add")
@click.argument("title")
@click.option("--weekly", default=None, help="Days of week, e.g. mon,thu")
@click.option("--every", default=1, type=int, help="Every N weeks (with --weekly)")
@click.option("--monthly", default=None, type=int, help="Day of month, -1 for the last day")
@click.option("--yearly", default=None, help="Month and day, MM-DD")
@click.option("--interval", default=None, type=int, help="Every N days (needs --anchor)")
@click.option("--anchor", default=None, help="Anchor date for --every/--interval (YYYY-MM-DD)")
@click.option("--description", default="", help="Longer description")
@click.option("--url", default="", help="Quick-action URL")
def recurring_add(
    title: str,
    weekly: str | None,
    every: int,
    monthly: int | None,
    yearly: str | None,
    interval: int | None,
    anchor: str | None,
    description: str,
    url: str,
):
    """Add a template (daily unless a pattern option is given)."""
    try:
        pattern = _pattern_from_options(weekly, every, monthly, yearly, interval, anchor)
        template = _planner().create_template(title, pattern, description=description, url=url)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Added {template.id}: {template.title}")


@recurring.command("delete")
@click.argument("template_id")
def recurring_delete(template_id: str):
    """Delete a template."""
    try:
        _planner().delete_template(template_id)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Deleted {template_id}")


@recurring.command("pause")
@click.argument("template_id")
@click.argument("until")
def recurring_pause(template_id: str, until: str):
    """Pause a template until a date (YYYY-MM-DD)."""
    try:
        template = _planner().pause_template(template_id, parse_date_key(until))
    except JogFileError as e:
        _fail(e)
    click.echo(f"Paused {template.title} until {template.paused_until}")


@recurring.command("resume")
@click.argument("template_id")
def recurring_resume(template_id: str):
    """Resume a paused or deactivated template."""
    try:
        template = _planner().resume_template(template_id)
    except JogFileError as e:
        _fail(e)
    click.echo(f"Resumed {template.title}")


if __name__ == "__main__":
    main()
