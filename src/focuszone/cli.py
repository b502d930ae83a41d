"""FocusZone CLI - day timeline and break suggestions."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.json_store import JsonTaskStore
from .adapters.log_notifier import LoggingNotifier
from .config import load_config
from .core.breaks import BreakSuggestion, summarize
from .core.tasks import Task, TaskType, decode_repeat_rule, decode_task_type, new_task_id
from .timeline import TimelineService


def _service() -> TimelineService:
    config = load_config()
    return TimelineService(
        store=JsonTaskStore(config.tasks_path),
        notifier=LoggingNotifier(),
        config=config,
    )


def _parse_date(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        click.echo(f"Error: invalid date '{value}', expected YYYY-MM-DD", err=True)
        sys.exit(1)


def _find_or_exit(service: TimelineService, task_id: str, target: date) -> Task:
    task = service.find_task(task_id, target)
    if task is None:
        click.echo(f"Error: no task '{task_id}' on {target}", err=True)
        sys.exit(1)
    return task


def _task_line(task: Task) -> str:
    check = "x" if task.is_finished else " "
    repeat = f" ↻{task.repeat_rule.value}" if task.is_repeating else ""
    virtual = " (repeat)" if task.is_generated_from_repeat else ""
    icon = f"{task.icon} " if task.icon else ""
    return f"[{check}] {task.format_time_range()} {icon}{task.title}{repeat}{virtual}  {task.id[:8]}"


def _suggestion_line(s: BreakSuggestion) -> str:
    flag = "!" if s.is_high_priority else " "
    return (
        f"{flag} {s.suggested_start_time.strftime('%H:%M')} {s.icon} {s.type.display_name} "
        f"({s.suggested_duration} min) - {s.reason} [impact {s.impact_score:.0f}]"
    )


@click.group()
@click.version_option(package_name="focuszone")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """FocusZone - focus timeline and break planner."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def day(target_date: str | None, as_json: bool):
    """Show the tasks for a day, including repeating ones."""
    target = _parse_date(target_date)
    tasks = _service().load_day(target)

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(f"No tasks on {target.strftime('%A, %b %d')}.")
        return

    click.echo(f"{target.strftime('%A, %b %d')}\n")
    for task in tasks:
        click.echo(_task_line(task))


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="First day (YYYY-MM-DD), defaults to today")
@click.option("--days", default=7, show_default=True, help="Number of days")
def week(target_date: str | None, days: int):
    """Show tasks for several days."""
    start = _parse_date(target_date)
    for day_date, tasks in _service().load_range(start, days).items():
        click.echo(f"\n{day_date.strftime('%A, %b %d')}")
        if not tasks:
            click.echo("  (nothing scheduled)")
        for task in tasks:
            click.echo(f"  {_task_line(task)}")


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--all", "show_all", is_flag=True, help="Show every suggestion passing the quality gate")
@click.option("--stats", is_flag=True, help="Summarize suggestions instead of listing them")
@click.option("--after", "after_id", default=None, help="Only the break to take after this task")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def breaks(target_date: str | None, show_all: bool, stats: bool, after_id: str | None, as_json: bool):
    """Suggest breaks for a day."""
    target = _parse_date(target_date)
    service = _service()
    now = datetime.now()
    if after_id:
        suggestion = service.break_after_task(_find_or_exit(service, after_id, target), now)
        suggestions = [suggestion] if suggestion else []
    elif show_all:
        suggestions = service.break_suggestions(target, now)
    else:
        suggestions = service.top_suggestions(target, now)

    if stats:
        click.echo(summarize(suggestions).format())
        return

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in suggestions], indent=2))
        return

    if not suggestions:
        click.echo("No break suggestions right now.")
        return

    for suggestion in suggestions:
        click.echo(_suggestion_line(suggestion))


@main.command()
@click.argument("title")
@click.option("--start", "-s", required=True, help="Start time (YYYY-MM-DDTHH:MM)")
@click.option("--duration", "-m", default=30, show_default=True, help="Duration in minutes")
@click.option("--repeat", "-r", default="none",
              type=click.Choice(["none", "once", "daily", "weekly", "monthly"]), help="Repeat rule")
@click.option("--type", "-t", "task_type", default=None,
              type=click.Choice([t.value for t in TaskType]), help="Task category")
@click.option("--icon", default="", help="Icon shown next to the title")
def add(title: str, start: str, duration: int, repeat: str, task_type: str | None, icon: str):
    """Add a task."""
    try:
        start_time = datetime.fromisoformat(start)
    except ValueError:
        click.echo(f"Error: invalid start time '{start}'", err=True)
        sys.exit(1)

    kind = decode_task_type(task_type)
    now = datetime.now()
    task = Task(
        id=new_task_id(),
        title=title,
        start_time=start_time,
        duration_minutes=duration,
        icon=icon or (kind.icon if kind else ""),
        task_type=kind,
        repeat_rule=decode_repeat_rule(repeat),
        created_at=now,
        updated_at=now,
    )
    if not _service().add_task(task):
        click.echo("Error: could not save task", err=True)
        sys.exit(1)
    click.echo(f"✓ Added '{title}' at {start_time.strftime('%Y-%m-%d %H:%M')} ({task.id[:8]})")


@main.command()
@click.argument("task_id")
@click.option("--date", "-d", "target_date", default=None, help="Date of the occurrence (YYYY-MM-DD)")
def complete(task_id: str, target_date: str | None):
    """Mark a task (or one occurrence of a repeating task) done."""
    target = _parse_date(target_date)
    service = _service()
    task = _find_or_exit(service, task_id, target)
    if not service.complete_task(task):
        click.echo("Error: could not complete task", err=True)
        sys.exit(1)
    click.echo(f"✓ Completed '{task.title}'")


@main.command()
@click.argument("task_id")
@click.option("--date", "-d", "target_date", default=None, help="Date of the occurrence (YYYY-MM-DD)")
def duplicate(task_id: str, target_date: str | None):
    """Copy a task one hour later."""
    target = _parse_date(target_date)
    service = _service()
    task = _find_or_exit(service, task_id, target)
    copy = service.duplicate_task(task)
    if copy is None:
        click.echo("Error: could not duplicate task", err=True)
        sys.exit(1)
    click.echo(f"✓ Added '{copy.title}' at {copy.start_time.strftime('%H:%M')} ({copy.id[:8]})")


@main.command()
@click.argument("task_id")
@click.option("--date", "-d", "target_date", default=None, help="Date of the occurrence (YYYY-MM-DD)")
@click.option("--scope", default="instance", show_default=True,
              type=click.Choice(["instance", "all", "future"]), help="What to delete")
def delete(task_id: str, target_date: str | None, scope: str):
    """Delete a task, a whole series, or a series' future instances."""
    target = _parse_date(target_date)
    service = _service()
    task = _find_or_exit(service, task_id, target)

    match scope:
        case "all":
            ok = service.delete_all_instances(task)
        case "future":
            ok = service.delete_future_instances(task, datetime.combine(target, datetime.min.time()))
        case _:
            ok = service.delete_task(task)

    if not ok:
        click.echo("Error: could not delete task", err=True)
        sys.exit(1)
    click.echo(f"✓ Deleted '{task.title}' ({scope})")


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Date (YYYY-MM-DD), defaults to today")
def conflicts(target_date: str | None):
    """List scheduling conflicts for a day."""
    target = _parse_date(target_date)
    service = _service()
    tasks = service.load_day(target)

    found = False
    for task in tasks:
        for conflict in service.conflicts_for(task, target):
            found = True
            click.echo(f"{task.title} [{conflict.severity.value}]: {conflict.message}")

    if not found:
        click.echo("No conflicts.")


@main.command()
def snapshot():
    """Print the current/upcoming task summary as JSON."""
    click.echo(json.dumps(_service().day_snapshot().to_dict(), indent=2))


if __name__ == "__main__":
    main()
