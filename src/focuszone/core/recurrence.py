"""Pure recurrence expansion logic - no I/O dependencies."""

from datetime import date, datetime, timedelta

from .tasks import (
    RepeatRule,
    Task,
    TaskStatus,
    copy_task,
    sort_by_start,
    virtual_task_id,
)


def should_include(template: Task, target_date: date) -> bool:
    """
    Decide whether a repeating template has a virtual occurrence on a date.

    The template's own start day is never included: that day is covered by
    the stored task itself.
    """
    start_day = template.start_time.date()
    if target_date <= start_day:
        return False

    match template.repeat_rule:
        case RepeatRule.DAILY:
            return True
        case RepeatRule.WEEKLY:
            return target_date.weekday() == start_day.weekday()
        case RepeatRule.MONTHLY:
            return target_date.day == start_day.day
        case _:
            return False


def create_virtual_task(template: Task, target_date: date) -> Task:
    """Synthesize the occurrence of a template on a date."""
    return Task(
        id=virtual_task_id(template.id, target_date),
        title=template.title,
        start_time=datetime.combine(target_date, template.time_of_day),
        duration_minutes=template.duration_minutes,
        icon=template.icon,
        color=template.color,
        is_completed=False,
        task_type=template.task_type,
        status=TaskStatus.SCHEDULED,
        repeat_rule=RepeatRule.NONE,
        parent_task_id=template.id,
        is_generated_from_repeat=True,
    )


def find_cancellation(template_id: str, target_date: date, tasks: list[Task]) -> Task | None:
    """Find the tombstone cancelling a template's occurrence on a date."""
    for t in tasks:
        if (
            t.parent_task_id == template_id
            and t.start_time.date() == target_date
            and t.status == TaskStatus.CANCELLED
        ):
            return t
    return None


def is_cancelled_on(template_id: str, target_date: date, tasks: list[Task]) -> bool:
    return find_cancellation(template_id, target_date, tasks) is not None


def find_matching_actual(template: Task, target_date: date, actual: list[Task]) -> Task | None:
    """
    Find a stored task that already stands in for a template's occurrence.

    Matches on same title and time of day, or on a persisted child of the
    template for that date.
    """
    hm = (template.start_time.hour, template.start_time.minute)
    for t in actual:
        if t.start_time.date() != target_date:
            continue
        if t.parent_task_id == template.id:
            return t
        if t.title == template.title and (t.start_time.hour, t.start_time.minute) == hm:
            return t
    return None


def make_tombstone(occurrence: Task) -> Task:
    """
    Build the cancellation record for one occurrence of a repeating task.

    The tombstone shares the parent reference and is pinned to the
    occurrence's start time.
    """
    return copy_task(
        occurrence,
        status=TaskStatus.CANCELLED,
        is_completed=False,
        is_generated_from_repeat=True,
        repeat_rule=RepeatRule.NONE,
    )


def resolve_occurrences(templates: list[Task], target_date: date) -> list[Task]:
    """
    Resolve the effective task list for a date.

    Stored tasks on the date are kept as-is; repeating templates contribute
    virtual occurrences unless a stored task or a tombstone already covers
    that date. Result is sorted by start time, stored before virtual on ties.

    Pure function - no I/O.
    """
    actual = [
        t for t in templates
        if t.start_time.date() == target_date and not t.is_generated_from_repeat
    ]
    sources = [
        t for t in templates
        if t.repeat_rule.repeats and not t.is_generated_from_repeat
    ]

    virtual = []
    for template in sources:
        if not should_include(template, target_date):
            continue
        if find_matching_actual(template, target_date, actual):
            continue
        if is_cancelled_on(template.id, target_date, templates):
            continue
        virtual.append(create_virtual_task(template, target_date))

    return sort_by_start(actual + virtual)


def resolve_range(templates: list[Task], start_date: date, days: int) -> dict[date, list[Task]]:
    """Resolve each day in [start_date, start_date + days) independently."""
    return {
        start_date + timedelta(days=i): resolve_occurrences(templates, start_date + timedelta(days=i))
        for i in range(max(0, days))
    }


def collect_descendants(root_id: str, tasks: list[Task]) -> list[Task]:
    """
    All tasks descending from root_id through parent references.

    Order is breadth-first; cycles in stored data are ignored.
    """
    children_of: dict[str, list[Task]] = {}
    for t in tasks:
        if t.parent_task_id:
            children_of.setdefault(t.parent_task_id, []).append(t)

    seen = {root_id}
    result = []
    queue = [root_id]
    while queue:
        current = queue.pop(0)
        for child in children_of.get(current, []):
            if child.id in seen:
                continue
            seen.add(child.id)
            result.append(child)
            queue.append(child.id)
    return result


def future_children(template_id: str, from_time: datetime, tasks: list[Task]) -> list[Task]:
    """Direct children of a template starting at or after from_time."""
    return [
        t for t in tasks
        if t.parent_task_id == template_id and t.start_time >= from_time
    ]
