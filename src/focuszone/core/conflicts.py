"""Pure scheduling conflict detection - no I/O dependencies."""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from .tasks import Task

MIN_BUFFER = timedelta(minutes=5)


class ConflictType(Enum):
    TIME_OVERLAP = "time_overlap"
    NO_BUFFER = "no_buffer"


class ConflictSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class TaskConflict:
    """A scheduling problem between a task and another one."""

    type: ConflictType
    severity: ConflictSeverity
    message: str
    conflicting_task_id: str
    conflicting_task_title: str


def _candidates(task: Task, tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if t.id != task.id and not t.is_cancelled]


def check_overlap(task: Task, tasks: list[Task]) -> TaskConflict | None:
    """First task whose span overlaps this one."""
    for other in _candidates(task, tasks):
        if not task.overlaps(other.start_time, other.end_time):
            continue

        if task.start_time == other.start_time:
            severity = ConflictSeverity.CRITICAL
            message = f"Starts at same time as '{other.title}'"
        elif task.start_time < other.start_time:
            severity = ConflictSeverity.HIGH
            message = f"Overlaps with '{other.title}'"
        else:
            severity = ConflictSeverity.MEDIUM
            message = f"Overlaps with '{other.title}'"

        return TaskConflict(
            type=ConflictType.TIME_OVERLAP,
            severity=severity,
            message=message,
            conflicting_task_id=other.id,
            conflicting_task_title=other.title,
        )
    return None


def check_buffer(task: Task, tasks: list[Task]) -> TaskConflict | None:
    """First task ending less than five minutes from this one's start."""
    for other in _candidates(task, tasks):
        between = abs(task.start_time - other.end_time)
        if timedelta(0) < between < MIN_BUFFER:
            minutes = int(between.total_seconds() / 60)
            return TaskConflict(
                type=ConflictType.NO_BUFFER,
                severity=ConflictSeverity.LOW,
                message=f"Only {minutes}m buffer with '{other.title}'",
                conflicting_task_id=other.id,
                conflicting_task_title=other.title,
            )
    return None


def detect_conflicts(task: Task, tasks: list[Task]) -> list[TaskConflict]:
    """
    Find conflicts for a task within a day's task list.

    Pure function - no I/O.
    """
    conflicts = []
    overlap = check_overlap(task, tasks)
    if overlap:
        conflicts.append(overlap)
    buffer = check_buffer(task, tasks)
    if buffer:
        conflicts.append(buffer)
    return conflicts
