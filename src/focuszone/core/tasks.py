"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum

# Namespace for deterministic virtual occurrence ids
VIRTUAL_NAMESPACE = uuid.UUID("6f1c3f0e-5b7a-4a52-9d43-0c6e2f6a9b11")


class RepeatRule(Enum):
    """How a task template repeats."""

    NONE = "none"
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def repeats(self) -> bool:
        """True for rules that produce virtual occurrences."""
        return self in (RepeatRule.DAILY, RepeatRule.WEEKLY, RepeatRule.MONTHLY)

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class TaskStatus(Enum):
    """Lifecycle state of a task."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskType(Enum):
    """Task category."""

    WORK = "work"
    EXERCISE = "exercise"
    STUDY = "study"
    RELAX = "relax"
    MEAL = "meal"
    SLEEP = "sleep"
    CUSTOM = "custom"

    @property
    def icon(self) -> str:
        icons = {
            TaskType.WORK: "💼",
            TaskType.EXERCISE: "🏃",
            TaskType.STUDY: "📚",
            TaskType.RELAX: "🧘",
            TaskType.MEAL: "🍽",
            TaskType.SLEEP: "🌙",
            TaskType.CUSTOM: "🛠",
        }
        return icons[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def _normalize(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def decode_repeat_rule(value: RepeatRule | str | None) -> RepeatRule:
    """Decode a stored repeat rule. Unknown values mean no repeat."""
    if isinstance(value, RepeatRule):
        return value
    try:
        return RepeatRule(_normalize(value))
    except ValueError:
        return RepeatRule.NONE


def decode_status(value: TaskStatus | str | None) -> TaskStatus:
    """Decode a stored status. Unknown values mean scheduled."""
    if isinstance(value, TaskStatus):
        return value
    normalized = _normalize(value).replace("-", "_")
    # "inProgress" from older records
    if normalized == "inprogress":
        normalized = "in_progress"
    try:
        return TaskStatus(normalized)
    except ValueError:
        return TaskStatus.SCHEDULED


def decode_task_type(value: TaskType | str | None) -> TaskType | None:
    """Decode a stored task type. Unknown or empty values mean no type."""
    if isinstance(value, TaskType):
        return value
    try:
        return TaskType(_normalize(value))
    except ValueError:
        return None


def _parse_datetime(value: datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Task:
    """A stored task template or a resolved occurrence of one."""

    id: str
    title: str
    start_time: datetime
    duration_minutes: int
    icon: str = ""
    color: str = ""
    is_completed: bool = False
    task_type: TaskType | None = None
    status: TaskStatus = TaskStatus.SCHEDULED
    repeat_rule: RepeatRule = RepeatRule.NONE
    parent_task_id: str | None = None
    is_generated_from_repeat: bool = False
    time_spent_minutes: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        # Generated occurrences never repeat themselves
        if self.is_generated_from_repeat:
            self.repeat_rule = RepeatRule.NONE

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def time_of_day(self) -> time:
        """Start time of day, keeping the offset of aware start times."""
        return self.start_time.timetz()

    @property
    def is_finished(self) -> bool:
        return self.status == TaskStatus.COMPLETED or self.is_completed

    @property
    def is_cancelled(self) -> bool:
        return self.status == TaskStatus.CANCELLED

    @property
    def is_tombstone(self) -> bool:
        """Cancellation record for one occurrence of a repeating task."""
        return self.is_cancelled and self.is_generated_from_repeat

    @property
    def is_repeating(self) -> bool:
        return self.repeat_rule.repeats and not self.is_generated_from_repeat

    @property
    def is_child(self) -> bool:
        return self.parent_task_id is not None

    @property
    def remaining_minutes(self) -> int:
        return max(0, self.duration_minutes - self.time_spent_minutes)

    @property
    def progress(self) -> float:
        """Fraction of planned time spent, capped at 1.0."""
        if self.duration_minutes <= 0:
            return 0.0
        return min(1.0, self.time_spent_minutes / self.duration_minutes)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check if this task's span overlaps [start, end)."""
        return self.start_time < end and start < self.end_time

    def format_time_range(self) -> str:
        return f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "title": self.title,
            "icon": self.icon,
            "color": self.color,
            "startTime": self.start_time.isoformat(),
            "durationMinutes": self.duration_minutes,
            "isCompleted": self.is_completed,
            "taskType": self.task_type.value if self.task_type else None,
            "status": self.status.value,
            "repeatRule": self.repeat_rule.value,
            "parentTaskId": self.parent_task_id,
            "isGeneratedFromRepeat": self.is_generated_from_repeat,
            "timeSpentMinutes": self.time_spent_minutes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """
        Create Task from a stored record.

        Enum fields decode totally; only a missing id, title or start time
        raises (KeyError / ValueError).
        """
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            start_time=datetime.fromisoformat(data["startTime"]),
            duration_minutes=int(data.get("durationMinutes") or 0),
            icon=data.get("icon") or "",
            color=data.get("color") or "",
            is_completed=bool(data.get("isCompleted", False)),
            task_type=decode_task_type(data.get("taskType")),
            status=decode_status(data.get("status")),
            repeat_rule=decode_repeat_rule(data.get("repeatRule")),
            parent_task_id=data.get("parentTaskId") or None,
            is_generated_from_repeat=bool(data.get("isGeneratedFromRepeat", False)),
            time_spent_minutes=int(data.get("timeSpentMinutes") or 0),
            created_at=_parse_datetime(data.get("createdAt")),
            updated_at=_parse_datetime(data.get("updatedAt")),
        )


def virtual_task_id(template_id: str, target_date: date) -> str:
    """Stable id for the occurrence of a template on a given date."""
    return str(uuid.uuid5(VIRTUAL_NAMESPACE, f"{template_id}:{target_date.isoformat()}"))


def new_task_id() -> str:
    return str(uuid.uuid4())


def sort_by_start(tasks: list[Task]) -> list[Task]:
    """Sort tasks by start time. Stable, so ties keep input order."""
    return sorted(tasks, key=lambda t: t.start_time)


def filter_by_date(tasks: list[Task], target_date: date) -> list[Task]:
    """Filter tasks to those starting on a date."""
    return [t for t in tasks if t.start_time.date() == target_date]


def copy_task(task: Task, **changes) -> Task:
    """Return a copy of a task with some fields replaced."""
    return replace(task, **changes)
