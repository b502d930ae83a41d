"""Read models for presentation layers - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .tasks import Task, sort_by_start


@dataclass
class TaskSnapshot:
    """Public, display-only view of a task."""

    id: str
    title: str
    icon: str
    start_time: datetime
    duration_minutes: int
    is_completed: bool
    color: str
    task_type: str | None
    status: str
    is_virtual: bool

    @classmethod
    def from_task(cls, task: Task) -> "TaskSnapshot":
        return cls(
            id=task.id,
            title=task.title,
            icon=task.icon,
            start_time=task.start_time,
            duration_minutes=task.duration_minutes,
            is_completed=task.is_finished,
            color=task.color,
            task_type=task.task_type.value if task.task_type else None,
            status=task.status.value,
            is_virtual=task.is_generated_from_repeat,
        )

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    def is_active_at(self, now: datetime) -> bool:
        return self.start_time <= now <= self.end_time and not self.is_completed

    def progress_at(self, now: datetime) -> float:
        total = (self.end_time - self.start_time).total_seconds()
        if total <= 0:
            return 0.0
        elapsed = (now - self.start_time).total_seconds()
        return min(1.0, max(0.0, elapsed / total))

    def time_until_start(self, now: datetime) -> str:
        """Human-readable countdown, e.g. '1h 5m' or 'Now'."""
        minutes = int((self.start_time - now).total_seconds() / 60)
        if minutes <= 0:
            return "Now"
        if minutes < 60:
            return f"{minutes}m"
        hours, rest = divmod(minutes, 60)
        return f"{hours}h {rest}m" if rest else f"{hours}h"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "icon": self.icon,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "durationMinutes": self.duration_minutes,
            "isCompleted": self.is_completed,
            "color": self.color,
            "taskType": self.task_type,
            "status": self.status,
            "isVirtual": self.is_virtual,
        }


@dataclass
class DaySnapshot:
    """Summary of a day: current task, what's next, and counts."""

    generated_at: datetime
    current: TaskSnapshot | None
    upcoming: list[TaskSnapshot] = field(default_factory=list)
    total: int = 0
    completed: int = 0

    def to_dict(self) -> dict:
        return {
            "generatedAt": self.generated_at.isoformat(),
            "current": self.current.to_dict() if self.current else None,
            "upcoming": [s.to_dict() for s in self.upcoming],
            "total": self.total,
            "completed": self.completed,
        }


def build_day_snapshot(tasks: list[Task], now: datetime, limit: int = 3) -> DaySnapshot:
    """
    Project a day's tasks into a summary read model.

    Pure function - no I/O.
    """
    snapshots = [TaskSnapshot.from_task(t) for t in sort_by_start(tasks) if not t.is_cancelled]
    current = next((s for s in snapshots if s.is_active_at(now)), None)
    upcoming = [s for s in snapshots if s.start_time > now and not s.is_completed]
    return DaySnapshot(
        generated_at=now,
        current=current,
        upcoming=upcoming[:limit],
        total=len(snapshots),
        completed=sum(1 for s in snapshots if s.is_completed),
    )
