"""Tests for read model projection."""

from datetime import datetime

from focuszone.core.snapshot import TaskSnapshot, build_day_snapshot
from focuszone.core.tasks import Task, TaskStatus, TaskType


def _task(task_id: str, hour: int, duration: int = 60, **kwargs) -> Task:
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        start_time=datetime(2024, 1, 15, hour, 0),
        duration_minutes=duration,
        **kwargs,
    )


class TestTaskSnapshot:
    def test_from_task(self):
        task = _task("a", 9, task_type=TaskType.WORK, is_generated_from_repeat=True, parent_task_id="p")
        snap = TaskSnapshot.from_task(task)
        assert snap.id == "a"
        assert snap.task_type == "work"
        assert snap.status == "scheduled"
        assert snap.is_virtual is True
        assert snap.end_time == datetime(2024, 1, 15, 10, 0)

    def test_progress(self):
        snap = TaskSnapshot.from_task(_task("a", 9))
        assert snap.progress_at(datetime(2024, 1, 15, 9, 30)) == 0.5
        assert snap.progress_at(datetime(2024, 1, 15, 8, 0)) == 0.0
        assert snap.progress_at(datetime(2024, 1, 15, 11, 0)) == 1.0

    def test_time_until_start(self):
        snap = TaskSnapshot.from_task(_task("a", 10))
        assert snap.time_until_start(datetime(2024, 1, 15, 9, 15)) == "45m"
        assert snap.time_until_start(datetime(2024, 1, 15, 8, 55)) == "1h 5m"
        assert snap.time_until_start(datetime(2024, 1, 15, 8, 0)) == "2h"
        assert snap.time_until_start(datetime(2024, 1, 15, 10, 30)) == "Now"

    def test_to_dict_uses_plain_values(self):
        data = TaskSnapshot.from_task(_task("a", 9)).to_dict()
        assert data["startTime"] == "2024-01-15T09:00:00"
        assert data["endTime"] == "2024-01-15T10:00:00"
        assert data["taskType"] is None


class TestBuildDaySnapshot:
    def test_current_and_upcoming(self):
        tasks = [
            _task("done", 7, is_completed=True),
            _task("now", 9),
            _task("next", 11),
            _task("later", 13),
            _task("latest", 15),
            _task("last", 17),
        ]
        snap = build_day_snapshot(tasks, datetime(2024, 1, 15, 9, 30))
        assert snap.current.id == "now"
        assert [s.id for s in snap.upcoming] == ["next", "later", "latest"]
        assert snap.total == 6
        assert snap.completed == 1

    def test_excludes_cancelled(self):
        tasks = [_task("a", 9, status=TaskStatus.CANCELLED), _task("b", 11)]
        snap = build_day_snapshot(tasks, datetime(2024, 1, 15, 9, 30))
        assert snap.current is None
        assert snap.total == 1

    def test_to_dict(self):
        snap = build_day_snapshot([], datetime(2024, 1, 15, 9, 30))
        assert snap.to_dict() == {
            "generatedAt": "2024-01-15T09:30:00",
            "current": None,
            "upcoming": [],
            "total": 0,
            "completed": 0,
        }
