"""Tests for conflict detection."""

from datetime import datetime, time

import pytest

from focuszone.core.conflicts import ConflictSeverity, ConflictType, detect_conflicts
from focuszone.core.tasks import Task, TaskStatus


@pytest.fixture
def make_task():
    def _make(task_id: str, hour: int, minute: int = 0, duration: int = 30, **kwargs) -> Task:
        return Task(
            id=task_id,
            title=f"Task {task_id}",
            start_time=datetime.combine(datetime(2024, 1, 15), time(hour, minute)),
            duration_minutes=duration,
            **kwargs,
        )
    return _make


class TestDetectConflicts:
    def test_no_conflicts(self, make_task):
        a = make_task("a", 9)
        b = make_task("b", 11)
        assert detect_conflicts(a, [a, b]) == []

    def test_same_start_is_critical(self, make_task):
        a = make_task("a", 9)
        b = make_task("b", 9)
        conflicts = detect_conflicts(a, [a, b])
        assert conflicts[0].type == ConflictType.TIME_OVERLAP
        assert conflicts[0].severity == ConflictSeverity.CRITICAL
        assert conflicts[0].conflicting_task_id == "b"

    def test_starting_before_other_is_high(self, make_task):
        a = make_task("a", 9, duration=60)
        b = make_task("b", 9, 30)
        assert detect_conflicts(a, [a, b])[0].severity == ConflictSeverity.HIGH

    def test_starting_inside_other_is_medium(self, make_task):
        a = make_task("a", 9, 30)
        b = make_task("b", 9, duration=60)
        conflict = detect_conflicts(a, [a, b])[0]
        assert conflict.severity == ConflictSeverity.MEDIUM
        assert "Overlaps with 'Task b'" == conflict.message

    def test_tight_buffer(self, make_task):
        before = make_task("before", 9, duration=28)
        a = make_task("a", 9, 30)
        conflicts = detect_conflicts(a, [before, a])
        assert [c.type for c in conflicts] == [ConflictType.NO_BUFFER]
        assert conflicts[0].severity == ConflictSeverity.LOW
        assert conflicts[0].message == "Only 2m buffer with 'Task before'"

    def test_back_to_back_is_fine(self, make_task):
        before = make_task("before", 9, duration=30)
        a = make_task("a", 9, 30)
        assert detect_conflicts(a, [before, a]) == []

    def test_cancelled_tasks_ignored(self, make_task):
        a = make_task("a", 9)
        b = make_task("b", 9, status=TaskStatus.CANCELLED)
        assert detect_conflicts(a, [a, b]) == []
