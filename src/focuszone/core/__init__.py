"""Functional core - pure business logic with no I/O."""

from .tasks import Task, RepeatRule, TaskStatus, TaskType, virtual_task_id
from .recurrence import resolve_occurrences, should_include, create_virtual_task, make_tombstone
from .breaks import (
    BreakSuggestion,
    BreakType,
    SuggestionPriority,
    analyze,
    suggest_after_task,
    validate_suggestion,
)
from .conflicts import TaskConflict, detect_conflicts
from .snapshot import TaskSnapshot, DaySnapshot, build_day_snapshot

__all__ = [
    # Tasks
    "Task",
    "RepeatRule",
    "TaskStatus",
    "TaskType",
    "virtual_task_id",
    # Recurrence
    "resolve_occurrences",
    "should_include",
    "create_virtual_task",
    "make_tombstone",
    # Breaks
    "BreakSuggestion",
    "BreakType",
    "SuggestionPriority",
    "analyze",
    "suggest_after_task",
    "validate_suggestion",
    # Conflicts
    "TaskConflict",
    "detect_conflicts",
    # Read models
    "TaskSnapshot",
    "DaySnapshot",
    "build_day_snapshot",
]
