"""Timeline workflow layer between the functional core and its collaborators.

Every read re-resolves the day from the store. Store failures are logged
and degrade to empty or unchanged results; nothing here raises to callers.
"""

import logging
from datetime import date, datetime, timedelta

from .config import Config
from .core.breaks import (
    BreakSuggestion,
    SuggestionTracker,
    analyze,
    rank_suggestions,
    suggest_after_task,
    validate_suggestion,
)
from .core.conflicts import TaskConflict, detect_conflicts
from .core.recurrence import (
    collect_descendants,
    future_children,
    is_cancelled_on,
    make_tombstone,
    resolve_occurrences,
    resolve_range,
)
from .core.snapshot import DaySnapshot, build_day_snapshot
from .core.tasks import (
    RepeatRule,
    Task,
    TaskStatus,
    TaskType,
    copy_task,
    new_task_id,
)
from .ports.notifier import Notifier
from .ports.task_store import StoreError, TaskStore

logger = logging.getLogger(__name__)


class TimelineService:
    """Resolves a day's tasks and applies user actions to the store."""

    def __init__(
        self,
        store: TaskStore | None = None,
        notifier: Notifier | None = None,
        config: Config | None = None,
        tracker: SuggestionTracker | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.config = config or Config()
        self.tracker = tracker or SuggestionTracker(
            spacing=timedelta(minutes=self.config.suggestion_spacing_minutes),
            max_active=self.config.max_active_suggestions,
        )

    # ============== Reads ==============

    def fetch_all(self) -> list[Task]:
        """All stored tasks, or an empty list when the store is unavailable."""
        if self.store is None:
            logger.warning("No task store configured, returning no tasks")
            return []
        try:
            return self.store.fetch_all()
        except StoreError as e:
            logger.error(f"Failed to fetch tasks: {e}")
            return []

    def load_day(self, target_date: date) -> list[Task]:
        """Stored and virtual tasks for a date, sorted by start time."""
        return resolve_occurrences(self.fetch_all(), target_date)

    def load_range(self, start_date: date, days: int = 7) -> dict[date, list[Task]]:
        return resolve_range(self.fetch_all(), start_date, days)

    def find_task(self, task_id: str, target_date: date) -> Task | None:
        """
        Find a task by id among stored tasks, then among the day's virtual ones.

        A unique id prefix is accepted too. Cancellation records are never
        returned, since they stand for an occurrence that no longer exists.
        """
        stored = [t for t in self.fetch_all() if not t.is_tombstone]
        for candidates in (stored, self.load_day(target_date)):
            exact = [t for t in candidates if t.id == task_id]
            if exact:
                return exact[0]
            prefixed = [t for t in candidates if t.id.startswith(task_id)]
            if len(prefixed) == 1:
                return prefixed[0]
        return None

    def is_persisted(self, task: Task) -> bool:
        if self.store is None:
            return False
        try:
            return self.store.get(task.id) is not None
        except StoreError as e:
            logger.error(f"Failed to look up task {task.id}: {e}")
            return False

    def conflicts_for(self, task: Task, target_date: date | None = None) -> list[TaskConflict]:
        day = self.load_day(target_date or task.start_time.date())
        return detect_conflicts(task, day)

    def day_snapshot(self, now: datetime | None = None) -> DaySnapshot:
        now = now or datetime.now()
        return build_day_snapshot(self.load_day(now.date()), now)

    # ============== Break suggestions ==============

    def break_suggestions(self, target_date: date, now: datetime | None = None) -> list[BreakSuggestion]:
        """Suggestions for a day that pass the quality gate, by start time."""
        now = now or datetime.now()
        tasks = self.load_day(target_date)
        candidates = analyze(
            tasks,
            now,
            long_task_minutes=self.config.long_task_minutes,
            hydration_offset=timedelta(minutes=self.config.hydration_offset_minutes),
            lunch_time=self.config.lunch,
            lunch_duration=self.config.lunch_duration,
            target_date=target_date,
        )
        return [
            s for s in candidates
            if validate_suggestion(
                s,
                tasks,
                now,
                max_lead_time=timedelta(hours=self.config.max_suggestion_hours),
                min_impact=self.config.min_impact_score,
            )
        ]

    def break_after_task(self, task: Task, now: datetime | None = None) -> BreakSuggestion | None:
        """Break to take once a task ends, judged against the rest of its day."""
        now = now or datetime.now()
        day = self.load_day(task.start_time.date())
        following = [
            t for t in day
            if t.id != task.id and not t.is_cancelled and t.start_time >= task.end_time
        ]
        suggestion = suggest_after_task(task, following[0] if following else None, now, day)
        if suggestion is None:
            return None
        if not validate_suggestion(
            suggestion,
            day,
            now,
            max_lead_time=timedelta(hours=self.config.max_suggestion_hours),
            min_impact=self.config.min_impact_score,
        ):
            return None
        return suggestion

    def top_suggestions(self, target_date: date, now: datetime | None = None) -> list[BreakSuggestion]:
        """The most relevant suggestions to surface right now."""
        now = now or datetime.now()
        ranked = rank_suggestions(self.break_suggestions(target_date, now), now)
        selected = self.tracker.select(ranked, now)
        for suggestion in selected:
            self.tracker.mark_shown(suggestion, now)
        return selected

    def accept_suggestion(self, suggestion: BreakSuggestion, now: datetime | None = None) -> Task | None:
        """Turn a suggestion into a scheduled relax task."""
        now = now or datetime.now()
        task = Task(
            id=new_task_id(),
            title=suggestion.type.display_name,
            start_time=suggestion.suggested_start_time,
            duration_minutes=suggestion.suggested_duration,
            icon=suggestion.icon,
            task_type=TaskType.RELAX,
            created_at=now,
            updated_at=now,
        )
        if not self.add_task(task):
            return None
        self.tracker.mark_accepted(suggestion, now)
        return task

    def dismiss_suggestion(self, suggestion: BreakSuggestion) -> None:
        self.tracker.mark_dismissed(suggestion)

    # ============== Mutations ==============

    def add_task(self, task: Task) -> bool:
        if self.store is None:
            logger.warning("No task store configured, cannot add task")
            return False
        try:
            self.store.insert(task)
        except StoreError as e:
            logger.error(f"Failed to add task '{task.title}': {e}")
            return False
        self._schedule(task)
        return True

    def update_task(self, task: Task) -> bool:
        if self.store is None:
            logger.warning("No task store configured, cannot update task")
            return False
        try:
            self.store.update(copy_task(task, updated_at=datetime.now()))
        except StoreError as e:
            logger.error(f"Failed to update task {task.id}: {e}")
            return False
        self._schedule(task)
        return True

    def delete_task(self, task: Task) -> bool:
        """
        Delete one task.

        Virtual occurrences get a tombstone. Templates with children take
        the whole series with them. A stored child is removed and its date
        cancelled so the parent doesn't regenerate it.
        """
        if self.store is None:
            logger.warning("No task store configured, cannot delete task")
            return False

        all_tasks = self.fetch_all()
        stored = next((t for t in all_tasks if t.id == task.id), None)
        if stored is None:
            if task.is_generated_from_repeat and task.parent_task_id:
                return self._cancel_occurrence(task, all_tasks)
            logger.warning(f"Task {task.id} not found, nothing to delete")
            return False

        if stored.is_tombstone:
            return True

        if stored.is_repeating or collect_descendants(stored.id, all_tasks):
            return self.delete_all_instances(stored)

        try:
            self.store.delete(stored.id)
        except StoreError as e:
            logger.error(f"Failed to delete task {stored.id}: {e}")
            return False
        self._cancel(stored.id)

        parent = next((t for t in all_tasks if t.id == stored.parent_task_id), None)
        if parent and parent.is_repeating:
            remaining = [t for t in all_tasks if t.id != stored.id]
            return self._cancel_occurrence(stored, remaining)
        return True

    def delete_all_instances(self, task: Task) -> bool:
        """Delete a series: its template and every task descending from it."""
        if self.store is None:
            logger.warning("No task store configured, cannot delete series")
            return False

        root_id = task.parent_task_id or task.id
        all_tasks = self.fetch_all()
        doomed = [t.id for t in collect_descendants(root_id, all_tasks)]
        if any(t.id == root_id for t in all_tasks):
            doomed.append(root_id)

        try:
            for task_id in doomed:
                self.store.delete(task_id)
        except StoreError as e:
            logger.error(f"Failed to delete series {root_id}: {e}")
            return False

        for task_id in doomed:
            self._cancel(task_id)
        logger.info(f"Deleted series {root_id} ({len(doomed)} tasks)")
        return True

    def delete_future_instances(self, task: Task, from_time: datetime) -> bool:
        """Delete a series' children starting at or after from_time."""
        if self.store is None:
            logger.warning("No task store configured, cannot delete future instances")
            return False

        root_id = task.parent_task_id or task.id
        doomed = future_children(root_id, from_time, self.fetch_all())
        try:
            for child in doomed:
                self.store.delete(child.id)
        except StoreError as e:
            logger.error(f"Failed to delete future instances of {root_id}: {e}")
            return False

        for child in doomed:
            self._cancel(child.id)
        return True

    def complete_task(self, task: Task, now: datetime | None = None) -> bool:
        """Mark a task completed, persisting virtual occurrences under their own id."""
        if self.store is None:
            logger.warning("No task store configured, cannot complete task")
            return False
        if task.is_tombstone:
            logger.warning(f"Task {task.id} is a cancelled occurrence, not completing it")
            return False

        now = now or datetime.now()
        completed = copy_task(
            task,
            is_completed=True,
            status=TaskStatus.COMPLETED,
            is_generated_from_repeat=False,
            updated_at=now,
        )
        try:
            stored = self.store.get(task.id)
            if stored is not None and stored.is_tombstone:
                logger.warning(f"Occurrence {task.id} was cancelled, not completing it")
                return False
            if stored is None:
                self.store.insert(copy_task(completed, repeat_rule=RepeatRule.NONE, created_at=now))
            else:
                self.store.update(completed)
        except StoreError as e:
            logger.error(f"Failed to complete task {task.id}: {e}")
            return False

        self._cancel(task.id)
        return True

    def duplicate_task(self, task: Task, now: datetime | None = None) -> Task | None:
        """Store a one-off copy of a task an hour later."""
        now = now or datetime.now()
        duplicate = Task(
            id=new_task_id(),
            title=f"{task.title} (Copy)",
            start_time=task.start_time + timedelta(hours=1),
            duration_minutes=task.duration_minutes,
            icon=task.icon,
            color=task.color,
            task_type=task.task_type,
            created_at=now,
            updated_at=now,
        )
        if not self.add_task(duplicate):
            return None
        return duplicate

    # ============== Helpers ==============

    def _cancel_occurrence(self, occurrence: Task, all_tasks: list[Task]) -> bool:
        day = occurrence.start_time.date()
        if is_cancelled_on(occurrence.parent_task_id, day, all_tasks):
            return True
        try:
            self.store.insert(make_tombstone(occurrence))
        except StoreError as e:
            logger.error(f"Failed to cancel occurrence {occurrence.id}: {e}")
            return False
        self._cancel(occurrence.id)
        return True

    def _schedule(self, task: Task) -> None:
        if self.notifier is not None:
            self.notifier.schedule(task)

    def _cancel(self, task_id: str) -> None:
        if self.notifier is not None:
            self.notifier.cancel(task_id)
