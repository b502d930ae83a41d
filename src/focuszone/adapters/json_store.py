"""File-based task storage adapter."""

import json
import logging
from pathlib import Path

from focuszone.core.tasks import Task
from focuszone.ports.task_store import StoreError

logger = logging.getLogger(__name__)


class JsonTaskStore:
    """
    JSON file task storage.

    Implements TaskStore protocol. All tasks live in a single JSON list;
    every write rewrites the file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read_records(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"Expected a list of tasks in {self.path}")
        return data

    def _write_tasks(self, tasks: list[Task]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps([t.to_dict() for t in tasks], indent=2))
        except OSError as e:
            raise StoreError(f"Failed to write {self.path}: {e}") from e

    def fetch_all(self) -> list[Task]:
        """Fetch all stored tasks, skipping records that cannot be parsed."""
        tasks = []
        for record in self._read_records():
            try:
                tasks.append(Task.from_dict(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed task record: {e}")
        return tasks

    def get(self, task_id: str) -> Task | None:
        return next((t for t in self.fetch_all() if t.id == task_id), None)

    def insert(self, task: Task) -> None:
        tasks = self.fetch_all()
        if any(t.id == task.id for t in tasks):
            raise StoreError(f"Task {task.id} already exists")
        tasks.append(task)
        self._write_tasks(tasks)

    def update(self, task: Task) -> None:
        tasks = self.fetch_all()
        for i, existing in enumerate(tasks):
            if existing.id == task.id:
                tasks[i] = task
                self._write_tasks(tasks)
                return
        raise StoreError(f"Task {task.id} not found")

    def delete(self, task_id: str) -> None:
        tasks = self.fetch_all()
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) != len(tasks):
            self._write_tasks(remaining)
