"""Task store interface."""

from typing import Protocol

from focuszone.core.tasks import Task


class StoreError(Exception):
    """Raised when the store cannot read or write tasks."""

    pass


class TaskStore(Protocol):
    """Interface for persisting task templates and tombstones in any backend."""

    def fetch_all(self) -> list[Task]:
        """Fetch all stored tasks."""
        ...

    def get(self, task_id: str) -> Task | None:
        """Fetch one task by id. Returns None if not stored."""
        ...

    def insert(self, task: Task) -> None:
        """Store a new task."""
        ...

    def update(self, task: Task) -> None:
        """Replace a stored task with the same id."""
        ...

    def delete(self, task_id: str) -> None:
        """Remove a task. Missing ids are ignored."""
        ...
