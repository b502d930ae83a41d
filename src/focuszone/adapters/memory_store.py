"""In-memory task storage adapter."""

from focuszone.core.tasks import Task
from focuszone.ports.task_store import StoreError


class MemoryTaskStore:
    """
    Dict-backed task storage.

    Implements TaskStore protocol. Nothing survives the process.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: dict[str, Task] = {t.id: t for t in tasks or []}

    def fetch_all(self) -> list[Task]:
        return list(self._tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def insert(self, task: Task) -> None:
        if task.id in self._tasks:
            raise StoreError(f"Task {task.id} already exists")
        self._tasks[task.id] = task

    def update(self, task: Task) -> None:
        if task.id not in self._tasks:
            raise StoreError(f"Task {task.id} not found")
        self._tasks[task.id] = task

    def delete(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)
