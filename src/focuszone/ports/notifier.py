"""Notification interface."""

from typing import Protocol

from focuszone.core.tasks import Task


class Notifier(Protocol):
    """Interface for reminding the user about upcoming tasks."""

    def schedule(self, task: Task) -> None:
        """Schedule (or reschedule) reminders for a task."""
        ...

    def cancel(self, task_id: str) -> None:
        """Cancel pending reminders for a task."""
        ...
