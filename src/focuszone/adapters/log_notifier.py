"""Notifier adapter that only records reminders in the log."""

import logging

from focuszone.core.tasks import Task

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """
    Implements Notifier protocol by logging requests.

    Used when no real notification backend is configured.
    """

    def schedule(self, task: Task) -> None:
        logger.info(f"Reminder scheduled for '{task.title}' at {task.start_time.isoformat()}")

    def cancel(self, task_id: str) -> None:
        logger.info(f"Reminders cancelled for task {task_id}")
