"""Ports - interfaces/protocols for external dependencies."""

from .task_store import StoreError, TaskStore
from .notifier import Notifier

__all__ = [
    "StoreError",
    "TaskStore",
    "Notifier",
]
