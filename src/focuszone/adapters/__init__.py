"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskStore
from .memory_store import MemoryTaskStore
from .log_notifier import LoggingNotifier

__all__ = [
    "JsonTaskStore",
    "MemoryTaskStore",
    "LoggingNotifier",
]
