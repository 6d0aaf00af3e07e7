# src/slack_todo/core/errors.py

from __future__ import annotations


class TaskError(Exception):
    """Base class for errors raised by the task service and stores."""


class InvalidInput(TaskError):
    """Empty task text or a missing required argument."""


class NotFound(TaskError):
    """The id does not reference any task (malformed ids included)."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id


class StoreError(TaskError):
    """Connectivity/timeout or driver failure from the persistence layer."""


class UnknownCommand(TaskError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown command: {name}")
        self.name = name
