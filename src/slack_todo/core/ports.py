# src/slack_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the store backend (MongoDB / SQLite) and the chat transport swappable
and makes testing easier.
"""

from typing import Any, Protocol

from ..tasks.task_models import Task, TaskFilter

View = dict[str, Any]
# Block-kit view document: {"type": "home", "blocks": [...]}.


class TaskRepo(Protocol):
    """Single collection of Task records."""

    def insert(self, *, text: str, user_id: str, user_name: str, channel_id: str, created_at: float) -> Task: ...

    def find(self, flt: TaskFilter) -> list[Task]:
        """Matching tasks, ascending by created_at (ties in insertion order)."""
        ...

    def find_by_id(self, task_id: str) -> Task | None: ...

    def set_completed(self, task_id: str, value: bool) -> Task | None:
        """Updated task, or None if the id references no task."""
        ...

    def delete_by_id(self, task_id: str) -> Task | None:
        """Deleted task, or None if the id references no task."""
        ...

    def delete_many(self, flt: TaskFilter) -> int: ...

    def ping(self) -> bool: ...
    def close(self) -> None: ...


class HomePublisher(Protocol):
    """Transport-side port: replace a user's Home view."""

    def publish_home(self, *, user_id: str, view: View) -> None: ...

    def open_modal(self, *, trigger_id: str, view: View) -> None: ...


class Messenger(Protocol):
    """Transport-side port: plain text outward (channel posts, notices to one user)."""

    def post_message(self, *, channel_id: str, text: str) -> None: ...

    def notify_user(self, *, user_id: str, text: str) -> None: ...
