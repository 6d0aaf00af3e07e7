# src/slack_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass

from ..core.errors import InvalidInput


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    text: str
    completed: bool

    user_id: str
    user_name: str
    channel_id: str

    created_at: float


@dataclass(slots=True, frozen=True)
class TaskFilter:
    """
    Equality filter over tasks. None means "any".

    Stores translate it to a WHERE clause / a Mongo query document.
    """

    channel_id: str | None = None
    user_id: str | None = None
    completed: bool | None = None


@dataclass(slots=True, frozen=True)
class ClearScope:
    """Scope of a "clear completed" operation: exactly one channel or one user."""

    channel_id: str | None = None
    user_id: str | None = None

    def __post_init__(self) -> None:
        if bool(self.channel_id) == bool(self.user_id):
            raise InvalidInput("clear scope needs exactly one of channel_id / user_id")

    @classmethod
    def channel(cls, channel_id: str) -> ClearScope:
        return cls(channel_id=channel_id)

    @classmethod
    def user(cls, user_id: str) -> ClearScope:
        return cls(user_id=user_id)

    def completed_filter(self) -> TaskFilter:
        return TaskFilter(channel_id=self.channel_id, user_id=self.user_id, completed=True)
