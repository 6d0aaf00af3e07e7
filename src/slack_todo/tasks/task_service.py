# src/slack_todo/tasks/task_service.py

"""
Task domain service.

Pure business logic over an injected TaskRepo:
- validates inputs,
- applies the complete/uncomplete transition,
- computes derived views (per-channel listing, active vs. completed split).

Transport (slash commands, Home tab) lives in cli/commands.py and home/.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..core.errors import InvalidInput, NotFound
from ..core.ports import TaskRepo
from .task_models import ClearScope, Task, TaskFilter

logger = logging.getLogger(__name__)


def sort_by_created(tasks: Iterable[Task]) -> list[Task]:
    """Ascending by created_at; stable, so equal timestamps keep store order."""
    return sorted(tasks, key=lambda t: t.created_at)


def partition_tasks(tasks: Iterable[Task]) -> tuple[list[Task], list[Task]]:
    """Split into (active, completed), keeping relative order inside each part."""
    active: list[Task] = []
    completed: list[Task] = []
    for t in tasks:
        (completed if t.completed else active).append(t)
    return active, completed


class TaskService:
    def __init__(self, repo: TaskRepo, *, clock: Callable[[], float] = time.time) -> None:
        self._repo = repo
        self._clock = clock

    def add_task(self, text: str, user_id: str, user_name: str, channel_id: str) -> Task:
        clean = (text or "").strip()
        if not clean:
            raise InvalidInput("task text required")
        if not user_id:
            raise InvalidInput("user_id required")
        if not channel_id:
            raise InvalidInput("channel_id required")

        task = self._repo.insert(
            text=clean,
            user_id=user_id,
            user_name=user_name or user_id,
            channel_id=channel_id,
            created_at=self._clock(),
        )
        logger.info("Task %s added by %s in %s", task.id, user_id, channel_id)
        return task

    def list_by_channel(self, channel_id: str) -> list[Task]:
        return sort_by_created(self._repo.find(TaskFilter(channel_id=channel_id)))

    def list_by_user(self, user_id: str) -> list[Task]:
        return sort_by_created(self._repo.find(TaskFilter(user_id=user_id)))

    def home_lists(self, user_id: str) -> tuple[list[Task], list[Task]]:
        return partition_tasks(self.list_by_user(user_id))

    def get_task(self, task_id: str) -> Task:
        task = self._repo.find_by_id(task_id.strip())
        if task is None:
            raise NotFound(task_id)
        return task

    def set_completed(self, task_id: str, value: bool) -> Task:
        task = self._repo.set_completed(task_id.strip(), bool(value))
        if task is None:
            raise NotFound(task_id)
        logger.info("Task %s completed=%s", task.id, task.completed)
        return task

    def delete_task(self, task_id: str) -> str:
        task = self._repo.delete_by_id(task_id.strip())
        if task is None:
            raise NotFound(task_id)
        logger.info("Task %s deleted", task.id)
        return task.text

    def clear_completed(self, scope: ClearScope) -> int:
        removed = self._repo.delete_many(scope.completed_filter())
        logger.info(
            "Cleared %d completed task(s) channel=%s user=%s",
            removed,
            scope.channel_id,
            scope.user_id,
        )
        return removed
