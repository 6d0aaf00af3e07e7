# src/slack_todo/home/handlers.py

"""
Home-tab interaction handlers.

Each handler performs exactly one TaskService call, then rebuilds and republishes
the acting user's Home view. Acknowledging the event is the transport's job and
happens before the handler runs (see connectors/slack_connector.py).

A failed domain call (or a failed reload of the task lists) is logged and reported
to the user as a short notice; the Home view is republished whenever it can be rendered.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..core.errors import InvalidInput, NotFound, TaskError
from ..core.ports import HomePublisher, Messenger
from ..tasks.task_models import ClearScope
from ..tasks.task_service import TaskService
from .view import build_add_task_modal, build_home_view

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class HomeOpened:
    user_id: str


@dataclass(slots=True, frozen=True)
class OpenAddModal:
    user_id: str
    trigger_id: str


@dataclass(slots=True, frozen=True)
class TaskButton:
    """complete_todo / delete_todo click: the button value is the task id."""

    user_id: str
    task_id: str


@dataclass(slots=True, frozen=True)
class ClearCompletedClick:
    user_id: str


@dataclass(slots=True, frozen=True)
class AddTaskSubmission:
    user_id: str
    user_name: str
    text: str
    channel_id: str


def _failure_notice(action: str, exc: TaskError) -> str:
    if isinstance(exc, NotFound):
        return f"Could not {action}: that task no longer exists."
    if isinstance(exc, InvalidInput):
        return f"Could not {action}: {exc}."
    return f"Could not {action} because the task store is unavailable. Please try again."


class HomeHandlers:
    def __init__(self, tasks: TaskService, publisher: HomePublisher, messenger: Messenger) -> None:
        self._tasks = tasks
        self._publisher = publisher
        self._messenger = messenger

    # ---- helpers ----

    def render_home(self, user_id: str) -> dict[str, Any]:
        active, completed = self._tasks.home_lists(user_id)
        return build_home_view(active, completed)

    def refresh_home(self, user_id: str, *, notify_failure: bool = True) -> None:
        try:
            view = self.render_home(user_id)
        except TaskError as e:
            logger.exception("Failed to load tasks for Home view user=%s", user_id)
            if notify_failure:
                self._notify(user_id, _failure_notice("load your tasks", e))
            return

        try:
            self._publisher.publish_home(user_id=user_id, view=view)
        except Exception:
            logger.exception("Failed to publish Home view for user=%s", user_id)

    def _notify(self, user_id: str, text: str) -> None:
        try:
            self._messenger.notify_user(user_id=user_id, text=text)
        except Exception:
            logger.exception("Failed to send failure notice to user=%s", user_id)

    def _mutate(self, user_id: str, action: str, fn: Callable[[], Any]) -> bool:
        """Run one domain call, notify on failure, then republish the Home view."""
        ok = True
        try:
            fn()
        except TaskError as e:
            ok = False
            logger.exception("Home action '%s' failed for user=%s", action, user_id)
            self._notify(user_id, _failure_notice(action, e))
        # One notice per interaction: skip the reload notice if the action already reported.
        self.refresh_home(user_id, notify_failure=ok)
        return ok

    # ---- events ----

    def on_home_opened(self, req: HomeOpened) -> None:
        self.refresh_home(req.user_id)

    def on_open_add_modal(self, req: OpenAddModal) -> None:
        try:
            self._publisher.open_modal(trigger_id=req.trigger_id, view=build_add_task_modal())
        except Exception:
            logger.exception("Failed to open add-task modal for user=%s", req.user_id)
            self._notify(req.user_id, "Could not open the add-task dialog. Please try again.")

    def on_complete(self, req: TaskButton) -> bool:
        return self._mutate(req.user_id, "complete the task", lambda: self._tasks.set_completed(req.task_id, True))

    def on_delete(self, req: TaskButton) -> bool:
        return self._mutate(req.user_id, "delete the task", lambda: self._tasks.delete_task(req.task_id))

    def on_clear_completed(self, req: ClearCompletedClick) -> bool:
        return self._mutate(
            req.user_id,
            "clear completed tasks",
            lambda: self._tasks.clear_completed(ClearScope.user(req.user_id)),
        )

    def on_add_submission(self, req: AddTaskSubmission) -> bool:
        def add_and_announce() -> None:
            task = self._tasks.add_task(req.text, req.user_id, req.user_name, req.channel_id)
            try:
                self._messenger.post_message(
                    channel_id=task.channel_id,
                    text=f"<@{req.user_id}> added a new task: {task.text}",
                )
            except Exception:
                # The task is stored; only the channel announcement is lost.
                logger.exception("Failed to announce task %s in %s", task.id, task.channel_id)

        return self._mutate(req.user_id, "add the task", add_and_announce)
