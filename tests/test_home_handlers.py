# tests/test_home_handlers.py

from __future__ import annotations

from slack_todo.core.errors import StoreError
from slack_todo.home.handlers import (
    AddTaskSubmission,
    ClearCompletedClick,
    HomeHandlers,
    HomeOpened,
    OpenAddModal,
    TaskButton,
)
from slack_todo.home.view import ACTION_COMPLETE, ACTION_DELETE, MODAL_CALLBACK_ID
from slack_todo.tasks.task_models import Task, TaskFilter
from slack_todo.tasks.task_service import TaskService

from .fakes import BrokenTaskRepo, FakeOutbound


def _accessories(view: dict) -> list[tuple[str, str]]:
    return [
        (b["accessory"]["action_id"], b["accessory"]["value"])
        for b in view["blocks"]
        if b["type"] == "section" and "accessory" in b
    ]


def test_home_opened_publishes_view(service: TaskService, outbound: FakeOutbound) -> None:
    task = service.add_task("water plants", "U1", "alice", "C1")
    home = HomeHandlers(service, outbound, outbound)

    home.on_home_opened(HomeOpened(user_id="U1"))

    (user_id, view), = outbound.published
    assert user_id == "U1"
    assert _accessories(view) == [(ACTION_COMPLETE, task.id)]


def test_complete_then_delete_republishes_each_time(service: TaskService, outbound: FakeOutbound) -> None:
    task = service.add_task("water plants", "U1", "alice", "C1")
    home = HomeHandlers(service, outbound, outbound)

    assert home.on_complete(TaskButton(user_id="U1", task_id=task.id)) is True
    assert _accessories(outbound.published[-1][1]) == [(ACTION_DELETE, task.id)]

    assert home.on_delete(TaskButton(user_id="U1", task_id=task.id)) is True
    assert _accessories(outbound.published[-1][1]) == []
    assert len(outbound.published) == 2
    assert outbound.notices == []


def test_clear_completed_is_user_scoped(service: TaskService, outbound: FakeOutbound) -> None:
    mine = service.add_task("mine", "U1", "alice", "C1")
    theirs = service.add_task("theirs", "U2", "bob", "C1")
    service.set_completed(mine.id, True)
    service.set_completed(theirs.id, True)
    home = HomeHandlers(service, outbound, outbound)

    home.on_clear_completed(ClearCompletedClick(user_id="U1"))

    assert service.list_by_user("U1") == []
    assert [t.id for t in service.list_by_user("U2")] == [theirs.id]
    assert outbound.published[-1][0] == "U1"


def test_add_submission_posts_to_channel(service: TaskService, outbound: FakeOutbound) -> None:
    home = HomeHandlers(service, outbound, outbound)

    ok = home.on_add_submission(AddTaskSubmission(user_id="U1", user_name="alice", text="plan sprint", channel_id="C9"))

    assert ok is True
    (task,) = service.list_by_channel("C9")
    assert task.text == "plan sprint"
    assert outbound.posts == [("C9", "<@U1> added a new task: plan sprint")]
    assert _accessories(outbound.published[-1][1]) == [(ACTION_COMPLETE, task.id)]


def test_unknown_task_notifies_user(service: TaskService, outbound: FakeOutbound) -> None:
    home = HomeHandlers(service, outbound, outbound)

    assert home.on_complete(TaskButton(user_id="U1", task_id="gone")) is False

    assert len(outbound.notices) == 1
    assert outbound.notices[0][0] == "U1"
    assert "no longer exists" in outbound.notices[0][1]
    # Home view is republished even after a failure.
    assert len(outbound.published) == 1


def test_store_failure_is_logged_and_surfaced(outbound: FakeOutbound, caplog) -> None:
    broken = BrokenTaskRepo()
    home = HomeHandlers(TaskService(broken), outbound, outbound)  # type: ignore[arg-type]

    ok = home.on_add_submission(AddTaskSubmission(user_id="U1", user_name="alice", text="x", channel_id="C1"))

    assert ok is False
    assert outbound.posts == []
    # The reload fails as well, but the user gets one notice per interaction.
    assert len(outbound.notices) == 1
    assert "unavailable" in outbound.notices[0][1]
    assert outbound.published == []
    assert any("failed" in r.getMessage() for r in caplog.records)


def test_open_add_modal(service: TaskService, outbound: FakeOutbound) -> None:
    home = HomeHandlers(service, outbound, outbound)
    home.on_open_add_modal(OpenAddModal(user_id="U1", trigger_id="trig-1"))

    (trigger_id, view), = outbound.modals
    assert trigger_id == "trig-1"
    assert view["callback_id"] == MODAL_CALLBACK_ID


def test_home_opened_with_store_down_notifies_user(outbound: FakeOutbound) -> None:
    home = HomeHandlers(TaskService(BrokenTaskRepo()), outbound, outbound)  # type: ignore[arg-type]

    home.on_home_opened(HomeOpened(user_id="U1"))

    assert outbound.published == []
    assert outbound.notices == [
        ("U1", "Could not load your tasks because the task store is unavailable. Please try again.")
    ]


class ReloadFailsRepo:
    """Writes succeed, every listing fails."""

    def set_completed(self, task_id: str, value: bool) -> Task | None:
        return Task(
            id=task_id,
            text="ship",
            completed=value,
            user_id="U1",
            user_name="alice",
            channel_id="C1",
            created_at=1.0,
        )

    def find(self, flt: TaskFilter) -> list[Task]:
        raise StoreError("store unreachable")


def test_reload_failure_after_successful_action_notifies_user(outbound: FakeOutbound) -> None:
    home = HomeHandlers(TaskService(ReloadFailsRepo()), outbound, outbound)  # type: ignore[arg-type]

    assert home.on_complete(TaskButton(user_id="U1", task_id="t-1")) is True

    assert outbound.published == []
    assert len(outbound.notices) == 1
    assert outbound.notices[0][1].startswith("Could not load your tasks")
