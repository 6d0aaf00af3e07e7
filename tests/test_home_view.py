# tests/test_home_view.py

from __future__ import annotations

from slack_todo.home.view import (
    ACTION_ADD,
    ACTION_CLEAR,
    ACTION_COMPLETE,
    ACTION_DELETE,
    CHANNEL_BLOCK,
    MAX_TASK_ROWS,
    MODAL_CALLBACK_ID,
    TASK_BLOCK,
    build_add_task_modal,
    build_home_view,
)
from slack_todo.tasks.task_models import Task


def _task(task_id: str, text: str, completed: bool = False) -> Task:
    return Task(
        id=task_id,
        text=text,
        completed=completed,
        user_id="U1",
        user_name="alice",
        channel_id="C1",
        created_at=float(len(task_id)),
    )


def _types(view: dict) -> list[str]:
    return [b["type"] for b in view["blocks"]]


def test_empty_view_structure() -> None:
    view = build_home_view([], [])
    assert view["type"] == "home"
    assert _types(view) == ["header", "divider", "section", "actions", "divider", "section"]

    actions = view["blocks"][3]["elements"]
    assert [e["action_id"] for e in actions] == [ACTION_ADD, ACTION_CLEAR]
    assert "no tasks" in view["blocks"][-1]["text"]["text"]


def test_active_and_completed_rows() -> None:
    active = [_task("a1", "write docs"), _task("a2", "review PR")]
    completed = [_task("c1", "ship release", completed=True)]

    view = build_home_view(active, completed)
    blocks = view["blocks"]
    assert _types(view) == [
        "header", "divider", "section", "actions", "divider",
        "header", "section", "section",
        "header", "section",
    ]

    assert blocks[5]["text"]["text"] == "Active"
    assert blocks[6]["text"]["text"] == "• write docs"
    assert blocks[6]["accessory"]["action_id"] == ACTION_COMPLETE
    assert [blocks[6]["accessory"]["value"], blocks[7]["accessory"]["value"]] == ["a1", "a2"]

    assert blocks[8]["text"]["text"] == "Completed"
    assert blocks[9]["text"]["text"] == "~ship release~"
    assert blocks[9]["accessory"] == {
        "type": "button",
        "text": {"type": "plain_text", "text": "Delete", "emoji": True},
        "action_id": ACTION_DELETE,
        "value": "c1",
        "style": "danger",
    }


def test_only_completed_omits_active_header() -> None:
    view = build_home_view([], [_task("c1", "done", completed=True)])
    headers = [b["text"]["text"] for b in view["blocks"] if b["type"] == "header"]
    assert headers == ["Your ToDo list", "Completed"]


def test_render_is_deterministic() -> None:
    active = [_task("a1", "x")]
    assert build_home_view(active, []) == build_home_view(list(active), [])


def test_add_task_modal_ids() -> None:
    modal = build_add_task_modal()
    assert modal["type"] == "modal"
    assert modal["callback_id"] == MODAL_CALLBACK_ID
    assert [b["block_id"] for b in modal["blocks"]] == [TASK_BLOCK, CHANNEL_BLOCK]
    assert modal["blocks"][1]["element"]["type"] == "conversations_select"


def test_long_lists_stay_within_slack_block_limit() -> None:
    active = [_task(f"a{i}", f"open {i}") for i in range(150)]
    completed = [_task(f"c{i}", f"done {i}", completed=True) for i in range(10)]

    view = build_home_view(active, completed)
    blocks = view["blocks"]
    assert len(blocks) <= 100

    rows = [b for b in blocks if b["type"] == "section" and "accessory" in b]
    assert len(rows) == MAX_TASK_ROWS
    assert rows[-1]["accessory"]["value"] == f"a{MAX_TASK_ROWS - 1}"

    notes = [b["elements"][0]["text"] for b in blocks if b["type"] == "context"]
    assert notes == ["…and 60 more", "…and 10 more"]
    assert blocks[-2]["text"]["text"] == "Completed"


def test_short_lists_have_no_overflow_note() -> None:
    view = build_home_view([_task("a1", "x")], [_task("c1", "y", completed=True)])
    assert all(b["type"] != "context" for b in view["blocks"])
