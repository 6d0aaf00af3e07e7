# src/slack_todo/home/view.py

"""
Block-kit rendering for the Home tab and the "add task" modal.

Pure functions: no store or transport access. The Home view is rebuilt from
scratch after every mutation and published as a whole.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..tasks.task_models import Task

ACTION_ADD = "add_todo"
ACTION_COMPLETE = "complete_todo"
ACTION_DELETE = "delete_todo"
ACTION_CLEAR = "clear_completed"

MODAL_CALLBACK_ID = "add_todo_modal"
TASK_BLOCK = "task_block"
TASK_INPUT = "task_input"
CHANNEL_BLOCK = "channel_block"
CHANNEL_SELECT = "channel_select"

Block = dict[str, Any]

# Slack rejects views with more than 100 blocks. 5 fixed blocks, 2 list headers and
# up to 2 overflow notes leave 91 rows; one row is kept spare.
MAX_TASK_ROWS = 90


def _plain(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _header(text: str) -> Block:
    return {"type": "header", "text": _plain(text)}


def _divider() -> Block:
    return {"type": "divider"}


def _section(mrkdwn: str, accessory: Block | None = None) -> Block:
    block: Block = {"type": "section", "text": {"type": "mrkdwn", "text": mrkdwn}}
    if accessory is not None:
        block["accessory"] = accessory
    return block


def _more(hidden: int) -> Block:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": f"…and {hidden} more"}]}


def _button(label: str, action_id: str, *, value: str | None = None, style: str | None = None) -> Block:
    button: Block = {"type": "button", "text": _plain(label), "action_id": action_id}
    if value is not None:
        button["value"] = value
    if style is not None:
        button["style"] = style
    return button


def build_home_view(active: Sequence[Task], completed: Sequence[Task]) -> dict[str, Any]:
    blocks: list[Block] = [
        _header("Your ToDo list"),
        _divider(),
        _section("Add, manage and complete your tasks here."),
        {
            "type": "actions",
            "elements": [
                _button("Add a new task", ACTION_ADD),
                _button("Clear completed tasks", ACTION_CLEAR),
            ],
        },
        _divider(),
    ]

    if not active and not completed:
        blocks.append(_section("You have no tasks. Add a new one!"))
        return {"type": "home", "blocks": blocks}

    shown_active = list(active[:MAX_TASK_ROWS])
    shown_completed = list(completed[: MAX_TASK_ROWS - len(shown_active)])

    if active:
        blocks.append(_header("Active"))
        for task in shown_active:
            blocks.append(_section(f"• {task.text}", _button("Complete", ACTION_COMPLETE, value=task.id)))
        if len(active) > len(shown_active):
            blocks.append(_more(len(active) - len(shown_active)))

    if completed:
        blocks.append(_header("Completed"))
        for task in shown_completed:
            blocks.append(
                _section(f"~{task.text}~", _button("Delete", ACTION_DELETE, value=task.id, style="danger"))
            )
        if len(completed) > len(shown_completed):
            blocks.append(_more(len(completed) - len(shown_completed)))

    return {"type": "home", "blocks": blocks}


def build_add_task_modal() -> dict[str, Any]:
    return {
        "type": "modal",
        "callback_id": MODAL_CALLBACK_ID,
        "title": _plain("Add a task"),
        "submit": _plain("Add"),
        "close": _plain("Cancel"),
        "blocks": [
            {
                "type": "input",
                "block_id": TASK_BLOCK,
                "element": {
                    "type": "plain_text_input",
                    "action_id": TASK_INPUT,
                    "placeholder": {"type": "plain_text", "text": "Describe the task"},
                },
                "label": _plain("Task"),
            },
            {
                "type": "input",
                "block_id": CHANNEL_BLOCK,
                "element": {
                    "type": "conversations_select",
                    "action_id": CHANNEL_SELECT,
                    "placeholder": {"type": "plain_text", "text": "Select a channel"},
                    "filter": {"include": ["public", "private"]},
                },
                "label": _plain("Share in channel"),
            },
        ],
    }
