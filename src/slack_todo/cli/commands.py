# src/slack_todo/cli/commands.py

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from ..core.errors import InvalidInput, NotFound, StoreError, UnknownCommand
from ..core.state import AppState
from ..tasks.task_models import ClearScope, Task

logger = logging.getLogger(__name__)

COMMAND_NAME = "/todo"

STATUS_DONE = "✅"
STATUS_OPEN = "⬜"

_FIRST_WS = re.compile(r"\s+")


@dataclass(slots=True, frozen=True)
class CommandRequest:
    """One `/todo ...` invocation: raw text after the command name plus caller identity."""

    text: str
    user_id: str
    user_name: str
    channel_id: str


CommandHandler = Callable[[AppState, str, CommandRequest], str]


def split_command(text: str) -> tuple[str, str]:
    """Split on the first whitespace run into (subcommand, rest). Subcommand is lowercased."""
    parts = _FIRST_WS.split((text or "").strip(), maxsplit=1)
    sub = parts[0].lower() if parts else ""
    rest = parts[1].strip() if len(parts) > 1 else ""
    return sub, rest


class CommandRegistry:
    """Subcommand registry for `/todo` (help, add, list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def resolve(self, name: str) -> CommandHandler:
        handler = self._handlers.get(name.lower())
        if handler is None:
            raise UnknownCommand(name)
        return handler

    def handle(self, state: AppState, request: CommandRequest) -> str:
        """
        Route one command and return the (ephemeral) reply text.

        Domain errors become user-facing replies; nothing escapes except bugs.
        """
        sub, rest = split_command(request.text)
        if not sub:
            return self.build_help()

        try:
            handler = self.resolve(sub)
        except UnknownCommand:
            return f"Unknown command: `{sub}`\n{self.build_help()}"

        try:
            return handler(state, rest, request)
        except InvalidInput as e:
            return f"Invalid input: {e}"
        except NotFound as e:
            return f"No task found with ID: `{e.task_id}`."
        except StoreError:
            logger.exception("Store error while handling %s %s", COMMAND_NAME, sub)
            return "The task store is unavailable right now. Please try again in a moment."

    def build_help(self) -> str:
        lines = ["*How to use the ToDo list*:"]
        for name, help_text in self._help.items():
            lines.append(f"• `{COMMAND_NAME} {name}` - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task_line(task: Task) -> str:
    status = STATUS_DONE if task.completed else STATUS_OPEN
    return f"{status} *ID:* `{task.id}` - {task.text} (@{task.user_name})"


def _single_id(rest: str, sub: str) -> str:
    task_id = rest.split()[0] if rest.split() else ""
    if not task_id:
        raise InvalidInput(f"task ID required. Example: `{COMMAND_NAME} {sub} 5f8d0e5e1c91c7353c6b4d7a`")
    return task_id


def cmd_help(state: AppState, rest: str, request: CommandRequest) -> str:
    return registry.build_help()


def cmd_add(state: AppState, rest: str, request: CommandRequest) -> str:
    if not rest:
        return f"Task text required. Example: `{COMMAND_NAME} add Prepare the meeting notes`"
    task = state.tasks.add_task(rest, request.user_id, request.user_name, request.channel_id)
    return f"Added task \"{task.text}\"."


def cmd_list(state: AppState, rest: str, request: CommandRequest) -> str:
    tasks = state.tasks.list_by_channel(request.channel_id)
    if not tasks:
        return "There are no tasks in this channel."
    lines = ["*ToDo list*:"]
    lines.extend(format_task_line(t) for t in tasks)
    return "\n".join(lines)


def cmd_complete(state: AppState, rest: str, request: CommandRequest) -> str:
    task = state.tasks.set_completed(_single_id(rest, "complete"), True)
    return f"Marked task \"{task.text}\" as complete."


def cmd_uncomplete(state: AppState, rest: str, request: CommandRequest) -> str:
    task = state.tasks.set_completed(_single_id(rest, "uncomplete"), False)
    return f"Marked task \"{task.text}\" as incomplete."


def cmd_delete(state: AppState, rest: str, request: CommandRequest) -> str:
    text = state.tasks.delete_task(_single_id(rest, "delete"))
    return f"Deleted task \"{text}\"."


def cmd_clear(state: AppState, rest: str, request: CommandRequest) -> str:
    removed = state.tasks.clear_completed(ClearScope.channel(request.channel_id))
    return f"Removed {removed} completed task(s)."


registry.register("help", cmd_help, help_text="Show this help message.")
registry.register("add", cmd_add, help_text="Add a new task: `add <task text>`.")
registry.register("list", cmd_list, help_text="List the tasks in this channel (alias: `ls`).", aliases=["ls"])
registry.register(
    "complete", cmd_complete, help_text="Mark a task as complete: `complete <task id>` (alias: `done`).", aliases=["done"]
)
registry.register("uncomplete", cmd_uncomplete, help_text="Mark a task as incomplete: `uncomplete <task id>`.")
registry.register("delete", cmd_delete, help_text="Delete a task: `delete <task id>` (alias: `rm`).", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Delete every completed task in this channel.")
