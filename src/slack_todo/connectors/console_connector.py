# src/slack_todo/connectors/console_connector.py

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import COMMAND_NAME, CommandRequest, registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

CONSOLE_USER_ID = "console"
CONSOLE_CHANNEL_ID = "console"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _console_user_name() -> str:
    try:
        return getpass.getuser()
    except Exception:
        return CONSOLE_USER_ID


def handle_console_line(state: AppState, line: str, *, user_name: str = CONSOLE_USER_ID) -> str | None:
    """
    Route one console line. Returns the reply, or None if the line is not a /todo command.
    """
    stripped = line.strip()
    if stripped != COMMAND_NAME and not stripped.startswith(COMMAND_NAME + " "):
        return None

    req = CommandRequest(
        text=stripped[len(COMMAND_NAME) :].strip(),
        user_id=CONSOLE_USER_ID,
        user_name=user_name,
        channel_id=CONSOLE_CHANNEL_ID,
    )
    try:
        return command_registry.handle(state, req)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState, *, read_line: Callable[[str], str] = input) -> None:
    logger.info("Console connector started.")
    _print_ts(f"[CONSOLE] Type `{COMMAND_NAME} help` for commands. Use /exit to quit.\n")

    user_name = _console_user_name()

    while True:
        try:
            user_input = read_line(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_console_line(state, user_input, user_name=user_name)
        if reply is None:
            _print_ts(f"Not a command. Try `{COMMAND_NAME} help`.")
            continue

        _print_ts(reply)

    logger.info("Console connector finished.")
