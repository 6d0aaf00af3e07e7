# src/slack_todo/connectors/slack_connector.py

"""
Slack connector (Bolt, socket mode).

The connector owns everything Slack-specific:
- acknowledging requests first (Slack's 3-second ack contract),
- turning raw payload dicts into typed requests,
- delivering replies / views through the Web API.

Task logic stays in TaskService, command routing in cli/commands.py and the
Home-tab behaviour in home/handlers.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_sdk import WebClient

from ..cli.commands import COMMAND_NAME, CommandRequest, registry as command_registry
from ..core.state import AppState
from ..home.handlers import (
    AddTaskSubmission,
    ClearCompletedClick,
    HomeHandlers,
    HomeOpened,
    OpenAddModal,
    TaskButton,
)
from ..home.view import (
    ACTION_ADD,
    ACTION_CLEAR,
    ACTION_COMPLETE,
    ACTION_DELETE,
    CHANNEL_BLOCK,
    CHANNEL_SELECT,
    MODAL_CALLBACK_ID,
    TASK_BLOCK,
    TASK_INPUT,
)

logger = logging.getLogger(__name__)


class SlackOutbound:
    """HomePublisher + Messenger over the Slack Web API."""

    def __init__(self, client: WebClient) -> None:
        self._client = client

    def publish_home(self, *, user_id: str, view: dict[str, Any]) -> None:
        self._client.views_publish(user_id=user_id, view=view)

    def open_modal(self, *, trigger_id: str, view: dict[str, Any]) -> None:
        self._client.views_open(trigger_id=trigger_id, view=view)

    def post_message(self, *, channel_id: str, text: str) -> None:
        self._client.chat_postMessage(channel=channel_id, text=text)

    def notify_user(self, *, user_id: str, text: str) -> None:
        # Posting to a user id delivers a DM from the app.
        self._client.chat_postMessage(channel=user_id, text=text)


# ---- payload parsing ----


def _user(body: dict[str, Any]) -> dict[str, Any]:
    user = body.get("user") or {}
    return user if isinstance(user, dict) else {}


def parse_command(command: dict[str, Any]) -> CommandRequest:
    return CommandRequest(
        text=str(command.get("text") or ""),
        user_id=str(command.get("user_id") or ""),
        user_name=str(command.get("user_name") or ""),
        channel_id=str(command.get("channel_id") or ""),
    )


def parse_home_opened(event: dict[str, Any]) -> HomeOpened | None:
    # app_home_opened also fires for the Messages tab.
    if event.get("tab", "home") != "home":
        return None
    user_id = str(event.get("user") or "")
    return HomeOpened(user_id=user_id) if user_id else None


def parse_task_button(body: dict[str, Any]) -> TaskButton:
    actions = body.get("actions") or [{}]
    return TaskButton(
        user_id=str(_user(body).get("id") or ""),
        task_id=str(actions[0].get("value") or ""),
    )


def parse_add_submission(body: dict[str, Any], view: dict[str, Any]) -> AddTaskSubmission:
    values = (view.get("state") or {}).get("values") or {}
    task_input = (values.get(TASK_BLOCK) or {}).get(TASK_INPUT) or {}
    channel_select = (values.get(CHANNEL_BLOCK) or {}).get(CHANNEL_SELECT) or {}
    user = _user(body)
    user_id = str(user.get("id") or "")
    return AddTaskSubmission(
        user_id=user_id,
        user_name=str(user.get("username") or user.get("name") or user_id),
        text=str(task_input.get("value") or ""),
        channel_id=str(channel_select.get("selected_conversation") or ""),
    )


# ---- listeners ----


def register_handlers(app: App, state: AppState, home: HomeHandlers) -> None:
    @app.command(COMMAND_NAME)
    def handle_todo_command(ack, respond, command):
        ack()
        req = parse_command(command)
        logger.info("Slash command %s %r from %s in %s", COMMAND_NAME, req.text, req.user_id, req.channel_id)
        try:
            reply = command_registry.handle(state, req)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."
        respond(text=reply, response_type="ephemeral")

    @app.event("app_home_opened")
    def handle_home_opened(event):
        req = parse_home_opened(event)
        if req is not None:
            home.on_home_opened(req)

    @app.action(ACTION_ADD)
    def handle_add_button(ack, body):
        ack()
        home.on_open_add_modal(
            OpenAddModal(user_id=str(_user(body).get("id") or ""), trigger_id=str(body.get("trigger_id") or ""))
        )

    @app.action(ACTION_COMPLETE)
    def handle_complete_button(ack, body):
        ack()
        home.on_complete(parse_task_button(body))

    @app.action(ACTION_DELETE)
    def handle_delete_button(ack, body):
        ack()
        home.on_delete(parse_task_button(body))

    @app.action(ACTION_CLEAR)
    def handle_clear_button(ack, body):
        ack()
        home.on_clear_completed(ClearCompletedClick(user_id=str(_user(body).get("id") or "")))

    @app.view(MODAL_CALLBACK_ID)
    def handle_add_submission(ack, body, view):
        req = parse_add_submission(body, view)
        if not req.text.strip():
            ack(response_action="errors", errors={TASK_BLOCK: "Task text required."})
            return
        ack()
        home.on_add_submission(req)


def create_slack_app(state: AppState) -> App:
    settings = state.settings
    app = App(token=settings.slack_bot_token, signing_secret=settings.slack_signing_secret)
    outbound = SlackOutbound(app.client)
    register_handlers(app, state, HomeHandlers(state.tasks, outbound, outbound))
    return app


@dataclass
class SlackBackgroundRunner:
    handler: SocketModeHandler

    def stop(self) -> None:
        try:
            self.handler.close()
        except Exception:
            logger.debug("Failed to close Slack socket-mode handler.", exc_info=True)


def start_slack_in_background(state: AppState) -> SlackBackgroundRunner | None:
    """
    Connect the socket-mode client without blocking.

    SocketModeHandler.connect() runs the websocket on its own threads, so the console
    REPL (or the main thread's signal wait) keeps running in parallel.
    """
    settings = state.settings
    if not settings.slack_enabled:
        logger.info("Slack connector disabled, not starting.")
        return None

    try:
        app = create_slack_app(state)
        handler = SocketModeHandler(app, settings.slack_app_token)
        handler.connect()
    except Exception:
        logger.exception("Slack connector failed to start.")
        return None

    logger.info("Slack socket-mode connector started.")
    return SlackBackgroundRunner(handler=handler)
