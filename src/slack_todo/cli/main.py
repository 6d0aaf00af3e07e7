# src/slack_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts connectors:
- health server in a background thread (optional),
- Slack socket-mode connector in background threads (optional),
- console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..cli.bootstrap import create_initial_state
from ..config import ENV_VARS, get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.slack_connector import SlackBackgroundRunner, start_slack_in_background
from ..core.state import AppState
from ..health.server import HealthServerRunner, start_health_in_background
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.task_store.close()
    except Exception:
        logger.debug("Task store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    missing = settings.missing_required()
    if missing:
        for name in missing:
            logger.error("Missing required setting %s: %s", name, ENV_VARS.get(name, ""))
        sys.exit(2)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except Exception:
        logger.exception("Failed to initialize the task store.")
        sys.exit(1)

    health_runner: HealthServerRunner | None = start_health_in_background(state)
    slack_runner: SlackBackgroundRunner | None = start_slack_in_background(state)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running background connectors only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if slack_runner is not None:
            slack_runner.stop()

        if health_runner is not None:
            health_runner.stop()
            health_runner.join(timeout=10.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
