# src/slack_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the task store backend from the store URI and injects it into TaskService.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import get_settings
from ..core.ports import TaskRepo
from ..core.retry import RetryManager
from ..core.state import AppState
from ..tasks.mongo_store import MongoTaskStore
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

SQLITE_SCHEME = "sqlite:///"
MONGO_SCHEMES = ("mongodb://", "mongodb+srv://")


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def sqlite_path_from_uri(uri: str, data_dir: Path) -> Path:
    """`sqlite:///tasks.db` / plain paths -> Path; relative paths live under data_dir."""
    raw = uri[len(SQLITE_SCHEME) :] if uri.startswith(SQLITE_SCHEME) else uri
    path = Path(raw).expanduser()
    return path if path.is_absolute() else data_dir / path


def create_task_store(settings) -> TaskRepo:
    uri = (settings.store_uri or "").strip()
    if not uri:
        raise ValueError("store URI is not set (TODO_STORE_URI / MONGODB_URI)")

    timeout_ms = int(getattr(settings, "store_timeout_ms", 5000))
    retry = RetryManager(max_retries=int(getattr(settings, "store_max_retries", 3)))

    if uri.startswith(MONGO_SCHEMES):
        logger.info("Using MongoDB task store.")
        return MongoTaskStore.from_uri(uri, timeout_ms=timeout_ms, retry=retry)

    path = sqlite_path_from_uri(uri, Path(settings.data_dir))
    logger.info("Using SQLite task store at %s.", path)
    return TaskStore(path, timeout_s=timeout_ms / 1000.0, retry=retry)


def create_initial_state(*, settings=None, task_store: TaskRepo | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the store) injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = task_store if task_store is not None else create_task_store(settings)
    return AppState(settings=settings, task_store=store, tasks=TaskService(store))
