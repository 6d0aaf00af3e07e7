# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from slack_todo.core.retry import RetryManager
from slack_todo.core.state import AppState
from slack_todo.tasks.task_service import TaskService
from slack_todo.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeOutbound


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the connectors.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="slack-todo",
        data_dir=tmp_path,
        store_uri=f"sqlite:///{tmp_path / 'tasks.sqlite3'}",
        store_timeout_ms=1000,
        store_max_retries=3,
        slack_enabled=False,
        console_enabled=False,
        health_enabled=False,
        slack_bot_token="xoxb-test",
        slack_signing_secret="secret",
        slack_app_token="xapp-test",
        host="127.0.0.1",
        port=10000,
    )


@pytest.fixture()
def no_sleep_retry() -> RetryManager:
    return RetryManager(max_retries=3, sleep=lambda _s: None)


@pytest.fixture()
def store(tmp_path: Path, no_sleep_retry: RetryManager) -> TaskStore:
    """Real SQLite store: its correctness is part of what we want to test."""
    return TaskStore(tmp_path / "tasks.sqlite3", retry=no_sleep_retry)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def service(store: TaskStore, clock: FakeClock) -> TaskService:
    return TaskService(store, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, service: TaskService) -> AppState:
    return AppState(settings=settings, task_store=store, tasks=service)


@pytest.fixture()
def outbound() -> FakeOutbound:
    return FakeOutbound()
