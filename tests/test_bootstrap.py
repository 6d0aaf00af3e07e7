# tests/test_bootstrap.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from slack_todo.cli.bootstrap import create_initial_state, create_task_store, sqlite_path_from_uri
from slack_todo.tasks.task_store import TaskStore


def test_sqlite_path_from_uri(tmp_path: Path) -> None:
    assert sqlite_path_from_uri("sqlite:///tasks.db", tmp_path) == tmp_path / "tasks.db"
    assert sqlite_path_from_uri("sqlite:////var/lib/tasks.db", tmp_path) == Path("/var/lib/tasks.db")
    assert sqlite_path_from_uri("nested/tasks.db", tmp_path) == tmp_path / "nested" / "tasks.db"


def test_create_task_store_picks_sqlite(settings: SimpleNamespace) -> None:
    store = create_task_store(settings)
    assert isinstance(store, TaskStore)
    assert store.ping() is True


def test_create_task_store_requires_uri(settings: SimpleNamespace) -> None:
    settings.store_uri = "  "
    with pytest.raises(ValueError):
        create_task_store(settings)


def test_create_initial_state_wires_service(settings: SimpleNamespace, tmp_path: Path) -> None:
    settings.data_dir = tmp_path / "data"
    settings.store_uri = "sqlite:///tasks.sqlite3"

    state = create_initial_state(settings=settings)

    assert settings.data_dir.is_dir()
    task = state.tasks.add_task("hello", "U1", "alice", "C1")
    assert state.task_store.find_by_id(task.id) == task
