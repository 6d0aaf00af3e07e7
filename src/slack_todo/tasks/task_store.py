# src/slack_todo/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Any

from ..core.errors import StoreError
from ..core.retry import RetryManager
from .task_models import Task, TaskFilter

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store (local runs and tests).

    The table and its indexes are created on first use.

    Ids are generated client-side (uuid4 hex) so an insert retried after a
    "database is locked" error cannot create a second row.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        timeout_s: float = 30.0,
        retry: RetryManager | None = None,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout_s = float(timeout_s)
        self._retry = retry or RetryManager()
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout_s)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    text TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    user_id TEXT NOT NULL,
                    user_name TEXT NOT NULL,
                    channel_id TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
                """
            )

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_channel ON tasks(channel_id, created_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id, created_at)")

            conn.commit()
        finally:
            conn.close()

    def _run(self, op_name: str, fn: Any) -> Any:
        """Retry transient failures; map remaining driver errors to StoreError."""
        try:
            return self._retry.call(op_name, fn)
        except sqlite3.Error as e:
            logger.exception("TaskStore %s failed", op_name)
            raise StoreError(f"{op_name} failed: {e}") from e

    @staticmethod
    def _where(flt: TaskFilter) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []

        if flt.channel_id is not None:
            clauses.append("channel_id = ?")
            params.append(flt.channel_id)

        if flt.user_id is not None:
            clauses.append("user_id = ?")
            params.append(flt.user_id)

        if flt.completed is not None:
            clauses.append("completed = ?")
            params.append(1 if flt.completed else 0)

        if not clauses:
            return "", params
        return "WHERE " + " AND ".join(clauses), params

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            text=str(row["text"] or ""),
            completed=bool(row["completed"]),
            user_id=str(row["user_id"]),
            user_name=str(row["user_name"] or ""),
            channel_id=str(row["channel_id"]),
            created_at=float(row["created_at"] or 0.0),
        )

    def _select_one(self, conn: sqlite3.Connection, task_id: str) -> Task | None:
        cur = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
        row = cur.fetchone()
        return self._row_to_task(row) if row else None

    # ---- public API ----

    def count_tasks(self) -> int:
        def op() -> int:
            conn = self._get_conn()
            try:
                (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
                return int(n)
            finally:
                conn.close()

        return self._run("count_tasks", op)

    def ping(self) -> bool:
        try:
            conn = self._get_conn()
            try:
                conn.execute("SELECT 1").fetchone()
            finally:
                conn.close()
            return True
        except sqlite3.Error:
            logger.warning("TaskStore ping failed db=%s", self._db_path, exc_info=True)
            return False

    def insert(self, *, text: str, user_id: str, user_name: str, channel_id: str, created_at: float) -> Task:
        task = Task(
            id=uuid.uuid4().hex,
            text=text,
            completed=False,
            user_id=user_id,
            user_name=user_name,
            channel_id=channel_id,
            created_at=float(created_at),
        )

        def op() -> Task:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT OR IGNORE INTO tasks(id, text, completed, user_id, user_name, channel_id, created_at)
                    VALUES (?, ?, 0, ?, ?, ?, ?)
                    """,
                    (task.id, task.text, task.user_id, task.user_name, task.channel_id, task.created_at),
                )
                conn.commit()
                return task
            finally:
                conn.close()

        inserted = self._run("insert", op)
        logger.debug("Task added id=%s channel=%s user=%s", task.id, channel_id, user_id)
        return inserted

    def find(self, flt: TaskFilter) -> list[Task]:
        where, params = self._where(flt)

        def op() -> list[Task]:
            conn = self._get_conn()
            try:
                cur = conn.execute(f"SELECT * FROM tasks {where} ORDER BY created_at ASC, seq ASC", params)
                return [self._row_to_task(r) for r in cur.fetchall()]
            finally:
                conn.close()

        return self._run("find", op)

    def find_by_id(self, task_id: str) -> Task | None:
        def op() -> Task | None:
            conn = self._get_conn()
            try:
                return self._select_one(conn, task_id)
            finally:
                conn.close()

        return self._run("find_by_id", op)

    def set_completed(self, task_id: str, value: bool) -> Task | None:
        def op() -> Task | None:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    "UPDATE tasks SET completed = ? WHERE id = ?",
                    (1 if value else 0, task_id),
                )
                conn.commit()
                if cur.rowcount == 0:
                    return None
                return self._select_one(conn, task_id)
            finally:
                conn.close()

        return self._run("set_completed", op)

    def delete_by_id(self, task_id: str) -> Task | None:
        # Not retried: a retry after a lost commit would report the task as missing.
        conn = self._get_conn()
        try:
            # Single statement: concurrent deletes of one id cannot both return the row.
            rows = conn.execute("DELETE FROM tasks WHERE id = ? RETURNING *", (task_id,)).fetchall()
            conn.commit()
            return self._row_to_task(rows[0]) if rows else None
        except sqlite3.Error as e:
            logger.exception("TaskStore delete_by_id failed id=%s", task_id)
            raise StoreError(f"delete_by_id failed: {e}") from e
        finally:
            conn.close()

    def delete_many(self, flt: TaskFilter) -> int:
        where, params = self._where(flt)
        if not where:
            raise ValueError("delete_many requires a non-empty filter")

        conn = self._get_conn()
        try:
            cur = conn.execute(f"DELETE FROM tasks {where}", params)
            conn.commit()
            return int(cur.rowcount)
        except sqlite3.Error as e:
            logger.exception("TaskStore delete_many failed")
            raise StoreError(f"delete_many failed: {e}") from e
        finally:
            conn.close()
