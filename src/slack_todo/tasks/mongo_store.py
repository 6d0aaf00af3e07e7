# src/slack_todo/tasks/mongo_store.py

from __future__ import annotations

import logging
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..core.errors import StoreError
from ..core.retry import RetryManager
from .task_models import Task, TaskFilter

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "slack_todo"
COLLECTION_NAME = "todos"

_SORT = [("created_at", ASCENDING), ("_id", ASCENDING)]


class MongoTaskStore:
    """
    MongoDB task store: one document per task in the `todos` collection.

    Document shape:
        {_id: ObjectId, text, completed, user_id, user_name, channel_id, created_at}

    Malformed ids (not a 24-hex ObjectId) behave like unknown ids and are never sent
    to the server. Inserts carry a client-generated _id, so a retried insert whose
    first attempt already landed surfaces as DuplicateKeyError and is treated as success.
    """

    def __init__(
        self,
        collection: Collection,
        *,
        client: MongoClient | None = None,
        retry: RetryManager | None = None,
    ) -> None:
        self._col = collection
        self._client = client
        self._retry = retry or RetryManager()
        self._ensure_indexes()
        logger.info("MongoTaskStore ready collection=%s", getattr(collection, "full_name", COLLECTION_NAME))

    @classmethod
    def from_uri(cls, uri: str, *, timeout_ms: int = 5000, retry: RetryManager | None = None) -> MongoTaskStore:
        client: MongoClient = MongoClient(
            uri,
            connectTimeoutMS=timeout_ms,
            socketTimeoutMS=timeout_ms,
            serverSelectionTimeoutMS=timeout_ms,
            # Transient failures are retried by RetryManager with backoff.
            retryWrites=False,
        )
        db = client.get_default_database(default=DEFAULT_DB_NAME)
        return cls(db[COLLECTION_NAME], client=client, retry=retry)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("MongoTaskStore connection closed.")

    # ---- low-level helpers ----

    def _ensure_indexes(self) -> None:
        try:
            self._col.create_index([("channel_id", ASCENDING), ("created_at", ASCENDING)])
            self._col.create_index([("user_id", ASCENDING), ("created_at", ASCENDING)])
        except PyMongoError:
            # The store stays usable without indexes; first real call reports connectivity.
            logger.warning("MongoTaskStore: failed to ensure indexes", exc_info=True)

    def _run(self, op_name: str, fn: Any) -> Any:
        try:
            return self._retry.call(op_name, fn)
        except PyMongoError as e:
            logger.exception("MongoTaskStore %s failed", op_name)
            raise StoreError(f"{op_name} failed: {e}") from e

    @staticmethod
    def _oid(task_id: str) -> ObjectId | None:
        if not task_id or not ObjectId.is_valid(task_id):
            return None
        return ObjectId(task_id)

    @staticmethod
    def _query(flt: TaskFilter) -> dict[str, Any]:
        query: dict[str, Any] = {}
        if flt.channel_id is not None:
            query["channel_id"] = flt.channel_id
        if flt.user_id is not None:
            query["user_id"] = flt.user_id
        if flt.completed is not None:
            query["completed"] = flt.completed
        return query

    @staticmethod
    def _doc_to_task(doc: dict[str, Any]) -> Task:
        return Task(
            id=str(doc["_id"]),
            text=str(doc.get("text") or ""),
            completed=bool(doc.get("completed", False)),
            user_id=str(doc.get("user_id") or ""),
            user_name=str(doc.get("user_name") or ""),
            channel_id=str(doc.get("channel_id") or ""),
            created_at=float(doc.get("created_at") or 0.0),
        )

    # ---- public API ----

    def ping(self) -> bool:
        if self._client is None:
            return True
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError:
            logger.warning("MongoTaskStore ping failed", exc_info=True)
            return False

    def insert(self, *, text: str, user_id: str, user_name: str, channel_id: str, created_at: float) -> Task:
        doc = {
            "_id": ObjectId(),
            "text": text,
            "completed": False,
            "user_id": user_id,
            "user_name": user_name,
            "channel_id": channel_id,
            "created_at": float(created_at),
        }
        attempts = 0

        def op() -> Task:
            nonlocal attempts
            attempts += 1
            try:
                # insert_one mutates its argument; pass a copy so retries resend the same doc.
                self._col.insert_one(dict(doc))
            except DuplicateKeyError:
                if attempts == 1:
                    raise
                logger.info("Insert retry hit existing _id=%s; first attempt had landed.", doc["_id"])
            return self._doc_to_task(doc)

        task = self._run("insert", op)
        logger.debug("Task added id=%s channel=%s user=%s", task.id, channel_id, user_id)
        return task

    def find(self, flt: TaskFilter) -> list[Task]:
        query = self._query(flt)
        return self._run("find", lambda: [self._doc_to_task(d) for d in self._col.find(query).sort(_SORT)])

    def find_by_id(self, task_id: str) -> Task | None:
        oid = self._oid(task_id)
        if oid is None:
            return None
        doc = self._run("find_by_id", lambda: self._col.find_one({"_id": oid}))
        return self._doc_to_task(doc) if doc else None

    def set_completed(self, task_id: str, value: bool) -> Task | None:
        oid = self._oid(task_id)
        if oid is None:
            return None
        doc = self._run(
            "set_completed",
            lambda: self._col.find_one_and_update(
                {"_id": oid},
                {"$set": {"completed": bool(value)}},
                return_document=ReturnDocument.AFTER,
            ),
        )
        return self._doc_to_task(doc) if doc else None

    def delete_by_id(self, task_id: str) -> Task | None:
        oid = self._oid(task_id)
        if oid is None:
            return None
        # Not retried: a retry after a lost reply would report the task as missing.
        try:
            doc = self._col.find_one_and_delete({"_id": oid})
        except PyMongoError as e:
            logger.exception("MongoTaskStore delete_by_id failed id=%s", task_id)
            raise StoreError(f"delete_by_id failed: {e}") from e
        return self._doc_to_task(doc) if doc else None

    def delete_many(self, flt: TaskFilter) -> int:
        query = self._query(flt)
        if not query:
            raise ValueError("delete_many requires a non-empty filter")
        try:
            result = self._col.delete_many(query)
        except PyMongoError as e:
            logger.exception("MongoTaskStore delete_many failed")
            raise StoreError(f"delete_many failed: {e}") from e
        return int(result.deleted_count)
