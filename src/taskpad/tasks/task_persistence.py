# tasks/task_persistence.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path

from ..core.ports import KeyValueStorePort
from .task_models import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"


class SQLiteKeyValueStore:
    """
    SQLite-backed key-value store for opaque blobs.

    One row per key; set() overwrites. Each method opens its own short-lived
    connection, so the store can be shared across threads.
    """

    def __init__(self, db_path: str | Path = "taskpad.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("KeyValueStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> bytes | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            if row is None:
                return None
            value = row[0]
            return value.encode("utf-8") if isinstance(value, str) else bytes(value)
        finally:
            conn.close()

    def set(self, key: str, value: bytes) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(value), time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


class TaskPersistence:
    """
    Stores the whole task collection as one JSON blob under a fixed key.

    There is no schema version: a blob that no longer decodes is treated as
    "no data" and the app starts with an empty list.
    """

    def __init__(self, kv: KeyValueStorePort, key: str = TASKS_KEY) -> None:
        self._kv = kv
        self._key = key

    def save(self, tasks: list[Task]) -> bool:
        try:
            blob = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False).encode("utf-8")
        except Exception:
            logger.exception("Failed to encode %d tasks; not saved.", len(tasks))
            return False

        try:
            self._kv.set(self._key, blob)
        except Exception:
            logger.exception("Failed to write tasks blob key=%s", self._key)
            return False

        logger.debug("Saved %d tasks (%d bytes)", len(tasks), len(blob))
        return True

    def load(self) -> list[Task]:
        try:
            blob = self._kv.get(self._key)
        except Exception:
            logger.exception("Failed to read tasks blob key=%s", self._key)
            return []

        if blob is None:
            return []

        try:
            data = json.loads(blob.decode("utf-8"))
            if not isinstance(data, list):
                raise TypeError(f"stored tasks must be a list, got {type(data).__name__}")
            tasks = [Task.from_dict(item) for item in data]
        except Exception:
            logger.warning("Stored tasks could not be decoded; starting empty.", exc_info=True)
            return []

        logger.info("Loaded %d tasks", len(tasks))
        return tasks
