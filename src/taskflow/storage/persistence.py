# src/taskflow/storage/persistence.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TASKS_COLLECTION = "tasks"
NOTES_COLLECTION = "notes"


class SQLiteCollectionRepo:
    """
    SQLite persistence for whole serialized collections.

    Every collection is stored as one JSON array under a namespaced key
    ("<namespace>:<name>") and is rewritten in full on each save.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "taskflow.sqlite3", *, namespace: str = "taskflow") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._namespace = namespace.strip() or "taskflow"
        self._ensure_schema()
        logger.info("Persistence ready db=%s namespace=%s", self._db_path, self._namespace)

    # ---- low-level helpers ----

    def _key(self, name: str) -> str:
        return f"{self._namespace}:{name}"

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS collections (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL DEFAULT '[]',
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def load_collection(self, name: str) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT payload FROM collections WHERE key = ?", (self._key(name),))
            row = cur.fetchone()
        finally:
            conn.close()

        if row is None:
            return []
        try:
            val = json.loads(row["payload"])
        except (TypeError, ValueError):
            logger.warning("Collection %s has an unreadable payload; starting empty.", self._key(name))
            return []
        if not isinstance(val, list):
            return []
        return [r for r in val if isinstance(r, dict)]

    def save_collection(self, name: str, records: list[dict[str, Any]]) -> None:
        payload = json.dumps(records, ensure_ascii=False)
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO collections(key, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    payload = excluded.payload,
                    updated_at = excluded.updated_at
                """,
                (self._key(name), payload, time.time()),
            )
            conn.commit()
            logger.debug("Saved collection %s items=%d", self._key(name), len(records))
        finally:
            conn.close()
