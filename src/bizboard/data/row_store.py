# src/bizboard/data/row_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Any

from ..core.models import title_key
from ..core.ports import Row
from .rows import format_ts, utcnow

logger = logging.getLogger(__name__)


class RowStoreError(RuntimeError):
    """The store is unreachable or does not have the expected structure."""


class DuplicateRowError(RowStoreError):
    """A uniqueness constraint rejected the write."""


# Known columns per table (besides id/created_at/updated_at).
_COLUMNS: dict[str, tuple[str, ...]] = {
    "profiles": ("name", "email"),
    "businesses": (
        "user_id",
        "name",
        "type",
        "location",
        "industry",
        "size",
        "description",
        "founded_year",
        "website",
        "logo_url",
    ),
    "tasks": (
        "business_id",
        "title",
        "title_key",
        "description",
        "frequency",
        "priority",
        "status",
        "due_date",
        "completed_at",
        "category",
        "tags",
    ),
    "tips": ("business_id", "title", "content", "category", "source"),
}

_JSON_COLUMNS = {"tags"}
_HIDDEN_COLUMNS = {"title_key"}

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        email TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS businesses (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        location TEXT NOT NULL DEFAULT '',
        industry TEXT NOT NULL DEFAULT '',
        size TEXT NOT NULL DEFAULT 'small',
        description TEXT NOT NULL DEFAULT '',
        founded_year INTEGER,
        website TEXT,
        logo_url TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        business_id TEXT NOT NULL,
        title TEXT NOT NULL,
        title_key TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        frequency TEXT NOT NULL DEFAULT 'once',
        priority TEXT NOT NULL DEFAULT 'medium',
        status TEXT NOT NULL DEFAULT 'pending',
        due_date TEXT,
        completed_at TEXT,
        category TEXT NOT NULL DEFAULT 'other',
        tags TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tips (
        id TEXT PRIMARY KEY,
        business_id TEXT NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        category TEXT NOT NULL DEFAULT 'other',
        source TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_businesses_user ON businesses(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_business_status ON tasks(business_id, status)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_tasks_business_title ON tasks(business_id, title_key)",
    "CREATE INDEX IF NOT EXISTS idx_tips_business ON tips(business_id)",
)


class SqliteRowStore:
    """
    SQLite-backed row store standing in for the managed Postgres backend.

    Rows go in and come out as dicts with snake_case keys and ISO timestamp
    strings; mapping to domain records is the gateway's job.

    Thread-safety:
    - each method opens its own SQLite connection (the gateway calls us from
      worker threads)
    """

    def __init__(self, db_path: str | Path = "store.sqlite3", *, create_schema: bool = True) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        if create_schema:
            self._ensure_schema()
        logger.info("SqliteRowStore ready db=%s schema=%s", self._db_path, create_schema)

    # ---- low-level helpers ----

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
            for stmt in _SCHEMA:
                cur.execute(stmt)
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _columns(table: str) -> tuple[str, ...]:
        cols = _COLUMNS.get(table)
        if cols is None:
            raise RowStoreError(f"Unknown table: {table}")
        return cols

    @classmethod
    def _check_columns(cls, table: str, names: list[str]) -> None:
        allowed = set(cls._columns(table)) | {"id", "created_at", "updated_at"}
        unknown = [n for n in names if n not in allowed]
        if unknown:
            raise RowStoreError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")

    @staticmethod
    def _encode(name: str, value: Any) -> Any:
        if name in _JSON_COLUMNS:
            return json.dumps(list(value or []), ensure_ascii=False)
        return value

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Row:
        out: Row = {}
        for key in row.keys():
            if key in _HIDDEN_COLUMNS:
                continue
            val = row[key]
            if key in _JSON_COLUMNS:
                try:
                    val = json.loads(val) if val else []
                except ValueError:
                    val = []
            out[key] = val
        return out

    def _run(self, sql: str, params: list[Any]) -> list[sqlite3.Row]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise RowStoreError(f"Store unavailable: {e}") from e
        try:
            cur = conn.execute(sql, params)
            rows = cur.fetchall()
            conn.commit()
            return rows
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                raise DuplicateRowError(str(e)) from e
            raise RowStoreError(str(e)) from e
        except sqlite3.Error as e:
            raise RowStoreError(str(e)) from e
        finally:
            conn.close()

    # ---- public API ----

    def select(self, table: str, **filters: Any) -> list[Row]:
        """Equality-filtered read, oldest first."""
        self._check_columns(table, list(filters))
        sql = f"SELECT * FROM {table}"
        params: list[Any] = []
        if filters:
            sql += " WHERE " + " AND ".join(f"{k} = ?" for k in filters)
            params = [self._encode(k, v) for k, v in filters.items()]
        sql += " ORDER BY created_at ASC"
        return [self._row_to_dict(r) for r in self._run(sql, params)]

    def insert(self, table: str, row: Row) -> Row:
        data = {k: v for k, v in row.items() if k not in ("created_at", "updated_at")}
        if table == "tasks":
            data["title_key"] = title_key(str(data.get("title") or ""))
        self._check_columns(table, list(data))

        now = format_ts(utcnow())
        data.setdefault("id", uuid.uuid4().hex)
        data["created_at"] = now
        data["updated_at"] = now

        names = list(data)
        placeholders = ", ".join("?" for _ in names)
        sql = f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders})"
        self._run(sql, [self._encode(k, data[k]) for k in names])
        logger.debug("Row inserted table=%s id=%s", table, data["id"])

        inserted = self.select(table, id=data["id"])
        if not inserted:
            raise RowStoreError(f"Inserted row not readable: {table}/{data['id']}")
        return inserted[0]

    def update(self, table: str, row_id: str, changes: Row) -> Row | None:
        data = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        if table == "tasks" and "title" in data:
            data["title_key"] = title_key(str(data.get("title") or ""))
        data.setdefault("updated_at", format_ts(utcnow()))
        self._check_columns(table, list(data))

        names = list(data)
        sql = f"UPDATE {table} SET {', '.join(f'{k} = ?' for k in names)} WHERE id = ?"
        self._run(sql, [*(self._encode(k, data[k]) for k in names), row_id])

        rows = self.select(table, id=row_id)
        return rows[0] if rows else None
