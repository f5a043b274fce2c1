from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional

from .storage import KeyValueStore


@dataclass(frozen=True)
class _Cols:
    table: str = "kv"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


class SQLiteKeyValueStore(KeyValueStore):
    """
    Lightweight SQLite key-value store implementing the KeyValueStore interface.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @property
    def backend_name(self) -> str:
        return "sqlite"

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
            return str(row[_COLS.value]) if row else None

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"value for {key!r} must be str, got {type(value).__name__}")
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}) VALUES (?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                """,
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
