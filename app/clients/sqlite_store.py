"""SQLite database handle shared by the account and token stores."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from app.core.errors import PersistenceError

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        resource_uuid TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        app_slug TEXT NOT NULL,
        plan_slug TEXT NOT NULL,
        language TEXT,
        email_preference INTEGER NOT NULL DEFAULT 0,
        source TEXT NOT NULL,
        status TEXT NOT NULL,
        license_key TEXT NOT NULL,
        created_at TEXT NOT NULL,
        modified_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS activities (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        account_id INTEGER NOT NULL REFERENCES accounts (id),
        resource_uuid TEXT NOT NULL,
        source TEXT NOT NULL,
        title TEXT NOT NULL,
        body TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tokens (
        resource_uuid TEXT PRIMARY KEY,
        access_token_encrypted TEXT NOT NULL,
        refresh_token_encrypted TEXT NOT NULL,
        expires_at INTEGER NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
)


class SQLiteStore:
    """Owns the database file, its schema and short-lived connections."""

    def __init__(self, db_path: str, *, timeout: float = 5.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection that commits on success and is always closed.

        ``sqlite3.Error`` raised inside the block, including lock waits that
        exceed the configured timeout, is re-raised as ``PersistenceError``.
        """
        try:
            conn = sqlite3.connect(
                self._db_path, timeout=self._timeout, check_same_thread=False
            )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to open database: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as exc:
            raise PersistenceError(f"Database operation failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self.connection() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)


__all__ = ["SQLiteStore"]
