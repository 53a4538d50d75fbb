"""Summary: Key-value persistence for client-side inbox state.

Importance: Replaces browser localStorage so read state survives restarts in any host.
Alternatives: Keep read state only in memory for the process lifetime.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class KeyValueStore(ABC):
    """Summary: Minimal synchronous key-value interface.

    Importance: Lets tests and hosts substitute storage without touching the reconciler.
    Alternatives: Depend on a concrete storage class directly.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


class MemoryKeyValueStore(KeyValueStore):
    """Summary: Dictionary-backed store for tests and short-lived sessions.

    Importance: Gives deterministic isolated state per session.
    Alternatives: Use a temporary SQLite file.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SqliteKeyValueStore(KeyValueStore):
    """Summary: SQLite-backed key-value store.

    Importance: Persists the last-checked timestamp locally with no extra services.
    Alternatives: Write a JSON file on every change.
    """

    def __init__(self, db_path: str) -> None:
        """Summary: Initialize the store with a database path.

        Importance: Allows configurable database location per environment.
        Alternatives: Hardcode a default path in the class.
        """

        self._db_path = Path(db_path)

    def initialize(self) -> None:
        """Summary: Create the key-value table if it does not exist.

        Importance: Ensures the database is ready before the first reconciliation.
        Alternatives: Run migrations using a dedicated migration tool.
        """

        with self._connection() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            connection.commit()

    def get(self, key: str) -> str | None:
        with self._connection() as connection:
            row = connection.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connection() as connection:
            connection.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            connection.commit()

    def delete(self, key: str) -> None:
        with self._connection() as connection:
            connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            connection.commit()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Summary: Context manager for SQLite connections.

        Importance: Ensures connections are closed cleanly after use.
        Alternatives: Keep a single long-lived connection.
        """

        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
        finally:
            connection.close()
