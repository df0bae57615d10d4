"""Persistent key-value storage for session data on the device."""

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    """Interface for small persistent string values."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value, if any."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value."""

    def remove_item(self, key: str) -> None:
        """Remove a value if present."""


@dataclass
class SqliteKeyValueStore(KeyValueStore):
    """Key-value storage kept in a single SQLite table."""

    connection: sqlite3.Connection

    @classmethod
    def open(cls, db_path: str | Path) -> "SqliteKeyValueStore":
        """Open the storage file and ensure the table exists."""
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(str(db_path), check_same_thread=False)
        with connection:
            connection.execute(
                "CREATE TABLE IF NOT EXISTS key_value "
                "(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
        return cls(connection)

    def get_item(self, key: str) -> str | None:
        """Return the stored value for a key."""
        row = self.connection.execute(
            "SELECT value FROM key_value WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Insert or replace a value."""
        with self.connection:
            self.connection.execute(
                "INSERT INTO key_value (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        """Delete a key."""
        with self.connection:
            self.connection.execute("DELETE FROM key_value WHERE key = ?", (key,))

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()
