"""Key/value persistence for memory snapshots."""

import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

import aiosqlite

from orbit.core.logging import get_logger

logger = get_logger("memory.kv")


# Python 3.12+ fix: Register datetime adapters explicitly
def _adapt_datetime(dt: datetime) -> str:
    """Convert datetime to ISO format string for SQLite storage."""
    return dt.isoformat()


sqlite3.register_adapter(datetime, _adapt_datetime)

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


class PersistenceError(RuntimeError):
    """Value could not be written to the key/value slot."""


class KeyValueStore(ABC):
    """Flat string key/value slot."""

    async def connect(self) -> None:
        """Open underlying resources. No-op by default."""
        return None

    async def close(self) -> None:
        """Release underlying resources. No-op by default."""
        return None

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get value, or None when the key is absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Write value.

        Raises:
            PersistenceError: write failed
        """
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local slot; contents vanish with the object."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed slot, one row per key."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self.db_path)
        await self._conn.executescript(SCHEMA)
        await self._conn.commit()
        logger.info(f"Connected to key/value store: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Key/value store not connected. Call connect() first.")
        return self._conn

    async def get(self, key: str) -> str | None:
        async with self.conn.execute(
            "SELECT value FROM kv WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
            return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        now = datetime.now()
        try:
            await self.conn.execute(
                """INSERT INTO kv (key, value, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET value=?, updated_at=?""",
                (key, value, now, value, now),
            )
            await self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to write {key!r}: {e}") from e
