"""Key-value state store: Protocol definition, SQLite implementation, factory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Protocol, runtime_checkable

import aiosqlite

from finz.core.config import StorageConfig
from finz.core.exceptions import StorageError

logger = logging.getLogger(__name__)


@runtime_checkable
class StateStore(Protocol):
    """Numeric settings keyed by name. Upserts are last-write-wins."""

    async def get(self, key: str) -> float | None: ...
    async def put(self, key: str, value: float) -> None: ...
    async def initialize(self) -> None: ...
    async def close(self) -> None: ...
    async def health_check(self) -> bool: ...


class SqliteStateStore:
    """SQLite implementation of the state store.

    Uses aiosqlite for async access, WAL mode, and a version-tracked
    migration system.
    """

    _MIGRATIONS: ClassVar[dict[int, tuple[str, list[str]]]] = {
        1: (
            "Initial schema",
            [
                """CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT DEFAULT (datetime('now'))
                )""",
                """CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value REAL,
                    updated_at TEXT DEFAULT (datetime('now'))
                )""",
            ],
        ),
    }

    def __init__(self, config: StorageConfig) -> None:
        self._path = config.sqlite_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open connection, enable WAL, run migrations."""
        try:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self._path)
            await self._db.execute("PRAGMA journal_mode=WAL")
            current = await self._get_schema_version()
            await self._apply_migrations(current)
            await self._db.commit()
        except Exception as e:
            raise StorageError(
                f"Failed to initialize SQLite state store: {e}",
                context={"operation": "initialize", "path": self._path},
            ) from e

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def health_check(self) -> bool:
        if self._db is None:
            return False
        try:
            async with self._db.execute("SELECT 1") as cursor:
                row = await cursor.fetchone()
            return row is not None
        except Exception:
            return False

    # --- Schema Migration ---

    async def _get_schema_version(self) -> int:
        try:
            async with self._db.execute(
                "SELECT MAX(version) FROM schema_version"
            ) as cursor:
                row = await cursor.fetchone()
            return row[0] if row[0] is not None else 0
        except aiosqlite.OperationalError:
            return 0

    async def _apply_migrations(self, current_version: int) -> None:
        for version in sorted(self._MIGRATIONS.keys()):
            if version <= current_version:
                continue
            desc, statements = self._MIGRATIONS[version]
            logger.info("Applying migration %d: %s", version, desc)
            for sql in statements:
                await self._db.execute(sql)
            await self._db.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )

    # --- Key-Value Operations ---

    def _connection(self, operation: str, key: str) -> aiosqlite.Connection:
        if self._db is None:
            raise StorageError(
                "State store is not initialized",
                context={"operation": operation, "key": key},
            )
        return self._db

    async def get(self, key: str) -> float | None:
        db = self._connection("get", key)
        try:
            async with db.execute(
                "SELECT value FROM app_state WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except Exception as e:
            raise StorageError(
                f"Failed to read state: {e}",
                context={"operation": "get", "key": key},
            ) from e
        if row is None or row[0] is None:
            return None
        return float(row[0])

    async def put(self, key: str, value: float) -> None:
        db = self._connection("put", key)
        try:
            await db.execute(
                """INSERT INTO app_state (key, value, updated_at)
                   VALUES (?, ?, datetime('now'))
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (key, value),
            )
            await db.commit()
        except Exception as e:
            raise StorageError(
                f"Failed to write state: {e}",
                context={"operation": "put", "key": key},
            ) from e


async def create_state_store(config: StorageConfig) -> SqliteStateStore | None:
    """Create and initialize the state store, or None when storage is disabled."""
    if not config.enabled:
        logger.info("State store disabled")
        return None
    store = SqliteStateStore(config)
    await store.initialize()
    return store
