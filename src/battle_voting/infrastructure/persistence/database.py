"""aiosqlite access layer for battle voting.

Every operation opens its own connection. Mutating use cases run inside
``locked_transaction()``, which holds SQLite's write lock for the whole
read-check-write sequence.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite

from battle_voting.domain.shared.constants import SQLPragmas
from battle_voting.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import DatabaseSettings

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"
_SHARED_MEMORY_URI = "file:battle-voting?mode=memory&cache=shared"
_URL_PREFIX = "sqlite:///"

_SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS battles (
        id TEXT PRIMARY KEY,
        creator_id TEXT NOT NULL,
        opponent_id TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        winner_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        completed_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS battle_vote_state (
        battle_id TEXT PRIMARY KEY,
        creator_id TEXT NOT NULL,
        opponent_id TEXT,
        status TEXT NOT NULL,
        votes TEXT NOT NULL DEFAULT '{}',
        voting_started_at TEXT,
        vote_deadline_at TEXT,
        winner_id TEXT,
        processed_event_ids TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_vote_state_status_deadline "
    "ON battle_vote_state(status, vote_deadline_at)",
    """
    CREATE TABLE IF NOT EXISTS battle_votes (
        battle_id TEXT NOT NULL,
        participant_id TEXT NOT NULL,
        vote TEXT NOT NULL,
        created_at TEXT NOT NULL,
        PRIMARY KEY (battle_id, participant_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS analytics_events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        participant_id TEXT NOT NULL,
        event_name TEXT NOT NULL,
        properties TEXT NOT NULL DEFAULT '{}',
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_analytics_events_name ON analytics_events(event_name)",
)


def path_from_url(url: str) -> str:
    """Strip the ``sqlite:///`` scheme, leaving a filesystem path or ``:memory:``."""
    return url[len(_URL_PREFIX):] if url.startswith(_URL_PREFIX) else url


class Database:
    def __init__(self, url: str, settings: DatabaseSettings | None = None) -> None:
        self._db_path = path_from_url(url)
        self._busy_timeout_ms = settings.busy_timeout_ms if settings else 5000
        self._connect_timeout_s = settings.connection_timeout_s if settings else 10
        self._keepalive: aiosqlite.Connection | None = None
        self._initialized = False

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_memory(self) -> bool:
        return self._db_path == MEMORY_PATH

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the schema. Safe to call more than once."""
        if self._initialized:
            return

        if self.is_memory:
            # The shared in-memory database lives only while a connection is open.
            if self._keepalive is None:
                self._keepalive = await self._connect()
            await self._create_schema(self._keepalive)
            await self._keepalive.commit()
        else:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            async with self.transaction() as conn:
                await self._create_schema(conn)

        self._initialized = True
        logger.info(LogTemplates.DATABASE_INITIALIZED, self._db_path)

    @staticmethod
    async def _create_schema(conn: aiosqlite.Connection) -> None:
        for statement in _SCHEMA:
            await conn.execute(statement)

    async def _connect(self) -> aiosqlite.Connection:
        target, uri = (_SHARED_MEMORY_URI, True) if self.is_memory else (self._db_path, False)
        conn = await aiosqlite.connect(target, uri=uri, timeout=self._connect_timeout_s)
        conn.row_factory = aiosqlite.Row

        for pragma in (
            SQLPragmas.JOURNAL_MODE_WAL,
            SQLPragmas.FOREIGN_KEYS_ON,
            SQLPragmas.BUSY_TIMEOUT.format(timeout=self._busy_timeout_ms),
        ):
            await conn.execute(pragma)
        return conn

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """A dedicated connection, closed on exit. Nothing is committed implicitly."""
        conn = await self._connect()
        try:
            yield conn
        finally:
            await conn.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Deferred transaction committed on success and rolled back on error."""
        async with self.connection() as conn:
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    @asynccontextmanager
    async def locked_transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Transaction holding the exclusive write lock from its first statement.

        ``BEGIN IMMEDIATE`` acquires SQLite's write lock up front, so reads made
        on this connection stay valid until commit. Other writers, in this
        process or another one sharing the file, wait up to the busy timeout.
        """
        async with self.connection() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def execute(self, sql: str, parameters: Sequence[Any] = ()) -> int:
        """Run one write statement in its own transaction and return the row count."""
        async with self.transaction() as conn:
            cursor = await conn.execute(sql, parameters)
            return cursor.rowcount

    async def fetch_one(self, sql: str, parameters: Sequence[Any] = ()) -> dict[str, Any] | None:
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters)
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, parameters: Sequence[Any] = ()) -> list[dict[str, Any]]:
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters)
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def close(self) -> None:
        """Release the in-memory keepalive connection, if any."""
        keepalive, self._keepalive = self._keepalive, None
        self._initialized = False
        if keepalive is not None:
            await keepalive.close()
        logger.info(LogTemplates.DATABASE_CLOSED)
