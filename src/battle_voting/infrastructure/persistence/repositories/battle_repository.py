"""SQLite implementation of the battle record store."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING

import aiosqlite

from battle_voting.domain.battles.entities import Battle, BattleStatus
from battle_voting.domain.battles.repository import BattleRepository
from battle_voting.domain.shared.datetime_utils import UtcDateTime
from battle_voting.domain.voting.entities import ParticipantVote
from battle_voting.domain.voting.value_objects import VoteValue

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteBattleRepository(BattleRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    @asynccontextmanager
    async def _ensure_conn(
        self, conn: aiosqlite.Connection | None
    ) -> AsyncIterator[aiosqlite.Connection]:
        if conn is not None:
            yield conn
        else:
            async with self._db.connection() as own:
                yield own

    async def create(self, battle: Battle) -> None:
        await self._db.execute(
            """
            INSERT INTO battles (
                id, creator_id, opponent_id, status, winner_id,
                created_at, updated_at, completed_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                battle.id,
                battle.creator_id,
                battle.opponent_id,
                battle.status.value,
                battle.winner_id,
                UtcDateTime(battle.created_at).iso,
                UtcDateTime(battle.updated_at).iso,
                UtcDateTime(battle.completed_at).iso if battle.completed_at else None,
            ),
        )

    async def get(
        self, battle_id: str, conn: aiosqlite.Connection | None = None
    ) -> Battle | None:
        async with self._ensure_conn(conn) as c:
            cursor = await c.execute("SELECT * FROM battles WHERE id = ?", (battle_id,))
            row = await cursor.fetchone()

        if row is None:
            return None

        return Battle(
            id=row["id"],
            creator_id=row["creator_id"],
            opponent_id=row["opponent_id"],
            status=BattleStatus(row["status"]),
            winner_id=row["winner_id"],
            created_at=UtcDateTime.from_iso(row["created_at"]).dt,
            updated_at=UtcDateTime.from_iso(row["updated_at"]).dt,
            completed_at=UtcDateTime.from_optional_iso(row["completed_at"]),
        )

    async def mark_voting(self, conn: aiosqlite.Connection, battle_id: str, now: datetime) -> None:
        await conn.execute(
            "UPDATE battles SET status = ?, updated_at = ? WHERE id = ?",
            (BattleStatus.VOTING.value, UtcDateTime(now).iso, battle_id),
        )

    async def mark_completed(
        self,
        conn: aiosqlite.Connection,
        battle_id: str,
        winner_id: str,
        completed_at: datetime,
    ) -> None:
        ts = UtcDateTime(completed_at).iso
        await conn.execute(
            """
            UPDATE battles
            SET status = ?, winner_id = ?, completed_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (BattleStatus.COMPLETED.value, winner_id, ts, ts, battle_id),
        )
        logger.debug("Battle %s marked completed, winner=%s", battle_id, winner_id)

    async def record_vote(
        self,
        conn: aiosqlite.Connection,
        battle_id: str,
        participant_id: str,
        value: VoteValue,
        voted_at: datetime,
    ) -> None:
        await conn.execute(
            """
            INSERT INTO battle_votes (battle_id, participant_id, vote, created_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(battle_id, participant_id) DO UPDATE SET vote = excluded.vote
            """,
            (battle_id, participant_id, value.value, UtcDateTime(voted_at).iso),
        )

    async def list_votes(
        self, conn: aiosqlite.Connection, battle_id: str
    ) -> list[ParticipantVote]:
        cursor = await conn.execute(
            "SELECT participant_id, vote, created_at FROM battle_votes WHERE battle_id = ?",
            (battle_id,),
        )
        rows = await cursor.fetchall()
        return [
            ParticipantVote(
                participant_id=row["participant_id"],
                value=VoteValue(row["vote"]),
                voted_at=UtcDateTime.from_iso(row["created_at"]).dt,
            )
            for row in rows
        ]
