"""SQLite implementation of the vote state repository."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

import aiosqlite

from battle_voting.domain.shared.datetime_utils import UtcDateTime
from battle_voting.domain.voting.entities import ParticipantVote, VoteState
from battle_voting.domain.voting.repository import VoteStateRepository
from battle_voting.domain.voting.value_objects import VoteStatus, VoteValue

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)

_SELECT_STATE = "SELECT * FROM battle_vote_state WHERE battle_id = ?"


def _iso(value: datetime | None) -> str | None:
    return UtcDateTime(value).iso if value is not None else None


def _dump_votes(state: VoteState) -> str:
    return json.dumps(
        {
            participant_id: {
                "value": vote.value.value,
                "voted_at": UtcDateTime(vote.voted_at).iso,
            }
            for participant_id, vote in state.votes.items()
        },
        sort_keys=True,
    )


def _load_votes(raw: str) -> dict[str, ParticipantVote]:
    return {
        participant_id: ParticipantVote(
            participant_id=participant_id,
            value=VoteValue(entry["value"]),
            voted_at=UtcDateTime.from_iso(entry["voted_at"]).dt,
        )
        for participant_id, entry in json.loads(raw).items()
    }


def _row_to_state(row: Mapping[str, Any]) -> VoteState:
    return VoteState(
        battle_id=row["battle_id"],
        creator_id=row["creator_id"],
        opponent_id=row["opponent_id"],
        status=VoteStatus(row["status"]),
        votes=_load_votes(row["votes"]),
        voting_started_at=UtcDateTime.from_optional_iso(row["voting_started_at"]),
        vote_deadline_at=UtcDateTime.from_optional_iso(row["vote_deadline_at"]),
        winner_id=row["winner_id"],
        processed_event_ids=json.loads(row["processed_event_ids"]),
        created_at=UtcDateTime.from_iso(row["created_at"]).dt,
        updated_at=UtcDateTime.from_iso(row["updated_at"]).dt,
    )


class SQLiteVoteStateRepository(VoteStateRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, battle_id: str) -> VoteState | None:
        row = await self._db.fetch_one(_SELECT_STATE, (battle_id,))
        return _row_to_state(row) if row else None

    async def get_for_update(
        self, conn: aiosqlite.Connection, battle_id: str
    ) -> VoteState | None:
        # The caller's BEGIN IMMEDIATE already holds the write lock, which is
        # what SELECT ... FOR UPDATE provides on server databases.
        cursor = await conn.execute(_SELECT_STATE, (battle_id,))
        row = await cursor.fetchone()
        return _row_to_state(dict(row)) if row else None

    async def insert(self, conn: aiosqlite.Connection, state: VoteState) -> None:
        await conn.execute(
            """
            INSERT INTO battle_vote_state (
                battle_id, creator_id, opponent_id, status, votes,
                voting_started_at, vote_deadline_at, winner_id,
                processed_event_ids, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                state.battle_id,
                state.creator_id,
                state.opponent_id,
                state.status.value,
                _dump_votes(state),
                _iso(state.voting_started_at),
                _iso(state.vote_deadline_at),
                state.winner_id,
                json.dumps(state.processed_event_ids),
                UtcDateTime(state.created_at).iso,
                UtcDateTime(state.updated_at).iso,
            ),
        )
        logger.debug("Inserted vote state for battle %s", state.battle_id)

    async def update(self, conn: aiosqlite.Connection, state: VoteState) -> None:
        await conn.execute(
            """
            UPDATE battle_vote_state
            SET status = ?, votes = ?, winner_id = ?,
                processed_event_ids = ?, updated_at = ?
            WHERE battle_id = ?
            """,
            (
                state.status.value,
                _dump_votes(state),
                state.winner_id,
                json.dumps(state.processed_event_ids),
                UtcDateTime(state.updated_at).iso,
                state.battle_id,
            ),
        )
        logger.debug("Updated vote state for battle %s", state.battle_id)

    async def list_expired(self, now: datetime) -> list[VoteState]:
        rows = await self._db.fetch_all(
            """
            SELECT * FROM battle_vote_state
            WHERE status = ? AND vote_deadline_at < ?
            ORDER BY vote_deadline_at
            """,
            (VoteStatus.VOTING.value, UtcDateTime(now).iso),
        )
        return [_row_to_state(row) for row in rows]
