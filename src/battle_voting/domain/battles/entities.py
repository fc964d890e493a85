"""Battle record as seen by the voting engine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from battle_voting.domain.shared.datetime_utils import utcnow
from battle_voting.domain.shared.types import BattleIdField, ParticipantIdField, UtcDatetimeField


class BattleStatus(Enum):
    PENDING = "pending"
    VOTING = "voting"
    COMPLETED = "completed"


class Battle(BaseModel):
    id: BattleIdField
    creator_id: ParticipantIdField
    opponent_id: ParticipantIdField | None = None
    status: BattleStatus = BattleStatus.PENDING
    winner_id: ParticipantIdField | None = None
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    updated_at: UtcDatetimeField = Field(default_factory=utcnow)
    completed_at: UtcDatetimeField | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is BattleStatus.COMPLETED

    def is_participant(self, participant_id: str) -> bool:
        return participant_id == self.creator_id or (
            self.opponent_id is not None and participant_id == self.opponent_id
        )
