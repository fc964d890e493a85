"""Core domain entities for the battle voting bounded context."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from battle_voting.domain.shared.datetime_utils import utcnow
from battle_voting.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidOperationError,
    ValidationError,
)
from battle_voting.domain.shared.messages import ErrorMessages
from battle_voting.domain.shared.types import (
    BattleIdField,
    EventIdField,
    ParticipantIdField,
    UtcDatetimeField,
)
from battle_voting.domain.voting.value_objects import VoteStatus, VoteValue


class ParticipantVote(BaseModel):
    """Immutable record of one participant's vote."""

    model_config = ConfigDict(frozen=True)

    participant_id: ParticipantIdField
    value: VoteValue
    voted_at: UtcDatetimeField = Field(default_factory=utcnow)


class VoteState(BaseModel):
    """Aggregate holding the voting record of a single battle.

    Votes are keyed by participant id, so a participant voting again replaces
    their previous vote. ``processed_event_ids`` is a bounded FIFO window of
    idempotency keys that have already been applied to this aggregate.
    """

    DEFAULT_VOTE_TIMEOUT_SECONDS: ClassVar[int] = 60
    DEFAULT_MAX_PROCESSED_EVENTS: ClassVar[int] = 50
    MAX_VOTES: ClassVar[int] = 2

    battle_id: BattleIdField
    creator_id: ParticipantIdField
    opponent_id: ParticipantIdField | None = None
    status: VoteStatus = VoteStatus.WAITING
    votes: dict[str, ParticipantVote] = Field(default_factory=dict)
    voting_started_at: UtcDatetimeField | None = None
    vote_deadline_at: UtcDatetimeField | None = None
    winner_id: ParticipantIdField | None = None
    processed_event_ids: list[EventIdField] = Field(default_factory=list)
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    updated_at: UtcDatetimeField = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_invariants(self) -> VoteState:
        if (self.winner_id is not None) != (self.status is VoteStatus.COMPLETED):
            raise ValueError(ErrorMessages.WINNER_STATUS_MISMATCH)
        if len(self.votes) > self.MAX_VOTES:
            raise ValueError(ErrorMessages.TOO_MANY_VOTES)
        return self

    @classmethod
    def start_voting(
        cls,
        *,
        battle_id: str,
        creator_id: str,
        opponent_id: str | None,
        event_id: str,
        now: datetime,
        timeout_seconds: int = DEFAULT_VOTE_TIMEOUT_SECONDS,
    ) -> VoteState:
        """Create the vote state for a battle entering its voting phase."""
        if timeout_seconds < 1:
            raise ValidationError(ErrorMessages.INVALID_VOTE_TIMEOUT, field="timeout_seconds")
        return cls(
            battle_id=battle_id,
            creator_id=creator_id,
            opponent_id=opponent_id,
            status=VoteStatus.VOTING,
            voting_started_at=now,
            vote_deadline_at=now + timedelta(seconds=timeout_seconds),
            processed_event_ids=[event_id],
            created_at=now,
            updated_at=now,
        )

    # ---- Queries ----

    @property
    def is_voting(self) -> bool:
        return self.status is VoteStatus.VOTING

    @property
    def is_completed(self) -> bool:
        return self.status is VoteStatus.COMPLETED

    @property
    def creator_voted(self) -> bool:
        return self.has_voted(self.creator_id)

    @property
    def opponent_voted(self) -> bool:
        return self.opponent_id is not None and self.has_voted(self.opponent_id)

    @property
    def both_voted(self) -> bool:
        return self.creator_voted and self.opponent_voted

    def has_voted(self, participant_id: str) -> bool:
        return participant_id in self.votes

    def is_participant(self, participant_id: str) -> bool:
        return participant_id == self.creator_id or (
            self.opponent_id is not None and participant_id == self.opponent_id
        )

    def has_processed(self, event_id: str) -> bool:
        return event_id in self.processed_event_ids

    def is_past_deadline(self, now: datetime) -> bool:
        if now.tzinfo is None:
            raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_NOW)
        return self.vote_deadline_at is not None and now > self.vote_deadline_at

    # ---- Mutations ----

    def record_vote(self, participant_id: str, value: VoteValue, now: datetime) -> bool:
        """Upsert a participant's vote.

        Returns:
            True if an earlier vote from the same participant was replaced.
        """
        if not self.is_participant(participant_id):
            raise BusinessRuleViolationError("participant_only", ErrorMessages.NOT_A_PARTICIPANT)
        if not self.is_voting:
            raise InvalidOperationError("record_vote", self.status.value)

        replaced = participant_id in self.votes
        self.votes[participant_id] = ParticipantVote(
            participant_id=participant_id, value=value, voted_at=now
        )
        self.updated_at = now
        return replaced

    def mark_processed(
        self, event_id: str, max_events: int = DEFAULT_MAX_PROCESSED_EVENTS
    ) -> None:
        """Append an idempotency key, evicting the oldest beyond ``max_events``."""
        self.processed_event_ids = [*self.processed_event_ids, event_id][-max_events:]

    def complete(self, winner_id: str, now: datetime) -> None:
        if self.is_completed:
            raise InvalidOperationError("complete", self.status.value)
        if not self.is_participant(winner_id):
            raise BusinessRuleViolationError(
                "winner_is_participant", ErrorMessages.WINNER_NOT_PARTICIPANT
            )

        self.status = VoteStatus.COMPLETED
        self.winner_id = winner_id
        self.updated_at = now
