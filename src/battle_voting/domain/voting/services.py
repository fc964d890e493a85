"""
Voting Domain Services

Pure business rules for deciding battle outcomes.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from battle_voting.domain.shared.datetime_utils import UtcDateTime, utcnow
from battle_voting.domain.shared.exceptions import ValidationError
from battle_voting.domain.shared.messages import ErrorMessages, LogTemplates
from battle_voting.domain.voting.entities import ParticipantVote, VoteState
from battle_voting.domain.voting.value_objects import TimeoutReason

logger = logging.getLogger(__name__)


class WinnerResult(BaseModel):
    """Outcome of counting a complete vote set."""

    model_config = ConfigDict(frozen=True)

    winner_id: str
    scores: dict[str, int]
    is_tie: bool = False


class TimeoutResolution(BaseModel):
    """Outcome of forcing a battle closed after its deadline."""

    model_config = ConfigDict(frozen=True)

    winner_id: str
    reason: TimeoutReason


class WinnerResolver:
    """Domain service computing a battle winner from its votes.

    A ``clean`` vote is a statement about the *other* participant, so it
    awards the point to the voter's opponent. Equal scores (including 0-0)
    go to the creator.
    """

    @classmethod
    def calculate_winner(
        cls,
        votes: Iterable[ParticipantVote],
        creator_id: str,
        opponent_id: str | None,
    ) -> WinnerResult:
        """Count votes and pick a winner.

        Args:
            votes: Votes cast in the battle, in any order. Votes from anyone
                other than the two participants are ignored.
            creator_id: The battle creator (wins ties).
            opponent_id: The battle opponent.

        Returns:
            The winner and the per-participant score tally.

        Raises:
            ValidationError: If the battle has no opponent.
        """
        if opponent_id is None:
            raise ValidationError(ErrorMessages.OPPONENT_REQUIRED, field="opponent_id")

        scores = {creator_id: 0, opponent_id: 0}
        for vote in votes:
            if not vote.value.awards_point:
                continue
            if vote.participant_id == creator_id:
                scores[opponent_id] += 1
            elif vote.participant_id == opponent_id:
                scores[creator_id] += 1

        creator_score = scores[creator_id]
        opponent_score = scores[opponent_id]

        if opponent_score > creator_score:
            return WinnerResult(winner_id=opponent_id, scores=scores)
        if creator_score > opponent_score:
            return WinnerResult(winner_id=creator_id, scores=scores)

        logger.info(LogTemplates.TIE_RESOLVED, creator_id, opponent_id, scores)
        return WinnerResult(winner_id=creator_id, scores=scores, is_tie=True)


class TimeoutResolver:
    """Domain service deciding who wins when the vote deadline lapses."""

    @classmethod
    def resolve(cls, state: VoteState) -> TimeoutResolution | None:
        """Decide the outcome of an expired battle.

        Returns:
            The resolution, or None when both participants already voted
            (the battle should have been completed by the vote itself).
        """
        creator_voted = state.creator_voted
        opponent_voted = state.opponent_voted

        if creator_voted and opponent_voted:
            return None
        if creator_voted:
            return TimeoutResolution(
                winner_id=state.creator_id, reason=TimeoutReason.OPPONENT_TIMEOUT
            )
        if opponent_voted and state.opponent_id is not None:
            return TimeoutResolution(
                winner_id=state.opponent_id, reason=TimeoutReason.CREATOR_TIMEOUT
            )
        return TimeoutResolution(winner_id=state.creator_id, reason=TimeoutReason.BOTH_TIMEOUT)

    @classmethod
    def event_id_for(cls, state: VoteState) -> str:
        """Deterministic idempotency key for timing out this deadline."""
        deadline = state.vote_deadline_at
        sequence_key = f"deadline-{UtcDateTime(deadline).iso_z if deadline else 'none'}"
        return generate_event_id("timeout", state.battle_id, state.battle_id, sequence_key)


def generate_event_id(
    kind: str,
    participant_id: str,
    battle_id: str,
    sequence_key: str | None = None,
) -> str:
    """Build an idempotency key.

    With a ``sequence_key`` the key is deterministic, so retries of the same
    logical action collide. Without one a unique key is produced.
    """
    if sequence_key:
        return f"{kind}-{battle_id}-{participant_id}-{sequence_key}"
    millis = int(utcnow().timestamp() * 1000)
    return f"{kind}-{battle_id}-{participant_id}-{millis}-{secrets.token_hex(4)}"
