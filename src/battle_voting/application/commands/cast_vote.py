"""
Cast Vote Command

Applies one participant's vote to a battle, exactly once per event id.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from battle_voting.application.interfaces.analytics import log_event_safely
from battle_voting.domain.shared.constants import AnalyticsEvents
from battle_voting.domain.shared.datetime_utils import Clock, utcnow
from battle_voting.domain.shared.messages import ErrorMessages, LogTemplates
from battle_voting.domain.shared.types import BattleIdField, EventIdField, ParticipantIdField
from battle_voting.domain.voting.entities import VoteState
from battle_voting.domain.voting.services import WinnerResolver
from battle_voting.domain.voting.value_objects import VoteValue

if TYPE_CHECKING:
    from ...domain.battles.repository import BattleRepository
    from ...domain.voting.repository import VoteStateRepository
    from ...infrastructure.persistence.database import Database
    from ..interfaces.analytics import AnalyticsSink

logger = logging.getLogger(__name__)


class CastVoteCommand(BaseModel):
    """Command to cast (or change) a participant's vote."""

    model_config = ConfigDict(frozen=True)

    event_id: EventIdField
    battle_id: BattleIdField
    participant_id: ParticipantIdField
    value: VoteValue


class CastVoteResult(BaseModel):
    """Result of a cast vote command."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    already_processed: bool = False
    battle_complete: bool = False
    winner_id: str | None = None
    final_score: dict[str, int] | None = None

    @classmethod
    def rejected(cls, error: str) -> CastVoteResult:
        return cls(success=False, error=error)

    @classmethod
    def replay(cls, state: VoteState) -> CastVoteResult:
        """Report the persisted outcome for an event that was already applied."""
        return cls(
            success=True,
            already_processed=True,
            battle_complete=state.is_completed,
            winner_id=state.winner_id,
        )

    @classmethod
    def completed(cls, winner_id: str, scores: dict[str, int]) -> CastVoteResult:
        return cls(success=True, battle_complete=True, winner_id=winner_id, final_score=scores)

    @property
    def should_notify(self) -> bool:
        """Whether this result reflects a newly applied vote."""
        return self.success and not self.already_processed


class CastVoteHandler:
    """Handler for CastVoteCommand.

    Everything a single vote changes (the vote state, the vote audit row and,
    on completion, the battle record) is written inside one locked
    transaction. Analytics are sent only after that transaction commits.
    """

    def __init__(
        self,
        *,
        database: Database,
        vote_state_repository: VoteStateRepository,
        battle_repository: BattleRepository,
        analytics: AnalyticsSink,
        max_processed_events: int = VoteState.DEFAULT_MAX_PROCESSED_EVENTS,
        clock: Clock = utcnow,
    ) -> None:
        self._db = database
        self._vote_states = vote_state_repository
        self._battles = battle_repository
        self._analytics = analytics
        self._max_processed_events = max_processed_events
        self._clock = clock

    async def handle(self, command: CastVoteCommand) -> CastVoteResult:
        """Execute the cast vote command."""
        try:
            async with self._db.locked_transaction() as conn:
                result = await self._apply(conn, command, self._clock())
        except Exception:
            logger.exception(
                LogTemplates.VOTE_CAST_FAILED, command.battle_id, command.participant_id
            )
            return CastVoteResult.rejected(ErrorMessages.CAST_VOTE_FAILED)

        if result.should_notify:
            await self._notify(command, result)
        return result

    async def _apply(self, conn: Any, command: CastVoteCommand, now: datetime) -> CastVoteResult:
        state = await self._vote_states.get_for_update(conn, command.battle_id)

        if state is None:
            logger.warning(LogTemplates.VOTE_LEGACY_FALLBACK, command.battle_id)
            return await self._apply_legacy(conn, command, now)

        if state.has_processed(command.event_id):
            logger.debug(LogTemplates.VOTE_ALREADY_PROCESSED, command.event_id, command.battle_id)
            return CastVoteResult.replay(state)

        error = self._validate(state, command.participant_id, now)
        if error is not None:
            logger.info(
                LogTemplates.VOTE_REJECTED, command.battle_id, command.participant_id, error
            )
            return CastVoteResult.rejected(error)

        replaced = state.record_vote(command.participant_id, command.value, now)
        state.mark_processed(command.event_id, self._max_processed_events)
        template = LogTemplates.VOTE_UPDATED if replaced else LogTemplates.VOTE_RECORDED
        logger.info(template, command.battle_id, command.participant_id, command.value.value)

        await self._battles.record_vote(
            conn, command.battle_id, command.participant_id, command.value, now
        )

        if not state.both_voted:
            await self._vote_states.update(conn, state)
            return CastVoteResult(success=True, battle_complete=False)

        outcome = WinnerResolver.calculate_winner(
            state.votes.values(), state.creator_id, state.opponent_id
        )
        state.complete(outcome.winner_id, now)
        await self._vote_states.update(conn, state)
        await self._battles.mark_completed(conn, command.battle_id, outcome.winner_id, now)

        logger.info(
            LogTemplates.BATTLE_COMPLETED, command.battle_id, outcome.winner_id, outcome.scores
        )
        return CastVoteResult.completed(outcome.winner_id, outcome.scores)

    @staticmethod
    def _validate(state: VoteState, participant_id: str, now: datetime) -> str | None:
        if not state.is_voting:
            return ErrorMessages.VOTING_NOT_ACTIVE
        if state.is_past_deadline(now):
            return ErrorMessages.VOTING_DEADLINE_PASSED
        if not state.is_participant(participant_id):
            return ErrorMessages.NOT_A_PARTICIPANT
        return None

    async def _apply_legacy(
        self, conn: Any, command: CastVoteCommand, now: datetime
    ) -> CastVoteResult:
        """Vote on a battle that predates vote state tracking.

        There is no event history here, so retries are not deduplicated.
        """
        battle = await self._battles.get(command.battle_id, conn)
        if battle is None:
            return CastVoteResult.rejected(ErrorMessages.BATTLE_NOT_FOUND)
        if not battle.is_participant(command.participant_id):
            return CastVoteResult.rejected(ErrorMessages.NOT_A_PARTICIPANT)
        if battle.is_completed:
            return CastVoteResult.rejected(ErrorMessages.VOTING_NOT_ACTIVE)

        await self._battles.record_vote(
            conn, command.battle_id, command.participant_id, command.value, now
        )

        votes = await self._battles.list_votes(conn, command.battle_id)
        voters = {vote.participant_id for vote in votes}
        if battle.opponent_id is None or not {battle.creator_id, battle.opponent_id} <= voters:
            return CastVoteResult(success=True, battle_complete=False)

        outcome = WinnerResolver.calculate_winner(votes, battle.creator_id, battle.opponent_id)
        await self._battles.mark_completed(conn, command.battle_id, outcome.winner_id, now)

        logger.info(
            LogTemplates.BATTLE_COMPLETED, command.battle_id, outcome.winner_id, outcome.scores
        )
        return CastVoteResult.completed(outcome.winner_id, outcome.scores)

    async def _notify(self, command: CastVoteCommand, result: CastVoteResult) -> None:
        await log_event_safely(
            self._analytics,
            command.participant_id,
            AnalyticsEvents.BATTLE_VOTED,
            {"battle_id": command.battle_id, "vote": command.value.value},
        )

        if result.battle_complete and result.winner_id is not None:
            await log_event_safely(
                self._analytics,
                result.winner_id,
                AnalyticsEvents.BATTLE_COMPLETED,
                {"battle_id": command.battle_id, "winner_id": result.winner_id},
            )
