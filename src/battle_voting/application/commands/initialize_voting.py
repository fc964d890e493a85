"""
Initialize Voting Command

Creates the vote state when a battle enters its voting phase.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from battle_voting.domain.shared.datetime_utils import Clock, utcnow
from battle_voting.domain.shared.messages import ErrorMessages, LogTemplates
from battle_voting.domain.shared.types import BattleIdField, EventIdField, ParticipantIdField
from battle_voting.domain.voting.entities import VoteState

if TYPE_CHECKING:
    from ...domain.battles.repository import BattleRepository
    from ...domain.voting.repository import VoteStateRepository
    from ...infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)


class InitializeVotingCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: EventIdField
    battle_id: BattleIdField
    creator_id: ParticipantIdField
    opponent_id: ParticipantIdField | None = None


class InitializeVotingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    already_initialized: bool = False


class InitializeVotingHandler:
    """Handler for InitializeVotingCommand.

    Initialization happens at most once per battle. Repeating it, with the
    same event id or a new one, reports ``already_initialized`` and leaves
    the existing state untouched.
    """

    def __init__(
        self,
        *,
        database: Database,
        vote_state_repository: VoteStateRepository,
        battle_repository: BattleRepository,
        vote_timeout_seconds: int = VoteState.DEFAULT_VOTE_TIMEOUT_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._db = database
        self._vote_states = vote_state_repository
        self._battles = battle_repository
        self._vote_timeout_seconds = vote_timeout_seconds
        self._clock = clock

    async def handle(self, command: InitializeVotingCommand) -> InitializeVotingResult:
        now = self._clock()

        try:
            async with self._db.locked_transaction() as conn:
                existing = await self._vote_states.get_for_update(conn, command.battle_id)

                if existing is not None:
                    if existing.has_processed(command.event_id):
                        logger.info(LogTemplates.VOTING_ALREADY_INITIALIZED, command.battle_id)
                    else:
                        logger.warning(
                            LogTemplates.VOTING_REINITIALIZE_SKIPPED,
                            command.battle_id,
                            existing.status.value,
                        )
                    return InitializeVotingResult(success=True, already_initialized=True)

                state = VoteState.start_voting(
                    battle_id=command.battle_id,
                    creator_id=command.creator_id,
                    opponent_id=command.opponent_id,
                    event_id=command.event_id,
                    now=now,
                    timeout_seconds=self._vote_timeout_seconds,
                )
                await self._vote_states.insert(conn, state)
                await self._battles.mark_voting(conn, command.battle_id, now)
        except Exception:
            logger.exception(LogTemplates.VOTING_INITIALIZE_FAILED, command.battle_id)
            return InitializeVotingResult(
                success=False, error=ErrorMessages.INITIALIZE_VOTING_FAILED
            )

        logger.info(
            LogTemplates.VOTING_INITIALIZED,
            command.battle_id,
            command.creator_id,
            command.opponent_id,
        )
        return InitializeVotingResult(success=True, already_initialized=False)
