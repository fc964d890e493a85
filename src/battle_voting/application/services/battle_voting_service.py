"""
Battle Voting Application Service

The four operations exposed to the route layer. Request parsing, auth and
HTTP status mapping stay with the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from battle_voting.application.commands.cast_vote import CastVoteCommand, CastVoteResult
from battle_voting.application.commands.initialize_voting import (
    InitializeVotingCommand,
    InitializeVotingResult,
)
from battle_voting.application.queries.get_vote_state import GetVoteStateQuery
from battle_voting.domain.voting.entities import VoteState
from battle_voting.domain.voting.value_objects import VoteValue

if TYPE_CHECKING:
    from ..commands.cast_vote import CastVoteHandler
    from ..commands.initialize_voting import InitializeVotingHandler
    from ..queries.get_vote_state import GetVoteStateHandler
    from .timeout_sweeper import VoteTimeoutSweeper


class BattleVotingService:
    def __init__(
        self,
        *,
        initialize_voting_handler: InitializeVotingHandler,
        cast_vote_handler: CastVoteHandler,
        get_vote_state_handler: GetVoteStateHandler,
        timeout_sweeper: VoteTimeoutSweeper,
    ) -> None:
        self._initialize_voting = initialize_voting_handler
        self._cast_vote = cast_vote_handler
        self._get_vote_state = get_vote_state_handler
        self._sweeper = timeout_sweeper

    async def initialize_voting(
        self,
        event_id: str,
        battle_id: str,
        creator_id: str,
        opponent_id: str | None,
    ) -> InitializeVotingResult:
        return await self._initialize_voting.handle(
            InitializeVotingCommand(
                event_id=event_id,
                battle_id=battle_id,
                creator_id=creator_id,
                opponent_id=opponent_id,
            )
        )

    async def cast_vote(
        self,
        event_id: str,
        battle_id: str,
        participant_id: str,
        value: VoteValue | str,
    ) -> CastVoteResult:
        return await self._cast_vote.handle(
            CastVoteCommand(
                event_id=event_id,
                battle_id=battle_id,
                participant_id=participant_id,
                value=VoteValue(value),
            )
        )

    async def process_vote_timeouts(self) -> None:
        await self._sweeper.process_vote_timeouts()

    async def get_vote_state(self, battle_id: str) -> VoteState | None:
        return await self._get_vote_state.handle(GetVoteStateQuery(battle_id=battle_id))
