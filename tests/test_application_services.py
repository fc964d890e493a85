"""
Unit Tests for Application Services

Tests for:
- BattleVotingService facade delegating to handlers
- GetVoteStateHandler
- log_event_safely
"""

from unittest.mock import AsyncMock, Mock

import pytest

from battle_voting.application.commands.cast_vote import CastVoteCommand, CastVoteResult
from battle_voting.application.commands.initialize_voting import (
    InitializeVotingCommand,
    InitializeVotingResult,
)
from battle_voting.application.interfaces.analytics import log_event_safely
from battle_voting.application.queries.get_vote_state import (
    GetVoteStateHandler,
    GetVoteStateQuery,
)
from battle_voting.application.services.battle_voting_service import BattleVotingService
from battle_voting.application.services.timeout_sweeper import SweepStats
from battle_voting.domain.voting.value_objects import VoteValue


@pytest.fixture
def handlers():
    return {
        "initialize_voting_handler": Mock(
            handle=AsyncMock(return_value=InitializeVotingResult(success=True))
        ),
        "cast_vote_handler": Mock(handle=AsyncMock(return_value=CastVoteResult(success=True))),
        "get_vote_state_handler": Mock(handle=AsyncMock(return_value=None)),
        "timeout_sweeper": Mock(process_vote_timeouts=AsyncMock(return_value=SweepStats())),
    }


@pytest.fixture
def service(handlers):
    return BattleVotingService(**handlers)


class TestBattleVotingService:
    async def test_initialize_voting_builds_command(self, service, handlers):
        result = await service.initialize_voting("e1", "b1", "alice", "bob")

        assert result.success is True
        handlers["initialize_voting_handler"].handle.assert_awaited_once_with(
            InitializeVotingCommand(
                event_id="e1", battle_id="b1", creator_id="alice", opponent_id="bob"
            )
        )

    async def test_cast_vote_accepts_string_value(self, service, handlers):
        await service.cast_vote("e1", "b1", "alice", "sketch")

        command = handlers["cast_vote_handler"].handle.await_args.args[0]
        assert isinstance(command, CastVoteCommand)
        assert command.value is VoteValue.SKETCH

    async def test_cast_vote_rejects_unknown_value(self, service):
        with pytest.raises(ValueError):
            await service.cast_vote("e1", "b1", "alice", "maybe")

    async def test_process_vote_timeouts_delegates(self, service, handlers):
        assert await service.process_vote_timeouts() is None
        handlers["timeout_sweeper"].process_vote_timeouts.assert_awaited_once()

    async def test_get_vote_state_delegates(self, service, handlers):
        assert await service.get_vote_state("b1") is None
        handlers["get_vote_state_handler"].handle.assert_awaited_once_with(
            GetVoteStateQuery(battle_id="b1")
        )

    async def test_end_to_end_with_real_handlers(
        self,
        initialize_voting_handler,
        cast_vote_handler,
        vote_state_repository,
        timeout_sweeper,
        battle_repository,
        sample_battle,
    ):
        await battle_repository.create(sample_battle)
        service = BattleVotingService(
            initialize_voting_handler=initialize_voting_handler,
            cast_vote_handler=cast_vote_handler,
            get_vote_state_handler=GetVoteStateHandler(
                vote_state_repository=vote_state_repository
            ),
            timeout_sweeper=timeout_sweeper,
        )

        await service.initialize_voting("init", "battle-1", "creator", "opponent")
        await service.cast_vote("v1", "battle-1", "creator", VoteValue.CLEAN)
        result = await service.cast_vote("v2", "battle-1", "opponent", "clean")

        assert result.battle_complete is True
        state = await service.get_vote_state("battle-1")
        assert state.winner_id == "creator"


class TestGetVoteStateHandler:
    async def test_missing_state_returns_none(self, vote_state_repository):
        handler = GetVoteStateHandler(vote_state_repository=vote_state_repository)

        assert await handler.handle(GetVoteStateQuery(battle_id="nope")) is None

    async def test_repository_failure_returns_none(self):
        repo = Mock(get=AsyncMock(side_effect=RuntimeError("locked")))
        handler = GetVoteStateHandler(vote_state_repository=repo)

        assert await handler.handle(GetVoteStateQuery(battle_id="b1")) is None


class TestLogEventSafely:
    async def test_success(self, analytics):
        assert await log_event_safely(analytics, "alice", "battle_voted", {"x": 1}) is True
        assert analytics.events == [("alice", "battle_voted", {"x": 1})]

    async def test_failure_is_swallowed(self, analytics):
        analytics.fail = True

        assert await log_event_safely(analytics, "alice", "battle_voted", {}) is False
