"""
Concurrency Tests

Runs competing operations against a file-backed database so that each
operation gets its own connection and the write lock is actually contended.
"""

import asyncio

import pytest_asyncio

from battle_voting.application.commands.cast_vote import CastVoteCommand, CastVoteHandler
from battle_voting.application.commands.initialize_voting import (
    InitializeVotingCommand,
    InitializeVotingHandler,
)
from battle_voting.application.services.timeout_sweeper import VoteTimeoutSweeper
from battle_voting.domain.battles.entities import Battle, BattleStatus
from battle_voting.domain.shared.constants import AnalyticsEvents
from battle_voting.domain.voting.value_objects import VoteStatus
from battle_voting.infrastructure.persistence.database import Database
from battle_voting.infrastructure.persistence.repositories import (
    SQLiteBattleRepository,
    SQLiteVoteStateRepository,
)


@pytest_asyncio.fixture
async def file_database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'battles.db'}")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def env(file_database, analytics, clock):
    vote_states = SQLiteVoteStateRepository(file_database)
    battles = SQLiteBattleRepository(file_database)
    deps = {
        "database": file_database,
        "vote_state_repository": vote_states,
        "battle_repository": battles,
    }

    await battles.create(Battle(id="b1", creator_id="creator", opponent_id="opp"))
    await InitializeVotingHandler(**deps, clock=clock).handle(
        InitializeVotingCommand(
            event_id="init", battle_id="b1", creator_id="creator", opponent_id="opp"
        )
    )

    return {
        "vote_states": vote_states,
        "battles": battles,
        "cast": CastVoteHandler(**deps, analytics=analytics, clock=clock),
        "sweeper": VoteTimeoutSweeper(**deps, analytics=analytics, clock=clock),
    }


def vote(event_id: str, participant_id: str, value: str = "clean") -> CastVoteCommand:
    return CastVoteCommand(
        event_id=event_id, battle_id="b1", participant_id=participant_id, value=value
    )


class TestConcurrentVoting:
    async def test_simultaneous_votes_complete_once(self, env, analytics):
        first, second = await asyncio.gather(
            env["cast"].handle(vote("v-creator", "creator", "redo")),
            env["cast"].handle(vote("v-opp", "opp", "clean")),
        )

        assert first.success is True
        assert second.success is True
        assert [first.battle_complete, second.battle_complete].count(True) == 1

        state = await env["vote_states"].get("b1")
        assert state.status is VoteStatus.COMPLETED
        assert state.winner_id == "creator"
        assert set(state.votes) == {"creator", "opp"}

        battle = await env["battles"].get("b1")
        assert battle.status is BattleStatus.COMPLETED
        assert battle.winner_id == "creator"
        assert len(analytics.named(AnalyticsEvents.BATTLE_COMPLETED)) == 1

    async def test_concurrent_duplicate_event_applied_once(self, env, analytics):
        results = await asyncio.gather(
            *(env["cast"].handle(vote("same-event", "creator")) for _ in range(3))
        )

        assert all(result.success for result in results)
        assert [result.already_processed for result in results].count(False) == 1
        assert len(analytics.named(AnalyticsEvents.BATTLE_VOTED)) == 1

        state = await env["vote_states"].get("b1")
        assert state.processed_event_ids.count("same-event") == 1

    async def test_vote_racing_sweep_has_one_outcome(self, env, analytics, clock):
        clock.advance(61)

        vote_result, stats = await asyncio.gather(
            env["cast"].handle(vote("late", "opp")),
            env["sweeper"].process_vote_timeouts(),
        )

        assert vote_result.success is False
        assert stats.resolved == 1

        state = await env["vote_states"].get("b1")
        assert state.status is VoteStatus.COMPLETED
        assert state.winner_id == "creator"
        assert len(analytics.named(AnalyticsEvents.BATTLE_COMPLETED)) == 1
