from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from battle_voting.application.interfaces.analytics import AnalyticsSink

# ============================================================================
# Test Doubles
# ============================================================================


class FakeClock:
    """Controllable clock returning a fixed UTC instant until advanced."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


class RecordingAnalyticsSink(AnalyticsSink):
    """Analytics sink that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []
        self.fail = False

    async def log_event(self, participant_id, event_name, properties):
        if self.fail:
            raise RuntimeError("analytics backend unavailable")
        self.events.append((participant_id, event_name, dict(properties)))

    def named(self, event_name: str) -> list[tuple[str, str, dict]]:
        return [event for event in self.events if event[1] == event_name]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from battle_voting.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def vote_state_repository(in_memory_database):
    """Create a vote state repository with in-memory database."""
    from battle_voting.infrastructure.persistence.repositories.vote_state_repository import (
        SQLiteVoteStateRepository,
    )

    return SQLiteVoteStateRepository(in_memory_database)


@pytest_asyncio.fixture
async def battle_repository(in_memory_database):
    """Create a battle repository with in-memory database."""
    from battle_voting.infrastructure.persistence.repositories.battle_repository import (
        SQLiteBattleRepository,
    )

    return SQLiteBattleRepository(in_memory_database)


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def analytics():
    return RecordingAnalyticsSink()


@pytest.fixture
def initialize_voting_handler(in_memory_database, vote_state_repository, battle_repository, clock):
    from battle_voting.application.commands.initialize_voting import InitializeVotingHandler

    return InitializeVotingHandler(
        database=in_memory_database,
        vote_state_repository=vote_state_repository,
        battle_repository=battle_repository,
        vote_timeout_seconds=60,
        clock=clock,
    )


@pytest.fixture
def cast_vote_handler(
    in_memory_database, vote_state_repository, battle_repository, analytics, clock
):
    from battle_voting.application.commands.cast_vote import CastVoteHandler

    return CastVoteHandler(
        database=in_memory_database,
        vote_state_repository=vote_state_repository,
        battle_repository=battle_repository,
        analytics=analytics,
        clock=clock,
    )


@pytest.fixture
def timeout_sweeper(
    in_memory_database, vote_state_repository, battle_repository, analytics, clock
):
    from battle_voting.application.services.timeout_sweeper import VoteTimeoutSweeper

    return VoteTimeoutSweeper(
        database=in_memory_database,
        vote_state_repository=vote_state_repository,
        battle_repository=battle_repository,
        analytics=analytics,
        clock=clock,
    )


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def sample_battle(clock):
    """A pending battle between two participants."""
    from battle_voting.domain.battles.entities import Battle

    return Battle(
        id="battle-1",
        creator_id="creator",
        opponent_id="opponent",
        created_at=clock(),
        updated_at=clock(),
    )


@pytest_asyncio.fixture
async def voting_battle(battle_repository, initialize_voting_handler, sample_battle):
    """A battle stored and moved into its voting phase."""
    from battle_voting.application.commands.initialize_voting import InitializeVotingCommand

    await battle_repository.create(sample_battle)
    result = await initialize_voting_handler.handle(
        InitializeVotingCommand(
            event_id="init-1",
            battle_id=sample_battle.id,
            creator_id=sample_battle.creator_id,
            opponent_id=sample_battle.opponent_id,
        )
    )
    assert result.success is True
    return sample_battle
