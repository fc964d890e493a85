"""
Unit Tests for Dependency Injection Container

Tests for:
- Lazy initialization and caching of components
- Settings flowing into handlers and jobs
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock

import pytest

from battle_voting.config.container import Container, create_container
from battle_voting.config.settings import (
    DatabaseSettings,
    Settings,
    SweepSettings,
    VotingSettings,
)


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        database=DatabaseSettings(url="sqlite:///:memory:"),
        voting=VotingSettings(vote_timeout_seconds=30, max_processed_events=10),
        sweep=SweepSettings(interval_seconds=5),
    )


@pytest.fixture
def container(settings, clock):
    return create_container(settings, clock=clock)


class TestContainer:
    def test_create_container(self, container, settings):
        assert isinstance(container, Container)
        assert container.settings is settings

    def test_components_are_cached(self, container):
        assert container.database is container.database
        assert container.vote_state_repository is container.vote_state_repository
        assert container.battle_repository is container.battle_repository
        assert container.analytics_sink is container.analytics_sink
        assert container.battle_voting_service is container.battle_voting_service
        assert container.sweep_job is container.sweep_job

    def test_database_uses_memory_path(self, container):
        assert container.database.db_path == ":memory:"

    def test_handlers_share_repositories(self, container):
        cast = container.cast_vote_handler
        sweeper = container.timeout_sweeper

        assert cast._vote_states is container.vote_state_repository
        assert sweeper._vote_states is container.vote_state_repository
        assert cast._battles is sweeper._battles

    def test_voting_settings_applied(self, container, clock):
        assert container.initialize_voting_handler._vote_timeout_seconds == 30
        assert container.initialize_voting_handler._clock is clock
        assert container.cast_vote_handler._max_processed_events == 10
        assert container.timeout_sweeper._max_processed_events == 10

    async def test_initialize_and_shutdown(self, container):
        await container.initialize()
        assert container.database.is_initialized is True

        result = await container.battle_voting_service.initialize_voting(
            "init", "b1", "alice", "bob"
        )
        assert result.success is True
        assert (await container.battle_voting_service.get_vote_state("b1")).status.value == (
            "voting"
        )

        await container.shutdown()
        assert container.database.is_initialized is False

    async def test_shutdown_stops_running_job(self, container):
        await container.initialize()
        container.sweep_job.start()

        await container.shutdown()

        assert container.sweep_job.is_running is False

    async def test_shutdown_tolerates_job_stop_failure(self, container):
        await container.initialize()
        job = container.sweep_job
        job.stop = AsyncMock(side_effect=RuntimeError("stuck"))

        await container.shutdown()

        assert container.database.is_initialized is False

    async def test_shutdown_without_initialize(self, container):
        await container.shutdown()
