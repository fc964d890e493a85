"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for repositories, handlers and background jobs.
Components are created on-demand and cached for reuse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.datetime_utils import Clock, utcnow

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.commands.cast_vote import CastVoteHandler
    from ..application.commands.initialize_voting import InitializeVotingHandler
    from ..application.interfaces.analytics import AnalyticsSink
    from ..application.queries.get_vote_state import GetVoteStateHandler
    from ..application.services.battle_voting_service import BattleVotingService
    from ..application.services.timeout_sweeper import VoteTimeoutSweeper
    from ..domain.battles.repository import BattleRepository
    from ..domain.voting.repository import VoteStateRepository
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.scheduling.sweep_job import VoteTimeoutSweepJob
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    clock: Clock = utcnow

    # Persistence layer
    _database: Database | None = None
    _vote_state_repository: VoteStateRepository | None = None
    _battle_repository: BattleRepository | None = None

    # Infrastructure adapters
    _analytics_sink: AnalyticsSink | None = None

    # Command / query handlers
    _initialize_voting_handler: InitializeVotingHandler | None = None
    _cast_vote_handler: CastVoteHandler | None = None
    _get_vote_state_handler: GetVoteStateHandler | None = None

    # Application services
    _timeout_sweeper: VoteTimeoutSweeper | None = None
    _battle_voting_service: BattleVotingService | None = None

    # Background jobs
    _sweep_job: VoteTimeoutSweepJob | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def vote_state_repository(self) -> VoteStateRepository:
        if self._vote_state_repository is None:
            from ..infrastructure.persistence.repositories.vote_state_repository import (
                SQLiteVoteStateRepository,
            )

            self._vote_state_repository = SQLiteVoteStateRepository(self.database)
        return self._vote_state_repository

    @property
    def battle_repository(self) -> BattleRepository:
        if self._battle_repository is None:
            from ..infrastructure.persistence.repositories.battle_repository import (
                SQLiteBattleRepository,
            )

            self._battle_repository = SQLiteBattleRepository(self.database)
        return self._battle_repository

    # === Infrastructure Adapters ===

    @property
    def analytics_sink(self) -> AnalyticsSink:
        if self._analytics_sink is None:
            from ..infrastructure.analytics.sqlite_sink import SQLiteAnalyticsSink

            self._analytics_sink = SQLiteAnalyticsSink(self.database)
        return self._analytics_sink

    # === Handlers ===

    @property
    def initialize_voting_handler(self) -> InitializeVotingHandler:
        if self._initialize_voting_handler is None:
            from ..application.commands.initialize_voting import InitializeVotingHandler

            self._initialize_voting_handler = InitializeVotingHandler(
                database=self.database,
                vote_state_repository=self.vote_state_repository,
                battle_repository=self.battle_repository,
                vote_timeout_seconds=self.settings.voting.vote_timeout_seconds,
                clock=self.clock,
            )
        return self._initialize_voting_handler

    @property
    def cast_vote_handler(self) -> CastVoteHandler:
        if self._cast_vote_handler is None:
            from ..application.commands.cast_vote import CastVoteHandler

            self._cast_vote_handler = CastVoteHandler(
                database=self.database,
                vote_state_repository=self.vote_state_repository,
                battle_repository=self.battle_repository,
                analytics=self.analytics_sink,
                max_processed_events=self.settings.voting.max_processed_events,
                clock=self.clock,
            )
        return self._cast_vote_handler

    @property
    def get_vote_state_handler(self) -> GetVoteStateHandler:
        if self._get_vote_state_handler is None:
            from ..application.queries.get_vote_state import GetVoteStateHandler

            self._get_vote_state_handler = GetVoteStateHandler(
                vote_state_repository=self.vote_state_repository,
            )
        return self._get_vote_state_handler

    # === Application Services ===

    @property
    def timeout_sweeper(self) -> VoteTimeoutSweeper:
        if self._timeout_sweeper is None:
            from ..application.services.timeout_sweeper import VoteTimeoutSweeper

            self._timeout_sweeper = VoteTimeoutSweeper(
                database=self.database,
                vote_state_repository=self.vote_state_repository,
                battle_repository=self.battle_repository,
                analytics=self.analytics_sink,
                max_processed_events=self.settings.voting.max_processed_events,
                clock=self.clock,
            )
        return self._timeout_sweeper

    @property
    def battle_voting_service(self) -> BattleVotingService:
        """Get the facade exposing the voting operations to the route layer."""
        if self._battle_voting_service is None:
            from ..application.services.battle_voting_service import BattleVotingService

            self._battle_voting_service = BattleVotingService(
                initialize_voting_handler=self.initialize_voting_handler,
                cast_vote_handler=self.cast_vote_handler,
                get_vote_state_handler=self.get_vote_state_handler,
                timeout_sweeper=self.timeout_sweeper,
            )
        return self._battle_voting_service

    # === Background Jobs ===

    @property
    def sweep_job(self) -> VoteTimeoutSweepJob:
        if self._sweep_job is None:
            from ..infrastructure.scheduling.sweep_job import VoteTimeoutSweepJob

            self._sweep_job = VoteTimeoutSweepJob(
                sweeper=self.timeout_sweeper,
                settings=self.settings.sweep,
            )
        return self._sweep_job

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Stop background jobs and release resources."""
        if self._sweep_job is not None:
            try:
                await self._sweep_job.stop()
            except Exception as exc:
                logger.warning("Failed stopping vote timeout sweep job: %r", exc)

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings, clock: Clock = utcnow) -> Container:
    """Create a new dependency injection container."""
    return Container(settings, clock=clock)
