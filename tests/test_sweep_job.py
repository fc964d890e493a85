"""Unit Tests for VoteTimeoutSweepJob."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from battle_voting.application.services.timeout_sweeper import SweepStats
from battle_voting.config.settings import SweepSettings
from battle_voting.infrastructure.scheduling.sweep_job import VoteTimeoutSweepJob


@pytest.fixture
def sweeper():
    return Mock(process_vote_timeouts=AsyncMock(return_value=SweepStats(candidates=2, resolved=2)))


@pytest.fixture
def job(sweeper):
    return VoteTimeoutSweepJob(sweeper=sweeper, settings=SweepSettings(interval_seconds=1))


class TestVoteTimeoutSweepJob:
    async def test_run_once_records_stats(self, job, sweeper):
        stats = await job.run_once()

        assert stats.resolved == 2
        assert job.last_stats is stats
        sweeper.process_vote_timeouts.assert_awaited_once()

    async def test_start_and_stop(self, job, sweeper):
        job.start()
        assert job.is_running is True

        await asyncio.sleep(0.05)
        await job.stop()

        assert job.is_running is False
        sweeper.process_vote_timeouts.assert_awaited()

    async def test_start_twice_is_ignored(self, job):
        job.start()
        first_task = job._loop_task
        job.start()

        assert job._loop_task is first_task
        await job.stop()

    async def test_loop_survives_sweep_errors(self, sweeper):
        sweeper.process_vote_timeouts.side_effect = [RuntimeError("boom"), SweepStats()]
        job = VoteTimeoutSweepJob(sweeper=sweeper, settings=SweepSettings(interval_seconds=1))

        job.start()
        await asyncio.sleep(0.05)

        assert job.is_running is True
        await job.stop()

    async def test_stop_without_start(self, job):
        await job.stop()

        assert job.is_running is False
