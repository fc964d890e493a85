"""Periodic runner for the vote timeout sweep."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from battle_voting.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...application.services.timeout_sweeper import SweepStats, VoteTimeoutSweeper
    from ...config.settings import SweepSettings

logger = logging.getLogger(__name__)


class VoteTimeoutSweepJob:
    """Calls ``process_vote_timeouts`` every ``interval_seconds``.

    A single background task runs the sweeps one after another, so sweeps
    started by the same job never overlap.
    """

    def __init__(self, *, sweeper: VoteTimeoutSweeper, settings: SweepSettings) -> None:
        self._sweeper = sweeper
        self._interval = settings.interval_seconds
        self._loop_task: asyncio.Task[None] | None = None
        self._last_stats: SweepStats | None = None

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def last_stats(self) -> SweepStats | None:
        return self._last_stats

    def start(self) -> None:
        if self.is_running:
            logger.warning(LogTemplates.SWEEP_JOB_ALREADY_RUNNING)
            return

        self._loop_task = asyncio.create_task(self._sweep_forever(), name="vote-timeout-sweep")
        logger.info(LogTemplates.SWEEP_JOB_STARTED, self._interval)

    async def stop(self) -> None:
        task, self._loop_task = self._loop_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info(LogTemplates.SWEEP_JOB_STOPPED)

    async def run_once(self) -> SweepStats:
        self._last_stats = await self._sweeper.process_vote_timeouts()
        return self._last_stats

    async def _sweep_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception(LogTemplates.SWEEP_JOB_CYCLE_FAILED)
            await asyncio.sleep(self._interval)
