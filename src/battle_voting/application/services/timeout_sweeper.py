"""Forced resolution of battles whose vote deadline has lapsed."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from battle_voting.application.interfaces.analytics import log_event_safely
from battle_voting.domain.shared.constants import AnalyticsEvents
from battle_voting.domain.shared.datetime_utils import Clock, utcnow
from battle_voting.domain.shared.messages import LogTemplates
from battle_voting.domain.shared.types import NonNegativeInt
from battle_voting.domain.voting.entities import VoteState
from battle_voting.domain.voting.services import TimeoutResolution, TimeoutResolver

if TYPE_CHECKING:
    from ...domain.battles.repository import BattleRepository
    from ...domain.voting.repository import VoteStateRepository
    from ...infrastructure.persistence.database import Database
    from ..interfaces.analytics import AnalyticsSink

logger = logging.getLogger(__name__)


class SweepStats(BaseModel):
    candidates: NonNegativeInt = 0
    resolved: NonNegativeInt = 0
    skipped: NonNegativeInt = 0
    failed: NonNegativeInt = 0


class VoteTimeoutSweeper:
    """Completes battles still voting after their deadline.

    Only one sweep is expected to run at a time, but each battle is resolved
    under the same exclusive lock ``CastVoteHandler`` uses, so a racing vote
    and the sweep serialize and the loser sees a non-voting state.
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

    async def process_vote_timeouts(self) -> SweepStats:
        stats = SweepStats()
        now = self._clock()

        try:
            candidates = await self._vote_states.list_expired(now)
        except Exception:
            logger.exception(LogTemplates.SWEEP_QUERY_FAILED)
            return stats

        stats.candidates = len(candidates)
        if not candidates:
            return stats
        logger.info(LogTemplates.SWEEP_CANDIDATES, stats.candidates)

        for candidate in candidates:
            try:
                resolution = await self._resolve(candidate, now)
            except Exception:
                logger.exception(LogTemplates.SWEEP_ITEM_FAILED, candidate.battle_id)
                stats.failed += 1
                continue

            if resolution is None:
                stats.skipped += 1
                continue

            stats.resolved += 1
            await log_event_safely(
                self._analytics,
                resolution.winner_id,
                AnalyticsEvents.BATTLE_COMPLETED,
                {
                    "battle_id": candidate.battle_id,
                    "winner_id": resolution.winner_id,
                    "completion_reason": resolution.reason.value,
                },
            )

        logger.info(
            LogTemplates.SWEEP_COMPLETED,
            stats.candidates,
            stats.resolved,
            stats.skipped,
            stats.failed,
        )
        return stats

    async def _resolve(self, candidate: VoteState, now: datetime) -> TimeoutResolution | None:
        event_id = TimeoutResolver.event_id_for(candidate)

        async with self._db.locked_transaction() as conn:
            state = await self._vote_states.get_for_update(conn, candidate.battle_id)
            if state is None:
                return None

            already_processed = state.has_processed(event_id)
            if already_processed or not state.is_voting:
                logger.debug(
                    LogTemplates.SWEEP_ITEM_SKIPPED,
                    state.battle_id,
                    state.status.value,
                    already_processed,
                )
                return None

            resolution = TimeoutResolver.resolve(state)
            if resolution is None:
                logger.warning(LogTemplates.SWEEP_UNREACHABLE_BOTH_VOTED, state.battle_id)
                return None

            state.complete(resolution.winner_id, now)
            state.mark_processed(event_id, self._max_processed_events)
            await self._vote_states.update(conn, state)
            await self._battles.mark_completed(conn, state.battle_id, resolution.winner_id, now)

        logger.info(
            LogTemplates.TIMEOUT_RESOLVED,
            candidate.battle_id,
            resolution.winner_id,
            resolution.reason.value,
        )
        return resolution
