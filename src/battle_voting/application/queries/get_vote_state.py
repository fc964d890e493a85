"""Query for reading a battle's vote state for status display."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from battle_voting.domain.shared.types import BattleIdField
from battle_voting.domain.voting.entities import VoteState

if TYPE_CHECKING:
    from ...domain.voting.repository import VoteStateRepository

logger = logging.getLogger(__name__)


class GetVoteStateQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    battle_id: BattleIdField


class GetVoteStateHandler:

    def __init__(self, *, vote_state_repository: VoteStateRepository) -> None:
        self._vote_states = vote_state_repository

    async def handle(self, query: GetVoteStateQuery) -> VoteState | None:
        try:
            return await self._vote_states.get(query.battle_id)
        except Exception:
            logger.exception("Failed to get vote state for battle %s", query.battle_id)
            return None
