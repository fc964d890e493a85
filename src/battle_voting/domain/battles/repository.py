"""
Battle Repository Interface

Contract for the external battle record store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from battle_voting.domain.battles.entities import Battle
from battle_voting.domain.voting.entities import ParticipantVote
from battle_voting.domain.voting.value_objects import VoteValue


class BattleRepository(ABC):
    """Abstract repository for battle records and their vote audit rows.

    Write methods take the caller's locked connection so that the battle
    update commits or rolls back together with the vote state.
    """

    @abstractmethod
    async def create(self, battle: Battle) -> None:
        """Insert a new battle record."""
        ...

    @abstractmethod
    async def get(self, battle_id: str, conn: Any | None = None) -> Battle | None:
        """Fetch a battle, optionally on an existing connection."""
        ...

    @abstractmethod
    async def mark_voting(self, conn: Any, battle_id: str, now: datetime) -> None:
        """Move a battle into its voting phase."""
        ...

    @abstractmethod
    async def mark_completed(
        self, conn: Any, battle_id: str, winner_id: str, completed_at: datetime
    ) -> None:
        """Record the final outcome of a battle."""
        ...

    @abstractmethod
    async def record_vote(
        self,
        conn: Any,
        battle_id: str,
        participant_id: str,
        value: VoteValue,
        voted_at: datetime,
    ) -> None:
        """Upsert the audit row for a participant's vote."""
        ...

    @abstractmethod
    async def list_votes(self, conn: Any, battle_id: str) -> list[ParticipantVote]:
        """List the audit rows recorded for a battle."""
        ...
