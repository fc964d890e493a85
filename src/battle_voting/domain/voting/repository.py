"""
Voting Domain Repository Interfaces

Abstract base classes defining the contracts for vote state persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from battle_voting.domain.voting.entities import VoteState


class VoteStateRepository(ABC):
    """Abstract repository for per-battle vote state.

    Methods taking ``conn`` run on a connection that already holds the
    exclusive write lock (see ``Database.locked_transaction``); they never
    commit on their own.
    """

    @abstractmethod
    async def get(self, battle_id: str) -> VoteState | None:
        """Read the current vote state without locking.

        Args:
            battle_id: The battle whose state to read.

        Returns:
            The vote state, or None if voting was never initialized.
        """
        ...

    @abstractmethod
    async def get_for_update(self, conn: Any, battle_id: str) -> VoteState | None:
        """Read the vote state inside a locked transaction.

        Args:
            conn: Connection holding the exclusive lock.
            battle_id: The battle whose state to read.

        Returns:
            The vote state, or None if voting was never initialized.
        """
        ...

    @abstractmethod
    async def insert(self, conn: Any, state: VoteState) -> None:
        """Persist a newly created vote state."""
        ...

    @abstractmethod
    async def update(self, conn: Any, state: VoteState) -> None:
        """Overwrite the mutable fields of an existing vote state."""
        ...

    @abstractmethod
    async def list_expired(self, now: datetime) -> list[VoteState]:
        """List states still voting whose deadline is before ``now``.

        The result is a non-locked snapshot; callers must re-read each row
        with ``get_for_update`` before acting on it.
        """
        ...
