"""SQLite repository implementations."""

from battle_voting.infrastructure.persistence.repositories.battle_repository import (
    SQLiteBattleRepository,
)
from battle_voting.infrastructure.persistence.repositories.vote_state_repository import (
    SQLiteVoteStateRepository,
)

__all__ = [
    "SQLiteBattleRepository",
    "SQLiteVoteStateRepository",
]
