"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite database and repositories)
- Analytics event sink
- Scheduling of the vote timeout sweep
"""

from battle_voting.infrastructure.persistence.database import Database

__all__ = [
    "Database",
]
