"""Analytics sink implementations."""

from battle_voting.infrastructure.analytics.sqlite_sink import SQLiteAnalyticsSink

__all__ = [
    "SQLiteAnalyticsSink",
]
