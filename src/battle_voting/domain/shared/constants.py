"""Centralized constants for SQLite pragmas and analytics event names."""

from __future__ import annotations


class SQLPragmas:
    """SQLite PRAGMA statements."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class AnalyticsEvents:
    """Event names sent to the analytics sink."""

    BATTLE_VOTED = "battle_voted"
    BATTLE_COMPLETED = "battle_completed"
