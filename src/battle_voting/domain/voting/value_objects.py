"""
Voting Domain Value Objects

Immutable value objects for the battle voting bounded context.
"""

from enum import Enum


class VoteValue(Enum):
    """A participant's judgement of the *other* participant's trick."""

    CLEAN = "clean"  # Opponent landed the trick
    SKETCH = "sketch"  # Landed, but not cleanly enough to count
    REDO = "redo"  # Not landed

    @property
    def awards_point(self) -> bool:
        """Whether this vote awards a point to the voter's opponent."""
        return self is VoteValue.CLEAN


class VoteStatus(Enum):
    """Lifecycle of a battle's vote state. ``COMPLETED`` is terminal."""

    WAITING = "waiting"
    ACTIVE = "active"
    VOTING = "voting"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self is VoteStatus.COMPLETED


class TimeoutReason(Enum):
    """Why a battle was completed by the timeout sweep."""

    OPPONENT_TIMEOUT = "opponent_timeout"  # Only the creator voted
    CREATOR_TIMEOUT = "creator_timeout"  # Only the opponent voted
    BOTH_TIMEOUT = "both_timeout"  # Nobody voted
