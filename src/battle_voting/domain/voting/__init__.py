"""
Voting Bounded Context

Domain logic for head-to-head battle votes, winner resolution and timeouts.
"""

from battle_voting.domain.voting.entities import ParticipantVote, VoteState
from battle_voting.domain.voting.repository import VoteStateRepository
from battle_voting.domain.voting.services import (
    TimeoutResolution,
    TimeoutResolver,
    WinnerResolver,
    WinnerResult,
    generate_event_id,
)
from battle_voting.domain.voting.value_objects import TimeoutReason, VoteStatus, VoteValue

__all__ = [
    # Entities
    "ParticipantVote",
    "VoteState",
    # Value Objects
    "VoteValue",
    "VoteStatus",
    "TimeoutReason",
    # Repository
    "VoteStateRepository",
    # Services
    "WinnerResolver",
    "WinnerResult",
    "TimeoutResolver",
    "TimeoutResolution",
    "generate_event_id",
]
