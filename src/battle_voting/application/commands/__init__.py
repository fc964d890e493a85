"""
Application Commands (CQRS Write Side)

Command objects and their handlers for write operations.
"""

from battle_voting.application.commands.cast_vote import CastVoteCommand, CastVoteResult
from battle_voting.application.commands.initialize_voting import (
    InitializeVotingCommand,
    InitializeVotingResult,
)

__all__ = [
    # Initialize
    "InitializeVotingCommand",
    "InitializeVotingResult",
    # Cast
    "CastVoteCommand",
    "CastVoteResult",
]
