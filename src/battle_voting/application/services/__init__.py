"""Application services."""

from battle_voting.application.services.battle_voting_service import BattleVotingService
from battle_voting.application.services.timeout_sweeper import SweepStats, VoteTimeoutSweeper

__all__ = [
    "BattleVotingService",
    "SweepStats",
    "VoteTimeoutSweeper",
]
