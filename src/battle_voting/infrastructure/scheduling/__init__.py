"""Background jobs."""

from battle_voting.infrastructure.scheduling.sweep_job import VoteTimeoutSweepJob

__all__ = [
    "VoteTimeoutSweepJob",
]
