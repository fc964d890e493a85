"""
Application Queries (CQRS Read Side)

Query objects and their handlers for read operations.
"""

from battle_voting.application.queries.get_vote_state import GetVoteStateQuery

__all__ = [
    "GetVoteStateQuery",
]
