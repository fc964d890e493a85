"""
Battles Bounded Context

The battle record itself is owned elsewhere; the voting engine only reads
participants and writes the final outcome.
"""

from battle_voting.domain.battles.entities import Battle, BattleStatus
from battle_voting.domain.battles.repository import BattleRepository

__all__ = [
    "Battle",
    "BattleStatus",
    "BattleRepository",
]
