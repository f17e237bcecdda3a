"""Combat system package."""

from .combat_engine import CombatEngine, CombatSession, CombatSessionNotFoundError, TurnOutcome
from .dice import DiceRoller
from .resolver import CombatResolver
from .rewards import RewardEngine, RewardSnapshot
from .stats import derive_effective_stats

__all__ = [
    "CombatEngine",
    "CombatSession",
    "CombatSessionNotFoundError",
    "TurnOutcome",
    "DiceRoller",
    "CombatResolver",
    "RewardEngine",
    "RewardSnapshot",
    "derive_effective_stats",
]
