"""
战斗奖励

Rewards are computed from the roster as it stood before the encounter so
that in-combat changes never move the payout.
"""
import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Optional

from .dice import DiceRoller
from .models.character import Character, InventoryItem
from .models.combatant import Combatant
from .models.combat_result import CombatRewards
from .rules import CURRENCY_LEVEL_FACTOR, DEFAULT_LEVEL, EXP_PER_ENEMY_LEVEL

logger = logging.getLogger(__name__)

RewardTable = Callable[[Combatant], List[InventoryItem]]


@dataclass(frozen=True)
class RewardSnapshot:
    """Read-only character id -> pre-combat level."""

    levels: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_characters(cls, characters: Iterable[Character]) -> "RewardSnapshot":
        return cls(
            levels=MappingProxyType(
                {c.id: (c.level if c.level else DEFAULT_LEVEL) for c in characters}
            )
        )

    def level_of(self, character_id: str) -> int:
        return self.levels.get(character_id, DEFAULT_LEVEL)


class RewardEngine:
    """奖励计算"""

    def __init__(self, dice: DiceRoller, reward_table: Optional[RewardTable] = None):
        self.dice = dice
        self.reward_table = reward_table

    def compute(self, combatants: Iterable[Combatant], snapshot: RewardSnapshot) -> CombatRewards:
        """
        计算胜利奖励

        Per defeated enemy: exp += level × 10 and
        currency += floor(random() × level × 5) + level.
        """
        rewards = CombatRewards()
        for enemy in combatants:
            if not (enemy.is_enemy() and enemy.is_defeated):
                continue
            level = snapshot.level_of(enemy.character_id)
            rewards.exp += level * EXP_PER_ENEMY_LEVEL
            rewards.currency += math.floor(self.dice.fraction() * level * CURRENCY_LEVEL_FACTOR) + level
            if self.reward_table is not None:
                rewards.items.extend(self.reward_table(enemy))

        logger.debug("rewards: exp=%d currency=%d items=%d", rewards.exp, rewards.currency, len(rewards.items))
        return rewards
