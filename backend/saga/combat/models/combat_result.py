"""
战斗结果数据模型
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .active_combat import ActiveCombat, CombatState
from .character import InventoryItem
from .combatant import Combatant, StatusEffectInstance


@dataclass
class CombatRewards:
    """战斗奖励"""

    exp: int = 0
    currency: int = 0
    items: List[InventoryItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exp": self.exp,
            "currency": self.currency,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class CombatantUpdate:
    """单个战斗单位的回合后状态"""

    combatant_id: str
    new_hp: int
    new_mp: Optional[int]
    is_defeated: bool
    new_status_effects: List[StatusEffectInstance] = field(default_factory=list)

    @classmethod
    def from_combatant(cls, combatant: Combatant) -> "CombatantUpdate":
        return cls(
            combatant_id=combatant.character_id,
            new_hp=combatant.current_hp,
            new_mp=combatant.current_mp,
            is_defeated=combatant.is_defeated,
            new_status_effects=list(combatant.status_effects),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "combatant_id": self.combatant_id,
            "new_hp": self.new_hp,
            "new_mp": self.new_mp,
            "is_defeated": self.is_defeated,
            "new_status_effects": [se.to_dict() for se in self.new_status_effects],
        }


@dataclass
class CombatUpdate:
    """
    回合结算结果

    Produced by the resolver, consumed by the propagator. ``next_active_combat``
    is only set while the encounter continues (including the pending-reward
    case); ``conquest_location_id`` is only set on a conquering victory.
    """

    updated_combatants: List[CombatantUpdate]
    combat_ended: bool
    outcome: CombatState
    turn_log: List[str] = field(default_factory=list)
    rewards: CombatRewards = field(default_factory=CombatRewards)
    next_active_combat: Optional[ActiveCombat] = None
    conquest_location_id: Optional[str] = None

    @property
    def exp_gained(self) -> int:
        return self.rewards.exp

    @property
    def currency_gained(self) -> int:
        return self.rewards.currency

    @property
    def items_obtained(self) -> List[InventoryItem]:
        return self.rewards.items

    @property
    def turn_narration(self) -> str:
        """给叙事层的纯文本回合日志"""
        return "\n".join(self.turn_log)

    @property
    def conquest_happened(self) -> bool:
        return self.conquest_location_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updated_combatants": [u.to_dict() for u in self.updated_combatants],
            "combat_ended": self.combat_ended,
            "outcome": self.outcome.value,
            "exp_gained": self.exp_gained,
            "currency_gained": self.currency_gained,
            "items_obtained": [item.to_dict() for item in self.items_obtained],
            "turn_narration": self.turn_narration,
            "conquest_location_id": self.conquest_location_id,
            "next_active_combat": (
                self.next_active_combat.to_dict() if self.next_active_combat else None
            ),
        }
