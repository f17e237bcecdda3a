"""
进行中的战斗快照
"""
import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .combatant import Combatant, CombatTeam


class CombatState(str, Enum):
    """战斗状态"""

    INACTIVE = "inactive"
    ACTIVE = "active"
    ENDED_VICTORY = "ended_victory"
    ENDED_DEFEAT = "ended_defeat"
    ENDED_VICTORY_PENDING_REWARD = "ended_victory_pending_reward"  # 仍视为进行中，直到领取奖励


def _new_combat_id() -> str:
    return f"combat_{uuid.uuid4().hex[:8]}"


@dataclass
class ActiveCombat:
    """
    战斗快照

    Treated as a value: each turn produces a new snapshot and the session
    swaps it in wholesale.
    """

    combatants: List[Combatant] = field(default_factory=list)
    is_active: bool = True
    environment_description: str = ""
    contested_location_id: Optional[str] = None
    combat_id: str = field(default_factory=_new_combat_id)

    # ===== 便捷方法 =====

    def get_combatant(self, character_id: str) -> Optional[Combatant]:
        for combatant in self.combatants:
            if combatant.character_id == character_id:
                return combatant
        return None

    def team(self, team: CombatTeam) -> List[Combatant]:
        return [c for c in self.combatants if c.team == team]

    def living(self, team: CombatTeam) -> List[Combatant]:
        return [c for c in self.combatants if c.team == team and not c.is_defeated]

    def all_defeated(self, team: CombatTeam) -> bool:
        return all(c.is_defeated for c in self.team(team))

    def has_pending_reward(self) -> bool:
        return any(c.is_enemy() and c.has_pending_reward() for c in self.combatants)

    @property
    def state(self) -> CombatState:
        enemies_down = self.all_defeated(CombatTeam.ENEMY)
        if self.all_defeated(CombatTeam.PLAYER) and not enemies_down:
            return CombatState.ENDED_DEFEAT
        if enemies_down:
            if self.is_active and self.has_pending_reward():
                return CombatState.ENDED_VICTORY_PENDING_REWARD
            return CombatState.ENDED_VICTORY
        return CombatState.ACTIVE if self.is_active else CombatState.INACTIVE

    def copy(self) -> "ActiveCombat":
        """Deep copy used by the resolver before it mutates anything."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "combat_id": self.combat_id,
            "is_active": self.is_active,
            "state": self.state.value,
            "environment_description": self.environment_description,
            "contested_location_id": self.contested_location_id,
            "combatants": [c.to_dict() for c in self.combatants],
        }
