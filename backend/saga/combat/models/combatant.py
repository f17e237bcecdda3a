"""
战斗单位数据模型
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .character import Character, InventoryItem


class CombatTeam(str, Enum):
    """阵营"""

    PLAYER = "player"
    ENEMY = "enemy"


@dataclass
class StatusEffectInstance:
    """状态效果实例"""

    name: str
    duration: int  # 剩余回合数

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "duration": self.duration}


@dataclass
class Combatant:
    """
    战斗单位

    Per-encounter projection of a character (or the player). Created when
    the encounter starts, mutated only on the resolver's private copy, and
    discarded when the encounter ends.
    """

    # ===== 基础信息 =====
    character_id: str  # 对应 Character.id（玩家为 "player"）
    name: str
    team: CombatTeam

    # ===== 生命值 / 法力值 =====
    current_hp: int
    max_hp: int
    current_mp: Optional[int] = None
    max_mp: Optional[int] = None

    # ===== 状态 =====
    status_effects: List[StatusEffectInstance] = field(default_factory=list)
    is_defeated: bool = False

    # ===== 狩猎奖励 =====
    reward_item: Optional["InventoryItem"] = None

    def is_player_team(self) -> bool:
        return self.team == CombatTeam.PLAYER

    def is_enemy(self) -> bool:
        return self.team == CombatTeam.ENEMY

    def has_pending_reward(self) -> bool:
        return self.is_defeated and self.reward_item is not None

    def take_damage(self, amount: int) -> int:
        """
        受到伤害

        Returns:
            int: 实际扣除的生命值
        """
        actual = min(max(amount, 0), self.current_hp)
        self.current_hp -= actual
        if self.current_hp <= 0:
            self.current_hp = 0
            self.is_defeated = True
        return actual

    def heal(self, amount: int) -> int:
        """恢复生命值（不超过上限）"""
        actual = max(0, min(amount, self.max_hp - self.current_hp))
        self.current_hp += actual
        return actual

    @classmethod
    def from_character(cls, character: "Character", team: CombatTeam) -> "Combatant":
        return cls(
            character_id=character.id,
            name=character.name,
            team=team,
            current_hp=character.hit_points,
            max_hp=character.max_hit_points,
            current_mp=character.mana_points,
            max_mp=character.max_mana_points,
            status_effects=[
                StatusEffectInstance(se.name, se.duration) for se in character.status_effects
            ],
            is_defeated=character.is_defeated or character.hit_points <= 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于序列化）"""
        return {
            "character_id": self.character_id,
            "name": self.name,
            "team": self.team.value,
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "current_mp": self.current_mp,
            "max_mp": self.max_mp,
            "status_effects": [se.to_dict() for se in self.status_effects],
            "is_defeated": self.is_defeated,
            "reward_item": self.reward_item.to_dict() if self.reward_item else None,
        }
