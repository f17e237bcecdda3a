"""
角色 / 玩家 / 装备 / 魔宠 数据模型

Long-lived records the combat core reads before a turn and writes back to
after it (through the propagator only).
"""
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .combatant import StatusEffectInstance

PLAYER_ID = "player"
BASE_ATTRIBUTE_VALUE = 8


class BonusKind(str, Enum):
    """Closed set of bonus keys an equipped item may carry."""

    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"
    HP = "hp"
    AC = "ac"
    ATTACK = "attack"
    DAMAGE = "damage"

    @property
    def is_attribute(self) -> bool:
        return self in ATTRIBUTE_BONUS_FIELDS


ATTRIBUTE_BONUS_FIELDS: Dict[BonusKind, str] = {
    BonusKind.STR: "strength",
    BonusKind.DEX: "dexterity",
    BonusKind.CON: "constitution",
    BonusKind.INT: "intelligence",
    BonusKind.WIS: "wisdom",
    BonusKind.CHA: "charisma",
}


class ItemType(str, Enum):
    """物品类型"""

    WEAPON = "weapon"
    ARMOR = "armor"
    JEWELRY = "jewelry"
    CONSUMABLE = "consumable"
    MISC = "misc"


class EquipmentSlot(str, Enum):
    """装备栏位"""

    WEAPON = "weapon"
    ARMOR = "armor"
    JEWELRY = "jewelry"


SLOT_BY_ITEM_TYPE: Dict[ItemType, EquipmentSlot] = {
    ItemType.WEAPON: EquipmentSlot.WEAPON,
    ItemType.ARMOR: EquipmentSlot.ARMOR,
    ItemType.JEWELRY: EquipmentSlot.JEWELRY,
}


class ItemEffectKind(str, Enum):
    """Consumable effect kinds."""

    HEAL = "heal"
    DAMAGE_SINGLE = "damage_single"
    DAMAGE_ALL = "damage_all"


@dataclass(frozen=True)
class EquipmentBonus:
    kind: BonusKind
    value: int

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Tuple["EquipmentBonus", ...]:
        """Build bonuses from a ``{"str": 1, "ac": 2}`` style mapping.

        Unknown keys raise ``ValueError``.
        """
        bonuses = []
        for key, value in raw.items():
            try:
                kind = BonusKind(str(key).strip().lower())
            except ValueError:
                raise ValueError(f"Unknown equipment bonus key: {key!r}") from None
            bonuses.append(cls(kind=kind, value=int(value)))
        return tuple(bonuses)


@dataclass(frozen=True)
class ItemEffect:
    kind: ItemEffectKind
    amount: str  # damage-formula notation, e.g. "2d4+2" or "10"


@dataclass
class InventoryItem:
    """背包物品"""

    id: str
    name: str
    item_type: ItemType = ItemType.MISC
    quantity: int = 1
    description: str = ""
    bonuses: Tuple[EquipmentBonus, ...] = ()
    damage: Optional[str] = None  # 武器伤害记号（如 "1d8+1"）
    armor_class: Optional[str] = None  # 护甲AC记号（如 "14 + Dex (max +2)"）
    effect: Optional[ItemEffect] = None
    gold_value: int = 0
    is_equipped: bool = False

    def bonus_total(self, kind: BonusKind) -> int:
        return sum(bonus.value for bonus in self.bonuses if bonus.kind == kind)

    @property
    def slot(self) -> Optional[EquipmentSlot]:
        return SLOT_BY_ITEM_TYPE.get(self.item_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.item_type.value,
            "quantity": self.quantity,
            "description": self.description,
            "stat_bonuses": {bonus.kind.value: bonus.value for bonus in self.bonuses},
            "damage": self.damage,
            "armor_class": self.armor_class,
            "effect": (
                {"type": self.effect.kind.value, "amount": self.effect.amount}
                if self.effect
                else None
            ),
            "gold_value": self.gold_value,
            "is_equipped": self.is_equipped,
        }


@dataclass(frozen=True)
class Attributes:
    """六大属性"""

    strength: int = BASE_ATTRIBUTE_VALUE
    dexterity: int = BASE_ATTRIBUTE_VALUE
    constitution: int = BASE_ATTRIBUTE_VALUE
    intelligence: int = BASE_ATTRIBUTE_VALUE
    wisdom: int = BASE_ATTRIBUTE_VALUE
    charisma: int = BASE_ATTRIBUTE_VALUE

    def floored(self) -> "Attributes":
        """Apply the base-attribute floor of 8."""
        return Attributes(
            **{
                name: max(BASE_ATTRIBUTE_VALUE, getattr(self, name))
                for name in ATTRIBUTE_BONUS_FIELDS.values()
            }
        )

    def plus(self, field_name: str, amount: int) -> "Attributes":
        if not amount:
            return self
        return replace(self, **{field_name: getattr(self, field_name) + amount})

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in ATTRIBUTE_BONUS_FIELDS.values()}


class FamiliarBonusKind(str, Enum):
    """魔宠被动加成类型"""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"
    ARMOR_CLASS = "armor_class"
    ATTACK_BONUS = "attack_bonus"
    NARRATIVE = "narrative"
    GOLD_FIND = "gold_find"
    EXP_GAIN = "exp_gain"


@dataclass(frozen=True)
class FamiliarPassiveBonus:
    kind: FamiliarBonusKind
    value: float = 0
    description: str = ""


@dataclass
class Familiar:
    """
    魔宠

    At most one familiar is active at a time; its passive bonus scales with
    its level and it levels up from combat experience.
    """

    id: str
    name: str
    passive_bonus: FamiliarPassiveBonus
    level: int = 1
    current_exp: int = 0
    exp_to_next_level: int = 100
    is_active: bool = False

    def bonus_amount(self) -> int:
        """有效加成 = floor(value × level)"""
        return math.floor(self.passive_bonus.value * self.level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "current_exp": self.current_exp,
            "exp_to_next_level": self.exp_to_next_level,
            "is_active": self.is_active,
            "passive_bonus": {
                "type": self.passive_bonus.kind.value,
                "value": self.passive_bonus.value,
                "description": self.passive_bonus.description,
            },
        }


@dataclass
class Character:
    """
    NPC / 敌人 / 队友 记录

    Optional combat numbers fall back to documented defaults when a
    combatant projection is resolved (AC 10, attack 0, damage 1d4, level 1).
    """

    id: str
    name: str
    level: Optional[int] = None
    hit_points: int = 10
    max_hit_points: int = 10
    mana_points: Optional[int] = None
    max_mana_points: Optional[int] = None
    armor_class: Optional[int] = None
    attack_bonus: Optional[int] = None
    damage_formula: Optional[str] = None
    status_effects: List[StatusEffectInstance] = field(default_factory=list)
    is_defeated: bool = False
    is_ally: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "hit_points": self.hit_points,
            "max_hit_points": self.max_hit_points,
            "mana_points": self.mana_points,
            "max_mana_points": self.max_mana_points,
            "armor_class": self.armor_class,
            "attack_bonus": self.attack_bonus,
            "damage_formula": self.damage_formula,
            "status_effects": [se.to_dict() for se in self.status_effects],
            "is_defeated": self.is_defeated,
            "is_ally": self.is_ally,
        }


def _empty_loadout() -> Dict[EquipmentSlot, Optional[str]]:
    return {slot: None for slot in EquipmentSlot}


@dataclass
class PlayerState:
    """
    玩家状态

    Inventory and familiars live behind repositories; the player only keeps
    references to what is equipped and which familiar is active.
    """

    name: str = "Héros"
    attributes: Attributes = field(default_factory=Attributes)
    current_hp: int = 0
    max_hp: int = 0
    current_mp: int = 0
    max_mp: int = 0
    experience: int = 0
    currency: int = 0
    equipped_item_ids: Dict[EquipmentSlot, Optional[str]] = field(default_factory=_empty_loadout)
    active_familiar_id: Optional[str] = None
    rpg_mode: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "attributes": self.attributes.to_dict(),
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "current_mp": self.current_mp,
            "max_mp": self.max_mp,
            "experience": self.experience,
            "currency": self.currency,
            "equipped_item_ids": {
                slot.value: item_id for slot, item_id in self.equipped_item_ids.items()
            },
            "active_familiar_id": self.active_familiar_id,
            "rpg_mode": self.rpg_mode,
        }
