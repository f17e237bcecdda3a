"""Derived combat numbers (never persisted)."""
from dataclasses import dataclass
from typing import Any, Dict

from .character import Attributes


@dataclass(frozen=True)
class EffectiveStats:
    attributes: Attributes
    max_hp: int
    max_mp: int
    armor_class: int
    attack_bonus: int
    damage_formula: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attributes": self.attributes.to_dict(),
            "max_hp": self.max_hp,
            "max_mp": self.max_mp,
            "armor_class": self.armor_class,
            "attack_bonus": self.attack_bonus,
            "damage_formula": self.damage_formula,
        }


NEUTRAL_STATS = EffectiveStats(
    attributes=Attributes(),
    max_hp=0,
    max_mp=0,
    armor_class=0,
    attack_bonus=0,
    damage_formula="0",
)
