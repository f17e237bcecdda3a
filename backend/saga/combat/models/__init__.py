"""Data models for the combat system."""

from .combatant import Combatant, CombatTeam, StatusEffectInstance
from .character import (
    PLAYER_ID,
    Attributes,
    BonusKind,
    Character,
    EquipmentBonus,
    EquipmentSlot,
    Familiar,
    FamiliarBonusKind,
    FamiliarPassiveBonus,
    InventoryItem,
    ItemEffect,
    ItemEffectKind,
    ItemType,
    PlayerState,
)
from .active_combat import ActiveCombat, CombatState
from .combat_result import CombatantUpdate, CombatRewards, CombatUpdate
from .effective_stats import NEUTRAL_STATS, EffectiveStats

__all__ = [
    "Combatant",
    "CombatTeam",
    "StatusEffectInstance",
    "PLAYER_ID",
    "Attributes",
    "BonusKind",
    "Character",
    "EquipmentBonus",
    "EquipmentSlot",
    "Familiar",
    "FamiliarBonusKind",
    "FamiliarPassiveBonus",
    "InventoryItem",
    "ItemEffect",
    "ItemEffectKind",
    "ItemType",
    "PlayerState",
    "ActiveCombat",
    "CombatState",
    "CombatantUpdate",
    "CombatRewards",
    "CombatUpdate",
    "NEUTRAL_STATS",
    "EffectiveStats",
]
