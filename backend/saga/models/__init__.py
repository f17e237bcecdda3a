"""
数据模型包
"""
from .combat_api import (
    ActivateFamiliarRequest,
    CharacterPayload,
    ClaimHuntRewardRequest,
    CreateCombatSessionRequest,
    EquipRequest,
    FamiliarPayload,
    ItemPayload,
    PlayerPayload,
    StartEncounterRequest,
    UnequipRequest,
    UseItemRequest,
)

__all__ = [
    "ActivateFamiliarRequest",
    "CharacterPayload",
    "ClaimHuntRewardRequest",
    "CreateCombatSessionRequest",
    "EquipRequest",
    "FamiliarPayload",
    "ItemPayload",
    "PlayerPayload",
    "StartEncounterRequest",
    "UnequipRequest",
    "UseItemRequest",
]
