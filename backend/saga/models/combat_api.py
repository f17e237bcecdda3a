"""
Combat API models.

Request payloads validated at the HTTP boundary and converted into the
runtime dataclasses of ``saga.combat.models``.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from saga.combat.models import (
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
    StatusEffectInstance,
)


class AttributesPayload(BaseModel):
    """六大属性"""
    strength: int = 8
    dexterity: int = 8
    constitution: int = 8
    intelligence: int = 8
    wisdom: int = 8
    charisma: int = 8

    def to_domain(self) -> Attributes:
        return Attributes(**self.model_dump())


class StatusEffectPayload(BaseModel):
    name: str
    duration: int = Field(ge=0)


class ItemEffectPayload(BaseModel):
    type: ItemEffectKind
    amount: str  # "2d4+2" / "10"


class ItemPayload(BaseModel):
    """背包物品"""
    id: str = Field(min_length=1)
    name: str
    type: ItemType = ItemType.MISC
    quantity: int = Field(default=1, ge=0)
    description: str = ""
    stat_bonuses: Dict[str, int] = Field(default_factory=dict)
    damage: Optional[str] = None
    armor_class: Optional[str] = None
    effect: Optional[ItemEffectPayload] = None
    gold_value: int = 0

    @field_validator("stat_bonuses")
    @classmethod
    def _known_bonus_keys(cls, value: Dict[str, int]) -> Dict[str, int]:
        allowed = {kind.value for kind in BonusKind}
        unknown = [key for key in value if key.strip().lower() not in allowed]
        if unknown:
            raise ValueError(f"unknown stat bonus keys: {unknown}")
        return value

    def to_domain(self) -> InventoryItem:
        return InventoryItem(
            id=self.id,
            name=self.name,
            item_type=self.type,
            quantity=self.quantity,
            description=self.description,
            bonuses=EquipmentBonus.from_mapping(self.stat_bonuses),
            damage=self.damage,
            armor_class=self.armor_class,
            effect=ItemEffect(self.effect.type, self.effect.amount) if self.effect else None,
            gold_value=self.gold_value,
        )


class FamiliarBonusPayload(BaseModel):
    type: FamiliarBonusKind
    value: float = 0
    description: str = ""


class FamiliarPayload(BaseModel):
    """魔宠"""
    id: str = Field(min_length=1)
    name: str
    passive_bonus: FamiliarBonusPayload
    level: int = Field(default=1, ge=1)
    current_exp: int = Field(default=0, ge=0)
    exp_to_next_level: int = Field(default=100, ge=1)
    is_active: bool = False

    def to_domain(self) -> Familiar:
        return Familiar(
            id=self.id,
            name=self.name,
            passive_bonus=FamiliarPassiveBonus(
                kind=self.passive_bonus.type,
                value=self.passive_bonus.value,
                description=self.passive_bonus.description,
            ),
            level=self.level,
            current_exp=self.current_exp,
            exp_to_next_level=self.exp_to_next_level,
            is_active=self.is_active,
        )


class CharacterPayload(BaseModel):
    """NPC / 敌人 / 队友"""
    id: str = Field(min_length=1)
    name: str
    level: Optional[int] = Field(default=None, ge=1)
    hit_points: int = 10
    max_hit_points: int = Field(default=10, ge=1)
    mana_points: Optional[int] = None
    max_mana_points: Optional[int] = None
    armor_class: Optional[int] = None
    attack_bonus: Optional[int] = None
    damage_formula: Optional[str] = None
    status_effects: List[StatusEffectPayload] = Field(default_factory=list)
    is_ally: bool = False

    def to_domain(self) -> Character:
        return Character(
            id=self.id,
            name=self.name,
            level=self.level,
            hit_points=self.hit_points,
            max_hit_points=self.max_hit_points,
            mana_points=self.mana_points,
            max_mana_points=self.max_mana_points,
            armor_class=self.armor_class,
            attack_bonus=self.attack_bonus,
            damage_formula=self.damage_formula,
            status_effects=[StatusEffectInstance(se.name, se.duration) for se in self.status_effects],
            is_defeated=self.hit_points <= 0,
            is_ally=self.is_ally,
        )


class PlayerPayload(BaseModel):
    """玩家"""
    name: str = "Héros"
    attributes: AttributesPayload = Field(default_factory=AttributesPayload)
    current_hp: Optional[int] = None  # None = 满血
    current_mp: Optional[int] = None
    experience: int = Field(default=0, ge=0)
    currency: int = Field(default=0, ge=0)
    rpg_mode: bool = True

    def to_domain(self) -> PlayerState:
        player = PlayerState(
            name=self.name,
            attributes=self.attributes.to_domain(),
            experience=self.experience,
            currency=self.currency,
            rpg_mode=self.rpg_mode,
        )
        if self.current_hp is not None:
            player.current_hp = self.current_hp
            player.max_hp = max(self.current_hp, 1)
        if self.current_mp is not None:
            player.current_mp = self.current_mp
            player.max_mp = self.current_mp
        return player


class CreateCombatSessionRequest(BaseModel):
    """创建战斗会话请求"""
    session_id: str = Field(min_length=1)
    player: PlayerPayload = Field(default_factory=PlayerPayload)
    characters: List[CharacterPayload] = Field(default_factory=list)
    inventory: List[ItemPayload] = Field(default_factory=list)
    familiars: List[FamiliarPayload] = Field(default_factory=list)
    location_names: Dict[str, str] = Field(default_factory=dict)


class StartEncounterRequest(BaseModel):
    """开始战斗请求"""
    enemy_ids: List[str] = Field(min_length=1)
    ally_ids: List[str] = Field(default_factory=list)
    environment_description: str = ""
    contested_location_id: Optional[str] = None
    reward_items: Dict[str, ItemPayload] = Field(default_factory=dict)


class ClaimHuntRewardRequest(BaseModel):
    combatant_id: str


class UseItemRequest(BaseModel):
    item_id: str
    target_id: Optional[str] = None


class EquipRequest(BaseModel):
    item_id: str


class UnequipRequest(BaseModel):
    slot: EquipmentSlot


class ActivateFamiliarRequest(BaseModel):
    familiar_id: Optional[str] = None  # None = 全部收回
