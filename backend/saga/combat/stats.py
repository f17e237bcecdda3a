"""
属性推导

Pure derivation of the numbers the resolver consumes from base attributes,
up to three equipped items and the active familiar's passive bonus.
"""
import logging
from typing import Dict, Mapping, Optional

from .models.character import (
    ATTRIBUTE_BONUS_FIELDS,
    Attributes,
    BonusKind,
    EquipmentSlot,
    Familiar,
    FamiliarBonusKind,
    InventoryItem,
)
from .models.effective_stats import NEUTRAL_STATS, EffectiveStats
from .notation import format_modifier, parse_armor_class, parse_damage_formula
from .rules import (
    BASE_ARMOR_CLASS,
    BASE_HIT_POINTS,
    HIT_POINTS_PER_CONSTITUTION,
    UNARMED_DAMAGE_DICE,
    ability_modifier,
)

logger = logging.getLogger(__name__)

_FAMILIAR_ATTRIBUTE_FIELDS: Dict[FamiliarBonusKind, str] = {
    FamiliarBonusKind.STRENGTH: "strength",
    FamiliarBonusKind.DEXTERITY: "dexterity",
    FamiliarBonusKind.CONSTITUTION: "constitution",
    FamiliarBonusKind.INTELLIGENCE: "intelligence",
    FamiliarBonusKind.WISDOM: "wisdom",
    FamiliarBonusKind.CHARISMA: "charisma",
}


def derive_effective_stats(
    attributes: Attributes,
    equipped: Optional[Mapping[EquipmentSlot, InventoryItem]] = None,
    *,
    rpg_mode: bool = True,
    familiar: Optional[Familiar] = None,
) -> EffectiveStats:
    """
    计算有效战斗属性

    Args:
        attributes: base attributes (floored at 8 before bonuses).
        equipped: slot -> equipped item; an empty slot contributes nothing.
        rpg_mode: outside RPG mode a neutral stat block is returned.
        familiar: the active familiar, if any. Its bonus is
            ``floor(value × level)`` on one attribute, AC or attack.

    Returns:
        EffectiveStats
    """
    if not rpg_mode:
        return NEUTRAL_STATS

    equipped = equipped or {}
    items = [item for item in equipped.values() if item is not None]

    familiar_kind = familiar.passive_bonus.kind if familiar else None
    familiar_amount = familiar.bonus_amount() if familiar else 0

    # 1. 属性：基础值 + 魔宠 + 装备
    effective = attributes.floored()
    if familiar_kind in _FAMILIAR_ATTRIBUTE_FIELDS:
        effective = effective.plus(_FAMILIAR_ATTRIBUTE_FIELDS[familiar_kind], familiar_amount)
    for kind, field_name in ATTRIBUTE_BONUS_FIELDS.items():
        effective = effective.plus(field_name, sum(item.bonus_total(kind) for item in items))

    # 2. 平面加值（不折算进属性）
    flat: Dict[BonusKind, int] = {
        kind: sum(item.bonus_total(kind) for item in items)
        for kind in (BonusKind.HP, BonusKind.AC, BonusKind.ATTACK, BonusKind.DAMAGE)
    }

    strength_mod = ability_modifier(effective.strength)
    dexterity_mod = ability_modifier(effective.dexterity)

    max_hp = BASE_HIT_POINTS + HIT_POINTS_PER_CONSTITUTION * effective.constitution + flat[BonusKind.HP]
    max_mp = effective.intelligence

    attack_bonus = strength_mod + flat[BonusKind.ATTACK]
    if familiar_kind == FamiliarBonusKind.ATTACK_BONUS:
        attack_bonus += familiar_amount

    damage_formula = _damage_formula(
        equipped.get(EquipmentSlot.WEAPON), strength_mod + flat[BonusKind.DAMAGE]
    )

    armor_class = _armor_class(
        equipped.get(EquipmentSlot.ARMOR),
        base=BASE_ARMOR_CLASS + effective.dexterity,
        dexterity_mod=dexterity_mod,
    )
    armor_class += flat[BonusKind.AC]
    if familiar_kind == FamiliarBonusKind.ARMOR_CLASS:
        armor_class += familiar_amount

    return EffectiveStats(
        attributes=effective,
        max_hp=max_hp,
        max_mp=max_mp,
        armor_class=armor_class,
        attack_bonus=attack_bonus,
        damage_formula=damage_formula,
    )


def _damage_formula(weapon: Optional[InventoryItem], modifier: int) -> str:
    """Weapon dice replace 1d4; the weapon's own modifier joins the others."""
    dice = UNARMED_DAMAGE_DICE
    if weapon is not None and weapon.damage:
        formula = parse_damage_formula(weapon.damage)
        if formula.malformed:
            logger.warning("Weapon %s has unreadable damage %r, using %s", weapon.id, weapon.damage, dice)
        elif formula.has_dice:
            dice = formula.dice_portion()
            modifier += formula.modifier
        else:
            # bare integer weapon damage stays flat
            return str(formula.modifier + modifier)
    return dice + format_modifier(modifier)


def _armor_class(armor: Optional[InventoryItem], *, base: int, dexterity_mod: int) -> int:
    if armor is None or not armor.armor_class:
        return base
    formula = parse_armor_class(armor.armor_class)
    if formula is None:
        return base
    return formula.value(dexterity_mod)
