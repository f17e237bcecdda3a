"""Effective stats derived from attributes, equipment and the active familiar."""
import pytest

from saga.combat.equipment import empty_loadout, equip_item, equipped_items, unequip_slot
from saga.combat.models import (
    NEUTRAL_STATS,
    Attributes,
    EquipmentBonus,
    EquipmentSlot,
    Familiar,
    FamiliarBonusKind,
    FamiliarPassiveBonus,
    InventoryItem,
    ItemType,
)
from saga.combat.stats import derive_effective_stats


def _weapon(notation, **bonuses):
    return InventoryItem(
        id="weapon", name="Arme", item_type=ItemType.WEAPON,
        damage=notation, bonuses=EquipmentBonus.from_mapping(bonuses),
    )


def _armor(armor_class):
    return InventoryItem(id="armor", name="Armure", item_type=ItemType.ARMOR, armor_class=armor_class)


def _jewel(**bonuses):
    return InventoryItem(
        id="ring", name="Anneau", item_type=ItemType.JEWELRY,
        bonuses=EquipmentBonus.from_mapping(bonuses),
    )


def _familiar(kind, value, level=1):
    return Familiar(
        id="fam", name="Compagnon", level=level, is_active=True,
        passive_bonus=FamiliarPassiveBonus(kind, value),
    )


def test_neutral_block_outside_rpg_mode():
    stats = derive_effective_stats(Attributes(strength=18), {EquipmentSlot.WEAPON: _weapon("1d8")}, rpg_mode=False)
    assert stats == NEUTRAL_STATS
    assert stats.attributes == Attributes()
    assert (stats.max_hp, stats.max_mp, stats.armor_class, stats.attack_bonus) == (0, 0, 0, 0)


def test_baseline_attributes():
    stats = derive_effective_stats(Attributes())
    assert stats.max_hp == 26
    assert stats.max_mp == 8
    assert stats.armor_class == 18
    assert stats.attack_bonus == -1
    assert stats.damage_formula == "1d4-1"


def test_derived_numbers():
    stats = derive_effective_stats(
        Attributes(strength=14, dexterity=12, constitution=10, intelligence=12)
    )
    assert stats.max_hp == 30
    assert stats.max_mp == 12
    assert stats.armor_class == 22
    assert stats.attack_bonus == 2
    assert stats.damage_formula == "1d4+2"


def test_neutral_strength_modifier_has_no_suffix():
    assert derive_effective_stats(Attributes(strength=10)).damage_formula == "1d4"


def test_base_attributes_floored_at_eight():
    stats = derive_effective_stats(Attributes(strength=5, constitution=3))
    assert stats.attributes.strength == 8
    assert stats.max_hp == 26


def test_equipment_may_push_attribute_below_eight():
    stats = derive_effective_stats(Attributes(), {EquipmentSlot.JEWELRY: _jewel(str=-2)})
    assert stats.attributes.strength == 6
    assert stats.attack_bonus == -2
    assert stats.damage_formula == "1d4-2"


def test_flat_bonuses_do_not_touch_attributes():
    stats = derive_effective_stats(
        Attributes(strength=10), {EquipmentSlot.JEWELRY: _jewel(hp=5, ac=1, attack=2, damage=1)}
    )
    assert stats.attributes == Attributes(strength=10)
    assert stats.max_hp == 31
    assert stats.armor_class == 19
    assert stats.attack_bonus == 2
    assert stats.damage_formula == "1d4+1"


class TestWeaponDamage:
    def test_weapon_dice_replace_unarmed_dice(self):
        stats = derive_effective_stats(
            Attributes(strength=14), {EquipmentSlot.WEAPON: _weapon("1d8+1", damage=1)}
        )
        assert stats.damage_formula == "1d8+4"

    def test_bare_integer_weapon_stays_flat(self):
        assert derive_effective_stats(
            Attributes(strength=10), {EquipmentSlot.WEAPON: _weapon("5")}
        ).damage_formula == "5"
        assert derive_effective_stats(
            Attributes(strength=12), {EquipmentSlot.WEAPON: _weapon("5")}
        ).damage_formula == "6"

    def test_unreadable_weapon_keeps_unarmed_dice(self):
        stats = derive_effective_stats(Attributes(strength=12), {EquipmentSlot.WEAPON: _weapon("sharp")})
        assert stats.damage_formula == "1d4+1"


class TestArmorClass:
    def test_capped_dex_armor(self):
        stats = derive_effective_stats(
            Attributes(dexterity=16), {EquipmentSlot.ARMOR: _armor("14 + Dex (max +2)")}
        )
        assert stats.armor_class == 16

    @pytest.mark.parametrize("dexterity", range(8, 31))
    def test_capped_armor_never_exceeds_base_plus_cap(self, dexterity):
        stats = derive_effective_stats(
            Attributes(dexterity=dexterity), {EquipmentSlot.ARMOR: _armor("14 + Mod.Dex (max +2)")}
        )
        assert stats.armor_class <= 16

    def test_flat_armor_overrides_base(self):
        stats = derive_effective_stats(Attributes(dexterity=18), {EquipmentSlot.ARMOR: _armor("12")})
        assert stats.armor_class == 12

    def test_flat_ac_bonus_added_after_armor(self):
        stats = derive_effective_stats(
            Attributes(dexterity=16),
            {EquipmentSlot.ARMOR: _armor("14 + Dex (max +2)"), EquipmentSlot.JEWELRY: _jewel(ac=1)},
        )
        assert stats.armor_class == 17

    def test_unreadable_armor_keeps_base(self):
        stats = derive_effective_stats(Attributes(dexterity=12), {EquipmentSlot.ARMOR: _armor("mithril")})
        assert stats.armor_class == 22


class TestFamiliarBonus:
    def test_attribute_bonus_scales_with_level(self):
        stats = derive_effective_stats(
            Attributes(dexterity=12), familiar=_familiar(FamiliarBonusKind.DEXTERITY, 1, level=3)
        )
        assert stats.attributes.dexterity == 15
        assert stats.armor_class == 25

    def test_armor_class_bonus_is_floored(self):
        stats = derive_effective_stats(
            Attributes(), familiar=_familiar(FamiliarBonusKind.ARMOR_CLASS, 0.5, level=3)
        )
        assert stats.armor_class == 19

    def test_attack_bonus(self):
        stats = derive_effective_stats(
            Attributes(strength=10), familiar=_familiar(FamiliarBonusKind.ATTACK_BONUS, 1, level=2)
        )
        assert stats.attack_bonus == 2

    def test_non_combat_bonus_is_inert(self):
        baseline = derive_effective_stats(Attributes())
        stats = derive_effective_stats(
            Attributes(), familiar=_familiar(FamiliarBonusKind.GOLD_FIND, 5, level=4)
        )
        assert stats == baseline


def test_equip_then_unequip_is_idempotent():
    attributes = Attributes(strength=13, dexterity=14, constitution=12)
    inventory = [_weapon("1d8+1", str=2, attack=1), _armor("14 + Dex (max +2)"), _jewel(con=2, hp=3)]

    loadout = empty_loadout()
    before = derive_effective_stats(attributes, equipped_items(loadout, inventory))

    for item in inventory:
        loadout, inventory = equip_item(loadout, inventory, item.id)
    equipped = derive_effective_stats(attributes, equipped_items(loadout, inventory))
    assert equipped != before

    for slot in EquipmentSlot:
        loadout, inventory = unequip_slot(loadout, inventory, slot)
    after = derive_effective_stats(attributes, equipped_items(loadout, inventory))
    assert after == before


def test_unknown_bonus_key_rejected():
    with pytest.raises(ValueError):
        EquipmentBonus.from_mapping({"luck": 1})
