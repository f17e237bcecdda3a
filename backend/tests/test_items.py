"""Consumable effects applied between turns."""
from saga.combat.dice import DiceRoller
from saga.combat.items import apply_consumable, consume_one
from saga.combat.models import (
    PLAYER_ID,
    ActiveCombat,
    Combatant,
    CombatTeam,
    InventoryItem,
    ItemEffect,
    ItemEffectKind,
    ItemType,
    PlayerState,
)


class RollRng:
    def __init__(self, rolls):
        self.rolls = list(rolls)

    def randint(self, low, high):
        return self.rolls.pop(0)


def _combat(active=True):
    return ActiveCombat(
        combatants=[
            Combatant(character_id=PLAYER_ID, name="Héros", team=CombatTeam.PLAYER, current_hp=5, max_hp=20),
            Combatant(character_id="gob1", name="Gobelin", team=CombatTeam.ENEMY, current_hp=3, max_hp=7),
            Combatant(character_id="gob2", name="Gobelin archer", team=CombatTeam.ENEMY, current_hp=9, max_hp=9),
        ],
        is_active=active,
    )


def _item(item_id, kind, amount, quantity=1):
    return InventoryItem(
        id=item_id, name=item_id.capitalize(), item_type=ItemType.CONSUMABLE,
        quantity=quantity, effect=ItemEffect(kind, amount),
    )


def test_heal_restores_player_and_combatant():
    player = PlayerState(current_hp=5, max_hp=20)
    inventory = [_item("potion", ItemEffectKind.HEAL, "2d4+2", quantity=2)]

    outcome = apply_consumable(_combat(), player, inventory, "potion", DiceRoller(rng=RollRng([3, 4])))

    assert outcome.amount == 9
    assert player.current_hp == 14
    assert outcome.active_combat.get_combatant(PLAYER_ID).current_hp == 14
    assert outcome.inventory[0].quantity == 1
    assert inventory[0].quantity == 2
    assert "9 PV" in outcome.message


def test_heal_is_clamped_to_max():
    player = PlayerState(current_hp=18, max_hp=20)
    inventory = [_item("elixir", ItemEffectKind.HEAL, "50")]

    outcome = apply_consumable(_combat(), player, inventory, "elixir", DiceRoller(rng=RollRng([])))

    assert player.current_hp == 20
    assert outcome.active_combat.get_combatant(PLAYER_ID).current_hp == 20
    assert outcome.inventory == []


def test_single_target_damage():
    inventory = [_item("dagger", ItemEffectKind.DAMAGE_SINGLE, "1d6")]
    combat = _combat()

    outcome = apply_consumable(combat, PlayerState(), inventory, "dagger", DiceRoller(rng=RollRng([5])), target_id="gob1")

    target = outcome.active_combat.get_combatant("gob1")
    assert target.current_hp == 0
    assert target.is_defeated
    assert outcome.active_combat.get_combatant("gob2").current_hp == 9
    assert combat.get_combatant("gob1").current_hp == 3


def test_single_target_requires_living_enemy():
    inventory = [_item("dagger", ItemEffectKind.DAMAGE_SINGLE, "1d6")]
    dice = DiceRoller(rng=RollRng([]))
    for target_id in (None, PLAYER_ID, "nobody"):
        assert apply_consumable(_combat(), PlayerState(), inventory, "dagger", dice, target_id=target_id) is None


def test_area_damage_hits_every_living_enemy_with_one_roll():
    inventory = [_item("flask", ItemEffectKind.DAMAGE_ALL, "1d6")]

    outcome = apply_consumable(_combat(), PlayerState(), inventory, "flask", DiceRoller(rng=RollRng([4])))

    assert outcome.amount == 4
    assert outcome.active_combat.get_combatant("gob1").is_defeated
    assert outcome.active_combat.get_combatant("gob2").current_hp == 5
    assert outcome.active_combat.get_combatant(PLAYER_ID).current_hp == 5


def test_noop_outside_active_combat():
    inventory = [_item("potion", ItemEffectKind.HEAL, "5")]
    dice = DiceRoller(rng=RollRng([]))
    assert apply_consumable(None, PlayerState(), inventory, "potion", dice) is None
    assert apply_consumable(_combat(active=False), PlayerState(), inventory, "potion", dice) is None


def test_noop_for_items_without_effect():
    inventory = [InventoryItem(id="rope", name="Corde")]
    assert apply_consumable(_combat(), PlayerState(), inventory, "rope", DiceRoller(rng=RollRng([]))) is None


def test_consume_one():
    inventory = [_item("potion", ItemEffectKind.HEAL, "5", quantity=2), InventoryItem(id="rope", name="Corde")]
    once = consume_one(inventory, "potion")
    assert [(i.id, i.quantity) for i in once] == [("potion", 1), ("rope", 1)]
    twice = consume_one(once, "potion")
    assert [i.id for i in twice] == ["rope"]


def test_heal_on_defeated_player_is_noop():
    combat = _combat()
    downed = combat.get_combatant(PLAYER_ID)
    downed.current_hp = 0
    downed.is_defeated = True
    player = PlayerState(current_hp=0, max_hp=20)
    inventory = [_item("potion", ItemEffectKind.HEAL, "4")]

    outcome = apply_consumable(combat, player, inventory, "potion", DiceRoller(rng=RollRng([])))

    assert outcome is None
    assert player.current_hp == 0
    assert inventory[0].quantity == 1
