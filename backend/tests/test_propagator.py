"""CombatUpdatePropagator: folding a turn result back into long-lived state."""
from saga.combat.models import (
    PLAYER_ID,
    ActiveCombat,
    Character,
    Combatant,
    CombatantUpdate,
    CombatRewards,
    CombatState,
    CombatTeam,
    CombatUpdate,
    Familiar,
    FamiliarBonusKind,
    FamiliarPassiveBonus,
    InventoryItem,
    PlayerState,
    StatusEffectInstance,
)
from saga.combat.propagator import CombatUpdatePropagator, NotificationKind
from saga.combat.repository import (
    InMemoryFamiliarRepository,
    InMemoryInventoryRepository,
    InMemoryLocationRegistry,
)


def _familiar(current_exp=90, active=True):
    return Familiar(
        id="owl", name="Hibou", current_exp=current_exp, is_active=active,
        passive_bonus=FamiliarPassiveBonus(FamiliarBonusKind.WISDOM, 1),
    )


def _setup(familiars=(), inventory=(), notifier=None):
    familiar_repo = InMemoryFamiliarRepository(familiars)
    inventory_repo = InMemoryInventoryRepository(inventory)
    locations = InMemoryLocationRegistry(names={"mill": "Le Moulin"}, owners={"mill": "bandits"})
    propagator = CombatUpdatePropagator(familiar_repo, inventory_repo, locations, notifier=notifier)
    return propagator, familiar_repo, inventory_repo, locations


def _ended_update(exp=20, currency=7, items=(), conquest=None):
    return CombatUpdate(
        updated_combatants=[
            CombatantUpdate(PLAYER_ID, new_hp=12, new_mp=3, is_defeated=False),
            CombatantUpdate("wolf", new_hp=0, new_mp=None, is_defeated=True),
        ],
        combat_ended=True,
        outcome=CombatState.ENDED_VICTORY,
        turn_log=["Victoire!"],
        rewards=CombatRewards(exp=exp, currency=currency, items=list(items)),
        conquest_location_id=conquest,
    )


def test_ongoing_turn_writes_hp_and_returns_next_snapshot():
    propagator, _, _, _ = _setup()
    player = PlayerState(current_hp=20, max_hp=20, current_mp=5, max_mp=8)
    wolf = Character(id="wolf", name="Loup", hit_points=10, max_hit_points=10)
    next_combat = ActiveCombat(combatants=[])
    update = CombatUpdate(
        updated_combatants=[
            CombatantUpdate(PLAYER_ID, new_hp=17, new_mp=None, is_defeated=False),
            CombatantUpdate("wolf", new_hp=4, new_mp=None, is_defeated=False,
                            new_status_effects=[StatusEffectInstance("saignement", 1)]),
        ],
        combat_ended=False,
        outcome=CombatState.ACTIVE,
        next_active_combat=next_combat,
    )

    result = propagator.apply(update, player, [wolf])

    assert result.active_combat is next_combat
    assert player.current_hp == 17
    assert player.current_mp == 5
    assert wolf.hit_points == 4
    assert wolf.status_effects == [StatusEffectInstance("saignement", 1)]
    assert player.experience == 0
    assert result.notifications == []


def test_victory_grants_exp_currency_and_items():
    pelt = InventoryItem(id="pelt", name="Peau", quantity=1)
    propagator, _, inventory_repo, _ = _setup(inventory=[InventoryItem(id="pelt", name="Peau", quantity=2)])
    player = PlayerState(current_hp=20, max_hp=20, experience=5, currency=3)
    wolf = Character(id="wolf", name="Loup")

    result = propagator.apply(_ended_update(items=[pelt]), player, [wolf])

    assert result.active_combat is None
    assert player.experience == 25
    assert player.currency == 10
    assert player.current_hp == 12
    assert wolf.is_defeated is True
    assert inventory_repo.load_inventory()[0].quantity == 3
    assert [n.kind for n in result.notifications] == [NotificationKind.COMBAT_ENDED]


def test_active_familiar_levels_up_once():
    propagator, familiar_repo, _, _ = _setup(familiars=[_familiar(current_exp=90)])
    player = PlayerState(active_familiar_id="owl")

    result = propagator.apply(_ended_update(exp=20), player, [])

    owl = familiar_repo.load_familiar("owl")
    assert owl.level == 2
    assert owl.current_exp == 10
    assert owl.exp_to_next_level == 150
    assert result.familiar_leveled_up is True
    level_up = [n for n in result.notifications if n.kind == NotificationKind.FAMILIAR_LEVEL_UP]
    assert level_up[0].title == "Familier a monté de niveau!"
    assert level_up[0].message == "Hibou est maintenant niveau 2!"


def test_familiar_without_level_up():
    propagator, familiar_repo, _, _ = _setup(familiars=[_familiar(current_exp=0)])
    player = PlayerState(active_familiar_id="owl")

    result = propagator.apply(_ended_update(exp=20), player, [])

    assert familiar_repo.load_familiar("owl").current_exp == 20
    assert result.familiar_leveled_up is False


def test_no_active_familiar_means_no_familiar_exp():
    propagator, familiar_repo, _, _ = _setup(familiars=[_familiar(current_exp=0, active=False)])
    propagator.apply(_ended_update(exp=20), PlayerState(), [])
    assert familiar_repo.load_familiar("owl").current_exp == 0


def test_conquest_transfers_ownership():
    seen = []
    propagator, _, _, locations = _setup(notifier=seen.append)

    result = propagator.apply(_ended_update(conquest="mill"), PlayerState(), [])

    assert locations.owners["mill"] == PLAYER_ID
    assert result.conquered_location_id == "mill"
    assert NotificationKind.TERRITORY_CONQUERED in [n.kind for n in seen]


def test_defeat_changes_no_ownership():
    propagator, _, _, locations = _setup()
    update = _ended_update(exp=0, currency=0)
    update.outcome = CombatState.ENDED_DEFEAT

    propagator.apply(update, PlayerState(), [])

    assert locations.owners["mill"] == "bandits"


class TestHuntRewardClaim:
    def _combat(self, defeated=True):
        wolf = Combatant(
            character_id="wolf", name="Loup", team=CombatTeam.ENEMY,
            current_hp=0 if defeated else 4, max_hp=10, is_defeated=defeated,
            reward_item=InventoryItem(id="pelt", name="Peau de loup"),
        )
        return ActiveCombat(combatants=[wolf])

    def test_claim_adds_item(self):
        propagator, _, inventory_repo, _ = _setup()

        claim = propagator.claim_hunt_reward(self._combat(), "wolf")

        assert claim is not None
        assert claim.item.id == "pelt"
        assert claim.message == "Vous avez récupéré Peau de loup sur la créature vaincue."
        assert [item.id for item in inventory_repo.load_inventory()] == ["pelt"]

    def test_claim_requires_defeat(self):
        propagator, _, inventory_repo, _ = _setup()
        assert propagator.claim_hunt_reward(self._combat(defeated=False), "wolf") is None
        assert inventory_repo.load_inventory() == []

    def test_claim_without_combat_or_unknown_combatant(self):
        propagator, _, _, _ = _setup()
        assert propagator.claim_hunt_reward(None, "wolf") is None
        assert propagator.claim_hunt_reward(self._combat(), "bear") is None
