"""DiceRoller: damage evaluation and the injected random source."""
import random

import pytest

from saga.combat.dice import DiceRoller


class ScriptedRng:
    """Returns queued values; an unexpected call raises IndexError."""

    def __init__(self, rolls=(), fractions=(), pick=0):
        self.rolls = list(rolls)
        self.fractions = list(fractions)
        self.pick = pick

    def randint(self, low, high):
        value = self.rolls.pop(0)
        assert low <= value <= high
        return value

    def random(self):
        return self.fractions.pop(0)

    def choice(self, options):
        return options[self.pick]


def test_roll_sums_dice_and_modifier():
    roll = DiceRoller(rng=ScriptedRng(rolls=[3, 4])).roll_damage("2d6+1")
    assert roll.rolls == [3, 4]
    assert roll.total == 8
    assert not roll.malformed


def test_negative_total_floors_at_one():
    assert DiceRoller(rng=ScriptedRng(rolls=[1])).damage("1d4-3") == 1


def test_flat_formula_does_not_roll():
    rng = ScriptedRng()
    assert DiceRoller(rng=rng).damage("6") == 6


def test_malformed_formula_is_one_without_rolling():
    rng = ScriptedRng()
    roll = DiceRoller(rng=rng).roll_damage("a lot")
    assert roll.total == 1
    assert roll.malformed
    assert roll.rolls == []


def test_choice_and_fraction_delegate_to_rng():
    dice = DiceRoller(rng=ScriptedRng(fractions=[0.25], pick=1))
    assert dice.fraction() == 0.25
    assert dice.choice(["a", "b", "c"]) == "b"


@pytest.mark.parametrize("formula", ["1d4", "1d4-1", "2d6-5", "1d20+3", "0", "-4", "garbage", None])
def test_damage_is_always_at_least_one(formula):
    dice = DiceRoller(seed=1234)
    for _ in range(200):
        assert dice.damage(formula) >= 1


def test_rolls_stay_within_bounds():
    dice = DiceRoller(seed=7)
    for _ in range(500):
        assert 1 <= dice.d20() <= 20
        assert 3 <= dice.damage("2d6+1") <= 13


def test_same_seed_replays_the_same_rolls():
    first = DiceRoller(seed=42)
    second = DiceRoller(rng=random.Random(42))
    assert [first.damage("3d8") for _ in range(20)] == [second.damage("3d8") for _ in range(20)]


def test_rng_failure_propagates():
    class BrokenRng(ScriptedRng):
        def randint(self, low, high):
            raise RuntimeError("entropy exhausted")

    with pytest.raises(RuntimeError):
        DiceRoller(rng=BrokenRng()).d20()
