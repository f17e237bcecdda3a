"""tests/test_stats_manager.py：StatsManager 纯函数单元测试。"""
from __future__ import annotations

import pytest

from saga.combat.rules import familiar_exp_threshold
from saga.world.stats_manager import add_exp, add_familiar_exp, add_gold, add_hp, set_hp, set_mp


# ---------------------------------------------------------------------------
# Helpers: lightweight mock player / familiar
# ---------------------------------------------------------------------------

class MockPlayer:
    """Minimal duck-type player for stats_manager tests."""

    def __init__(
        self,
        *,
        experience: int = 0,
        currency: int = 0,
        current_hp: int = 20,
        max_hp: int = 20,
        current_mp: int = 5,
    ):
        self.experience = experience
        self.currency = currency
        self.current_hp = current_hp
        self.max_hp = max_hp
        self.current_mp = current_mp


class MockFamiliar:
    def __init__(self, *, level: int = 1, current_exp: int = 0, exp_to_next_level: int = 100):
        self.level = level
        self.current_exp = current_exp
        self.exp_to_next_level = exp_to_next_level


# ===========================================================================
# add_exp
# ===========================================================================

class TestAddExp:
    def test_positive(self):
        p = MockPlayer(experience=5)
        result = add_exp(p, 20)
        assert result["old_exp"] == 5
        assert result["new_exp"] == 25
        assert p.experience == 25

    def test_zero_rejected(self):
        p = MockPlayer()
        result = add_exp(p, 0)
        assert result["success"] is False
        assert p.experience == 0

    def test_negative_rejected(self):
        result = add_exp(MockPlayer(), -10)
        assert result["success"] is False


# ===========================================================================
# add_familiar_exp
# ===========================================================================

class TestFamiliarExp:
    def test_below_threshold(self):
        f = MockFamiliar(current_exp=10)
        result = add_familiar_exp(f, 30)
        assert result["leveled_up"] is False
        assert f.level == 1
        assert f.current_exp == 40

    def test_level_up_carries_overflow(self):
        """90/100 + 20 → level 2 with 10 exp."""
        f = MockFamiliar(current_exp=90)
        result = add_familiar_exp(f, 20)
        assert result["leveled_up"] is True
        assert f.level == 2
        assert f.current_exp == 10
        assert f.exp_to_next_level == 150

    def test_single_level_up_per_grant(self):
        f = MockFamiliar(current_exp=0)
        add_familiar_exp(f, 500)
        assert f.level == 2
        assert f.current_exp == 400
        assert f.exp_to_next_level == familiar_exp_threshold(2)

    def test_threshold_growth(self):
        f = MockFamiliar(level=3, current_exp=220, exp_to_next_level=225)
        add_familiar_exp(f, 10)
        assert f.level == 4
        assert f.current_exp == 5
        assert f.exp_to_next_level == 337  # floor(100 × 1.5³)

    def test_zero_rejected(self):
        f = MockFamiliar(current_exp=99)
        assert add_familiar_exp(f, 0)["success"] is False
        assert f.level == 1


@pytest.mark.parametrize("level,expected", [(1, 100), (2, 150), (3, 225), (4, 337), (5, 506)])
def test_familiar_exp_threshold(level, expected):
    assert familiar_exp_threshold(level) == expected


# ===========================================================================
# add_gold
# ===========================================================================

class TestGold:
    def test_add_positive(self):
        p = MockPlayer(currency=50)
        result = add_gold(p, 100)
        assert result["success"] is True
        assert result["new_gold"] == 150

    def test_add_zero_rejected(self):
        p = MockPlayer(currency=50)
        assert add_gold(p, 0)["success"] is False
        assert p.currency == 50

    def test_add_negative_rejected(self):
        p = MockPlayer(currency=50)
        assert add_gold(p, -10)["success"] is False
        assert p.currency == 50


# ===========================================================================
# add_hp / set_hp / set_mp
# ===========================================================================

class TestHP:
    def test_add_normal(self):
        p = MockPlayer(current_hp=10, max_hp=20)
        assert add_hp(p, 5)["new_hp"] == 15

    def test_add_clamped_to_max(self):
        p = MockPlayer(current_hp=18, max_hp=20)
        assert add_hp(p, 10)["new_hp"] == 20

    def test_add_zero_rejected(self):
        assert add_hp(MockPlayer(), 0)["success"] is False

    def test_set_hp_normal(self):
        p = MockPlayer(current_hp=20, max_hp=20)
        assert set_hp(p, 10)["new_hp"] == 10

    def test_set_hp_floors_at_zero(self):
        p = MockPlayer(current_hp=5)
        set_hp(p, -3)
        assert p.current_hp == 0

    def test_set_mp_none_keeps_value(self):
        p = MockPlayer(current_mp=4)
        set_mp(p, None)
        assert p.current_mp == 4
        set_mp(p, 2)
        assert p.current_mp == 2
