"""纯函数式 Stats 操作模块：无 I/O。

All experience / currency / HP writes on the player and familiars go through
this module so the validation stays in one place. Each helper returns a small
result dict describing what changed.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from saga.combat.rules import familiar_exp_threshold


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

def add_exp(player: Any, amount: int) -> Dict[str, Any]:
    """Add experience to the player (amount must be > 0)."""
    if amount <= 0:
        return {"success": False, "error": "amount must be positive"}
    old = player.experience or 0
    player.experience = old + amount
    return {"success": True, "old_exp": old, "new_exp": player.experience}


def add_familiar_exp(familiar: Any, amount: int) -> Dict[str, Any]:
    """Grant combat experience to a familiar, with a single level-up check.

    On reaching the threshold the familiar gains one level, the threshold is
    subtracted from its experience and the next threshold becomes
    ``floor(100 × 1.5^(level−1))``.

    Returns:
        dict with old_level, new_level, new_exp, exp_to_next, leveled_up.
    """
    if amount <= 0:
        return {"success": False, "error": "amount must be positive"}

    old_level = familiar.level
    familiar.current_exp += amount

    leveled_up = False
    if familiar.current_exp >= familiar.exp_to_next_level:
        familiar.level += 1
        familiar.current_exp -= familiar.exp_to_next_level
        familiar.exp_to_next_level = familiar_exp_threshold(familiar.level)
        leveled_up = True

    return {
        "success": True,
        "old_level": old_level,
        "new_level": familiar.level,
        "new_exp": familiar.current_exp,
        "exp_to_next": familiar.exp_to_next_level,
        "leveled_up": leveled_up,
    }


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

def add_gold(player: Any, amount: int) -> Dict[str, Any]:
    """Add currency (amount must be > 0, balance never goes negative)."""
    if amount <= 0:
        return {"success": False, "error": "amount must be positive"}
    old = player.currency or 0
    player.currency = max(0, old + amount)
    return {"success": True, "old_gold": old, "new_gold": player.currency}


# ---------------------------------------------------------------------------
# HP / MP
# ---------------------------------------------------------------------------

def add_hp(player: Any, amount: int) -> Dict[str, Any]:
    """Heal HP (clamped to max_hp)."""
    if amount <= 0:
        return {"success": False, "error": "amount must be positive"}
    old = player.current_hp
    player.current_hp = min(player.max_hp, old + amount)
    return {"old_hp": old, "new_hp": player.current_hp, "max_hp": player.max_hp}


def set_hp(player: Any, hp: int) -> Dict[str, Any]:
    """Set HP to an exact value (floored at 0). For combat sync."""
    old = player.current_hp
    player.current_hp = max(0, int(hp))
    return {"old_hp": old, "new_hp": player.current_hp, "max_hp": player.max_hp}


def set_mp(player: Any, mp: Optional[int]) -> Dict[str, Any]:
    """Set MP when the combat reported one; ``None`` keeps the current value."""
    old = player.current_mp
    if mp is not None:
        player.current_mp = max(0, int(mp))
    return {"old_mp": old, "new_mp": player.current_mp}
