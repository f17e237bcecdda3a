"""
FastAPI dependencies.
"""
from functools import lru_cache

from saga.combat import CombatEngine, DiceRoller
from saga.config import settings


@lru_cache()
def get_combat_engine() -> CombatEngine:
    return CombatEngine(
        dice=DiceRoller(seed=settings.rng_seed),
        rpg_mode=settings.rpg_mode,
    )
