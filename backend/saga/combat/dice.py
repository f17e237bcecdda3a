"""
骰子系统

Seedable dice roller shared by the resolver, the reward engine and the
consumable effects. The random source is injected so turns can be replayed;
any failure inside it propagates to the caller.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TypeVar, Union

from .notation import DamageFormula, parse_damage_formula

logger = logging.getLogger(__name__)

T = TypeVar("T")

MINIMUM_DAMAGE = 1


@dataclass
class DamageRoll:
    """一次伤害投掷的结果"""

    formula: DamageFormula
    rolls: List[int] = field(default_factory=list)
    total: int = MINIMUM_DAMAGE

    @property
    def malformed(self) -> bool:
        return self.formula.malformed


class DiceRoller:
    """骰子投掷器"""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        """
        Args:
            rng: object exposing ``randint``, ``random`` and ``choice``
                (a ``random.Random`` or a scripted stand-in in tests).
            seed: used to build a private ``random.Random`` when no rng is given.
        """
        self._rng = rng if rng is not None else random.Random(seed)

    def roll_die(self, sides: int) -> int:
        """投掷单个骰子（1..sides）"""
        return self._rng.randint(1, sides)

    def d20(self) -> int:
        return self.roll_die(20)

    def fraction(self) -> float:
        """Uniform float in [0, 1)."""
        return self._rng.random()

    def choice(self, options: Sequence[T]) -> T:
        return self._rng.choice(options)

    def roll_damage(self, formula: Union[str, DamageFormula, None]) -> DamageRoll:
        """
        投掷伤害

        Rolls every die of the formula, adds its modifier and floors the total
        at 1. Malformed formulas resolve to 1 without touching the rng.
        """
        if not isinstance(formula, DamageFormula):
            formula = parse_damage_formula(formula)

        rolls = [self.roll_die(formula.dice_sides) for _ in range(formula.dice_count)] if formula.has_dice else []
        total = max(MINIMUM_DAMAGE, sum(rolls) + formula.modifier)
        logger.debug("roll %s -> %s = %d", formula.notation(), rolls, total)
        return DamageRoll(formula=formula, rolls=rolls, total=total)

    def damage(self, formula: Union[str, DamageFormula, None]) -> int:
        return self.roll_damage(formula).total
