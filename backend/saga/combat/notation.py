"""
伤害 / 护甲记号解析

Every damage ("1d6+2") and armor-class ("14 + Dex (max +2)") string in the
game goes through this module; nothing else pattern-matches notation text.
Malformed input never raises: damage falls back to a flat 1, armor notation
to ``None`` (callers keep their base value).
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_DAMAGE = 1

_DICE_PATTERN = re.compile(r"^(\d*)d(\d+)([+-]\d+)?$")
_FLAT_PATTERN = re.compile(r"^[+-]?\d+$")
_ARMOR_PATTERN = re.compile(
    r"^(\d+)"
    r"(?:\+(?:mod\.?)?dex(?:terity|térité)?"
    r"(?:\(max\+?(\d+)\))?)?$"
)


def _compact(notation: str) -> str:
    return "".join(str(notation).split()).lower()


@dataclass(frozen=True)
class DamageFormula:
    """
    解析后的伤害公式

    ``dice_count == 0`` means a flat amount (just ``modifier``).
    """

    dice_count: int = 0
    dice_sides: int = 0
    modifier: int = 0
    source: str = ""
    malformed: bool = False

    @property
    def has_dice(self) -> bool:
        return self.dice_count > 0 and self.dice_sides > 0

    def dice_portion(self) -> Optional[str]:
        """"2d6+1" -> "2d6"; flat formulas have no dice portion."""
        if not self.has_dice:
            return None
        return f"{self.dice_count}d{self.dice_sides}"

    def notation(self) -> str:
        dice = self.dice_portion()
        if dice is None:
            return str(self.modifier)
        return dice + format_modifier(self.modifier)


def format_modifier(modifier: int) -> str:
    """+2 -> "+2", -1 -> "-1", 0 -> "" """
    if modifier == 0:
        return ""
    return f"{modifier:+d}"


def parse_damage_formula(notation: Optional[str]) -> DamageFormula:
    """
    解析伤害记号

    Accepts ``NdM``, ``NdM+K``, ``NdM-K`` (``dM`` implies one die) or a bare
    integer. Anything else yields a flat formula of 1 flagged ``malformed``.
    """
    source = "" if notation is None else str(notation)
    text = _compact(source)

    match = _DICE_PATTERN.match(text)
    if match:
        count = int(match.group(1)) if match.group(1) else 1
        sides = int(match.group(2))
        modifier = int(match.group(3)) if match.group(3) else 0
        if sides >= 1:
            return DamageFormula(count, sides, modifier, source=source)

    if _FLAT_PATTERN.match(text):
        return DamageFormula(0, 0, int(text), source=source)

    logger.warning("Unparseable damage notation %r, defaulting to %d", source, DEFAULT_DAMAGE)
    return DamageFormula(0, 0, DEFAULT_DAMAGE, source=source, malformed=True)


def embedded_modifier(notation: Optional[str]) -> int:
    """Numeric modifier carried inside a dice notation ("1d8+2" -> 2)."""
    formula = parse_damage_formula(notation)
    if formula.malformed or not formula.has_dice:
        return 0
    return formula.modifier


@dataclass(frozen=True)
class ArmorClassFormula:
    """护甲AC公式：base [+ Dex 修正 (上限 dex_cap)]"""

    base: int
    adds_dexterity: bool = False
    dexterity_cap: Optional[int] = None

    def value(self, dexterity_modifier: int) -> int:
        if not self.adds_dexterity:
            return self.base
        bonus = dexterity_modifier
        if self.dexterity_cap is not None:
            bonus = min(bonus, self.dexterity_cap)
        return self.base + bonus


def parse_armor_class(notation: Optional[str]) -> Optional[ArmorClassFormula]:
    """
    解析护甲记号

    Examples:
        "14"                  -> ArmorClassFormula(14)
        "11 + Dex"            -> ArmorClassFormula(11, True)
        "14 + Mod.Dex (max +2)" -> ArmorClassFormula(14, True, 2)

    Returns:
        None when the notation cannot be read.
    """
    if notation is None:
        return None
    text = _compact(notation)
    match = _ARMOR_PATTERN.match(text)
    if not match:
        logger.warning("Unparseable armor class notation %r, ignoring it", notation)
        return None

    base = int(match.group(1))
    adds_dex = "dex" in text
    cap = int(match.group(2)) if match.group(2) else None
    return ArmorClassFormula(base=base, adds_dexterity=adds_dex, dexterity_cap=cap)
