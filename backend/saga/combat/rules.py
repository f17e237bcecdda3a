"""
战斗规则

Constants, documented defaults and the (French) combat log lines.
"""
import math

# ============================================
# 默认值（缺省配置时使用）
# ============================================

DEFAULT_ARMOR_CLASS = 10
DEFAULT_ATTACK_BONUS = 0
DEFAULT_DAMAGE_FORMULA = "1d4"
DEFAULT_LEVEL = 1

# ============================================
# 属性推导
# ============================================

BASE_HIT_POINTS = 10
HIT_POINTS_PER_CONSTITUTION = 2
BASE_ARMOR_CLASS = 10
UNARMED_DAMAGE_DICE = "1d4"

# ============================================
# 奖励
# ============================================

EXP_PER_ENEMY_LEVEL = 10
CURRENCY_LEVEL_FACTOR = 5

# ============================================
# 魔宠成长
# ============================================

FAMILIAR_BASE_EXP_THRESHOLD = 100
FAMILIAR_EXP_GROWTH = 1.5

UNKNOWN_TERRITORY_NAME = "Territoire Inconnu"


def ability_modifier(score: int) -> int:
    """属性修正 = floor((score - 10) / 2)"""
    return (score - 10) // 2


def familiar_exp_threshold(level: int) -> int:
    """Experience needed for a familiar at ``level`` to reach the next one."""
    return math.floor(FAMILIAR_BASE_EXP_THRESHOLD * FAMILIAR_EXP_GROWTH ** (level - 1))


# ============================================
# 战斗日志
# ============================================

def player_hit_line(attacker: str, target: str, damage: int) -> str:
    return f"{attacker} touche {target} et inflige {damage} points de dégâts."


def player_miss_line(attacker: str, target: str) -> str:
    return f"{attacker} attaque {target} mais rate son coup."


def enemy_hit_line(attacker: str, target: str, damage: int) -> str:
    return f"{attacker} attaque {target} et inflige {damage} points de dégâts."


def enemy_miss_line(attacker: str, target: str) -> str:
    return f"{attacker} attaque {target} et rate."


def defeated_line(name: str) -> str:
    return f"{name} est vaincu!"


def malformed_damage_line(attacker: str, notation: str) -> str:
    return f"La formule de dégâts de {attacker} (« {notation} ») est illisible : 1 point de dégâts par défaut."


VICTORY_LINE = "Victoire!"
DEFEAT_LINE = "Défaite..."
PENDING_REWARD_LINE = "Tous les ennemis sont vaincus, mais un butin attend d'être récupéré."


def conquest_line(location_name: str) -> str:
    return f"Le territoire de {location_name} est conquis!"


def hunt_reward_claimed_line(item_name: str) -> str:
    return f"Vous avez récupéré {item_name} sur la créature vaincue."
