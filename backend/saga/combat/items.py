"""Consumable item effects used during an encounter.

Applied outside the normal turn flow (before or between turns). Amounts are
damage-formula notations evaluated by the shared dice roller.
"""
import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from ..world import stats_manager
from .dice import DiceRoller
from .models.active_combat import ActiveCombat
from .models.character import PLAYER_ID, InventoryItem, ItemEffectKind, PlayerState
from .models.combatant import CombatTeam

logger = logging.getLogger(__name__)


@dataclass
class ConsumableOutcome:
    active_combat: ActiveCombat
    inventory: List[InventoryItem]
    amount: int
    message: str


def consume_one(inventory: List[InventoryItem], item_id: str) -> List[InventoryItem]:
    """Decrement the item's quantity; drop it at zero."""
    result = []
    for item in inventory:
        if item.id == item_id:
            if item.quantity - 1 <= 0:
                continue
            item = replace(item, quantity=item.quantity - 1)
        result.append(item)
    return result


def apply_consumable(
    combat: Optional[ActiveCombat],
    player: PlayerState,
    inventory: List[InventoryItem],
    item_id: str,
    dice: DiceRoller,
    target_id: Optional[str] = None,
) -> Optional[ConsumableOutcome]:
    """
    使用消耗品

    Returns ``None`` (no-op) when the combat is not active, the item is
    missing / has no effect, a single-target item has no valid target, or a
    heal targets a defeated player.
    Heal effects also update the player record.
    """
    if combat is None or not combat.is_active:
        logger.warning("apply_consumable(%s) outside an active combat", item_id)
        return None

    item = next((i for i in inventory if i.id == item_id and i.quantity > 0), None)
    if item is None or item.effect is None:
        logger.warning("apply_consumable(%s): item missing or without effect", item_id)
        return None

    effect = item.effect
    next_combat = combat.copy()

    if effect.kind == ItemEffectKind.DAMAGE_SINGLE:
        target = next_combat.get_combatant(target_id) if target_id else None
        if target is None or not target.is_enemy() or target.is_defeated:
            logger.warning("apply_consumable(%s): invalid target %s", item_id, target_id)
            return None
    elif effect.kind == ItemEffectKind.HEAL:
        player_combatant = next_combat.get_combatant(PLAYER_ID)
        if player_combatant is not None and player_combatant.is_defeated:
            logger.warning("apply_consumable(%s): player is defeated", item_id)
            return None

    amount = dice.damage(effect.amount)

    if effect.kind == ItemEffectKind.HEAL:
        stats_manager.add_hp(player, amount)
        if player_combatant is not None:
            player_combatant.heal(amount)
        message = f"Vous avez utilisé {item.name} et restauré {amount} PV."
    elif effect.kind == ItemEffectKind.DAMAGE_SINGLE:
        target.take_damage(amount)
        message = f"Vous avez utilisé {item.name} sur {target.name} pour {amount} dégâts."
    else:
        for enemy in next_combat.living(CombatTeam.ENEMY):
            enemy.take_damage(amount)
        message = f"Vous avez utilisé {item.name}, infligeant {amount} dégâts à tous les ennemis."

    logger.info("consumable %s applied (%s, %d)", item.id, effect.kind.value, amount)
    return ConsumableOutcome(
        active_combat=next_combat,
        inventory=consume_one(inventory, item.id),
        amount=amount,
        message=message,
    )
