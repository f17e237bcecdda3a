"""
战斗结果回写

Folds a resolver ``CombatUpdate`` back into the long-lived player, character,
familiar, inventory and territory state. This is the only writer of that
state after a turn.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ..world import stats_manager
from .models.active_combat import ActiveCombat
from .models.character import PLAYER_ID, Character, InventoryItem, PlayerState
from .models.combat_result import CombatUpdate
from .repository import (
    FamiliarRepository,
    InventoryRepository,
    LocationOwnership,
    add_item_to_inventory,
)
from .rules import hunt_reward_claimed_line

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    COMBAT_ENDED = "combat_ended"
    FAMILIAR_LEVEL_UP = "familiar_level_up"
    TERRITORY_CONQUERED = "territory_conquered"
    HUNT_REWARD_CLAIMED = "hunt_reward_claimed"


@dataclass
class CombatNotification:
    """User-visible notification (toast) raised by a propagation."""

    kind: NotificationKind
    title: str
    message: str = ""

    def to_dict(self):
        return {"kind": self.kind.value, "title": self.title, "message": self.message}


@dataclass
class PropagationResult:
    """回写结果"""

    active_combat: Optional[ActiveCombat] = None
    exp_added: int = 0
    currency_added: int = 0
    items_added: List[InventoryItem] = field(default_factory=list)
    familiar_leveled_up: bool = False
    conquered_location_id: Optional[str] = None
    notifications: List[CombatNotification] = field(default_factory=list)


@dataclass
class HuntRewardClaim:
    combatant_id: str
    item: InventoryItem
    message: str


NotificationSink = Callable[[CombatNotification], None]


class CombatUpdatePropagator:
    """
    战斗结果回写器

    Familiars and inventory are reached through repositories; territory
    ownership through the ``LocationOwnership`` collaborator.
    """

    def __init__(
        self,
        familiars: FamiliarRepository,
        inventory: InventoryRepository,
        locations: Optional[LocationOwnership] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self.familiars = familiars
        self.inventory = inventory
        self.locations = locations
        self.notifier = notifier

    def apply(
        self,
        update: CombatUpdate,
        player: PlayerState,
        characters: Sequence[Character],
    ) -> PropagationResult:
        """
        回写一个回合的结果

        Args:
            update: resolver output.
            player: the player record (mutated).
            characters: character records (matching ones are mutated).

        Returns:
            PropagationResult; ``active_combat`` is the snapshot the session
            should store next (``None`` once the encounter ended).
        """
        result = PropagationResult()
        by_id = {c.id: c for c in characters}

        # 1. 生命 / 法力 / 状态
        for combatant_update in update.updated_combatants:
            character = by_id.get(combatant_update.combatant_id)
            if character is not None:
                character.hit_points = combatant_update.new_hp
                if combatant_update.new_mp is not None:
                    character.mana_points = combatant_update.new_mp
                character.status_effects = list(combatant_update.new_status_effects)
                character.is_defeated = combatant_update.is_defeated
            if combatant_update.combatant_id == PLAYER_ID:
                stats_manager.set_hp(player, combatant_update.new_hp)
                stats_manager.set_mp(player, combatant_update.new_mp)

        if not update.combat_ended:
            result.active_combat = update.next_active_combat
            return result

        # 2. 经验（玩家 + 出战魔宠）
        if update.exp_gained > 0:
            stats_manager.add_exp(player, update.exp_gained)
            result.exp_added = update.exp_gained
            self._grant_familiar_exp(player, update.exp_gained, result)

        # 3. 金币
        if update.currency_gained > 0:
            stats_manager.add_gold(player, update.currency_gained)
            result.currency_added = update.currency_gained

        # 4. 物品
        if update.items_obtained:
            items = self.inventory.load_inventory()
            for item in update.items_obtained:
                items = add_item_to_inventory(items, item)
            self.inventory.save_inventory(items)
            result.items_added = list(update.items_obtained)

        self._emit(result, CombatNotification(
            kind=NotificationKind.COMBAT_ENDED,
            title="Le combat est terminé !",
            message=self._loot_message(result),
        ))

        # 5. 领地征服
        if update.conquest_location_id:
            result.conquered_location_id = update.conquest_location_id
            if self.locations is not None:
                self.locations.change_owner(update.conquest_location_id, PLAYER_ID)
            self._emit(result, CombatNotification(
                kind=NotificationKind.TERRITORY_CONQUERED,
                title="Territoire conquis!",
                message=update.conquest_location_id,
            ))

        return result

    def claim_hunt_reward(self, combat: Optional[ActiveCombat], combatant_id: str) -> Optional[HuntRewardClaim]:
        """
        领取狩猎奖励

        The combatant must be defeated and still carry its reward; otherwise
        nothing happens and ``None`` is returned. The item is stored in the
        inventory before the caller ends the encounter.
        """
        if combat is None:
            logger.warning("claim_hunt_reward(%s) without an active combat", combatant_id)
            return None
        combatant = combat.get_combatant(combatant_id)
        if combatant is None or not combatant.has_pending_reward():
            logger.warning("claim_hunt_reward(%s): no pending reward", combatant_id)
            return None

        item = combatant.reward_item
        self.inventory.save_inventory(add_item_to_inventory(self.inventory.load_inventory(), item))

        claim = HuntRewardClaim(
            combatant_id=combatant_id,
            item=item,
            message=hunt_reward_claimed_line(item.name),
        )
        if self.notifier is not None:
            self.notifier(CombatNotification(NotificationKind.HUNT_REWARD_CLAIMED, "Butin récupéré", claim.message))
        return claim

    # ============================================
    # 私有方法
    # ============================================

    def _grant_familiar_exp(self, player: PlayerState, amount: int, result: PropagationResult) -> None:
        if not player.active_familiar_id:
            return
        familiar = self.familiars.load_familiar(player.active_familiar_id)
        if familiar is None:
            logger.warning("active familiar %s not found", player.active_familiar_id)
            return

        outcome = stats_manager.add_familiar_exp(familiar, amount)
        self.familiars.save_familiar(familiar)
        if outcome.get("leveled_up"):
            result.familiar_leveled_up = True
            self._emit(result, CombatNotification(
                kind=NotificationKind.FAMILIAR_LEVEL_UP,
                title="Familier a monté de niveau!",
                message=f"{familiar.name} est maintenant niveau {familiar.level}!",
            ))

    def _emit(self, result: PropagationResult, notification: CombatNotification) -> None:
        result.notifications.append(notification)
        if self.notifier is not None:
            self.notifier(notification)

    @staticmethod
    def _loot_message(result: PropagationResult) -> str:
        parts = []
        if result.exp_added > 0:
            parts.append(f"Vous gagnez {result.exp_added} points d'expérience.")
        if result.currency_added > 0:
            parts.append(f"Vous trouvez {result.currency_added} pièces d'or.")
        if result.items_added:
            parts.append("Butin : " + ", ".join(item.name for item in result.items_added) + ".")
        return " ".join(parts)
