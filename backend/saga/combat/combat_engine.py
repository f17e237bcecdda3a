"""
战斗引擎

Session-level orchestration: holds the single live ``ActiveCombat`` slot per
session and wires stats derivation, the resolver and the propagator together.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .dice import DiceRoller
from .equipment import equip_item, equipped_items, unequip_slot
from .items import ConsumableOutcome, apply_consumable
from .models.active_combat import ActiveCombat, CombatState
from .models.character import PLAYER_ID, Character, EquipmentSlot, Familiar, InventoryItem, PlayerState
from .models.combatant import Combatant, CombatTeam
from .models.combat_result import CombatUpdate
from .models.effective_stats import EffectiveStats
from .propagator import CombatNotification, CombatUpdatePropagator, HuntRewardClaim, PropagationResult
from .repository import (
    FamiliarRepository,
    InMemoryFamiliarRepository,
    InMemoryInventoryRepository,
    InMemoryLocationRegistry,
    InventoryRepository,
)
from .resolver import CombatResolver
from .rewards import RewardEngine, RewardSnapshot, RewardTable
from .stats import derive_effective_stats

logger = logging.getLogger(__name__)


class CombatSessionNotFoundError(LookupError):
    """Raised when an operation targets an unknown session id."""

    def __init__(self, session_id: str):
        super().__init__(f"combat session not found: {session_id}")
        self.session_id = session_id


@dataclass
class CombatSession:
    """
    战斗会话

    One per game session: the player, the character roster, their
    repositories and the single live encounter slot.
    """

    session_id: str
    player: PlayerState
    characters: List[Character]
    familiars: FamiliarRepository
    inventory: InventoryRepository
    active_combat: Optional[ActiveCombat] = None
    reward_snapshot: Optional[RewardSnapshot] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def state(self) -> CombatState:
        if self.active_combat is None:
            return CombatState.INACTIVE
        return self.active_combat.state

    def get_character(self, character_id: str) -> Optional[Character]:
        for character in self.characters:
            if character.id == character_id:
                return character
        return None


@dataclass
class TurnOutcome:
    update: CombatUpdate
    propagation: PropagationResult


class CombatEngine:
    """
    战斗引擎

    职责：
    - 管理会话与唯一的进行中战斗
    - 每回合重新计算玩家有效属性
    - 结算回合并回写结果
    - 狩猎奖励领取 / 消耗品 / 装备
    """

    def __init__(
        self,
        dice: Optional[DiceRoller] = None,
        locations: Optional[InMemoryLocationRegistry] = None,
        reward_table: Optional[RewardTable] = None,
        notifier: Optional[Callable[[CombatNotification], None]] = None,
        rpg_mode: bool = True,
    ):
        self.dice = dice or DiceRoller()
        self.locations = locations or InMemoryLocationRegistry()
        self.resolver = CombatResolver(self.dice, RewardEngine(self.dice, reward_table))
        self.notifier = notifier
        self.rpg_mode = rpg_mode
        self.sessions: Dict[str, CombatSession] = {}
        self._sessions_lock = threading.Lock()

    # ============================================
    # 会话
    # ============================================

    def create_session(
        self,
        session_id: str,
        player: PlayerState,
        characters: Iterable[Character],
        inventory: Iterable[InventoryItem] = (),
        familiars: Iterable[Familiar] = (),
    ) -> CombatSession:
        familiars = list(familiars)
        if player.active_familiar_id is None:
            player.active_familiar_id = next((f.id for f in familiars if f.is_active), None)
        session = CombatSession(
            session_id=session_id,
            player=player,
            characters=list(characters),
            familiars=InMemoryFamiliarRepository(familiars),
            inventory=InMemoryInventoryRepository(inventory),
        )
        fresh_player = player.max_hp <= 0
        with self._sessions_lock:
            if session_id in self.sessions:
                raise ValueError(f"combat session already exists: {session_id}")
            self.sessions[session_id] = session
        stats = self._refresh_player_maxima(session)
        if fresh_player and self._rpg_mode(session):
            # 新角色满血满蓝
            player.current_hp = stats.max_hp
            player.current_mp = stats.max_mp
        logger.info("session %s created with %d characters", session_id, len(session.characters))
        return session

    def get_session(self, session_id: str) -> CombatSession:
        with self._sessions_lock:
            session = self.sessions.get(session_id)
        if session is None:
            raise CombatSessionNotFoundError(session_id)
        return session

    def effective_stats(self, session_id: str) -> EffectiveStats:
        return self._effective_stats(self.get_session(session_id))

    # ============================================
    # 战斗流程
    # ============================================

    def start_encounter(
        self,
        session_id: str,
        enemy_ids: Sequence[str],
        ally_ids: Sequence[str] = (),
        environment_description: str = "",
        contested_location_id: Optional[str] = None,
        reward_items: Optional[Mapping[str, InventoryItem]] = None,
    ) -> ActiveCombat:
        """
        开始战斗

        Builds the roster (player, allies, enemies in that order) from the
        session's records and snapshots pre-combat levels for rewards.

        Raises:
            ValueError: an encounter is already live, an id is unknown, or an
                enemy is already defeated.
        """
        session = self.get_session(session_id)
        with session.lock:
            if session.active_combat is not None:
                raise ValueError(f"session {session_id} already has a live encounter")
            if not self._rpg_mode(session):
                raise ValueError("encounters require RPG mode")

            stats = self._effective_stats(session)
            player = session.player
            combatants = [
                Combatant(
                    character_id=PLAYER_ID,
                    name=player.name,
                    team=CombatTeam.PLAYER,
                    current_hp=player.current_hp,
                    max_hp=stats.max_hp,
                    current_mp=player.current_mp,
                    max_mp=stats.max_mp,
                    is_defeated=player.current_hp <= 0,
                )
            ]
            for team, ids in ((CombatTeam.PLAYER, ally_ids), (CombatTeam.ENEMY, enemy_ids)):
                for character_id in ids:
                    character = session.get_character(character_id)
                    if character is None:
                        raise ValueError(f"unknown character: {character_id}")
                    if team == CombatTeam.ENEMY and (character.is_defeated or character.hit_points <= 0):
                        raise ValueError(f"character already defeated: {character_id}")
                    combatants.append(Combatant.from_character(character, team))

            for combatant in combatants:
                if reward_items and combatant.is_enemy() and combatant.character_id in reward_items:
                    combatant.reward_item = reward_items[combatant.character_id]

            session.reward_snapshot = RewardSnapshot.from_characters(session.characters)
            session.active_combat = ActiveCombat(
                combatants=combatants,
                is_active=True,
                environment_description=environment_description,
                contested_location_id=contested_location_id,
            )
            logger.info(
                "session %s: encounter %s started (%d enemies)",
                session_id,
                session.active_combat.combat_id,
                len(enemy_ids),
            )
            return session.active_combat

    def play_turn(self, session_id: str) -> Optional[TurnOutcome]:
        """
        执行一个回合

        Returns ``None`` when no encounter is live or it is waiting for its
        hunt reward to be claimed.
        """
        session = self.get_session(session_id)
        with session.lock:
            combat = session.active_combat
            if combat is None or not combat.is_active:
                logger.warning("session %s: play_turn without a live encounter", session_id)
                return None
            if combat.state == CombatState.ENDED_VICTORY_PENDING_REWARD:
                logger.warning("session %s: encounter waits for its hunt reward", session_id)
                return None

            stats = self._effective_stats(session)
            snapshot = session.reward_snapshot or RewardSnapshot.from_characters(session.characters)
            location_names = {}
            if combat.contested_location_id:
                name = self.locations.location_name(combat.contested_location_id)
                if name:
                    location_names[combat.contested_location_id] = name

            update = self.resolver.resolve_turn(combat, stats, session.characters, snapshot, location_names)
            propagation = self._propagator(session).apply(update, session.player, session.characters)
            session.active_combat = propagation.active_combat
            if update.combat_ended:
                session.reward_snapshot = None
            return TurnOutcome(update=update, propagation=propagation)

    def claim_hunt_reward(self, session_id: str, combatant_id: str) -> Optional[HuntRewardClaim]:
        """领取狩猎奖励，成功后结束战斗"""
        session = self.get_session(session_id)
        with session.lock:
            claim = self._propagator(session).claim_hunt_reward(session.active_combat, combatant_id)
            if claim is not None:
                session.active_combat = None
                session.reward_snapshot = None
                logger.info("session %s: hunt reward %s claimed, encounter over", session_id, claim.item.id)
            return claim

    def dismiss_pending_encounter(self, session_id: str) -> bool:
        """Close an encounter waiting on its hunt reward without claiming it."""
        session = self.get_session(session_id)
        with session.lock:
            if session.state != CombatState.ENDED_VICTORY_PENDING_REWARD:
                return False
            session.active_combat = None
            session.reward_snapshot = None
            return True

    def use_item(self, session_id: str, item_id: str, target_id: Optional[str] = None) -> Optional[ConsumableOutcome]:
        session = self.get_session(session_id)
        with session.lock:
            outcome = apply_consumable(
                session.active_combat,
                session.player,
                session.inventory.load_inventory(),
                item_id,
                self.dice,
                target_id=target_id,
            )
            if outcome is not None:
                session.active_combat = outcome.active_combat
                session.inventory.save_inventory(outcome.inventory)
            return outcome

    # ============================================
    # 装备 / 魔宠
    # ============================================

    def equip(self, session_id: str, item_id: str) -> EffectiveStats:
        session = self.get_session(session_id)
        with session.lock:
            loadout, inventory = equip_item(
                session.player.equipped_item_ids, session.inventory.load_inventory(), item_id
            )
            session.player.equipped_item_ids = loadout
            session.inventory.save_inventory(inventory)
            return self._refresh_player_maxima(session)

    def unequip(self, session_id: str, slot: EquipmentSlot) -> EffectiveStats:
        session = self.get_session(session_id)
        with session.lock:
            loadout, inventory = unequip_slot(
                session.player.equipped_item_ids, session.inventory.load_inventory(), slot
            )
            session.player.equipped_item_ids = loadout
            session.inventory.save_inventory(inventory)
            return self._refresh_player_maxima(session)

    def activate_familiar(self, session_id: str, familiar_id: Optional[str]) -> EffectiveStats:
        """Make ``familiar_id`` the only active familiar (``None`` deactivates all)."""
        session = self.get_session(session_id)
        with session.lock:
            if familiar_id is not None and session.familiars.load_familiar(familiar_id) is None:
                raise ValueError(f"unknown familiar: {familiar_id}")
            for familiar in session.familiars.list_familiars():
                should_be_active = familiar.id == familiar_id
                if familiar.is_active != should_be_active:
                    familiar.is_active = should_be_active
                    session.familiars.save_familiar(familiar)
            session.player.active_familiar_id = familiar_id
            return self._refresh_player_maxima(session)

    # ============================================
    # 私有方法
    # ============================================

    def _effective_stats(self, session: CombatSession) -> EffectiveStats:
        player = session.player
        familiar = (
            session.familiars.load_familiar(player.active_familiar_id)
            if player.active_familiar_id
            else None
        )
        return derive_effective_stats(
            player.attributes,
            equipped_items(player.equipped_item_ids, session.inventory.load_inventory()),
            rpg_mode=self._rpg_mode(session),
            familiar=familiar,
        )

    def _rpg_mode(self, session: CombatSession) -> bool:
        return self.rpg_mode and session.player.rpg_mode

    def _refresh_player_maxima(self, session: CombatSession) -> EffectiveStats:
        """Store the new maxima and clamp current HP/MP to them (RPG mode only)."""
        stats = self._effective_stats(session)
        if not self._rpg_mode(session):
            return stats
        player = session.player
        player.max_hp = stats.max_hp
        player.max_mp = stats.max_mp
        player.current_hp = min(player.current_hp, stats.max_hp)
        player.current_mp = min(player.current_mp, stats.max_mp)
        return stats

    def _propagator(self, session: CombatSession) -> CombatUpdatePropagator:
        return CombatUpdatePropagator(
            familiars=session.familiars,
            inventory=session.inventory,
            locations=self.locations,
            notifier=self.notifier,
        )
