"""
回合结算

One call resolves one full turn: the player strikes first, then every living
enemy strikes back. The incoming snapshot is never mutated; the resolver works
on a deep copy and hands back a ``CombatUpdate``.

Calling ``resolve_turn`` on an encounter that already ended is a caller error
and is not guarded here.
"""
import logging
from typing import Dict, Mapping, Optional, Sequence

from .dice import DiceRoller
from .models.active_combat import ActiveCombat, CombatState
from .models.character import PLAYER_ID, Character
from .models.combatant import Combatant, CombatTeam
from .models.combat_result import CombatantUpdate, CombatRewards, CombatUpdate
from .models.effective_stats import EffectiveStats
from .rewards import RewardEngine, RewardSnapshot
from .rules import (
    DEFAULT_ARMOR_CLASS,
    DEFAULT_ATTACK_BONUS,
    DEFAULT_DAMAGE_FORMULA,
    DEFEAT_LINE,
    PENDING_REWARD_LINE,
    UNKNOWN_TERRITORY_NAME,
    VICTORY_LINE,
    conquest_line,
    defeated_line,
    enemy_hit_line,
    enemy_miss_line,
    malformed_damage_line,
    player_hit_line,
    player_miss_line,
)

logger = logging.getLogger(__name__)


class CombatResolver:
    """
    回合结算器

    职责：
    - 玩家攻击第一个存活的敌人
    - 每个存活的敌人随机攻击一名玩家方单位
    - 判定胜负 / 待领取奖励
    - 胜利时计算奖励与领地征服
    """

    def __init__(self, dice: DiceRoller, reward_engine: Optional[RewardEngine] = None):
        self.dice = dice
        self.reward_engine = reward_engine or RewardEngine(dice)

    def resolve_turn(
        self,
        combat: ActiveCombat,
        player_stats: EffectiveStats,
        characters: Sequence[Character],
        snapshot: RewardSnapshot,
        location_names: Optional[Mapping[str, str]] = None,
    ) -> CombatUpdate:
        """
        结算一个完整回合

        Args:
            combat: current snapshot (left untouched).
            player_stats: live effective stats of the player.
            characters: live character records (AC / attack / damage lookups).
            snapshot: pre-combat levels for the reward computation.
            location_names: location id -> display name for the conquest line.

        Returns:
            CombatUpdate
        """
        next_combat = combat.copy()
        records: Dict[str, Character] = {c.id: c for c in characters}
        turn_log: list[str] = []

        # 1. 玩家行动
        player = next_combat.get_combatant(PLAYER_ID)
        if player is not None and not player.is_defeated:
            targets = next_combat.living(CombatTeam.ENEMY)
            if targets:
                target = targets[0]
                target_ac = self._stored_armor_class(records.get(target.character_id))
                self._attack(
                    player,
                    target,
                    attack_bonus=player_stats.attack_bonus,
                    target_ac=target_ac,
                    damage_formula=player_stats.damage_formula,
                    turn_log=turn_log,
                    is_player=True,
                )

        # 2. 敌人行动
        for enemy in next_combat.living(CombatTeam.ENEMY):
            pool = next_combat.living(CombatTeam.PLAYER)
            if not pool:
                continue
            target = self.dice.choice(pool)
            record = records.get(enemy.character_id)
            if target.character_id == PLAYER_ID:
                target_ac = player_stats.armor_class
            else:
                target_ac = self._stored_armor_class(records.get(target.character_id))
            self._attack(
                enemy,
                target,
                attack_bonus=self._stored_attack_bonus(record),
                target_ac=target_ac,
                damage_formula=(record.damage_formula if record and record.damage_formula else DEFAULT_DAMAGE_FORMULA),
                turn_log=turn_log,
                is_player=False,
            )

        # 3. 胜负判定
        all_enemies_defeated = next_combat.all_defeated(CombatTeam.ENEMY)
        all_players_defeated = next_combat.all_defeated(CombatTeam.PLAYER)
        pending_reward = all_enemies_defeated and next_combat.has_pending_reward()

        is_combat_over = all_enemies_defeated or all_players_defeated
        if is_combat_over and pending_reward:
            is_combat_over = False

        # 4. 奖励 / 征服
        rewards = CombatRewards()
        conquest_location_id: Optional[str] = None
        if is_combat_over and all_enemies_defeated:
            rewards = self.reward_engine.compute(next_combat.combatants, snapshot)
            turn_log.append(VICTORY_LINE)
            if combat.contested_location_id:
                conquest_location_id = combat.contested_location_id
                name = (location_names or {}).get(conquest_location_id) or UNKNOWN_TERRITORY_NAME
                turn_log.append(conquest_line(name))
            outcome = CombatState.ENDED_VICTORY
        elif is_combat_over:
            turn_log.append(DEFEAT_LINE)
            outcome = CombatState.ENDED_DEFEAT
        elif pending_reward:
            turn_log.append(PENDING_REWARD_LINE)
            outcome = CombatState.ENDED_VICTORY_PENDING_REWARD
        else:
            outcome = CombatState.ACTIVE

        next_combat.is_active = not is_combat_over

        logger.info(
            "combat %s turn resolved: outcome=%s exp=%d currency=%d",
            combat.combat_id,
            outcome.value,
            rewards.exp,
            rewards.currency,
        )

        return CombatUpdate(
            updated_combatants=[CombatantUpdate.from_combatant(c) for c in next_combat.combatants],
            combat_ended=is_combat_over,
            outcome=outcome,
            turn_log=turn_log,
            rewards=rewards,
            next_active_combat=None if is_combat_over else next_combat,
            conquest_location_id=conquest_location_id,
        )

    # ============================================
    # 私有方法
    # ============================================

    def _attack(
        self,
        attacker: Combatant,
        target: Combatant,
        *,
        attack_bonus: int,
        target_ac: int,
        damage_formula: str,
        turn_log: list,
        is_player: bool,
    ) -> bool:
        """d20 + 攻击加值 vs 目标AC，命中则投掷伤害"""
        hit_roll = self.dice.d20()
        hit_total = hit_roll + attack_bonus
        is_hit = hit_total >= target_ac
        logger.debug(
            "%s -> %s: d20=%d%+d vs AC %d (%s)",
            attacker.character_id,
            target.character_id,
            hit_roll,
            attack_bonus,
            target_ac,
            "hit" if is_hit else "miss",
        )

        if not is_hit:
            miss = player_miss_line if is_player else enemy_miss_line
            turn_log.append(miss(attacker.name, target.name))
            return False

        damage_roll = self.dice.roll_damage(damage_formula)
        if damage_roll.malformed:
            turn_log.append(malformed_damage_line(attacker.name, damage_formula))
        target.take_damage(damage_roll.total)

        hit = player_hit_line if is_player else enemy_hit_line
        turn_log.append(hit(attacker.name, target.name, damage_roll.total))
        if target.is_defeated:
            turn_log.append(defeated_line(target.name))
        return True

    @staticmethod
    def _stored_armor_class(record: Optional[Character]) -> int:
        if record is None or record.armor_class is None:
            return DEFAULT_ARMOR_CLASS
        return record.armor_class

    @staticmethod
    def _stored_attack_bonus(record: Optional[Character]) -> int:
        if record is None or record.attack_bonus is None:
            return DEFAULT_ATTACK_BONUS
        return record.attack_bonus
