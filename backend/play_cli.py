#!/usr/bin/env python3
"""
Saga 战斗核心 - 开发测试CLI工具

直接调用战斗引擎的交互式命令行工具，无需启动HTTP服务器。

功能：
- 预设遭遇战（哥布林小队 / 带狩猎奖励的狼）
- 回合结算与法语战斗日志
- 消耗品 / 装备 / 魔宠切换
- 狩猎奖励领取

使用方式:
    cd backend
    python play_cli.py
    python play_cli.py wolf --seed 42
"""
import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from saga.combat import CombatEngine, DiceRoller
from saga.combat.models import (
    Attributes,
    Character,
    EquipmentBonus,
    EquipmentSlot,
    Familiar,
    FamiliarBonusKind,
    FamiliarPassiveBonus,
    InventoryItem,
    ItemEffect,
    ItemEffectKind,
    ItemType,
    PlayerState,
)
from saga.combat.repository import InMemoryLocationRegistry
from saga.config import configure_logging, settings


# ==================== 配置 ====================

SESSION_ID = "cli"

COLORS = {
    "player": "bright_green",
    "enemy": "bright_red",
    "system": "bright_magenta",
    "error": "bright_red",
    "hint": "dim",
    "log": "bright_yellow",
    "combat": "bold red",
}

SCENARIOS: Dict[str, Dict] = {
    "goblins": {
        "enemy_ids": ["goblin_1", "goblin_2"],
        "environment": "Deux gobelins surgissent des buissons au bord du chemin.",
        "contested_location_id": "old_mill",
    },
    "wolf": {
        "enemy_ids": ["dire_wolf"],
        "environment": "Un loup sanguinaire rôde dans la clairière.",
        "reward_items": {
            "dire_wolf": InventoryItem(
                id="wolf_pelt",
                name="Peau de loup",
                item_type=ItemType.MISC,
                gold_value=15,
            ),
        },
    },
}


def build_demo_world():
    """演示用的玩家、角色、背包与魔宠"""
    player = PlayerState(
        name="Aria",
        attributes=Attributes(strength=14, dexterity=13, constitution=12, intelligence=10),
    )
    characters = [
        Character(id="goblin_1", name="Gobelin", level=1, hit_points=7, max_hit_points=7,
                  armor_class=12, attack_bonus=2, damage_formula="1d6"),
        Character(id="goblin_2", name="Gobelin archer", level=2, hit_points=9, max_hit_points=9,
                  armor_class=13, attack_bonus=3, damage_formula="1d6+1"),
        Character(id="dire_wolf", name="Loup sanguinaire", level=3, hit_points=18, max_hit_points=18,
                  armor_class=13, attack_bonus=4, damage_formula="2d4+2"),
    ]
    inventory = [
        InventoryItem(id="short_sword", name="Épée courte", item_type=ItemType.WEAPON,
                      damage="1d6", bonuses=EquipmentBonus.from_mapping({"attack": 1})),
        InventoryItem(id="leather_armor", name="Armure de cuir", item_type=ItemType.ARMOR,
                      armor_class="11 + Dex"),
        InventoryItem(id="healing_potion", name="Potion de soin", item_type=ItemType.CONSUMABLE,
                      quantity=2, effect=ItemEffect(ItemEffectKind.HEAL, "2d4+2")),
        InventoryItem(id="fire_flask", name="Fiole de feu", item_type=ItemType.CONSUMABLE,
                      effect=ItemEffect(ItemEffectKind.DAMAGE_ALL, "1d6")),
    ]
    familiars = [
        Familiar(id="owl", name="Hibou", passive_bonus=FamiliarPassiveBonus(
            FamiliarBonusKind.DEXTERITY, 1, "Vigilance nocturne")),
        Familiar(id="boar", name="Sanglier", passive_bonus=FamiliarPassiveBonus(
            FamiliarBonusKind.ARMOR_CLASS, 0.5, "Peau épaisse")),
    ]
    return player, characters, inventory, familiars


# ==================== 显示渲染 ====================

class CombatRenderer:
    """战斗界面渲染器"""

    def __init__(self):
        self.console = Console()

    def print_banner(self):
        banner = """
╔═══════════════════════════════════════════════════════════════╗
║           Saga 回合制战斗核心 - 开发测试工具                    ║
╚═══════════════════════════════════════════════════════════════╝
"""
        self.console.print(banner, style="bold bright_blue")

    def print_help(self):
        help_text = """
[bold]战斗命令:[/bold]
  start <goblins|wolf>   开始预设遭遇战
  attack / a             执行一个回合
  use <物品ID> [目标ID]   使用消耗品
  claim <战斗单位ID>      领取狩猎奖励
  dismiss                放弃狩猎奖励

[bold]角色命令:[/bold]
  equip <物品ID>          装备物品
  unequip <weapon|armor|jewelry>  卸下装备
  familiar <ID|none>     切换出战魔宠

[bold]信息命令:[/bold]
  status                 查看角色与战斗状态
  inv                    查看背包

[bold]系统命令:[/bold]
  help                   显示此帮助
  quit/exit              退出
"""
        self.console.print(Panel(help_text, title="帮助", border_style="green"))

    def print_system(self, message: str):
        self.console.print(f"[{COLORS['system']}]{message}[/]")

    def print_error(self, message: str):
        self.console.print(f"[{COLORS['error']}]错误: {message}[/]")

    def print_hint(self, message: str):
        self.console.print(f"[{COLORS['hint']}]{message}[/]")

    def print_turn_log(self, lines: List[str]):
        self.console.print(Panel(
            "\n".join(lines) or "(rien ne se passe)",
            title="[bold]Journal de combat[/bold]",
            border_style=COLORS["log"],
        ))

    def print_status(self, engine: CombatEngine):
        session = engine.get_session(SESSION_ID)
        player = session.player
        stats = engine.effective_stats(SESSION_ID)

        table = Table(title=f"{player.name}", show_header=False, box=None, padding=(0, 2))
        table.add_column("属性", style="cyan")
        table.add_column("值", style="white")
        table.add_row("HP", f"{player.current_hp}/{player.max_hp}")
        table.add_row("MP", f"{player.current_mp}/{player.max_mp}")
        table.add_row("AC", str(stats.armor_class))
        table.add_row("攻击", f"{stats.attack_bonus:+d}")
        table.add_row("伤害", stats.damage_formula)
        table.add_row("经验 / 金币", f"{player.experience} / {player.currency}")
        table.add_row("魔宠", player.active_familiar_id or "-")
        self.console.print(table)

        combat = session.active_combat
        if combat is None:
            self.print_hint(f"当前没有战斗（状态: {session.state.value}）")
            return
        content = []
        for combatant in combat.combatants:
            color = COLORS["player"] if combatant.is_player_team() else COLORS["enemy"]
            mark = " ✗" if combatant.is_defeated else ""
            reward = " 🎁" if combatant.has_pending_reward() else ""
            content.append(
                f"[{color}]{combatant.character_id:<12} {combatant.name}: "
                f"{combatant.current_hp}/{combatant.max_hp}{mark}{reward}[/]"
            )
        self.console.print(Panel(
            "\n".join(content),
            title=f"[bold red]战斗 {combat.combat_id} ({session.state.value})[/bold red]",
            border_style=COLORS["combat"],
        ))

    def print_inventory(self, engine: CombatEngine):
        session = engine.get_session(SESSION_ID)
        table = Table(title="背包")
        table.add_column("ID", style="cyan")
        table.add_column("名称")
        table.add_column("类型", style="dim")
        table.add_column("数量", justify="right")
        table.add_column("已装备", justify="center")
        for item in session.inventory.load_inventory():
            table.add_row(item.id, item.name, item.item_type.value, str(item.quantity),
                          "✓" if item.is_equipped else "")
        self.console.print(table)


# ==================== 主类 ====================

class CombatCLI:
    """战斗CLI主类（直接调用引擎）"""

    def __init__(self, scenario: str, seed: Optional[int] = None):
        self.engine = CombatEngine(
            dice=DiceRoller(seed=seed),
            locations=InMemoryLocationRegistry(names={"old_mill": "Le Vieux Moulin"}),
            notifier=self._on_notification,
        )
        self.renderer = CombatRenderer()
        self.scenario = scenario
        self.running = True

    def _on_notification(self, notification):
        self.renderer.console.print(
            f"[bold bright_cyan]🔔 {notification.title}[/] {notification.message}"
        )

    def start(self):
        self.renderer.print_banner()
        player, characters, inventory, familiars = build_demo_world()
        self.engine.create_session(SESSION_ID, player, characters, inventory, familiars)
        self.renderer.print_system("会话已创建")
        self.cmd_start(self.scenario)
        self.renderer.print_hint("输入 help 查看命令")
        self.main_loop()

    def main_loop(self):
        while self.running:
            try:
                user_input = Prompt.ask("[green]>[/green]")
            except (KeyboardInterrupt, EOFError):
                break
            if not user_input.strip():
                continue
            try:
                self.handle_input(user_input.strip())
            except ValueError as exc:
                self.renderer.print_error(str(exc))

    def handle_input(self, user_input: str):
        parts = user_input.split()
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("quit", "exit"):
            self.running = False
        elif cmd == "help":
            self.renderer.print_help()
        elif cmd == "status":
            self.renderer.print_status(self.engine)
        elif cmd == "inv":
            self.renderer.print_inventory(self.engine)
        elif cmd == "start":
            self.cmd_start(args[0] if args else self.scenario)
        elif cmd in ("attack", "a"):
            self.cmd_attack()
        elif cmd == "use" and args:
            self.cmd_use(args[0], args[1] if len(args) > 1 else None)
        elif cmd == "claim" and args:
            self.cmd_claim(args[0])
        elif cmd == "dismiss":
            if self.engine.dismiss_pending_encounter(SESSION_ID):
                self.renderer.print_system("狩猎奖励已放弃，战斗结束")
            else:
                self.renderer.print_hint("没有待领取的狩猎奖励")
        elif cmd == "equip" and args:
            self.engine.equip(SESSION_ID, args[0])
            self.renderer.print_status(self.engine)
        elif cmd == "unequip" and args:
            self.engine.unequip(SESSION_ID, EquipmentSlot(args[0]))
            self.renderer.print_status(self.engine)
        elif cmd == "familiar" and args:
            familiar_id = None if args[0] == "none" else args[0]
            self.engine.activate_familiar(SESSION_ID, familiar_id)
            self.renderer.print_status(self.engine)
        else:
            self.renderer.print_hint("未知命令，输入 help 查看帮助")

    def cmd_start(self, name: str):
        scenario = SCENARIOS.get(name)
        if scenario is None:
            self.renderer.print_error(f"未知遭遇战: {name}")
            return
        combat = self.engine.start_encounter(
            SESSION_ID,
            enemy_ids=scenario["enemy_ids"],
            environment_description=scenario["environment"],
            contested_location_id=scenario.get("contested_location_id"),
            reward_items=scenario.get("reward_items"),
        )
        self.renderer.print_system(combat.environment_description)
        self.renderer.print_status(self.engine)

    def cmd_attack(self):
        outcome = self.engine.play_turn(SESSION_ID)
        if outcome is None:
            self.renderer.print_hint("当前没有可结算的战斗")
            return
        self.renderer.print_turn_log(outcome.update.turn_log)
        self.renderer.print_status(self.engine)

    def cmd_use(self, item_id: str, target_id: Optional[str]):
        outcome = self.engine.use_item(SESSION_ID, item_id, target_id=target_id)
        if outcome is None:
            self.renderer.print_hint("无法使用该物品")
            return
        self.renderer.print_system(outcome.message)

    def cmd_claim(self, combatant_id: str):
        claim = self.engine.claim_hunt_reward(SESSION_ID, combatant_id)
        if claim is None:
            self.renderer.print_hint("没有可领取的奖励")
            return
        self.renderer.print_system(claim.message)


# ==================== 入口 ====================

def main():
    parser = argparse.ArgumentParser(description="Saga 战斗核心 - 开发测试CLI")
    parser.add_argument("scenario", nargs="?", default="goblins", choices=sorted(SCENARIOS))
    parser.add_argument("--seed", type=int, default=settings.rng_seed, help="固定随机种子")
    args = parser.parse_args()

    configure_logging()
    CombatCLI(scenario=args.scenario, seed=args.seed).start()


if __name__ == "__main__":
    main()
