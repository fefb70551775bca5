"""Session mode lifecycle: exploration, shop and combat.

  exploration ──shop──▶ shop ──close──▶ exploration
       │                  │
       └──startCombat──▶ combat ──endCombat──▶ exploration

Transitions happen only through patch directives (and the player closing a
shop). Nothing times out. Combat freezes the clock, and an enemy or player at
0 HP does not end combat by itself; the narrator has to send ``endCombat``.

The helpers mutate the GameState they are given; the Patch Applier always
hands them its own working copy.
"""

from __future__ import annotations

from mythic_realms.models import Enemy, GameState, Item, Shop


def is_time_frozen(state: GameState) -> bool:
    return state.enemy is not None


def start_combat(state: GameState, name: str, hp: int, ac: int = 10, damage: str = "") -> Enemy:
    """Spawn a fresh enemy at full health and switch to combat."""
    enemy = Enemy(name=name, hp=hp, hp_max=hp, ac=ac, damage=damage)
    state.enemy = enemy
    state.shop = None
    state.view = "combat"
    return enemy


def end_combat(state: GameState) -> None:
    state.enemy = None
    state.view = "exploration"


def open_shop(state: GameState, name: str, stock: list[Item]) -> Shop:
    shop = Shop(name=name, inventory=stock)
    state.shop = shop
    state.view = "shop"
    return shop


def close_shop(state: GameState) -> None:
    """Leave the shop; its stock is discarded."""
    state.shop = None
    if state.view == "shop":
        state.view = "exploration"


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def damage_enemy(enemy: Enemy, delta: int) -> None:
    enemy.hp = clamp(enemy.hp + delta, 0, enemy.hp_max)
