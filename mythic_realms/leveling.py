"""Experience thresholds and level-up rollover.

Threshold for the next level is ``level * 100 + 150``. Leftover experience
carries over. Only one level-up is granted per check, even when the
experience pool would cover several thresholds.
"""

from __future__ import annotations

import random

from mythic_realms.catalog import hit_die
from mythic_realms.models import Player
from mythic_realms.stats import ability_modifier, xp_to_next_level


def level_up(player: Player, rng: random.Random | None = None) -> tuple[Player, str]:
    """Raise the level by one, roll max HP and fully restore resources."""
    rng = rng or random.Random()
    nxt = player.model_copy(deep=True)
    nxt.level += 1

    roll = rng.randint(1, hit_die(nxt.class_name))
    hp_gain = max(1, roll + ability_modifier(nxt.stats.get("con")))
    nxt.hp_max += hp_gain

    nxt.hp_current = nxt.hp_max
    nxt.mana_current = nxt.mana_max
    nxt.stamina_current = nxt.stamina_max

    message = f"LEVEL UP! You are now Level {nxt.level}! You feel stronger. (HP +{hp_gain})"
    return nxt, message


def check_level_up(player: Player, rng: random.Random | None = None) -> tuple[Player, str | None]:
    """Apply at most one level-up. Returns (player, message or None)."""
    threshold = xp_to_next_level(player.level)
    if player.xp < threshold:
        return player, None
    nxt = player.model_copy(deep=True)
    nxt.xp -= threshold
    return level_up(nxt, rng)
