"""End-of-day survival tick.

Food and water are handled asymmetrically:
  ration:    consumed; going without only hurts after a 3-day streak
  waterskin: never consumed; going without costs exhaustion every day
"""

from __future__ import annotations

from mythic_realms.models import Player

RATION_ID = "ration"
WATERSKIN_ID = "waterskin"
STARVATION_GRACE_DAYS = 3


def check_survival(player: Player) -> tuple[Player, list[str]]:
    """Run one day of survival. Returns the new player and the tick's messages."""
    nxt = player.model_copy(deep=True)
    messages: list[str] = []

    ration = next((i for i, item in enumerate(nxt.inventory) if item.id == RATION_ID), None)
    if ration is not None:
        nxt.inventory.pop(ration)
        nxt.hunger_days = 0
        messages.append("Consumed 1 Ration.")
    else:
        nxt.hunger_days += 1
        if nxt.hunger_days > STARVATION_GRACE_DAYS:
            nxt.exhaustion += 1
            messages.append("Starving! Exhaustion +1.")

    if any(item.id == WATERSKIN_ID for item in nxt.inventory):
        nxt.thirst_days = 0
        messages.append("Drank water.")
    else:
        nxt.thirst_days += 1
        nxt.exhaustion += 1
        messages.append("Dehydrated! Exhaustion +1.")

    return nxt, messages
