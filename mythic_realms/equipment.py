"""Equip/unequip slot rules.

Slot assignment:
  ring      → ring1 if empty, else ring2 if empty, else ring1 (overwritten)
  occupied  → the previously equipped item goes back to the inventory
  two-handed main-hand weapon → any off-hand item goes back to the inventory
  off-hand while a two-handed weapon is held → refused, item stays in inventory

Both functions return a new Player; the argument is left untouched.
"""

from __future__ import annotations

import logging

from mythic_realms.models import Item, Player
from mythic_realms.stats import calculate_ac

logger = logging.getLogger(__name__)

SLOTS = ("mainHand", "offHand", "head", "chest", "legs", "hands", "feet", "ring1", "ring2", "amulet")


def _target_slot(player: Player, item: Item) -> str | None:
    if item.slot != "ring":
        return item.slot
    if "ring1" not in player.equipment:
        return "ring1"
    if "ring2" not in player.equipment:
        return "ring2"
    return "ring1"


def equip(player: Player, item: Item) -> Player:
    nxt = player.model_copy(deep=True)
    index = next(
        (i for i, candidate in enumerate(nxt.inventory) if candidate.same_as(item)),
        None,
    )
    if index is None:
        logger.debug("equip: %r not in inventory", item.name)
        return nxt
    if not item.slot:
        logger.debug("equip: %r has no slot", item.name)
        return nxt

    equipped = nxt.inventory.pop(index)
    slot = _target_slot(nxt, equipped)

    main_hand = nxt.equipment.get("mainHand")
    if slot == "offHand" and main_hand is not None and main_hand.two_handed:
        nxt.inventory.append(equipped)
        return nxt

    previous = nxt.equipment.get(slot)
    if previous is not None:
        nxt.inventory.append(previous)

    if equipped.two_handed:
        off_hand = nxt.equipment.pop("offHand", None)
        if off_hand is not None:
            nxt.inventory.append(off_hand)

    nxt.equipment[slot] = equipped
    nxt.ac = calculate_ac(nxt)
    return nxt


def unequip(player: Player, slot: str) -> Player:
    nxt = player.model_copy(deep=True)
    item = nxt.equipment.pop(slot, None)
    if item is None:
        return nxt
    nxt.inventory.append(item)
    nxt.ac = calculate_ac(nxt)
    return nxt
