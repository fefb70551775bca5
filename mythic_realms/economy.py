"""Buying from and selling to a shop's transient stock.

The shop's stock is its own list, separate from the catalog. Items sell for
half their value, rounded down.
"""

from __future__ import annotations

import logging

from mythic_realms.models import Item, Player, Shop

logger = logging.getLogger(__name__)


def can_afford(player: Player, cost: int) -> bool:
    return player.currency >= cost


def sale_value(item: Item) -> int:
    return (item.value or 0) // 2


def buy(player: Player, shop: Shop, item: Item) -> tuple[Player, Shop, bool]:
    """Buy one ``item`` from ``shop``.

    Returns (player, shop, bought). An unaffordable purchase leaves both
    unchanged and reports ``bought=False``.
    """
    cost = item.value or 0
    if not can_afford(player, cost):
        logger.debug("buy rejected: %r costs %d, have %d", item.name, cost, player.currency)
        return player, shop, False

    index = next((i for i, stock in enumerate(shop.inventory) if stock.same_as(item)), None)
    if index is None:
        raise ValueError(f"{item.name!r} is not in stock at {shop.name}")

    nxt_player = player.model_copy(deep=True)
    nxt_shop = shop.model_copy(deep=True)
    bought = nxt_shop.inventory.pop(index)
    nxt_player.currency -= cost
    nxt_player.inventory.append(bought)
    return nxt_player, nxt_shop, True


def sell(player: Player, shop: Shop, item: Item, index: int) -> tuple[Player, Shop]:
    """Sell the inventory entry at ``index`` (which must be ``item``)."""
    if index < 0 or index >= len(player.inventory):
        raise IndexError(f"Inventory index {index} out of range")
    if not player.inventory[index].same_as(item):
        raise ValueError(f"Inventory slot {index} does not hold {item.name!r}")

    nxt_player = player.model_copy(deep=True)
    nxt_shop = shop.model_copy(deep=True)
    sold = nxt_player.inventory.pop(index)
    nxt_player.currency += sale_value(sold)
    nxt_shop.inventory.append(sold)
    return nxt_player, nxt_shop
