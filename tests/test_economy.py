"""Tests for mythic_realms.economy: buying and selling."""

import pytest

from mythic_realms import catalog
from mythic_realms.economy import buy, can_afford, sale_value, sell
from mythic_realms.models import Player, Shop


def _player(currency: int = 1000, *item_ids: str) -> Player:
    p = Player.model_validate({"name": "Aria", "race": "Elf", "class": "Rogue", "currency": currency})
    p.inventory = [catalog.get_item(i) for i in item_ids]
    return p


def _shop(*item_ids: str) -> Shop:
    return Shop(name="Smithy", inventory=catalog.resolve_items(list(item_ids)))


# ── Buy ─────────────────────────────────────────────────────


def test_buy_moves_item_and_charges_value():
    player, shop, bought = buy(_player(1000), _shop("dagger_iron", "ration"), catalog.get_item("dagger_iron"))
    assert bought is True
    assert player.currency == 800
    assert [i.id for i in player.inventory] == ["dagger_iron"]
    assert [i.id for i in shop.inventory] == ["ration"]


def test_buy_removes_only_one_matching_entry():
    _, shop, _ = buy(_player(1000), _shop("ration", "ration"), catalog.get_item("ration"))
    assert [i.id for i in shop.inventory] == ["ration"]


def test_buy_rejected_when_unaffordable():
    p, s = _player(100), _shop("dagger_iron")
    player, shop, bought = buy(p, s, catalog.get_item("dagger_iron"))
    assert bought is False
    assert player.currency == 100
    assert player.inventory == []
    assert len(shop.inventory) == 1


def test_buy_item_not_in_stock():
    with pytest.raises(ValueError):
        buy(_player(1000), _shop("ration"), catalog.get_item("dagger_iron"))


def test_can_afford_exact_amount():
    assert can_afford(_player(200), 200)
    assert not can_afford(_player(199), 200)


# ── Sell ────────────────────────────────────────────────────


def test_sell_pays_half_value_rounded_down():
    item = catalog.get_item("waterskin").model_copy(update={"value": 25})
    assert sale_value(item) == 12


def test_sell_moves_item_to_shop():
    p = _player(0, "ration", "dagger_iron")
    player, shop = sell(p, _shop(), p.inventory[1], 1)
    assert player.currency == 100
    assert [i.id for i in player.inventory] == ["ration"]
    assert [i.id for i in shop.inventory] == ["dagger_iron"]


def test_sell_index_out_of_range():
    p = _player(0, "ration")
    with pytest.raises(IndexError):
        sell(p, _shop(), p.inventory[0], 3)


def test_sell_mismatched_item():
    p = _player(0, "ration", "dagger_iron")
    with pytest.raises(ValueError):
        sell(p, _shop(), p.inventory[1], 0)

