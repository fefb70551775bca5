"""Tests for mythic_realms.character: creating the opening game state."""

import pytest
from pydantic import ValidationError

from mythic_realms.character import STARTING_CURRENCY, CharacterDraft, create_character


def _draft(**overrides) -> CharacterDraft:
    fields = {
        "name": "Bram", "race": "Dwarf", "class": "Fighter", "background": "Soldier",
        "concept": "A veteran looking for peace",
        "stats": {"str": 15, "dex": 10, "con": 14, "int": 8, "wis": 12, "cha": 13},
    }
    fields.update(overrides)
    return CharacterDraft.model_validate(fields)


class TestCreateCharacter:
    def test_health_from_hit_die_and_con(self) -> None:
        player = create_character(_draft()).player
        assert player.hp_max == 12
        assert player.hp_current == 12

    def test_class_resources(self) -> None:
        player = create_character(_draft()).player
        assert (player.mana_max, player.mana_current) == (0, 0)
        assert (player.stamina_max, player.stamina_current) == (15, 15)

    def test_starting_inventory(self) -> None:
        player = create_character(_draft()).player
        names = [i.name for i in player.inventory]
        assert names == [
            "Ration (Day)", "Waterskin (Full)",
            "Chain Mail", "Iron Longsword", "Wooden Shield",
            "Insignia of Rank", "Trophy",
        ]

    def test_unknown_gear_becomes_ad_hoc_item(self) -> None:
        trophy = create_character(_draft()).player.inventory[-1]
        assert trophy.id is None
        assert (trophy.type, trophy.weight, trophy.value) == ("gear", 1, 10)

    def test_nothing_equipped_and_unarmored_ac(self) -> None:
        player = create_character(_draft()).player
        assert player.equipment == {}
        assert player.ac == 10

    def test_class_spells(self) -> None:
        player = create_character(_draft(**{"class": "Wizard", "background": "Sage"})).player
        assert [s.id for s in player.spells] == ["firebolt", "shield"]
        assert player.mana_max == 15

    def test_proficiencies(self) -> None:
        player = create_character(_draft()).player
        assert player.proficiencies.skills == ["Athletics", "Intimidation", "Acrobatics", "Athletics"]
        assert player.proficiencies.saving_throws == ["str", "con"]

    def test_default_stats_when_not_given(self) -> None:
        player = create_character(_draft(stats=None)).player
        assert player.stats["str"] == 15
        assert player.stats["con"] == 14

    def test_opening_world_and_log(self) -> None:
        state = create_character(_draft())
        assert (state.world.day, state.world.hour, state.world.weather) == (1, 8, "Clear")
        assert state.world.facts == ["Arrived at Oakhaven"]
        assert state.log[0].text == "Welcome, Bram. You stand at the gates of Oakhaven."
        assert [(c.id, c.label, c.intent) for c in state.choices] == [("enter", "Enter Town", "travel")]
        assert state.view == "exploration"
        assert state.enemy is None

    def test_starting_purse(self) -> None:
        assert create_character(_draft()).player.currency == STARTING_CURRENCY


class TestCharacterDraft:
    def test_unknown_class_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _draft(**{"class": "Juggler"})

    def test_unknown_race_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _draft(race="Ent")

    def test_unknown_background_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _draft(background="Astronaut")

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _draft(name="   ")

    def test_incomplete_stats_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _draft(stats={"str": 15})
