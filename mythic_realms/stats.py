"""Derived stats: pure functions of the current player state.

Armor class rule (kept deliberately simple, not additive):
  no equipped item carries an AC value  → 10 + DEX modifier (unarmored)
  otherwise                             → sum of the equipped items' AC values
The unarmored baseline is never added once any AC-bearing item is worn.
"""

from __future__ import annotations

import math

from mythic_realms.catalog import CLASSES, RACES
from mythic_realms.models import STAT_KEYS, Item, Player

STANDARD_ARRAY = (15, 14, 13, 12, 10, 8)

CARRY_PER_STR = 15

SKILLS: dict[str, str] = {
    "Acrobatics": "dex",
    "Animal Handling": "wis",
    "Arcana": "int",
    "Athletics": "str",
    "Deception": "cha",
    "History": "int",
    "Insight": "wis",
    "Intimidation": "cha",
    "Investigation": "int",
    "Medicine": "wis",
    "Nature": "int",
    "Perception": "wis",
    "Performance": "cha",
    "Persuasion": "cha",
    "Religion": "int",
    "Sleight of Hand": "dex",
    "Stealth": "dex",
    "Survival": "wis",
}

_SPELLCASTING = {
    "Wizard": "int", "Artificer": "int",
    "Cleric": "wis", "Druid": "wis", "Ranger": "wis",
    "Bard": "cha", "Paladin": "cha", "Sorcerer": "cha", "Warlock": "cha",
}


def ability_modifier(score: int | None) -> int:
    """floor((score - 10) / 2); a missing score counts as 10."""
    return math.floor(((score or 10) - 10) / 2)


def xp_to_next_level(level: int) -> int:
    return level * 100 + 150


def calculate_ac(player: Player) -> int:
    armor = [item for item in player.equipment.values() if item.ac is not None]
    if not armor:
        return 10 + ability_modifier(player.stats.get("dex"))
    return sum(item.ac for item in armor)


def encumbrance(inventory: list[Item]) -> float:
    return sum(item.weight or 0 for item in inventory)


def max_carry(strength: int | None) -> int:
    return (strength or 10) * CARRY_PER_STR


def format_currency(copper: int) -> str:
    """12345 → '1g 23s 45c' (100 copper to the silver, 100 silver to the gold)."""
    gold, rest = divmod(int(copper), 10000)
    silver, copper = divmod(rest, 100)
    return f"{gold}g {silver}s {copper}c"


def spellcasting_ability(class_name: str) -> str:
    return _SPELLCASTING.get(class_name, "int")


def assign_default_stats(race: str, class_name: str) -> dict[str, int]:
    """Standard array to the class's primary stats first, then in fixed order.

    Racial bonuses are applied on top; a bonus keyed ``all`` applies to
    every stat. Unknown race or class yields all 10s.
    """
    class_data = CLASSES.get(class_name)
    race_data = RACES.get(race)
    if not class_data or not race_data:
        return {key: 10 for key in STAT_KEYS}

    scores = list(STANDARD_ARRAY)
    stats: dict[str, int] = {}
    for key in class_data["primary_stats"][:2]:
        if key not in stats:
            stats[key] = scores.pop(0)
    for key in STAT_KEYS:
        if key not in stats:
            stats[key] = scores.pop(0)

    for key, bonus in race_data.get("bonus", {}).items():
        if key == "all":
            for stat in STAT_KEYS:
                stats[stat] += bonus
        else:
            stats[key] += bonus

    return {key: stats[key] for key in STAT_KEYS}
