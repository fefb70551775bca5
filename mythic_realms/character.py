"""Character creation: turns a finished draft into the opening game state."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator

from mythic_realms import catalog
from mythic_realms.models import (
    STAT_KEYS,
    Choice,
    GameState,
    Item,
    LogEntry,
    Personality,
    Player,
    Proficiencies,
    Record,
    World,
)
from mythic_realms.stats import ability_modifier, assign_default_stats, calculate_ac

logger = logging.getLogger(__name__)

STARTING_CURRENCY = 1000
STARTING_TOWN = "Oakhaven"
STARTING_SUPPLIES = ("ration", "waterskin")


class CharacterDraft(Record):
    """What the creation wizard hands over once every step is complete."""

    name: str
    race: str
    class_name: str = Field(alias="class")
    background: str
    concept: str = ""
    personality: Personality = Field(default_factory=Personality)
    stats: dict[str, int] | None = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v.strip()

    @field_validator("race")
    @classmethod
    def _known_race(cls, v: str) -> str:
        if v not in catalog.RACES:
            raise ValueError(f"unknown race {v!r}")
        return v

    @field_validator("class_name")
    @classmethod
    def _known_class(cls, v: str) -> str:
        if v not in catalog.CLASSES:
            raise ValueError(f"unknown class {v!r}")
        return v

    @field_validator("background")
    @classmethod
    def _known_background(cls, v: str) -> str:
        if v not in catalog.BACKGROUNDS:
            raise ValueError(f"unknown background {v!r}")
        return v

    @field_validator("stats")
    @classmethod
    def _complete_stats(cls, v: dict[str, int] | None) -> dict[str, int] | None:
        if v is not None and set(v) != set(STAT_KEYS):
            raise ValueError(f"stats must have exactly {', '.join(STAT_KEYS)}")
        return v


def _gear_item(name: str) -> Item:
    return catalog.find_item_by_name(name) or Item(name=name, type="gear", weight=1, value=10)


def create_character(draft: CharacterDraft) -> GameState:
    cls = catalog.CLASSES[draft.class_name]
    background = catalog.BACKGROUNDS[draft.background]
    stats = draft.stats or assign_default_stats(draft.race, draft.class_name)

    hp = cls["hd"] + ability_modifier(stats["con"])
    inventory = catalog.resolve_items(list(STARTING_SUPPLIES))
    for name in catalog.split_gear(cls["gear"]) + catalog.split_gear(background["gear"]):
        inventory.append(_gear_item(name))
    spells = [s for s in (catalog.get_spell(sid) for sid in cls.get("spells", [])) if s is not None]

    player = Player(
        name=draft.name,
        race=draft.race,
        class_name=draft.class_name,
        background=draft.background,
        concept=draft.concept,
        personality=draft.personality,
        proficiencies=Proficiencies(
            skills=[*background["skills"], *cls["skills"]],
            saving_throws=list(cls["saving_throws"]),
        ),
        hp_max=hp,
        hp_current=hp,
        mana_max=cls["mana"],
        mana_current=cls["mana"],
        stamina_max=cls["stamina"],
        stamina_current=cls["stamina"],
        currency=STARTING_CURRENCY,
        stats=stats,
        inventory=inventory,
        spells=spells,
    )
    player.ac = calculate_ac(player)
    logger.info("Created %s the %s %s", player.name, player.race, player.class_name)

    return GameState(
        player=player,
        world=World(day=1, hour=8, weather="Clear", facts=[f"Arrived at {STARTING_TOWN}"]),
        log=[LogEntry(type="narration", text=f"Welcome, {player.name}. You stand at the gates of {STARTING_TOWN}.")],
        choices=[Choice(id="enter", label="Enter Town", intent="travel")],
    )
