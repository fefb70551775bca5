"""Core domain models.

Every engine component and the storage layer operate on these types.
Pydantic is used for validation and serialisation at every data boundary.

Saved games and narrative responses use camelCase keys (``hpCurrent``,
``mainHand``, ``sceneImage``); Python code uses the snake_case attribute
names. Both spellings are accepted on input.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

LogType = Literal["player", "narration", "error", "levelup", "combat"]

Intent = Literal["travel", "combat", "social", "buy", "rest", "system"]

QuestStatus = Literal["active", "completed"]

View = Literal["exploration", "shop", "combat"]

STAT_KEYS = ("str", "dex", "con", "int", "wis", "cha")


class Record(BaseModel):
    """Base for all game records: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def default_stats() -> dict[str, int]:
    return {key: 10 for key in STAT_KEYS}


class Item(Record):
    """A catalog entry or an ad-hoc piece of starting gear.

    Two items are the same item when both ``name`` and ``id`` match.
    """

    id: str | None = None
    name: str
    type: str = "gear"
    rarity: str | None = None
    value: int = 0
    weight: float = 0
    effect: dict[str, float] = Field(default_factory=dict)
    slot: str | None = None
    power: int | None = None
    ac: int | None = None
    two_handed: bool = False
    stats_bonus: dict[str, int] | None = None

    def same_as(self, other: Item) -> bool:
        return self.name == other.name and self.id == other.id


class Spell(Record):
    id: str
    name: str
    cost: int
    damage: int | None = None
    heal: int | None = None
    buff: str | None = None
    duration: int | None = None
    school: str
    target: Literal["enemy", "ally", "self"]


class Quest(Record):
    """A quest; ``title`` is the key used by patch directives."""

    title: str
    description: str = ""
    status: QuestStatus = "active"


class NPC(Record):
    name: str
    role: str = ""
    location: str = ""


class Personality(Record):
    traits: str = ""
    ideals: str = ""
    bonds: str = ""
    flaws: str = ""


class Proficiencies(Record):
    skills: list[str] = Field(default_factory=list)
    saving_throws: list[str] = Field(default_factory=list)


class Player(Record):
    """The player character.

    Invariants kept by the engine: current resources stay within
    ``[0, max]``, currency is never negative, each equipment slot holds one
    item, and ``ac`` is only written by ``stats.calculate_ac``.
    """

    name: str
    race: str
    class_name: str = Field(alias="class")
    background: str = ""
    concept: str = ""
    personality: Personality = Field(default_factory=Personality)
    proficiencies: Proficiencies = Field(default_factory=Proficiencies)
    level: int = 1
    xp: int = 0
    hp_max: int = 10
    hp_current: int = 10
    mana_max: int = 0
    mana_current: int = 0
    stamina_max: int = 0
    stamina_current: int = 0
    currency: int = 0
    stats: dict[str, int] = Field(default_factory=default_stats)
    ac: int = 10
    inventory: list[Item] = Field(default_factory=list)
    equipment: dict[str, Item] = Field(default_factory=dict)
    spells: list[Spell] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    factions: dict[str, int] = Field(default_factory=dict)
    known_npcs: list[NPC] = Field(default_factory=list, alias="knownNPCs")
    exhaustion: int = 0
    hunger_days: int = 0
    thirst_days: int = 0
    confiscated_inventory: list[Item] | None = None
    confiscated_equipment: dict[str, Item] | None = None

    @field_validator("stats")
    @classmethod
    def _fill_stats(cls, stats: dict[str, int]) -> dict[str, int]:
        """Missing ability scores default to 10."""
        return {**default_stats(), **stats}


class World(Record):
    day: int = 1
    hour: int = 8  # 0–23
    weather: str = "Clear"
    facts: list[str] = Field(default_factory=list)
    event_log: list[dict] = Field(default_factory=list)


class Enemy(Record):
    """A combat opponent. Only exists while the session is in combat."""

    name: str
    hp: int
    hp_max: int
    ac: int = 10
    damage: str = ""


class LogEntry(Record):
    """A single entry in the append-only turn history."""

    type: LogType
    text: str


class Choice(Record):
    id: str
    label: str
    intent: Intent


class Shop(Record):
    """A merchant's transient stock, discarded when the shop closes."""

    name: str
    inventory: list[Item] = Field(default_factory=list)


class GameState(Record):
    """Everything one turn needs. Replaced wholesale after every turn."""

    player: Player
    world: World = Field(default_factory=World)
    log: list[LogEntry] = Field(default_factory=list)
    choices: list[Choice] = Field(default_factory=list)
    view: View = "exploration"
    enemy: Enemy | None = None
    scene_image: str | None = None
    shop: Shop | None = None


class SaveRecord(Record):
    """What a save slot holds on disk. The shop is never persisted."""

    player: Player
    world: World
    log: list[LogEntry] = Field(default_factory=list)
    choices: list[Choice] = Field(default_factory=list)
    view: View = "exploration"
    enemy: Enemy | None = None
    scene_image: str | None = None
    updated_at: float | None = None

    @classmethod
    def from_state(cls, state: GameState, updated_at: float | None = None) -> SaveRecord:
        return cls(
            player=state.player.model_copy(deep=True),
            world=state.world.model_copy(deep=True),
            log=[e.model_copy() for e in state.log],
            choices=[c.model_copy() for c in state.choices],
            view=state.view,
            enemy=state.enemy.model_copy() if state.enemy else None,
            scene_image=state.scene_image,
            updated_at=updated_at,
        )

    def to_state(self) -> GameState:
        # A saved shop view has no stock to show; fall back to exploring.
        view = "exploration" if self.view == "shop" else self.view
        return GameState(
            player=self.player,
            world=self.world,
            log=self.log,
            choices=self.choices,
            view=view,
            enemy=self.enemy,
            scene_image=self.scene_image,
        )


class SaveSlotSummary(Record):
    slot_id: str
    exists: bool
    player_name: str | None = None
    player_level: int | None = None
    world_day: int | None = None
