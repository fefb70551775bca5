"""Narrative response envelope and the sparse state patch it carries.

The narrator is asked for:

    {"narration": "...", "choices": [...], "patch": {...}}

but models wrap JSON in prose or markdown fences, so the envelope is cut out
of the raw reply from the first ``{`` to the last ``}``. Anything that cannot
be located or parsed raises EnvelopeError and the turn fails as a whole.

Every patch field is optional and an absent field is a no-op. Numeric fields
are floored to ints when they arrive as floats or numeric strings; other
garbage in a numeric field is dropped rather than failing the turn. The same
goes for a malformed choice or a directive that is not a proper object:
it is logged and skipped, and the rest of the patch still applies.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from mythic_realms.models import Choice, Record

logger = logging.getLogger(__name__)


def _floor_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            logger.warning("Dropping non-numeric patch value %r", value)
            return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return math.floor(value)
    logger.warning("Dropping non-numeric patch value %r", value)
    return None


def _valid_choices(value: Any) -> list[Choice] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        logger.warning("Dropping non-list choices %r", value)
        return None
    kept = []
    for entry in value:
        try:
            kept.append(Choice.model_validate(entry))
        except ValidationError as e:
            logger.warning("Dropping malformed choice %r: %s", entry, e)
    return kept


class QuestAdd(Record):
    title: str = ""
    description: str = ""


class QuestStatusUpdate(Record):
    title: str = ""
    new_status: str = ""


class ShopOffer(Record):
    name: str = ""
    inventory: list[str] | None = None


class CombatStart(Record):
    name: str
    hp: int
    ac: int = 10
    damage: str = ""

    @field_validator("hp", "ac", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        coerced = _floor_int(value)
        return value if coerced is None else coerced


_DIRECTIVES: dict[str, type[Record]] = {
    "add_quest": QuestAdd,
    "update_quest_status": QuestStatusUpdate,
    "shop": ShopOffer,
    "start_combat": CombatStart,
}


class Patch(Record):
    """Narrated effects, applied by the engine in a fixed order."""

    time_delta: int | None = None
    currency_delta: int | None = None
    hp_delta: int | None = None
    enemy_hp_delta: int | None = None
    mp_delta: int | None = None
    add_item_id: str | None = None
    add_fact: str | None = None
    xp_delta: int | None = None
    add_quest: QuestAdd | None = None
    update_quest_status: QuestStatusUpdate | None = None
    remove_quest: str | None = None
    shop: ShopOffer | None = None
    start_combat: CombatStart | None = None
    end_combat: bool = False
    clear_inventory: bool = False
    clear_equipment: bool = False
    restore_inventory: bool = False
    scene_prompt: str | None = None
    choices: list[Choice] | None = None

    @field_validator(
        "time_delta", "currency_delta", "hp_delta", "enemy_hp_delta", "mp_delta", "xp_delta",
        mode="before",
    )
    @classmethod
    def _coerce_delta(cls, value: Any) -> int | None:
        return _floor_int(value)

    @field_validator(
        "end_combat", "clear_inventory", "clear_equipment", "restore_inventory",
        mode="before",
    )
    @classmethod
    def _null_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("add_quest", "update_quest_status", "shop", "start_combat", mode="before")
    @classmethod
    def _drop_malformed_directive(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return None
        directive = _DIRECTIVES[info.field_name]
        try:
            return directive.model_validate(value)
        except ValidationError as e:
            logger.warning("Dropping malformed %s directive: %s", info.field_name, e)
            return None

    @field_validator("choices", mode="before")
    @classmethod
    def _drop_bad_choices(cls, value: Any) -> list[Choice] | None:
        return _valid_choices(value)


class NarrativeResponse(Record):
    narration: str = ""
    choices: list[Choice] | None = None
    patch: Patch = Field(default_factory=Patch)

    @field_validator("patch", mode="before")
    @classmethod
    def _null_patch(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("choices", mode="before")
    @classmethod
    def _drop_bad_choices(cls, value: Any) -> list[Choice] | None:
        return _valid_choices(value)

    def resolved_choices(self) -> list[Choice]:
        """Top-level choices win; the patch's own list is the fallback."""
        if self.choices is not None:
            return self.choices
        return self.patch.choices or []


class EnvelopeError(ValueError):
    """Raised when a narrator reply holds no parsable JSON envelope."""


def extract_envelope(raw: str) -> dict[str, Any]:
    """Cut the outermost ``{...}`` out of ``raw`` and parse it."""
    first = raw.find("{")
    last = raw.rfind("}")
    if first == -1 or last == -1 or last < first:
        raise EnvelopeError(f"Valid JSON object not found in the response. Raw response: {raw!r}")
    try:
        data = json.loads(raw[first:last + 1])
    except json.JSONDecodeError as e:
        raise EnvelopeError(f"Invalid JSON in response: {e}. Raw response: {raw!r}") from e
    if not isinstance(data, dict):
        raise EnvelopeError("JSON envelope must be an object")
    return data


def parse_response(raw: str) -> NarrativeResponse:
    """Extract and validate the narrator's envelope."""
    data = extract_envelope(raw)
    try:
        return NarrativeResponse.model_validate(data)
    except ValidationError as e:
        raise EnvelopeError(f"JSON envelope does not match the response schema: {e}") from e
