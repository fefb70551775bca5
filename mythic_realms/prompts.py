"""Handlebars prompt rendering for the narrator.

The prompt carries a text snapshot of the player, world and (in combat) the
enemy, the player's action, and the JSON schema the reply must follow.
Free text is emitted with triple-stash ``{{{...}}}`` so Handlebars does not
HTML-escape quotes and ampersands.
"""

from collections.abc import Callable
from typing import Any

import pybars

from mythic_realms.catalog import ITEMS
from mythic_realms.models import GameState
from mythic_realms.stats import encumbrance, format_currency, max_carry

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


NARRATOR_PROMPT = """\
Role: D&D 5E DM. Output JSON ONLY.
World: Day {{world.day}}, {{world.hour}}:00. Weather: {{{world.weather}}}.
Player: {{{player.name}}} ({{{player.race}}} {{{player.class_name}}}, Lvl {{player.level}}).
HP: {{player.hp}}. MP: {{player.mp}}. AC: {{player.ac}}. Exhaustion: {{player.exhaustion}}.
Active Quests: {{{quests}}}.
Survival: Hunger {{player.hunger_days}} days, Thirst {{player.thirst_days}} days.
Encumbrance: {{encumbrance}}/{{max_carry}} lbs.
Currency: {{player.currency}} copper ({{player.purse}}).
Inventory: {{{inventory}}}.
Spells: {{{spells}}}.
Facts: {{{facts}}}.
Confiscated Items: {{#if confiscated}}Yes{{else}}No{{/if}}.
Available Items for purchase/loot: {{{catalog}}}.
Action: "{{{action}}}"
{{#if enemy}}

COMBAT SCENE:
Enemy: {{{enemy.name}}}. HP: {{enemy.hp}}/{{enemy.hp_max}}. AC: {{enemy.ac}}. Damage: {{{enemy.damage}}}.
Combat Instructions:
1. This is the player's turn. Narrate the result of the player's action.
2. Calculate if the player's attack hits the enemy's AC.
3. If it hits, determine damage and return it as a negative 'enemyHpDelta'.
4. After the player's action, narrate the enemy's turn and its attack against the player.
5. If the enemy attack hits the player's AC, calculate damage and return it as a negative 'hpDelta'.
6. If the enemy is defeated (HP <= 0), set 'endCombat' to true, and grant rewards (xpDelta, currencyDelta, addItemId).
7. If the player is defeated (HP <= 0), set 'endCombat' to true and narrate the dire consequences.
JSON Schema: {
  "narration": "string",
  "choices": [],
  "patch": {
    "hpDelta": 0, "enemyHpDelta": 0, "xpDelta": 0, "endCombat": false,
    "scenePrompt": "A cinematic high-detail fantasy concept art of {{{enemy.name}}} in combat at the current location, atmospheric lighting, 16:9"
  }
}
{{else}}

Instructions:
1. If buying items, check if player has enough Currency. If not, reject.
2. If buying, return negative 'currencyDelta'. Use the item's value.
3. If an item is added to inventory, use 'addItemId'.
4. To start a combat encounter, provide a 'startCombat' object with the enemy's details.
5. Quests: To add a quest, use 'addQuest: {title, description}'. To complete, use 'updateQuestStatus: {title, newStatus: "completed"}'.
6. Shops: To open a shop, provide a 'shop' object with a 'name' and an 'inventory' array of item IDs.
7. If the scene or location changes significantly, provide a 'scenePrompt'.
JSON Schema: {
  "narration": "string",
  "choices": [{ "id": "str", "label": "str", "intent": "travel|combat|social|buy|rest|system" }],
  "patch": {
    "timeDelta": 1, "currencyDelta": 0, "hpDelta": 0, "addItemId": "string", "addFact": "string", "xpDelta": 0,
    "addQuest": {"title": "string", "description": "string"}, "updateQuestStatus": {"title": "string", "newStatus": "completed"},
    "scenePrompt": "A high-detail 16:9 environmental concept art of the current location in a fantasy world, cinematic lighting, professional digital painting style",
    "startCombat": {"name": "string", "hp": "number", "ac": "number", "damage": "string"}
  }
}
{{/if}}"""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return compiled(context)
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def build_context(state: GameState, action: str) -> dict[str, Any]:
    """Assemble template variables from the game state."""
    player = state.player
    world = state.world
    active = [q.title for q in player.quests if q.status == "active"]

    ctx: dict[str, Any] = {
        "action": action,
        "world": {"day": world.day, "hour": world.hour, "weather": world.weather},
        "player": {
            "name": player.name,
            "race": player.race,
            "class_name": player.class_name,
            "level": player.level,
            "hp": f"{player.hp_current}/{player.hp_max}",
            "mp": f"{player.mana_current}/{player.mana_max}",
            "ac": player.ac,
            "exhaustion": player.exhaustion,
            "hunger_days": player.hunger_days,
            "thirst_days": player.thirst_days,
            "currency": player.currency,
            "purse": format_currency(player.currency),
        },
        "quests": ", ".join(active) or "None",
        "encumbrance": encumbrance(player.inventory),
        "max_carry": max_carry(player.stats.get("str")),
        "inventory": ", ".join(i.name for i in player.inventory),
        "spells": ", ".join(f"{s.name} ({s.cost}MP)" for s in player.spells) or "None",
        "facts": ", ".join(world.facts),
        "confiscated": bool(player.confiscated_inventory),
        "catalog": "; ".join(f"{i.name} (id: {i.id}, value: {i.value})" for i in ITEMS.values()),
    }
    if state.enemy is not None:
        ctx["enemy"] = state.enemy.model_dump()
    return ctx


def build_narrator_prompt(state: GameState, action: str, template: str = NARRATOR_PROMPT) -> str:
    return render_prompt(template, build_context(state, action))
