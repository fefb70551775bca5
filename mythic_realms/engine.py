"""Patch Applier: folds one narrator response into the game state.

apply_patch() is a pure reducer: it deep-copies the incoming state and
returns the next one. Patch fields are applied in this fixed order:

   1. scene image       (resolved beforehand by apply_turn)
   2. time advance      (frozen in combat; a rollover runs one survival tick)
   3. currency delta    (+ addItemId, unless the payment was rejected)
   4. health delta
   5. enemy health delta
   6. mana delta
   7. fact
   8. experience delta  (positive only)
   9. quest directives  (add, update status, remove)
  10. shop open
  11. combat start / end
  12. level-up check    (once per turn)
  13. confiscation / restoration
  14. narration log entry + new choice set

Rejections that don't abort the turn (an unaffordable payment, an unknown
item id) append a short sentence to the narration instead.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable

from mythic_realms import catalog, combat
from mythic_realms.leveling import check_level_up
from mythic_realms.models import GameState, LogEntry, Player, Quest
from mythic_realms.patch import NarrativeResponse, Patch
from mythic_realms.stats import calculate_ac
from mythic_realms.survival import check_survival

logger = logging.getLogger(__name__)

Painter = Callable[[str], Awaitable[str | None]]

HOURS_PER_DAY = 24
DEFAULT_TIME_DELTA = 1

CANNOT_AFFORD = "(You cannot afford this.)"
ITEM_VANISHED = "(The item seems to have vanished.)"


async def apply_turn(
    state: GameState,
    response: NarrativeResponse,
    painter: Painter | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Resolve the scene image (step 1), then apply the rest of the patch."""
    scene_image = None
    prompt = response.patch.scene_prompt
    if prompt and painter is not None:
        try:
            scene_image = await painter(prompt)
        except Exception as e:
            logger.warning("Scene image generation failed, keeping previous scene: %s", e)
    return apply_patch(state, response, scene_image=scene_image, rng=rng)


def apply_patch(
    state: GameState,
    response: NarrativeResponse,
    scene_image: str | None = None,
    rng: random.Random | None = None,
) -> GameState:
    nxt = state.model_copy(deep=True)
    patch = response.patch
    addenda: list[str] = []

    if scene_image:
        nxt.scene_image = scene_image

    if not combat.is_time_frozen(nxt):
        addenda.extend(_advance_time(nxt, patch.time_delta))

    addenda.extend(_apply_currency(nxt.player, patch))

    player = nxt.player
    player.hp_current = combat.clamp(player.hp_current + (patch.hp_delta or 0), 0, player.hp_max)
    if nxt.enemy is not None:
        combat.damage_enemy(nxt.enemy, patch.enemy_hp_delta or 0)
    player.mana_current = combat.clamp(player.mana_current + (patch.mp_delta or 0), 0, player.mana_max)

    if patch.add_fact:
        nxt.world.facts.append(patch.add_fact)

    if patch.xp_delta and patch.xp_delta > 0:
        player.xp += patch.xp_delta

    _apply_quests(player, patch)

    if patch.shop and patch.shop.name and patch.shop.inventory is not None:
        combat.open_shop(nxt, patch.shop.name, catalog.resolve_items(patch.shop.inventory))

    if patch.start_combat is not None:
        encounter = patch.start_combat
        combat.start_combat(nxt, encounter.name, encounter.hp, encounter.ac, encounter.damage)
    elif patch.end_combat:
        combat.end_combat(nxt)

    nxt.player, level_message = check_level_up(nxt.player, rng)
    if level_message:
        nxt.log.append(LogEntry(type="levelup", text=level_message))

    if patch.clear_inventory or patch.clear_equipment:
        _confiscate(nxt.player)
    elif patch.restore_inventory:
        _restore(nxt.player)

    narration = " ".join([response.narration, *addenda]) if addenda else response.narration
    nxt.log.append(LogEntry(type="narration", text=narration))
    nxt.choices = list(response.resolved_choices())
    return nxt


def _advance_time(state: GameState, time_delta: int | None) -> list[str]:
    """Move the clock forward; returns survival messages if the day rolled over."""
    hours = time_delta or DEFAULT_TIME_DELTA
    if hours < 0:
        logger.warning("Ignoring negative timeDelta %d", hours)
        hours = 0

    world = state.world
    world.hour += hours
    if world.hour < HOURS_PER_DAY:
        return []
    # a single day rollover per turn, however long the delta
    world.hour %= HOURS_PER_DAY
    world.day += 1
    state.player, messages = check_survival(state.player)
    return messages


def _apply_currency(player: Player, patch: Patch) -> list[str]:
    delta = patch.currency_delta or 0
    if delta < 0 and player.currency + delta < 0:
        return [CANNOT_AFFORD]

    player.currency = max(0, player.currency + delta)
    if not patch.add_item_id:
        return []
    item = catalog.get_item(patch.add_item_id)
    if item is None:
        logger.warning("Narrator returned unknown addItemId %r", patch.add_item_id)
        return [ITEM_VANISHED]
    player.inventory.append(item)
    return []


def _apply_quests(player: Player, patch: Patch) -> None:
    if patch.add_quest and patch.add_quest.title:
        player.quests.append(
            Quest(title=patch.add_quest.title, description=patch.add_quest.description, status="active")
        )

    update = patch.update_quest_status
    if update and update.title:
        quest = next((q for q in player.quests if q.title == update.title), None)
        if quest is not None and update.new_status in ("active", "completed"):
            quest.status = update.new_status
        elif quest is not None:
            logger.warning("Ignoring unknown quest status %r for %r", update.new_status, update.title)

    if patch.remove_quest:
        player.quests = [q for q in player.quests if q.title != patch.remove_quest]


def _confiscate(player: Player) -> None:
    if player.inventory:
        player.confiscated_inventory = list(player.inventory)
    if player.equipment:
        player.confiscated_equipment = dict(player.equipment)
    player.inventory = []
    player.equipment = {}
    player.ac = calculate_ac(player)


def _restore(player: Player) -> None:
    if player.confiscated_inventory:
        player.inventory.extend(player.confiscated_inventory)
    player.confiscated_inventory = None

    if player.confiscated_equipment:
        for slot, item in player.confiscated_equipment.items():
            current = player.equipment.get(slot)
            if current is not None:
                player.inventory.append(current)
            player.equipment[slot] = item
    player.confiscated_equipment = None
    player.ac = calculate_ac(player)
