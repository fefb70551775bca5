"""Game session: owns the authoritative state for one save slot.

Turn flow (take_turn):
  1. A system-intent choice is dispatched locally; the narrator is not called.
  2. The action is logged ("combat" entry while an enemy is present, else "player").
  3. The narrator prompt is rendered from the state and sent to the LLM.
  4. The reply envelope is parsed and folded in by the Patch Applier.
  5. The new state is committed, saved to the slot, then mirrored remotely.

A failure in 3 or 4 leaves player, world and enemy untouched: one error entry
is appended to the log and the choices are replaced by the fallback set for
that kind of failure.

Only one turn runs at a time. A turn submitted while another is processing is
ignored; direct actions (equip, buy, save...) raise SessionBusyError instead.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable

from mythic_realms import combat, economy, equipment
from mythic_realms.engine import apply_turn
from mythic_realms.errors import classify_error
from mythic_realms.llm import LLM, Painter
from mythic_realms.models import Choice, GameState, LogEntry
from mythic_realms.patch import parse_response
from mythic_realms.prompts import build_narrator_prompt
from mythic_realms.storage import Storage

logger = logging.getLogger(__name__)

Mirror = Callable[[str, GameState], Awaitable[None]]

SYSTEM_ACTIONS = ("settings",)


class SessionBusyError(RuntimeError):
    """Raised when a direct action arrives while a turn is processing."""


class GameSession:
    def __init__(
        self,
        state: GameState,
        *,
        slot_id: str,
        storage: Storage,
        llm: LLM,
        painter: Painter | None = None,
        mirror: Mirror | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.state = state
        self.slot_id = slot_id
        self._storage = storage
        self.llm = llm
        self.painter = painter
        self._mirror = mirror
        self._rng = rng
        self._processing = False
        self.system_request: str | None = None

    @property
    def processing(self) -> bool:
        return self._processing

    def _check_idle(self) -> None:
        if self._processing:
            raise SessionBusyError("A turn is still being processed")

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def take_turn(self, action: str, choice: Choice | None = None) -> GameState | None:
        """Run one turn. Returns the new state, or None if the input was ignored."""
        if choice is not None and choice.intent == "system":
            self._dispatch_system(choice)
            return self.state

        if self._processing or not action.strip():
            logger.debug("Ignoring turn for slot %s (processing=%s)", self.slot_id, self._processing)
            return None

        self._processing = True
        self.system_request = None
        try:
            entry_type = "combat" if self.state.enemy is not None else "player"
            acted = self.state.model_copy(deep=True)
            acted.log.append(LogEntry(type=entry_type, text=action))
            self.state = acted

            try:
                prompt = build_narrator_prompt(acted, action)
                raw = await self.llm("narrator", prompt)
                response = parse_response(raw)
                nxt = await apply_turn(acted, response, painter=self.painter, rng=self._rng)
            except Exception as e:
                logger.error("Turn failed for slot %s: %s", self.slot_id, e)
                self.state = self._fail(acted, e)
                return self.state

            self.state = nxt
            await self._persist()
            return self.state
        finally:
            self._processing = False

    def _dispatch_system(self, choice: Choice) -> None:
        if choice.id in SYSTEM_ACTIONS:
            self.system_request = choice.id
        else:
            logger.warning("Unknown system action %r", choice.id)

    def _fail(self, state: GameState, error: Exception) -> GameState:
        failure = classify_error(error)
        failed = state.model_copy(deep=True)
        failed.log.append(LogEntry(type="error", text=failure.message))
        failed.choices = failure.choices
        return failed

    async def _persist(self) -> None:
        try:
            self._storage.save_game(self.slot_id, self.state)
        except OSError as e:
            logger.error("Local save failed for slot %s: %s", self.slot_id, e)
        if self._mirror is None:
            return
        try:
            await self._mirror(self.slot_id, self.state)
        except Exception as e:
            logger.warning("Remote save failed for slot %s: %s", self.slot_id, e)

    # ------------------------------------------------------------------
    # Direct actions (no narrator involved)
    # ------------------------------------------------------------------

    def _commit(self, state: GameState) -> GameState:
        self.state = state
        self._storage.save_game(self.slot_id, state)
        return state

    def equip(self, index: int) -> GameState:
        """Equip the inventory entry at ``index``."""
        self._check_idle()
        player = self.state.player
        if index < 0 or index >= len(player.inventory):
            raise IndexError(f"Inventory index {index} out of range")
        nxt = self.state.model_copy(deep=True)
        nxt.player = equipment.equip(player, player.inventory[index])
        return self._commit(nxt)

    def unequip(self, slot: str) -> GameState:
        self._check_idle()
        if slot not in equipment.SLOTS:
            raise ValueError(f"Unknown equipment slot {slot!r}")
        nxt = self.state.model_copy(deep=True)
        nxt.player = equipment.unequip(self.state.player, slot)
        return self._commit(nxt)

    def buy(self, index: int) -> tuple[GameState, bool]:
        """Buy the shop stock entry at ``index``. Returns (state, bought)."""
        self._check_idle()
        shop = self._open_shop()
        if index < 0 or index >= len(shop.inventory):
            raise IndexError(f"Shop index {index} out of range")
        player, shop, bought = economy.buy(self.state.player, shop, shop.inventory[index])
        if not bought:
            return self.state, False
        nxt = self.state.model_copy(deep=True)
        nxt.player, nxt.shop = player, shop
        return self._commit(nxt), True

    def sell(self, index: int) -> GameState:
        """Sell the inventory entry at ``index`` to the open shop."""
        self._check_idle()
        shop = self._open_shop()
        inventory = self.state.player.inventory
        if index < 0 or index >= len(inventory):
            raise IndexError(f"Inventory index {index} out of range")
        player, shop = economy.sell(self.state.player, shop, inventory[index], index)
        nxt = self.state.model_copy(deep=True)
        nxt.player, nxt.shop = player, shop
        return self._commit(nxt)

    def close_shop(self) -> GameState:
        self._check_idle()
        nxt = self.state.model_copy(deep=True)
        combat.close_shop(nxt)
        return self._commit(nxt)

    def save(self) -> GameState:
        self._check_idle()
        return self._commit(self.state)

    def _open_shop(self):
        if self.state.shop is None:
            raise ValueError("No shop is open")
        return self.state.shop
