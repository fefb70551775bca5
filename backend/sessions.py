"""Process-wide registry of game sessions, one per save slot.

Holds the Storage instance for the data directory and builds the narrator
and painter clients from the stored config. Sessions are created lazily when
a slot is loaded and kept in memory so an open shop survives between
requests.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from mythic_realms.llm import LLM, WIRE_FORMATS, EchoLLM, HttpLLM, HttpPainter, Painter
from mythic_realms.models import GameState
from mythic_realms.session import GameSession
from mythic_realms.storage import Storage

logger = logging.getLogger(__name__)

_storage: Storage | None = None
_sessions: dict[str, GameSession] = {}

PROVIDER_FORMATS = (*WIRE_FORMATS, "echo")


def init_sessions(data_dir: Path) -> None:
    global _storage
    data_dir.mkdir(parents=True, exist_ok=True)
    _storage = Storage(data_dir)
    _sessions.clear()


def storage() -> Storage:
    assert _storage is not None, "Call init_sessions() before using sessions"
    return _storage


def _api_key(section: dict[str, Any]) -> str:
    return section.get("api_key") or os.getenv("API_KEY", "")


def build_llm(config: dict[str, Any]) -> LLM:
    narrator = config["narrator"]
    if narrator.get("provider_format") == "echo":
        return EchoLLM()
    return HttpLLM(
        provider_url=narrator["provider_url"],
        api_key=_api_key(narrator),
        provider_format=narrator.get("provider_format", "koboldcpp"),
        model=narrator.get("model", ""),
    )


def build_painter(config: dict[str, Any]) -> Painter | None:
    painter = config["painter"]
    if not painter.get("enabled"):
        return None
    return HttpPainter(api_key=_api_key(painter), model=painter["model"])


def open_session(slot_id: str, state: GameState) -> GameSession:
    """Start (or replace) the session for a slot with the given state."""
    config = storage().get_config()
    session = GameSession(
        state,
        slot_id=slot_id,
        storage=storage(),
        llm=build_llm(config),
        painter=build_painter(config),
    )
    _sessions[slot_id] = session
    storage().set_last_played(slot_id)
    return session


def get_session(slot_id: str) -> GameSession | None:
    """Return the live session for a slot, loading it from disk on first use."""
    session = _sessions.get(slot_id)
    if session is not None:
        return session
    state = storage().load_game(slot_id)
    if state is None:
        return None
    return open_session(slot_id, state)


def live_session(slot_id: str) -> GameSession | None:
    """The in-memory session for a slot, without touching the disk."""
    return _sessions.get(slot_id)


def close_session(slot_id: str) -> None:
    _sessions.pop(slot_id, None)


def refresh_services() -> None:
    """Rebuild narrator/painter clients on live sessions after a settings change."""
    config = storage().get_config()
    for session in _sessions.values():
        session.llm = build_llm(config)
        session.painter = build_painter(config)
    logger.info("Rebuilt services for %d live session(s)", len(_sessions))
