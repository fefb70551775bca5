"""JSON file storage.

Save slots and app settings live in flat JSON files under one data
directory. Records are (de)serialised with pydantic; config is plain JSON.

Directory layout:

    {base}/
      config.json             ← app settings (narrator + image connections)
      last-played.txt         ← id of the most recently played save slot
      saves/
        {slot}.json           ← SaveRecord for one save slot
"""

from __future__ import annotations

import copy
import json
import logging
import re
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mythic_realms.models import GameState, SaveRecord, SaveSlotSummary

logger = logging.getLogger(__name__)

DEFAULT_SLOT_COUNT = 3

_SLOT_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

CONFIG_DEFAULTS: dict[str, Any] = {
    "narrator": {
        "provider_url": "http://localhost:5001",
        "provider_format": "koboldcpp",
        "api_key": "",
        "model": "",
    },
    "painter": {
        "enabled": False,
        "api_key": "",
        "model": "gemini-2.5-flash-image",
    },
    "save_slots": DEFAULT_SLOT_COUNT,
}


def slot_ids(count: int) -> list[str]:
    return [f"slot{i}" for i in range(1, count + 1)]


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._saves = base_path / "saves"
        self._saves.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _slot_file(self, slot_id: str) -> Path:
        if not _SLOT_RE.match(slot_id):
            raise ValueError(f"Invalid save slot id {slot_id!r}")
        return self._saves / f"{slot_id}.json"

    def _config_file(self) -> Path:
        return self._base / "config.json"

    def _last_played_file(self) -> Path:
        return self._base / "last-played.txt"

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text())

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2))

    # ------------------------------------------------------------------
    # Save slots
    # ------------------------------------------------------------------

    def save_game(self, slot_id: str, state: GameState) -> SaveRecord:
        record = SaveRecord.from_state(state, updated_at=time.time())
        self._slot_file(slot_id).write_text(record.model_dump_json(by_alias=True, indent=2))
        logger.info("Game saved to slot %s", slot_id)
        return record

    def load_record(self, slot_id: str) -> SaveRecord | None:
        path = self._slot_file(slot_id)
        if not path.is_file():
            return None
        return SaveRecord.model_validate_json(path.read_text())

    def load_game(self, slot_id: str) -> GameState | None:
        """Load a slot into a playable state, or None if the slot is empty or unreadable."""
        try:
            record = self.load_record(slot_id)
        except ValidationError as e:
            logger.error("Failed to load save slot %s: %s", slot_id, e)
            return None
        return record.to_state() if record else None

    def delete_game(self, slot_id: str) -> bool:
        path = self._slot_file(slot_id)
        if not path.is_file():
            return False
        path.unlink()
        logger.info("Save deleted for slot %s", slot_id)
        return True

    def slot_summary(self, slot_id: str) -> SaveSlotSummary:
        """Summarise a slot by partially reading its record."""
        path = self._slot_file(slot_id)
        if not path.is_file():
            return SaveSlotSummary(slot_id=slot_id, exists=False)
        try:
            data = self._read_json(path)
            player = data.get("player") or {}
            world = data.get("world") or {}
        except (json.JSONDecodeError, AttributeError) as e:
            logger.error("Error parsing save data for slot %s: %s", slot_id, e)
            return SaveSlotSummary(slot_id=slot_id, exists=False)
        return SaveSlotSummary(
            slot_id=slot_id,
            exists=True,
            player_name=player.get("name") or "Unknown Hero",
            player_level=player.get("level") or 1,
            world_day=world.get("day") or 1,
        )

    def list_slots(self, count: int | None = None) -> list[SaveSlotSummary]:
        count = count or self.get_config()["save_slots"]
        return [self.slot_summary(slot_id) for slot_id in slot_ids(count)]

    def get_last_played(self) -> str | None:
        path = self._last_played_file()
        if not path.is_file():
            return None
        return path.read_text().strip() or None

    def set_last_played(self, slot_id: str) -> None:
        self._slot_file(slot_id)  # validates the id
        self._last_played_file().write_text(slot_id)

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    def get_config(self) -> dict[str, Any]:
        """Read config, returning defaults merged with stored values."""
        config = copy.deepcopy(CONFIG_DEFAULTS)
        path = self._config_file()
        if path.is_file():
            stored = self._read_json(path)
            for section in ("narrator", "painter"):
                if isinstance(stored.get(section), dict):
                    config[section].update(stored[section])
            if "save_slots" in stored:
                config["save_slots"] = stored["save_slots"]
        return config

    def update_config(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into config and persist. Returns full config."""
        config = self.get_config()
        for section in ("narrator", "painter"):
            if isinstance(fields.get(section), dict):
                config[section].update(fields[section])
        if "save_slots" in fields:
            config["save_slots"] = fields["save_slots"]
        self._write_json(self._config_file(), config)
        return config
