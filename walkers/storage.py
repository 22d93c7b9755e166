# walkers/storage.py
"""
Where a game in progress is kept between sessions.

A snapshot has the logical shape {"player": {variant, name, experience,
health}, "level": int}. At most one snapshot exists per storage; the game
removes it as soon as a session starts, whether the player restored it or
chose a fresh start.
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .entities import VitalEntity
from .exceptions import CorruptSaveError
from .schemas import SaveSnapshotTypedDict
from .utils import get_save_filepath


def build_snapshot(player: VitalEntity, game_map) -> SaveSnapshotTypedDict:
    return {
        "player": player.serialize(),
        "level": game_map.get_current_level(),
    }


def check_snapshot_shape(snapshot) -> SaveSnapshotTypedDict:
    """Raises CorruptSaveError unless the snapshot has a player object and an integer level."""
    if not isinstance(snapshot, dict):
        raise CorruptSaveError(f"Saved game must be an object, got {type(snapshot).__name__}")
    if not isinstance(snapshot.get("player"), dict):
        raise CorruptSaveError("Saved game has no player data.")
    level = snapshot.get("level")
    if not isinstance(level, int) or isinstance(level, bool):
        raise CorruptSaveError(f"Saved game level is missing or not an integer: {level!r}")
    return snapshot


class GameStorage(ABC):
    """Persists and retrieves a (player, level) snapshot."""

    @abstractmethod
    def has_saved_game(self) -> bool: ...

    @abstractmethod
    def get_saved_game(self) -> SaveSnapshotTypedDict: ...

    @abstractmethod
    def save_game(self, player: VitalEntity, game_map): ...

    @abstractmethod
    def remove_saved_game(self):
        """Removes the snapshot. Doing so with nothing saved is a no-op."""


class InMemoryStorage(GameStorage):
    """Keeps the snapshot in memory; for headless runs and tests."""

    def __init__(self, snapshot: Optional[dict] = None):
        self.snapshot = snapshot
        self.logger = logging.getLogger("InMemoryStorage")

    def has_saved_game(self) -> bool:
        return self.snapshot is not None

    def get_saved_game(self) -> SaveSnapshotTypedDict:
        if self.snapshot is None:
            raise CorruptSaveError("There is no saved game to restore.")
        return check_snapshot_shape(json.loads(json.dumps(self.snapshot)))

    def save_game(self, player: VitalEntity, game_map):
        self.snapshot = build_snapshot(player, game_map)
        self.logger.info(f"Game saved in memory at level {self.snapshot['level']}")

    def remove_saved_game(self):
        self.snapshot = None


class JsonFileStorage(GameStorage):
    """One JSON document per save slot, written atomically."""

    def __init__(self, save_dir: Optional[str] = None, slot: str = "quicksave"):
        self.slot = slot
        self.path = get_save_filepath(slot, save_dir)
        self.logger = logging.getLogger("JsonFileStorage")
        self.logger.info(f"Save slot '{slot}' at {self.path}")

    def has_saved_game(self) -> bool:
        return os.path.isfile(self.path) and os.path.getsize(self.path) > 0

    def get_saved_game(self) -> SaveSnapshotTypedDict:
        try:
            with open(self.path, encoding='utf-8') as f:
                save_data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.error(f"Save file '{self.path}' is corrupted: {e}")
            raise CorruptSaveError(f"Save file for slot '{self.slot}' is not valid UTF-8 JSON.") from e
        except OSError as e:
            self.logger.error(f"Could not read save file '{self.path}': {e}")
            raise CorruptSaveError(f"Save file for slot '{self.slot}' could not be read.") from e

        snapshot = check_snapshot_shape(save_data)
        return {"player": snapshot["player"], "level": snapshot["level"]}

    def save_game(self, player: VitalEntity, game_map):
        snapshot = build_snapshot(player, game_map)
        save_data = {
            "save_info": {
                "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                "level": snapshot["level"] + 1,
                "character_class": snapshot["player"].get("variant"),
                "health": snapshot["player"].get("health"),
                "experience": snapshot["player"].get("experience"),
            },
            **snapshot,
        }

        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(save_data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except Exception:
            self.logger.error(f"Could not write save slot '{self.slot}'; keeping the previous save.", exc_info=True)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        self.logger.info(f"Game saved to slot '{self.slot}' at {self.path}")

    def remove_saved_game(self):
        try:
            os.remove(self.path)
            self.logger.info(f"Removed saved game in slot '{self.slot}'")
        except FileNotFoundError:
            self.logger.debug(f"No saved game to remove in slot '{self.slot}'")
