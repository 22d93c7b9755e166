# walkers/game_map.py
import copy
import logging
import random
from typing import Callable, Dict, List, Optional

from .entities import HostileEntity, VitalEntity, Walker
from .exceptions import ConfigurationError, InvalidLevelError
from .players import create_player


class Level:
    """One stage of the map: its doors and the experience for getting through it safely."""

    def __init__(self, doors: Dict[str, Optional[HostileEntity]], experience: int, name: str = ""):
        if experience < 0:
            raise ConfigurationError(f"Level experience reward must not be negative, got {experience}")
        self.doors = dict(doors)
        self.experience = experience
        self.name = name

    def __repr__(self):
        return f"Level(name={self.name!r}, doors={list(self.doors)}, experience={self.experience})"


class GameMap:
    """
    An ordered sequence of levels with a cursor on the current one.

    The cursor always points at a valid level once a level has been loaded.
    load_level() and advance() raise InvalidLevelError rather than move it
    out of range.
    """

    def __init__(self, levels: List[Level], players: Optional[Dict[str, Callable[[], VitalEntity]]] = None,
                 rng: Optional[random.Random] = None):
        if not levels:
            raise ConfigurationError("A map needs at least one level.")
        self.levels = list(levels)
        self.players = dict(players or {})
        self.rng = rng or random.Random()
        self.current_level = 0
        self.current_doors: Dict[str, Optional[HostileEntity]] = {}
        self.logger = logging.getLogger("GameMap")
        self.logger.info(f"GameMap created with {len(self.levels)} level(s) and {len(self.players)} player(s).")

    @classmethod
    def from_config(cls, resource_manager, rng: Optional[random.Random] = None) -> "GameMap":
        """Builds the map from the levels, walkers and players data files."""
        walker_defs = resource_manager.get_data('walkers', {})
        walkers = {
            walker_id: Walker.from_definition(definition)
            for walker_id, definition in walker_defs.items()
        }

        levels = []
        for index, level_data in enumerate(resource_manager.get_data('levels', {}).get('levels', [])):
            doors = {}
            for door_name, walker_id in level_data['doors'].items():
                if walker_id is not None and walker_id not in walkers:
                    raise ConfigurationError(f"Level {index}: door '{door_name}' references unknown walker '{walker_id}'")
                doors[door_name] = walkers.get(walker_id) if walker_id is not None else None
            levels.append(Level(doors, level_data['experience'], level_data.get('name', '')))

        players = {}
        for variant_id, details in resource_manager.get_data('players', {}).items():
            players[details.get('name', variant_id)] = lambda variant_id=variant_id: create_player(variant_id)

        return cls(levels, players, rng=rng)

    def get_level_count(self) -> int:
        return len(self.levels)

    def load_level(self, index: int):
        """Moves the cursor to the given level and resets its doors."""
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.levels):
            raise InvalidLevelError(index, len(self.levels))
        self.current_level = index
        self.current_doors = copy.copy(self.levels[index].doors)
        self.logger.info(f"Loaded level {index} with {len(self.current_doors)} door(s).")

    def get_current_level(self) -> int:
        return self.current_level

    def get_level_name(self) -> str:
        return self.levels[self.current_level].name

    def get_current_level_experience(self) -> int:
        return self.levels[self.current_level].experience

    def get_doors(self, shuffle: bool = False) -> Dict[str, Optional[HostileEntity]]:
        """
        Returns door name -> walker (or None) for the current level.
        Shuffling only changes the order of the names, never what is behind them.
        """
        names = list(self.current_doors)
        if shuffle:
            self.rng.shuffle(names)
        return {name: self.current_doors[name] for name in names}

    def can_advance(self) -> bool:
        return self.current_level + 1 < len(self.levels)

    def is_final_level(self) -> bool:
        return not self.can_advance()

    def advance(self):
        if not self.can_advance():
            raise InvalidLevelError(self.current_level + 1, len(self.levels))
        self.load_level(self.current_level + 1)

    def get_players(self) -> Dict[str, Callable[[], VitalEntity]]:
        """Display name -> factory for each selectable player."""
        return dict(self.players)
