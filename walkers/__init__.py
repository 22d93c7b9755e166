# walkers/__init__.py
"""
The Walking Dead: a door-picking survival game.

The Kivy front end lives in walkers.main and walkers.ui and is not imported
here, so the engine can be used without a window.
"""
from .entities import HostileEntity, VitalEntity, Walker
from .exceptions import (
    ConfigurationError, CorruptSaveError, GameStateError, InvalidChoiceError,
    InvalidLevelError, UnknownVariantError, WalkersError,
)
from .game import Game, GameState, MenuActions, Outcome, Prompt
from .game_map import GameMap, Level
from .players import PLAYER_REGISTRY, BasePlayer, create_player
from .resource_manager import ResourceManager
from .storage import GameStorage, InMemoryStorage, JsonFileStorage

__version__ = "1.0.0"
