# walkers/schemas.py
"""
Data structures for the static game data and the save snapshot.

ResourceManager validates every JSON file in data/ against the TypedDict
mapped to it here, so these classes are the single source of truth for what
the data files may contain.
"""
from typing import Dict, List, NotRequired, Optional, TypedDict


# --- CONFIGURATION SCHEMAS ---

class MenuActionsTypedDict(TypedDict):
    SAVE_EXIT: str
    EXIT: str


class GameConfigFileTypedDict(TypedDict, total=False):
    GAME_NAME: str
    GAME_VERSION: str
    WELCOME_TEXT: str
    INTRO_TEXT: List[str]
    MENU_ACTIONS: MenuActionsTypedDict
    SHUFFLE_DOORS: bool
    DEFAULT_SAVE_SLOT: str


class ConstantsFileTypedDict(TypedDict, total=False):
    COLORS: Dict[str, str]
    SEMANTIC_COLOR_MAP: Dict[str, str]


# --- WORLD SCHEMAS ---

class WalkerTypedDict(TypedDict):
    name: str
    damage: int
    description: NotRequired[str]


class LevelTypedDict(TypedDict):
    experience: int
    # A door maps to a walker id, or null for a safe door.
    doors: Dict[str, Optional[str]]
    name: NotRequired[str]


class LevelsFileTypedDict(TypedDict):
    levels: List[LevelTypedDict]


# --- SAVE SCHEMAS ---

class PlayerSnapshotTypedDict(TypedDict):
    variant: str
    experience: int
    health: int
    name: NotRequired[str]


class SaveSnapshotTypedDict(TypedDict):
    player: PlayerSnapshotTypedDict
    level: int


class PlayerClassTypedDict(TypedDict):
    name: str
    description: NotRequired[str]
