# walkers/resource_manager.py
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from .exceptions import ConfigurationError
from .players import PLAYER_REGISTRY
from .schemas import (
    ConstantsFileTypedDict, GameConfigFileTypedDict, LevelsFileTypedDict,
    PlayerClassTypedDict, WalkerTypedDict,
)

DEFAULT_MENU_ACTIONS = {"SAVE_EXIT": "Save and Exit", "EXIT": "Exit"}


class ResourceManager:
    """
    Loads and VALIDATES all static game data from the JSON files in data/.

    Each file is checked against its TypedDict schema, then the files are
    checked against each other (doors must name known walkers, the roster must
    name registered player variants, door names must not shadow menu actions).
    Any failure is logged and surfaces as a single ConfigurationError.
    """

    # File name (without extension) -> governing schema. Every file listed
    # here is required.
    schema_map = {
        'game_config': GameConfigFileTypedDict,
        'constants': ConstantsFileTypedDict,
        'levels': LevelsFileTypedDict,
        'walkers': WalkerTypedDict,
        'players': PlayerClassTypedDict,
    }

    def __init__(self, data_dir: Optional[str] = None, app_root: Optional[str] = None):
        if app_root is None:
            # data/ is a sibling of the walkers package
            app_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
        self.app_root = app_root
        self.data_dir = data_dir
        self.master_data: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)
        self.logger.info(f"ResourceManager initialized with app_root: {self.app_root}")

    def _discover_data_directory(self) -> Optional[str]:
        """Finds the 'data' directory, whether given explicitly, in development or in a bundled app."""
        if self.data_dir:
            if os.path.isdir(self.data_dir):
                return self.data_dir
            self.logger.error(f"Configured data directory does not exist: {self.data_dir}")
            return None

        # Path for bundled executables (PyInstaller)
        if hasattr(sys, '_MEIPASS'):
            bundle_data_path = os.path.join(sys._MEIPASS, 'data')
            if os.path.isdir(bundle_data_path):
                self.logger.info(f"Found bundled data directory: {bundle_data_path}")
                return bundle_data_path

        root_data_path = os.path.join(self.app_root, 'data')
        if os.path.isdir(root_data_path):
            self.logger.info(f"Found data directory at app root: {root_data_path}")
            return root_data_path

        self.logger.error("Could not find the 'data' directory.")
        return None

    def load_master_data(self) -> Dict[str, Any]:
        """
        Loads every required JSON file, validates it against its schema and
        stores it in master_data. Raises ConfigurationError if anything is
        missing, malformed or inconsistent.
        """
        self.logger.info("Loading and validating all master data...")
        data_dir = self._discover_data_directory()
        if not data_dir:
            raise ConfigurationError("The game's 'data' directory could not be located.")

        errors: List[str] = []
        loaded: Dict[str, Any] = {}
        for key_name, schema in self.schema_map.items():
            file_path = os.path.join(data_dir, f"{key_name}.json")
            if not os.path.isfile(file_path):
                errors.append(f"Missing data file '{key_name}.json' in {data_dir}")
                continue

            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                errors.append(f"Failed to load '{key_name}.json': Invalid JSON syntax - {e}")
                continue
            except OSError as e:
                errors.append(f"Failed to read '{key_name}.json': {e}")
                continue

            self.logger.debug(f"Validating '{key_name}.json' against schema '{schema.__name__}'...")
            is_valid, schema_errors = self._validate_data(data, schema)
            if not is_valid:
                errors.extend(f"Schema validation FAILED for '{key_name}.json': {err}" for err in schema_errors)
                continue

            loaded[key_name] = data
            self.logger.info(f"Successfully loaded and validated '{key_name}.json'.")

        if not errors:
            errors.extend(self._check_cross_references(loaded))

        if errors:
            for error in errors:
                self.logger.error(error)
            error_msg = "One or more game data files failed to load or validate. The game cannot start."
            self.logger.critical(error_msg)
            raise ConfigurationError(f"{error_msg}\n" + "\n".join(errors))

        self.master_data = loaded
        self.logger.info("All master data has been successfully loaded and validated.")
        return self.master_data

    def _check_cross_references(self, data: Dict[str, Any]) -> List[str]:
        """Checks the rules that span several files."""
        errors = []
        walkers = data.get('walkers', {})
        menu_actions = self.get_menu_actions(data.get('game_config', {}))
        menu_labels = set(menu_actions.values())
        if len(menu_labels) != len(menu_actions):
            errors.append(f"MENU_ACTIONS labels must be distinct, got {sorted(menu_actions.values())}.")

        levels = data.get('levels', {}).get('levels', [])
        if not levels:
            errors.append("levels.json must define at least one level.")
        for index, level in enumerate(levels):
            doors = level.get('doors', {})
            if not doors:
                errors.append(f"Level {index} has no doors.")
            if level.get('experience', 0) < 0:
                errors.append(f"Level {index} has a negative experience reward.")
            for door_name, walker_id in doors.items():
                if door_name in menu_labels:
                    errors.append(f"Level {index}: door '{door_name}' collides with a menu action.")
                if walker_id is not None and walker_id not in walkers:
                    errors.append(f"Level {index}: door '{door_name}' references unknown walker '{walker_id}'.")

        for walker_id, walker in walkers.items():
            if walker.get('damage', 0) < 0:
                errors.append(f"Walker '{walker_id}' has a negative damage value.")

        players = data.get('players', {})
        if not players:
            errors.append("players.json must define at least one player.")
        for variant_id in players:
            if variant_id not in PLAYER_REGISTRY:
                errors.append(f"players.json references unknown player variant '{variant_id}'.")
        return errors

    def _validate_data(self, data: Any, schema: type) -> Tuple[bool, List[str]]:
        """
        Recursively validates data against a TypedDict schema.
        It checks for missing keys and incorrect types in nested structures.
        """
        errors = []

        def check_typed_dict(d: dict, s: type, path: str):
            if not isinstance(d, dict):
                errors.append(f"Invalid type at '{path}': Expected a dictionary for '{s.__name__}', but got {type(d).__name__}.")
                return

            hints = get_type_hints(s)
            required_keys = getattr(s, '__required_keys__', frozenset(hints.keys() if getattr(s, '__total__', True) else []))
            for key in required_keys:
                if key not in d:
                    errors.append(f"Missing required key at '{path}': '{key}'")

            for key, value in d.items():
                if key not in hints:
                    continue
                check_value(value, hints[key], f"{path}.{key}")

        def check_value(v: Any, t: Any, path: str):
            origin = get_origin(t)
            args = get_args(t)

            if origin is Union:
                if not any(_is_valid_sub_type(v, arg) for arg in args):
                    errors.append(f"Type mismatch at '{path}': Value '{str(v)[:50]}' does not match any type in {t}.")
                return

            if origin is list:
                if not isinstance(v, list):
                    errors.append(f"Type mismatch at '{path}': Expected List, got {type(v).__name__}.")
                    return
                if args:
                    for i, item in enumerate(v):
                        check_value(item, args[0], f"{path}[{i}]")
                return

            if origin is dict:
                if not isinstance(v, dict):
                    errors.append(f"Type mismatch at '{path}': Expected Dict, got {type(v).__name__}.")
                    return
                if args:
                    key_type, val_type = args
                    for key, val in v.items():
                        check_value(key, key_type, f"{path}[{key}] (key)")
                        check_value(val, val_type, f"{path}[{key}] (value)")
                return

            is_td = isinstance(t, type) and hasattr(t, '__annotations__')
            if is_td:
                check_typed_dict(v, t, path)
            elif t is int and isinstance(v, bool):
                errors.append(f"Type mismatch at '{path}': Expected int, got bool.")
            elif not isinstance(v, t):
                # Allow int to be validated as float
                if t is float and isinstance(v, int):
                    return
                errors.append(f"Type mismatch at '{path}': Expected {t.__name__}, got {type(v).__name__}.")

        def _is_valid_sub_type(v, t):
            # A non-error-appending version of check_value for Union checks
            origin = get_origin(t)
            if origin is Union:
                return any(_is_valid_sub_type(v, arg) for arg in get_args(t))
            if origin in (list, dict):
                return isinstance(v, origin)
            if isinstance(t, type) and hasattr(t, '__annotations__'):
                return isinstance(v, dict)
            return isinstance(v, t)

        # Files named *FileTypedDict are a single object; the rest are
        # collections of objects keyed by id (walkers.json, players.json).
        if schema.__name__.endswith("FileTypedDict"):
            check_typed_dict(data, schema, 'root')
        elif not isinstance(data, dict):
            errors.append(f"Invalid type at 'root': Expected a dictionary of '{schema.__name__}' entries.")
        else:
            for key, value in data.items():
                check_typed_dict(value, schema, key)

        return not errors, errors

    def get_data(self, key: str, default: Any = None) -> Any:
        """
        Retrieves data from the loaded master_data dictionary.
        If data has not been loaded yet, it triggers the loading process.
        """
        if not self.master_data:
            self.logger.warning("get_data() called before master data was loaded. Triggering load now.")
            self.load_master_data()
        return self.master_data.get(key, default)

    @staticmethod
    def get_menu_actions(game_config: Dict[str, Any]) -> Dict[str, str]:
        """Returns the menu action labels, falling back to the defaults."""
        actions = dict(DEFAULT_MENU_ACTIONS)
        actions.update(game_config.get('MENU_ACTIONS', {}))
        return actions
