# walkers/utils.py
import json
import logging
import os
from typing import Dict, Optional

from .resource_manager import ResourceManager

SAVE_FILE_TEMPLATE = "savegame_{slot}.json"


def get_semantic_colors(resource_manager: Optional[ResourceManager]) -> Dict[str, str]:
    """Maps each semantic text type ('title', 'danger', ...) to its hex colour."""
    if not resource_manager:
        return {}

    constants = resource_manager.get_data('constants', {})
    colors = constants.get('COLORS', {})
    return {
        text_type: colors.get(color_name, 'ffffff')
        for text_type, color_name in constants.get('SEMANTIC_COLOR_MAP', {}).items()
    }


def color_text(text: str, text_type: str, resource_manager: Optional[ResourceManager]) -> str:
    """
    Applies Kivy color markup by looking up semantic types and colors
    from the constants loaded by the ResourceManager.
    """
    if not resource_manager:
        return text

    color_hex = get_semantic_colors(resource_manager).get(text_type, 'ffffff')
    return f"[color={color_hex}]{escape_markup(text)}[/color]"


def escape_markup(text: str) -> str:
    """Escapes the characters Kivy markup would otherwise interpret."""
    return text.replace('&', '&amp;').replace('[', '&bl;').replace(']', '&br;')


def get_default_save_dir() -> str:
    """The running Kivy app's user data dir, or ./saves outside of one."""
    try:
        from kivy.app import App
        return os.path.join(App.get_running_app().user_data_dir, 'saves')
    except (ImportError, AttributeError):
        return os.path.join(os.getcwd(), 'saves')


def get_save_filepath(slot_identifier: str = "quicksave", save_dir: Optional[str] = None) -> str:
    """
    Generates the absolute filepath for a given save slot identifier.
    This is the single source of truth for where save files are stored.
    """
    save_dir = save_dir or get_default_save_dir()
    os.makedirs(save_dir, exist_ok=True)
    return os.path.abspath(os.path.join(save_dir, SAVE_FILE_TEMPLATE.format(slot=slot_identifier)))


def get_save_slot_info(slot_id: str, save_dir: Optional[str] = None) -> Optional[dict]:
    """
    Reads the 'save_info' block from a save file for UI previews, without
    restoring anything.

    Returns a preview dict, a dict flagged 'corrupted', or None if there is no save.
    """
    save_path = get_save_filepath(slot_id, save_dir)
    if not os.path.exists(save_path):
        return None

    try:
        with open(save_path, "r", encoding="utf-8") as f:
            content = f.read()
        if not content.strip():
            return None
        save_data = json.loads(content)
        info = save_data.get("save_info", {})
        return {
            "timestamp": info.get("timestamp", "No date"),
            "level": info.get("level", "?"),
            "character_class": info.get("character_class", "Unknown"),
            "health": info.get("health", "--"),
            "experience": info.get("experience", 0),
            "corrupted": False,
        }
    except (json.JSONDecodeError, UnicodeDecodeError, AttributeError) as e:
        logging.error(f"Save file for slot '{slot_id}' appears corrupted: {e}")
        return {"corrupted": True, "timestamp": "Corrupted File"}
    except OSError as e:
        logging.error(f"Could not read save slot info for '{slot_id}': {e}", exc_info=True)
        return {"corrupted": True, "timestamp": "Read Error"}


def cleanup_corrupted_saves(save_dir: str) -> list:
    """Finds and renames any save files that are not valid UTF-8 JSON. Returns the renamed paths."""
    logger = logging.getLogger(__name__)
    renamed = []
    if not os.path.isdir(save_dir):
        return renamed

    logger.info(f"Checking for corrupted save files in {save_dir}...")
    for filename in os.listdir(save_dir):
        if not filename.endswith('.json'):
            continue

        filepath = os.path.join(save_dir, filename)
        try:
            with open(filepath, encoding='utf-8') as f:
                if not f.read().strip():
                    continue
                f.seek(0)
                json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            backup_path = filepath + ".corrupted"
            try:
                os.replace(filepath, backup_path)
                renamed.append(backup_path)
                logger.warning(f"Found and renamed corrupted save file: {filename} -> {filename}.corrupted")
            except OSError as e:
                logger.error(f"Could not rename corrupted save file {filename}: {e}")
    return renamed
