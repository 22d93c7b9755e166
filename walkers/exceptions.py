# walkers/exceptions.py
"""
Errors raised by the game engine.

Every error derives from WalkersError so the launcher can report any engine
failure with a single handler, while still letting callers catch the builtin
family (IndexError, ValueError, KeyError) each one belongs to.
"""


class WalkersError(Exception):
    """Base class for all engine errors."""


class InvalidLevelError(WalkersError, IndexError):
    """A level index outside the configured range was loaded or advanced to."""

    def __init__(self, index: int, level_count: int):
        self.index = index
        self.level_count = level_count
        super().__init__(f"Level {index} does not exist; the map has {level_count} level(s).")


class CorruptSaveError(WalkersError, ValueError):
    """A saved snapshot could not be turned back into a player and level."""


class ConfigurationError(WalkersError, ValueError):
    """Static game data failed to load or validate."""


class InvalidChoiceError(WalkersError, ValueError):
    """An answer was given that is not among the offered options."""

    def __init__(self, choice, options):
        self.choice = choice
        self.options = list(options)
        super().__init__(f"'{choice}' is not one of the offered options: {self.options}")


class UnknownVariantError(WalkersError, KeyError):
    """A player variant identifier is not registered."""

    def __init__(self, variant_id):
        self.variant_id = variant_id
        super().__init__(variant_id)

    def __str__(self):
        return f"Unknown player variant '{self.variant_id}'"


class GameStateError(WalkersError, RuntimeError):
    """An operation was attempted in a state of the game that does not allow it."""
