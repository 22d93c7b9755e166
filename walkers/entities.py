# walkers/entities.py
"""
The two capability sets the game loop depends on.

VitalEntity is anything with health, experience and a name (the player
variants). HostileEntity is anything that can attack a VitalEntity (the
walkers behind the doors). The controller only ever talks to these
interfaces; concrete variants are reached through the player registry and
the walker definitions in data/walkers.json.
"""
import logging
from abc import ABC, abstractmethod


class VitalEntity(ABC):
    """Player-like capability set."""

    @abstractmethod
    def get_health(self) -> int: ...

    @abstractmethod
    def set_health(self, health: int): ...

    @abstractmethod
    def get_experience(self) -> int: ...

    @abstractmethod
    def add_experience(self, delta: int): ...

    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def set_name(self, name: str): ...

    @abstractmethod
    def serialize(self) -> dict: ...

    def is_alive(self) -> bool:
        return self.get_health() > 0


class HostileEntity(ABC):
    """Anything that can stand behind a door and hurt the player."""

    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def attack(self, target: VitalEntity) -> int:
        """Damages the target and returns the amount of health it lost."""

    def get_description(self) -> str:
        return ""


class Walker(HostileEntity):
    """
    A walker bites for a fixed amount of damage.

    Walkers hold no state besides their identity, so one instance can sit
    behind any number of doors on any number of levels.
    """

    def __init__(self, name: str, damage: int, description: str = ""):
        if damage < 0:
            raise ValueError(f"Walker damage must not be negative, got {damage}")
        self.name = name
        self.damage = damage
        self.description = description
        self.logger = logging.getLogger("Walker")

    def get_name(self) -> str:
        return self.name

    def get_description(self) -> str:
        return self.description

    def attack(self, target: VitalEntity) -> int:
        # No clamping here; death is detected through is_alive().
        target.set_health(target.get_health() - self.damage)
        self.logger.debug(f"{self.name} bit {target.get_name()} for {self.damage}; health now {target.get_health()}")
        return self.damage

    @classmethod
    def from_definition(cls, definition: dict) -> "Walker":
        return cls(
            name=definition['name'],
            damage=definition['damage'],
            description=definition.get('description', ''),
        )

    def __repr__(self):
        return f"Walker({self.name!r}, damage={self.damage})"
