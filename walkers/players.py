# walkers/players.py
"""
The survivors a player can pick from.

Each variant is a small subclass of BasePlayer carrying its default name and
starting health. Variants are registered under a stable identifier; that
identifier is what goes into a save file, and restoring a save only ever
instantiates classes found in PLAYER_REGISTRY.
"""
import logging
from typing import Dict, Type

from .entities import VitalEntity
from .exceptions import CorruptSaveError, UnknownVariantError
from .schemas import PlayerSnapshotTypedDict

logger = logging.getLogger(__name__)

PLAYER_REGISTRY: Dict[str, Type["BasePlayer"]] = {}


def register_player(variant_id: str):
    """Class decorator adding a player variant to the registry."""
    def decorator(cls):
        if variant_id in PLAYER_REGISTRY:
            raise ValueError(f"Player variant '{variant_id}' is already registered")
        cls.variant_id = variant_id
        PLAYER_REGISTRY[variant_id] = cls
        return cls
    return decorator


def create_player(variant_id: str) -> "BasePlayer":
    player_cls = PLAYER_REGISTRY.get(variant_id)
    if player_cls is None:
        raise UnknownVariantError(variant_id)
    return player_cls()


class BasePlayer(VitalEntity):
    """
    Health, experience and a name.

    Experience only ever grows: add_experience rejects negative deltas with a
    ValueError rather than clamping them. Health is overwritten absolutely and
    may go to zero or below; the player is alive iff health > 0. There is no
    health ceiling.
    """

    variant_id = None
    default_name = "Survivor"
    default_health = 100

    def __init__(self):
        self.name = self.default_name
        self.health = self.default_health
        self.experience = 0

    def get_health(self) -> int:
        return self.health

    def set_health(self, health: int):
        self.health = health

    def get_experience(self) -> int:
        return self.experience

    def set_experience(self, experience: int):
        if experience < 0:
            raise ValueError(f"Experience must not be negative, got {experience}")
        self.experience = experience

    def add_experience(self, delta: int):
        if delta < 0:
            raise ValueError(f"Experience can only be added, got {delta}")
        self.experience += delta

    def get_name(self) -> str:
        return self.name

    def set_name(self, name: str):
        self.name = name

    def serialize(self) -> PlayerSnapshotTypedDict:
        return {
            "variant": self.variant_id,
            "name": self.name,
            "experience": self.experience,
            "health": self.health,
        }

    @staticmethod
    def from_snapshot(data: dict) -> "BasePlayer":
        """
        Rebuilds a player from the output of serialize().
        Raises CorruptSaveError if the variant is unknown or a field is bad.
        """
        if not isinstance(data, dict):
            raise CorruptSaveError(f"Player data must be an object, got {type(data).__name__}")

        try:
            player = create_player(data['variant'])
        except KeyError as e:
            # UnknownVariantError is a KeyError too
            raise CorruptSaveError(f"Saved player is unusable: {e}") from e
        except TypeError as e:
            raise CorruptSaveError(f"Saved player variant is invalid: {data.get('variant')!r}") from e

        for field in ('experience', 'health'):
            value = data.get(field)
            if not isinstance(value, int) or isinstance(value, bool):
                raise CorruptSaveError(f"Saved player field '{field}' is missing or not an integer: {value!r}")
        if data['experience'] < 0:
            raise CorruptSaveError(f"Saved player experience is negative: {data['experience']}")

        name = data.get('name', player.default_name)
        if not isinstance(name, str) or not name:
            raise CorruptSaveError(f"Saved player name is invalid: {name!r}")

        player.set_name(name)
        player.set_experience(data['experience'])
        player.set_health(data['health'])
        logger.debug(f"Rebuilt player {player!r} from snapshot")
        return player

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, health={self.health}, experience={self.experience})"


@register_player("gunner_rick")
class GunnerRick(BasePlayer):
    default_name = "Rick"
    default_health = 100


@register_player("kid_carl")
class KidCarl(BasePlayer):
    default_name = "Carl"
    default_health = 70


@register_player("ninja_michonne")
class NinjaMichonne(BasePlayer):
    default_name = "Michonne"
    default_health = 90


@register_player("old_hershel")
class OldHershel(BasePlayer):
    default_name = "Hershel"
    default_health = 60


@register_player("runner_glenn")
class RunnerGlenn(BasePlayer):
    default_name = "Glenn"
    default_health = 80
