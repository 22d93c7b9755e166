import random

import pytest

from walkers.entities import Walker
from walkers.exceptions import ConfigurationError, InvalidLevelError
from walkers.game_map import GameMap, Level
from walkers.players import BasePlayer
from walkers.resource_manager import ResourceManager


def test_load_level_sets_cursor_and_doors(two_level_map, biter):
    two_level_map.load_level(0)

    assert two_level_map.get_current_level() == 0
    assert two_level_map.get_doors() == {"A": biter, "B": None}
    assert two_level_map.get_current_level_experience() == 10
    assert two_level_map.get_level_name() == "Outskirts"


@pytest.mark.parametrize("index", [-1, 2, 99, "1", None, True])
def test_load_level_rejects_out_of_range(two_level_map, index):
    two_level_map.load_level(1)
    with pytest.raises(InvalidLevelError):
        two_level_map.load_level(index)
    # The cursor stays where it was
    assert two_level_map.get_current_level() == 1


def test_invalid_level_error_is_an_index_error(two_level_map):
    with pytest.raises(IndexError):
        two_level_map.load_level(5)


def test_advance_moves_to_next_level(two_level_map):
    two_level_map.load_level(0)
    assert two_level_map.can_advance()

    two_level_map.advance()

    assert two_level_map.get_current_level() == 1
    assert list(two_level_map.get_doors()) == ["B"]
    assert two_level_map.get_current_level_experience() == 20


def test_advance_fails_on_final_level(two_level_map):
    two_level_map.load_level(1)

    assert not two_level_map.can_advance()
    assert two_level_map.is_final_level()
    with pytest.raises(InvalidLevelError):
        two_level_map.advance()
    assert two_level_map.get_current_level() == 1


def test_single_level_map_cannot_advance():
    game_map = GameMap([Level({"Only": None}, experience=1)])
    game_map.load_level(0)
    assert not game_map.can_advance()


def test_shuffled_doors_keep_their_bindings():
    walkers = {name: Walker(name, 5) for name in "ABCDEFGH"}
    doors = dict(walkers, Safe=None)
    game_map = GameMap([Level(doors, experience=1)], rng=random.Random(3))
    game_map.load_level(0)

    for _ in range(20):
        shuffled = game_map.get_doors(shuffle=True)
        assert sorted(shuffled) == sorted(doors)
        for name, bound in shuffled.items():
            assert bound is doors[name]


def test_unshuffled_doors_keep_configured_order():
    doors = {"Zeta": None, "Alpha": None, "Mid": None}
    game_map = GameMap([Level(doors, experience=1)])
    game_map.load_level(0)

    assert list(game_map.get_doors(shuffle=False)) == ["Zeta", "Alpha", "Mid"]


def test_shuffle_is_reproducible_with_seeded_rng():
    doors = {name: None for name in "ABCDEFGHIJ"}

    def order(seed):
        game_map = GameMap([Level(doors, experience=1)], rng=random.Random(seed))
        game_map.load_level(0)
        return list(game_map.get_doors(shuffle=True))

    assert order(42) == order(42)


def test_mutating_returned_doors_does_not_touch_level(two_level_map):
    two_level_map.load_level(0)
    doors = two_level_map.get_doors()
    doors.pop("A")

    assert "A" in two_level_map.get_doors()


def test_map_requires_levels():
    with pytest.raises(ConfigurationError):
        GameMap([])


def test_level_rejects_negative_experience():
    with pytest.raises(ConfigurationError):
        Level({"A": None}, experience=-1)


def test_get_players_returns_factories(two_level_map):
    players = two_level_map.get_players()

    assert list(players) == ["Gunner Rick"]
    player = players["Gunner Rick"]()
    assert isinstance(player, BasePlayer)
    assert player.get_health() == 100


def test_from_config_builds_shipped_map():
    game_map = GameMap.from_config(ResourceManager())

    assert game_map.get_level_count() == 5
    game_map.load_level(0)
    doors = game_map.get_doors()
    assert doors["Kitchen"] is None
    assert isinstance(doors["Barn"], Walker)
    assert doors["Barn"].get_name() == "Crawler"
    assert set(game_map.get_players()) == {
        "Gunner Rick", "Kid Carl", "Ninja Michonne", "Old Hershel", "Runner Glenn",
    }


def test_from_config_shares_walker_instances_across_doors():
    game_map = GameMap.from_config(ResourceManager())
    game_map.load_level(0)
    lurker = game_map.get_doors()["Cellar"]
    game_map.load_level(1)

    assert game_map.get_doors()["Laundry"] is lurker
