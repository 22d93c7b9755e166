import random

import pytest

from conftest import CountingStorage, RecordingConsole
from walkers.entities import Walker
from walkers.exceptions import ConfigurationError, GameStateError, InvalidChoiceError
from walkers.game import Game, GameState, MenuActions, Outcome, Prompt
from walkers.game_map import GameMap, Level
from walkers.players import GunnerRick, KidCarl, create_player
from walkers.resource_manager import ResourceManager

SAVED_CARL = {
    "player": {"variant": "kid_carl", "name": "Carl", "experience": 15, "health": 42},
    "level": 1,
}


# --- Fresh start ---

def test_fresh_start_asks_for_player_and_loads_first_level(make_game, two_level_map):
    game, console = make_game(["Gunner Rick", "Exit"])

    game.play()

    assert console.questions[0] == ("Choose your player?", ["Gunner Rick"])
    assert isinstance(game.player, GunnerRick)
    assert ('title', "Godspeed Rick!") in console.calls
    assert two_level_map.get_current_level() == 0


def test_welcome_is_shown_first(make_game):
    game, console = make_game(["Gunner Rick", "Exit"])
    game.play()

    assert console.calls[0] == ('title', "The Walking Dead")
    assert console.calls[1][0] == 'text'


def test_turn_shows_level_progress_and_menu(make_game):
    game, console = make_game(["Gunner Rick", "Exit"])
    game.play()

    assert ('title', "Level 1: Outskirts") in console.calls
    assert console.tables()[0] == (['Level', 'Experience', 'Health'], [[1, 0, 100]])
    question, options = console.questions[1]
    assert question == "Carefully choose the door to enter!"
    assert options == ["A", "B", "Save and Exit", "Exit"]


def test_menu_actions_always_follow_shuffled_doors(storage):
    doors = {name: None for name in "ABCDEFG"}
    game_map = GameMap([Level(doors, 1)], {"Gunner Rick": GunnerRick}, rng=random.Random(7))
    game = Game(RecordingConsole(), storage, game_map, shuffle_doors=True)
    game.start()
    prompt = game.answer("Gunner Rick")

    assert sorted(prompt.options[:-2]) == sorted(doors)
    assert prompt.options[-2:] == ["Save and Exit", "Exit"]


# --- Door resolution ---

def test_hostile_door_kills_player_and_reports_death(make_game):
    game, console = make_game(["Gunner Rick", "A"])

    outcome = game.play()

    assert outcome is Outcome.DEATH
    assert game.player.get_health() == 0
    assert not game.player.is_alive()
    assert game.state is GameState.ENDED
    # The fatal turn is reported before the death message
    dangers = console.texts('danger')
    assert dangers == [
        "Bitten by Biter! Health decreased by 100 to 0",
        "*Rest in peace Rick! You will be remembered*",
    ]
    assert console.tables()[-1] == (['Level', 'Experience', 'Health'], [[1, 0, 0]])


def test_hostile_door_that_does_not_kill_continues(storage):
    game_map = GameMap([Level({"A": Walker("Roamer", 30), "B": None}, 5)], {"Gunner Rick": GunnerRick})
    game = Game(RecordingConsole(["Gunner Rick", "A", "A", "A", "A"]), storage, game_map, shuffle_doors=False)

    outcome = game.play()

    assert outcome is Outcome.DEATH
    assert game.player.get_health() == -20
    assert game.map.get_current_level() == 0


def test_walker_description_follows_the_bite(make_game):
    lurker = Walker("Lurker", 20, description="Waits motionless in the dark.")
    game_map = GameMap([Level({"A": lurker, "B": None}, 5)], {"Gunner Rick": GunnerRick})
    game, console = make_game(["Gunner Rick", "A", "Exit"], game_map=game_map)

    game.play()

    bite = console.calls.index(('danger', "Bitten by Lurker! Health decreased by 20 to 80"))
    assert console.calls[bite + 1] == ('text', "Waits motionless in the dark.")


def test_safe_doors_advance_then_win(make_game, two_level_map, monkeypatch):
    advance_calls = []
    original_advance = two_level_map.advance

    def counting_advance():
        advance_calls.append(two_level_map.get_current_level())
        original_advance()

    monkeypatch.setattr(two_level_map, 'advance', counting_advance)
    game, console = make_game(["Gunner Rick", "B", "B"])

    outcome = game.play()

    assert outcome is Outcome.VICTORY
    assert advance_calls == [0]
    assert two_level_map.get_current_level() == 1
    assert game.player.get_experience() == 30
    assert console.texts('info') == ["Phew! Nothing in that door!"] * 2
    assert console.texts('success')[-1] == "Good work Rick! You have made it alive to the Sanctuary"
    assert console.tables()[-1] == (['Level', 'Experience', 'Health'], [[2, 30, 100]])


def test_safe_door_grants_current_level_reward(make_game, two_level_map):
    game, _ = make_game()
    game.start()
    game.answer("Gunner Rick")

    assert game.take_turn("B") is Outcome.CONTINUE
    assert game.player.get_experience() == 10
    assert two_level_map.get_current_level() == 1


def test_door_named_like_menu_action_resolves_as_menu_action(storage):
    trap = Walker("Trap", 100)
    game_map = GameMap(
        [Level({"Exit": trap, "Save and Exit": trap, "B": None}, 5)],
        {"Gunner Rick": GunnerRick},
    )
    game = Game(RecordingConsole(), storage, game_map, shuffle_doors=False)
    game.start()
    prompt = game.answer("Gunner Rick")

    # Each label is offered once, as the menu action
    assert prompt.options == ["B", "Save and Exit", "Exit"]
    assert game.answer("Exit") is None
    assert game.outcome is Outcome.EXIT
    assert game.player.get_health() == 100


def test_door_named_like_save_action_saves(storage):
    game_map = GameMap([Level({"Save and Exit": Walker("Trap", 100)}, 5)], {"Gunner Rick": GunnerRick})
    game = Game(RecordingConsole(["Gunner Rick", "Save and Exit"]), storage, game_map, shuffle_doors=False)

    assert game.play() is Outcome.SAVE_AND_EXIT
    assert len(storage.saved) == 1
    assert game.player.get_health() == 100


# --- Menu actions ---

def test_save_and_exit_saves_once_and_stops(make_game, storage):
    game, console = make_game(["Gunner Rick", "B", "Save and Exit"])

    outcome = game.play()

    assert outcome is Outcome.SAVE_AND_EXIT
    assert storage.saved == [{
        "player": {"variant": "gunner_rick", "name": "Rick", "experience": 10, "health": 100},
        "level": 1,
    }]
    assert storage.has_saved_game()
    assert console.texts('success') == ["Bye bye Rick! Walkers will be waiting for you"]
    # Only the first safe door was resolved
    assert console.texts('info') == ["Phew! Nothing in that door!"]
    assert console.texts('danger') == []
    assert game.state is GameState.ENDED


def test_exit_does_not_save(make_game, storage):
    game, console = make_game(["Gunner Rick", "Exit"])

    assert game.play() is Outcome.EXIT
    assert storage.saved == []
    assert not storage.has_saved_game()
    assert console.texts('success') == ["Bye Rick! We wish you would have not lost hope"]


def test_custom_menu_labels(make_game, storage):
    game, console = make_game(["Gunner Rick", "Hide"], menu_actions=MenuActions("Hide", "Give Up"))

    assert game.play() is Outcome.SAVE_AND_EXIT
    assert console.questions[1][1] == ["A", "B", "Hide", "Give Up"]
    assert len(storage.saved) == 1


def test_menu_labels_must_be_distinct(two_level_map, storage):
    with pytest.raises(ConfigurationError):
        Game(RecordingConsole(), storage, two_level_map, menu_actions=MenuActions("Leave", "Leave"))


def test_menu_actions_from_config():
    assert MenuActions.from_config({"SAVE_EXIT": "Hide"}) == MenuActions("Hide", "Exit")


# --- Saved games ---

def test_fresh_start_discards_stale_save_before_first_turn(make_game, storage):
    storage.snapshot = dict(SAVED_CARL)
    game, _ = make_game()

    prompt = game.start()
    assert prompt == Prompt("Saved game found. Would you like to restore it?", ["Yes", "No"])
    prompt = game.answer("No")
    assert prompt.question == "Choose your player?"
    prompt = game.answer("Gunner Rick")

    assert game.state is GameState.PLAYING
    assert prompt.question == "Carefully choose the door to enter!"
    assert not storage.has_saved_game()
    assert storage.get_calls == 0

    game.answer("B")
    assert not storage.has_saved_game()


def test_restore_rebuilds_player_and_level(make_game, storage, two_level_map):
    storage.snapshot = dict(SAVED_CARL)
    game, console = make_game(["Yes", "Exit"])

    game.play()

    assert isinstance(game.player, KidCarl)
    assert game.player.get_health() == 42
    assert game.player.get_experience() == 15
    assert two_level_map.get_current_level() == 1
    assert ('title', "Welcome back Carl!") in console.calls
    assert console.tables()[0] == (['Level', 'Experience', 'Health'], [[2, 15, 42]])
    # Restoring consumes the save
    assert not storage.has_saved_game()
    assert storage.remove_calls == 1


def test_restored_game_can_be_won(make_game, storage):
    storage.snapshot = dict(SAVED_CARL)
    game, _ = make_game(["Yes", "B"])

    assert game.play() is Outcome.VICTORY
    assert game.player.get_experience() == 35


@pytest.mark.parametrize("snapshot", [
    {"player": {"variant": "negan", "experience": 0, "health": 10}, "level": 0},
    {"player": {"variant": "kid_carl", "experience": 0, "health": 10}, "level": 7},
    {"player": {"variant": "kid_carl", "experience": 0, "health": 10}, "level": -1},
    {"player": {"variant": "kid_carl", "experience": 0, "health": 0}, "level": 0},
    {"player": {"variant": "kid_carl", "health": 10}, "level": 0},
    {"player": {"variant": "kid_carl", "experience": 0, "health": 10}},
])
def test_corrupt_save_falls_back_to_fresh_start(make_game, storage, two_level_map, snapshot):
    storage.snapshot = snapshot
    game, console = make_game(["Yes", "Gunner Rick", "Exit"])

    game.play()

    assert isinstance(game.player, GunnerRick)
    assert two_level_map.get_current_level() == 0
    assert any("could not be restored" in text for text in console.texts('danger'))
    assert not storage.has_saved_game()


def test_save_then_restore_in_new_session(two_level_map, storage):
    first = Game(RecordingConsole(["Gunner Rick", "B", "Save and Exit"]), storage, two_level_map, shuffle_doors=False)
    first.play()

    fresh_map = GameMap(two_level_map.levels, two_level_map.get_players())
    second = Game(RecordingConsole(["Yes", "Exit"]), storage, fresh_map, shuffle_doors=False)
    second.play()

    assert fresh_map.get_current_level() == 1
    assert second.player.get_experience() == 10
    assert second.player.get_health() == 100


# --- Step API ---

def test_answer_rejects_unoffered_choice(make_game):
    game, _ = make_game()
    game.start()

    with pytest.raises(InvalidChoiceError):
        game.answer("Negan")
    # The question is still pending
    assert game.answer("Gunner Rick").question == "Carefully choose the door to enter!"


def test_take_turn_rejects_unknown_door(make_game):
    game, _ = make_game()
    game.start()
    game.answer("Gunner Rick")

    with pytest.raises(InvalidChoiceError):
        game.take_turn("Z")


def test_take_turn_before_playing_fails(make_game):
    game, _ = make_game()
    with pytest.raises(GameStateError):
        game.take_turn("B")


def test_start_twice_fails(make_game):
    game, _ = make_game()
    game.start()
    with pytest.raises(GameStateError):
        game.start()


def test_answer_after_end_fails(make_game):
    game, _ = make_game(["Gunner Rick", "Exit"])
    game.play()
    with pytest.raises(GameStateError):
        game.answer("Exit")


def test_empty_roster_is_a_configuration_error(storage):
    game_map = GameMap([Level({"A": None}, 1)], players={})
    game = Game(RecordingConsole(), storage, game_map)
    with pytest.raises(ConfigurationError):
        game.start()


# --- Shipped data ---

def test_shipped_game_can_be_won_through_safe_doors(storage):
    resource_manager = ResourceManager()
    game_config = resource_manager.get_data('game_config')
    game_map = GameMap.from_config(resource_manager, rng=random.Random(1))

    def choose_safely(question, options):
        if question == "Choose your player?":
            return "Runner Glenn"
        doors = game_map.get_doors()
        return next(name for name in options if name in doors and doors[name] is None)

    game = Game(
        RecordingConsole(chooser=choose_safely), storage, game_map,
        menu_actions=MenuActions.from_config(ResourceManager.get_menu_actions(game_config)),
        game_config=game_config,
    )

    assert game.play() is Outcome.VICTORY
    assert game.player.get_experience() == 10 + 20 + 30 + 40 + 50
    assert game.player.get_health() == 80
    assert game_map.get_current_level() == 4


def test_player_factory_can_be_any_vital_entity(storage):
    game_map = GameMap([Level({"Safe": None}, 3)], {"Carl": lambda: create_player("kid_carl")})
    game = Game(RecordingConsole(["Carl", "Safe"]), storage, game_map)

    assert game.play() is Outcome.VICTORY
    assert game.player.get_experience() == 3
