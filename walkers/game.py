# walkers/game.py
"""
The game controller.

Game runs the state machine

    UNINITIALIZED -> CHOOSING_RESTORE_OR_FRESH / CHOOSING_PLAYER -> PLAYING -> ENDED

and is driven one answer at a time: start() returns the first question,
answer() consumes a reply and returns the next question, or None once the
game is over. play() wraps the two in a blocking loop for consoles that can
ask questions themselves. Leaving the game ("Save and Exit", "Exit") never
terminates the process; it ends the state machine with the matching Outcome
and leaves the exit to whoever is driving it.
"""
import logging
from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from .console import Display
from .entities import HostileEntity, VitalEntity
from .exceptions import (
    ConfigurationError, CorruptSaveError, GameStateError, InvalidChoiceError, InvalidLevelError,
)
from .game_map import GameMap
from .players import BasePlayer
from .storage import GameStorage, check_snapshot_shape

DEFAULT_TITLE = "The Walking Dead"
DEFAULT_WELCOME = ("Welcome to the world of the dead, see if you can ditch your way "
                   "through the walkers towards the sanctuary.")
DEFAULT_INTRO = [
    "You will be shown some doors!",
    "Carefully choose a door while praying that you do not come across a Walker!",
]


class GameState(Enum):
    UNINITIALIZED = "uninitialized"
    CHOOSING_RESTORE_OR_FRESH = "choosing_restore_or_fresh"
    CHOOSING_PLAYER = "choosing_player"
    PLAYING = "playing"
    ENDED = "ended"


class Outcome(Enum):
    CONTINUE = "continue"
    SAVE_AND_EXIT = "save_and_exit"
    EXIT = "exit"
    VICTORY = "victory"
    DEATH = "death"


class MenuActions(NamedTuple):
    """Labels of the choices offered alongside the doors on every turn."""
    save_exit: str = "Save and Exit"
    exit: str = "Exit"

    def labels(self) -> List[str]:
        return [self.save_exit, self.exit]

    @classmethod
    def from_config(cls, menu_actions: Dict[str, str]) -> "MenuActions":
        defaults = cls()
        return cls(
            save_exit=menu_actions.get('SAVE_EXIT', defaults.save_exit),
            exit=menu_actions.get('EXIT', defaults.exit),
        )


class Prompt(NamedTuple):
    question: str
    options: List[str]


class Game:
    RESTORE_YES = "Yes"
    RESTORE_NO = "No"

    def __init__(self, console: Display, storage: GameStorage, game_map: GameMap,
                 menu_actions: Optional[MenuActions] = None, game_config: Optional[dict] = None,
                 shuffle_doors: Optional[bool] = None):
        game_config = game_config or {}
        self.console = console
        self.storage = storage
        self.map = game_map
        self.menu_actions = menu_actions or MenuActions()
        if len(set(self.menu_actions.labels())) != len(self.menu_actions.labels()):
            raise ConfigurationError(f"Menu action labels must be distinct: {self.menu_actions.labels()}")

        self.title = game_config.get('GAME_NAME', DEFAULT_TITLE)
        self.welcome_text = game_config.get('WELCOME_TEXT', DEFAULT_WELCOME)
        self.intro_text = list(game_config.get('INTRO_TEXT', DEFAULT_INTRO))
        if shuffle_doors is None:
            shuffle_doors = game_config.get('SHUFFLE_DOORS', True)
        self.shuffle_doors = shuffle_doors

        self.player: Optional[VitalEntity] = None
        self.state = GameState.UNINITIALIZED
        self.outcome: Optional[Outcome] = None
        self.prompt: Optional[Prompt] = None
        self._doors: Optional[Dict[str, Optional[HostileEntity]]] = None
        self.logger = logging.getLogger("Game")

    # --- Driving the state machine ---

    def play(self) -> Outcome:
        """Runs the whole game against a console that can ask questions."""
        prompt = self.start()
        while prompt is not None:
            choice = self.console.ask_choice(prompt.question, prompt.options)
            prompt = self.answer(choice)
        return self.outcome

    def start(self) -> Prompt:
        """Shows the welcome and returns the first question."""
        if self.state is not GameState.UNINITIALIZED:
            raise GameStateError(f"Game already started (state: {self.state.value})")

        self.logger.info("Starting a new session.")
        self.show_welcome()

        if self.storage.has_saved_game():
            self.state = GameState.CHOOSING_RESTORE_OR_FRESH
            return self._ask("Saved game found. Would you like to restore it?", [self.RESTORE_YES, self.RESTORE_NO])

        return self._begin_fresh_start()

    def answer(self, choice: str) -> Optional[Prompt]:
        """Feeds the reply to the current question; returns the next one, or None when the game is over."""
        if self.prompt is None:
            raise GameStateError(f"No question is pending (state: {self.state.value})")
        if choice not in self.prompt.options:
            raise InvalidChoiceError(choice, self.prompt.options)
        self.prompt = None

        if self.state is GameState.CHOOSING_RESTORE_OR_FRESH:
            return self._answer_restore(choice)
        if self.state is GameState.CHOOSING_PLAYER:
            return self._answer_player(choice)

        outcome = self.take_turn(choice)
        if outcome is Outcome.CONTINUE:
            return self._begin_turn()
        if outcome in (Outcome.VICTORY, Outcome.DEATH):
            self.end_game(outcome)
        else:
            self._finish(outcome)
        return None

    # --- Initialization ---

    def show_welcome(self):
        self.console.print_title(self.title)
        self.console.print_text(self.welcome_text)

    def _answer_restore(self, choice: str) -> Prompt:
        if choice != self.RESTORE_YES:
            self.logger.info("Player declined to restore the saved game.")
            return self._begin_fresh_start()

        try:
            self.restore_saved_game()
        except CorruptSaveError as e:
            self.logger.error(f"Restoring the saved game failed: {e}")
            self.console.print_danger(f"The saved game could not be restored ({e}). Starting a new game instead.")
            return self._begin_fresh_start()

        self.console.print_title(f"Welcome back {self.player.get_name()}!")
        return self._finish_initialization()

    def restore_saved_game(self):
        """
        Rebuilds the player and level from storage. Nothing is changed unless
        the whole snapshot is usable; otherwise CorruptSaveError is raised.
        """
        snapshot = check_snapshot_shape(self.storage.get_saved_game())
        player = BasePlayer.from_snapshot(snapshot['player'])
        if not player.is_alive():
            raise CorruptSaveError(f"Saved player has no health left ({player.get_health()}).")

        level = snapshot['level']
        try:
            self.map.load_level(level)
        except InvalidLevelError as e:
            raise CorruptSaveError(f"Saved level is out of range: {e}") from e

        self.player = player
        self.logger.info(f"Restored {player!r} on level {level}.")

    def _begin_fresh_start(self) -> Prompt:
        self.map.load_level(0)
        players = self.map.get_players()
        if not players:
            raise ConfigurationError("There are no players to choose from.")
        self.state = GameState.CHOOSING_PLAYER
        return self._ask("Choose your player?", list(players))

    def _answer_player(self, choice: str) -> Prompt:
        self.player = self.map.get_players()[choice]()
        self.logger.info(f"Fresh game started with {self.player!r}.")
        self.console.print_title(f"Godspeed {self.player.get_name()}!")
        return self._finish_initialization()

    def _finish_initialization(self) -> Prompt:
        # Restored games are consumed and stale ones discarded, so a save
        # can never be resumed twice.
        self.storage.remove_saved_game()

        for line in self.intro_text:
            self.console.print_text(line)
        self.console.break_line()

        self.state = GameState.PLAYING
        return self._begin_turn()

    # --- Turns ---

    def _begin_turn(self) -> Prompt:
        level = self.map.get_current_level()
        level_name = self.map.get_level_name()
        self.console.print_title(f"Level {level + 1}: {level_name}" if level_name else f"Level {level + 1}")
        self.show_progress()

        self._doors = self.map.get_doors(self.shuffle_doors)
        return self._ask("Carefully choose the door to enter!", self.generate_door_menu(self._doors))

    def generate_door_menu(self, doors: Dict[str, Optional[HostileEntity]]) -> List[str]:
        """Door names followed by the menu actions."""
        labels = self.menu_actions.labels()
        door_names = []
        for name in doors:
            if name in labels:
                self.logger.warning(f"Door '{name}' collides with a menu action; the menu action wins.")
                continue
            door_names.append(name)
        return door_names + labels

    def take_turn(self, choice: str) -> Outcome:
        """
        Resolves one choice made while playing. Menu actions are checked
        first, so a door sharing a menu action's name always acts as the
        menu action.
        """
        if self.state is not GameState.PLAYING:
            raise GameStateError(f"Cannot take a turn while {self.state.value}")

        doors = self._doors if self._doors is not None else self.map.get_doors()
        if choice not in self.generate_door_menu(doors):
            raise InvalidChoiceError(choice, self.generate_door_menu(doors))
        self._doors = None

        if self.is_menu_action(choice):
            return self.perform_action(choice)

        if self.is_walker_door(doors, choice):
            walker = doors[choice]
            damage = walker.attack(self.player)
            self.logger.info(f"Door '{choice}': {walker.get_name()} dealt {damage}; health {self.player.get_health()}.")
            self.console.print_danger(
                f"Bitten by {walker.get_name()}! Health decreased by {damage} to {self.player.get_health()}"
            )
            if walker.get_description():
                self.console.print_text(walker.get_description())
        else:
            reward = self.map.get_current_level_experience()
            self.logger.info(f"Door '{choice}' was safe; awarding {reward} experience.")
            self.console.print_info("Phew! Nothing in that door!")
            self.player.add_experience(reward)

            if not self.map.can_advance():
                return Outcome.VICTORY
            self.map.advance()

        if not self.player.is_alive():
            return Outcome.DEATH
        return Outcome.CONTINUE

    def is_menu_action(self, choice: str) -> bool:
        return choice in self.menu_actions.labels()

    @staticmethod
    def is_walker_door(doors: Dict[str, Optional[HostileEntity]], door: str) -> bool:
        return isinstance(doors.get(door), HostileEntity)

    def perform_action(self, action: str) -> Outcome:
        if action == self.menu_actions.save_exit:
            self.storage.save_game(self.player, self.map)
            self.console.print_success(f"Bye bye {self.player.get_name()}! Walkers will be waiting for you")
            return Outcome.SAVE_AND_EXIT
        if action == self.menu_actions.exit:
            self.console.print_success(f"Bye {self.player.get_name()}! We wish you would have not lost hope")
            return Outcome.EXIT
        raise InvalidChoiceError(action, self.menu_actions.labels())

    def show_progress(self):
        self.console.print_table(
            ['Level', 'Experience', 'Health'],
            [[self.map.get_current_level() + 1, self.player.get_experience(), self.player.get_health()]],
        )

    # --- Ending ---

    def end_game(self, outcome: Outcome):
        if self.player.is_alive():
            self.console.print_success(f"Good work {self.player.get_name()}! You have made it alive to the Sanctuary")
        else:
            self.console.print_danger(f"*Rest in peace {self.player.get_name()}! You will be remembered*")
        self.show_progress()
        self._finish(outcome)

    def _finish(self, outcome: Outcome):
        self.state = GameState.ENDED
        self.outcome = outcome
        self.logger.info(f"Game ended: {outcome.value}.")

    def _ask(self, question: str, options: List[str]) -> Prompt:
        self.prompt = Prompt(question, options)
        return self.prompt
