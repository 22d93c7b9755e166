# walkers/main.py
"""
The Kivy front end.

WalkersApp loads the game data once, then builds a fresh Game for every
session started from the title screen. Kivy never blocks on input, so the
app drives the game one button press at a time through Game.start() and
Game.answer().
"""
import logging
import os
from typing import Optional

from kivy.app import App
from kivy.clock import Clock
from kivy.uix.label import Label
from kivy.uix.screenmanager import ScreenManager, SlideTransition

from .exceptions import WalkersError
from .game import Game, MenuActions, Outcome
from .game_map import GameMap
from .resource_manager import ResourceManager
from .storage import JsonFileStorage
from .ui import GameScreen, ScreenDisplay, TitleScreen
from .utils import cleanup_corrupted_saves

# Seconds the farewell stays on screen before the app closes.
EXIT_DELAY = 1.5


class WalkersApp(App):

    def __init__(self, data_dir: Optional[str] = None, save_dir: Optional[str] = None,
                 slot: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.logger = logging.getLogger("WalkersApp")

        self.resource_manager = ResourceManager(data_dir=data_dir)
        self.resource_manager.load_master_data()
        self.game_config = self.resource_manager.get_data('game_config', {})

        self._save_dir = save_dir
        self.slot = slot or self.game_config.get('DEFAULT_SAVE_SLOT', 'quicksave')
        self.game: Optional[Game] = None

    @property
    def save_dir(self) -> str:
        # user_data_dir is only meaningful once the App exists
        return self._save_dir or os.path.join(self.user_data_dir, 'saves')

    def build(self):
        try:
            self.title = self.game_config.get('GAME_NAME', 'The Walking Dead')
            sm = ScreenManager(transition=SlideTransition(direction='left', duration=0.25))
            sm.add_widget(TitleScreen(
                name='title', resource_manager=self.resource_manager,
                save_dir=self.save_dir, slot=self.slot,
            ))
            sm.add_widget(GameScreen(name='game', resource_manager=self.resource_manager))
            sm.current = 'title'
            sm.get_screen('game').set_text_size(self.config.getfloat('Display', 'text_size'))
            self.logger.info("WalkersApp build() completed successfully.")
            return sm
        except Exception as e:
            self.logger.critical(f"FATAL BUILD ERROR: {e}", exc_info=True)
            return Label(text=f"A fatal error occurred during application build:\n{e}\n\nCheck the log for details.")

    def on_start(self):
        self.logger.info("Application starting.")
        cleanup_corrupted_saves(self.save_dir)

    def on_stop(self):
        self.logger.info("Application stopping.")

    def build_config(self, config):
        config.setdefaults('Display', {
            'text_size': 16,
        })

    def on_config_change(self, config, section, key, value):
        if section == "Display" and key == "text_size":
            self.apply_text_size()

    def apply_text_size(self):
        self.root_game_screen().set_text_size(self.config.getfloat('Display', 'text_size'))

    def root_game_screen(self) -> GameScreen:
        return self.root.get_screen('game')

    def start_session(self):
        """Builds a new Game and shows its first question."""
        screen = self.root_game_screen()
        screen.clear_output()
        try:
            game_map = GameMap.from_config(self.resource_manager)
            menu_actions = MenuActions.from_config(ResourceManager.get_menu_actions(self.game_config))
            self.game = Game(
                ScreenDisplay(screen, self.resource_manager),
                JsonFileStorage(self.save_dir, self.slot),
                game_map,
                menu_actions=menu_actions,
                game_config=self.game_config,
            )
            screen.show_prompt(self.game.start())
        except WalkersError as e:
            self._report_fatal(e)

    def submit_choice(self, choice: str):
        if self.game is None:
            self.logger.warning(f"Choice '{choice}' ignored: no session is running.")
            return

        screen = self.root_game_screen()
        try:
            prompt = self.game.answer(choice)
        except WalkersError as e:
            self._report_fatal(e)
            return

        if prompt is not None:
            screen.show_prompt(prompt)
            return

        outcome = self.game.outcome
        self.logger.info(f"Session over: {outcome.value}")
        self.game = None
        if outcome in (Outcome.SAVE_AND_EXIT, Outcome.EXIT):
            screen.show_prompt(None)
            Clock.schedule_once(lambda dt: self.stop(), EXIT_DELAY)
        else:
            screen.show_game_over()

    def _report_fatal(self, error: WalkersError):
        self.logger.critical(f"Session aborted: {error}", exc_info=True)
        screen = self.root_game_screen()
        ScreenDisplay(screen, self.resource_manager).print_danger(f"Something went wrong: {error}")
        self.game = None
        screen.show_game_over()
