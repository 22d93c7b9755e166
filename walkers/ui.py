# walkers/ui.py
import logging
from typing import Optional, Sequence

from kivy.app import App
from kivy.clock import Clock
from kivy.graphics import Color, Rectangle
from kivy.metrics import dp, sp
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.button import Button
from kivy.uix.gridlayout import GridLayout
from kivy.uix.label import Label
from kivy.uix.screenmanager import FadeTransition, Screen, SlideTransition
from kivy.uix.scrollview import ScrollView
from kivy.uix.widget import Widget

from .console import Display, format_table
from .game import Prompt
from .utils import color_text, escape_markup, get_save_slot_info

DEFAULT_FONT_SIZE = 16


def _wrap_button_text(btn, align='center'):
    """Keeps a Button's text wrapped to its width as the window resizes."""
    btn.halign = align
    btn.valign = 'middle'
    btn.text_size = (btn.width - dp(20), None)
    btn.bind(width=lambda i, w: setattr(i, 'text_size', (w - dp(20), None)))


class BaseScreen(Screen):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        with self.canvas.before:
            Color(0.05, 0.05, 0.05, 1)
            self.rect = Rectangle(size=self.size, pos=self.pos)
        self.bind(size=self._update_rect, pos=self._update_rect)

    def _update_rect(self, instance, value):
        self.rect.pos = instance.pos
        self.rect.size = instance.size

    def go_to_screen(self, screen_name: str, direction: str = 'left'):
        if direction == 'fade':
            self.manager.transition = FadeTransition()
        else:
            self.manager.transition = SlideTransition(direction=direction)
        self.manager.current = screen_name


class TitleScreen(BaseScreen):
    """Game title, a preview of any saved game, and the way in."""

    def __init__(self, **kwargs):
        self.resource_manager = kwargs.pop('resource_manager', None)
        self.save_dir = kwargs.pop('save_dir', None)
        self.slot = kwargs.pop('slot', 'quicksave')
        super().__init__(**kwargs)
        self.logger = logging.getLogger(__name__ + ".TitleScreen")

        game_config = self.resource_manager.get_data('game_config', {}) if self.resource_manager else {}
        layout = BoxLayout(orientation='vertical', padding=dp(20), spacing=dp(12))
        layout.add_widget(Label(
            text=color_text(game_config.get('GAME_NAME', 'The Walking Dead'), 'title', self.resource_manager),
            markup=True, font_size=sp(30), size_hint_y=0.3,
        ))
        self.save_label = Label(markup=True, font_size=sp(14), size_hint_y=0.2)
        layout.add_widget(self.save_label)
        layout.add_widget(Widget(size_hint_y=0.2))

        btn_play = Button(text="Enter", size_hint_y=None, height=dp(56), font_size=sp(20))
        btn_play.bind(on_release=self.start_game_flow)
        layout.add_widget(btn_play)

        btn_quit = Button(text="Quit", size_hint_y=None, height=dp(48))
        btn_quit.bind(on_release=lambda *_: App.get_running_app().stop())
        layout.add_widget(btn_quit)
        self.add_widget(layout)

    def on_enter(self, *args):
        info = get_save_slot_info(self.slot, self.save_dir)
        if info is None:
            self.save_label.text = ""
        elif info.get('corrupted'):
            self.save_label.text = color_text("The saved game looks damaged.", 'danger', self.resource_manager)
        else:
            self.save_label.text = color_text(
                f"Saved game: {info['character_class']} on level {info['level']}, "
                f"health {info['health']} ({info['timestamp']})",
                'info', self.resource_manager,
            )
        return super().on_enter(*args)

    def start_game_flow(self, *args):
        app = App.get_running_app()
        app.start_session()
        self.go_to_screen('game', direction='left')


class GameScreen(BaseScreen):
    """
    Shows the game's output as coloured markup and each question's options
    as buttons. Pressing a button hands the choice back to the app.
    """

    def __init__(self, **kwargs):
        self.resource_manager = kwargs.pop('resource_manager', None)
        super().__init__(**kwargs)
        self.logger = logging.getLogger(__name__ + ".GameScreen")

        layout = BoxLayout(orientation='vertical', padding=dp(10), spacing=dp(8))
        self.output_label = Label(
            markup=True, size_hint_y=None, valign='top', halign='left',
            font_size=sp(DEFAULT_FONT_SIZE), padding=(dp(8), dp(8)),
        )
        self.output_label.bind(
            width=lambda i, w: setattr(i, 'text_size', (w - dp(12), None)),
            texture_size=lambda i, v: setattr(i, 'height', v[1]),
        )
        self.output_scroll_view = ScrollView(size_hint_y=0.6)
        self.output_scroll_view.add_widget(self.output_label)
        layout.add_widget(self.output_scroll_view)

        self.question_label = Label(markup=True, size_hint_y=None, height=dp(36), font_size=sp(18))
        layout.add_widget(self.question_label)

        choice_scroll = ScrollView(size_hint_y=0.4)
        self.choice_grid = GridLayout(cols=1, spacing=dp(6), size_hint_y=None)
        self.choice_grid.bind(minimum_height=self.choice_grid.setter('height'))
        choice_scroll.add_widget(self.choice_grid)
        layout.add_widget(choice_scroll)
        self.add_widget(layout)

    def append_markup(self, markup: str):
        if self.output_label.text:
            self.output_label.text += f"\n{markup}"
        else:
            self.output_label.text = markup
        Clock.schedule_once(lambda dt: setattr(self.output_scroll_view, 'scroll_y', 0), 0.01)

    def clear_output(self):
        self.output_label.text = ""

    def show_prompt(self, prompt: Optional[Prompt]):
        self.choice_grid.clear_widgets()
        if prompt is None:
            self.question_label.text = ""
            return

        self.question_label.text = color_text(prompt.question, 'info', self.resource_manager)
        for option in prompt.options:
            btn = Button(text=option, size_hint_y=None, height=dp(48), font_size=sp(16))
            _wrap_button_text(btn)
            btn.bind(on_release=lambda instance, choice=option: self.choose(choice))
            self.choice_grid.add_widget(btn)

    def choose(self, choice: str):
        self.logger.debug(f"Button pressed: '{choice}'")
        App.get_running_app().submit_choice(choice)

    def show_game_over(self):
        """Replaces the choices with the ways out of a finished game."""
        self.choice_grid.clear_widgets()
        self.question_label.text = ""

        btn_title = Button(text="Back to Title", size_hint_y=None, height=dp(48))
        btn_title.bind(on_release=lambda *_: self.go_to_screen('title', 'right'))
        self.choice_grid.add_widget(btn_title)

        btn_quit = Button(text="Quit", size_hint_y=None, height=dp(48))
        btn_quit.bind(on_release=lambda *_: App.get_running_app().stop())
        self.choice_grid.add_widget(btn_quit)

    def set_text_size(self, size: float):
        self.output_label.font_size = sp(size)


class ScreenDisplay(Display):
    """The game's Display, rendered onto a GameScreen as Kivy markup."""

    def __init__(self, screen: GameScreen, resource_manager=None):
        self.screen = screen
        self.resource_manager = resource_manager

    def print_title(self, text: str):
        self.screen.append_markup(f"\n[b]{color_text(text, 'title', self.resource_manager)}[/b]")

    def print_text(self, text: str):
        self.screen.append_markup(escape_markup(text))

    def print_info(self, text: str):
        self.screen.append_markup(color_text(text, 'info', self.resource_manager))

    def print_success(self, text: str):
        self.screen.append_markup(color_text(text, 'success', self.resource_manager))

    def print_danger(self, text: str):
        self.screen.append_markup(color_text(text, 'danger', self.resource_manager))

    def print_table(self, headers: Sequence[str], rows: Sequence[Sequence]):
        self.screen.append_markup(escape_markup(format_table(headers, rows)))

    def break_line(self):
        self.screen.append_markup("")
