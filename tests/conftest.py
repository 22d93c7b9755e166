import json
import os
import shutil

import pytest

from walkers.console import Console
from walkers.entities import Walker
from walkers.game import Game
from walkers.game_map import GameMap, Level
from walkers.players import create_player
from walkers.storage import InMemoryStorage

DATA_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'data'))


class RecordingConsole(Console):
    """
    Records every output call as (kind, text) and answers questions either
    from a scripted list or from a chooser callable(question, options).
    """

    def __init__(self, answers=None, chooser=None):
        self.answers = list(answers or [])
        self.chooser = chooser
        self.calls = []
        self.questions = []

    def print_title(self, text):
        self.calls.append(('title', text))

    def print_text(self, text):
        self.calls.append(('text', text))

    def print_info(self, text):
        self.calls.append(('info', text))

    def print_success(self, text):
        self.calls.append(('success', text))

    def print_danger(self, text):
        self.calls.append(('danger', text))

    def print_table(self, headers, rows):
        self.calls.append(('table', (list(headers), [list(row) for row in rows])))

    def break_line(self):
        self.calls.append(('break', ''))

    def ask_choice(self, prompt, options):
        self.questions.append((prompt, list(options)))
        if self.chooser is not None:
            answer = self.chooser(prompt, list(options))
        else:
            assert self.answers, f"Unexpected question: {prompt} {options}"
            answer = self.answers.pop(0)
        assert answer in options, f"Scripted answer {answer!r} is not offered in {options}"
        return answer

    def texts(self, kind):
        return [text for k, text in self.calls if k == kind]

    def tables(self):
        return self.texts('table')


class CountingStorage(InMemoryStorage):
    """InMemoryStorage that keeps a log of what was asked of it."""

    def __init__(self, snapshot=None):
        super().__init__(snapshot)
        self.saved = []
        self.remove_calls = 0
        self.get_calls = 0

    def get_saved_game(self):
        self.get_calls += 1
        return super().get_saved_game()

    def save_game(self, player, game_map):
        super().save_game(player, game_map)
        self.saved.append(self.snapshot)

    def remove_saved_game(self):
        self.remove_calls += 1
        super().remove_saved_game()


@pytest.fixture
def biter():
    return Walker("Biter", 100)


@pytest.fixture
def two_level_map(biter):
    """Level 0: door A hides a 100-damage walker, door B is safe. Level 1: only a safe door B."""
    levels = [
        Level({"A": biter, "B": None}, experience=10, name="Outskirts"),
        Level({"B": None}, experience=20, name="Sanctuary"),
    ]
    players = {"Gunner Rick": lambda: create_player("gunner_rick")}
    return GameMap(levels, players)


@pytest.fixture
def storage():
    return CountingStorage()


@pytest.fixture
def make_game(two_level_map, storage):
    def _make(answers=None, game_map=None, storage_override=None, chooser=None, **kwargs):
        console = RecordingConsole(answers, chooser=chooser)
        kwargs.setdefault('shuffle_doors', False)
        game = Game(console, storage_override or storage, game_map or two_level_map, **kwargs)
        return game, console
    return _make


@pytest.fixture
def data_dir(tmp_path):
    """A writable copy of the shipped data files."""
    target = tmp_path / "data"
    shutil.copytree(DATA_DIR, target)
    return target


def rewrite_json(path, mutate):
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    mutate(data)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f)
