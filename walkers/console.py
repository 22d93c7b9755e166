# walkers/console.py
"""
How the game talks to a human.

Display is everything the game prints. Console adds the one blocking
question, ask_choice(), which the terminal front end can answer but the
event-driven Kivy front end cannot; the Kivy screen implements Display
and drives the game through Game.answer() instead.
"""
import logging
import sys
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Sequence


class Display(ABC):

    @abstractmethod
    def print_title(self, text: str): ...

    @abstractmethod
    def print_text(self, text: str): ...

    @abstractmethod
    def print_info(self, text: str): ...

    @abstractmethod
    def print_success(self, text: str): ...

    @abstractmethod
    def print_danger(self, text: str): ...

    @abstractmethod
    def print_table(self, headers: Sequence[str], rows: Sequence[Sequence]): ...

    @abstractmethod
    def break_line(self): ...


class Console(Display):

    @abstractmethod
    def ask_choice(self, prompt: str, options: Sequence[str]) -> str:
        """Returns one of options; never anything else."""


def format_table(headers: Sequence[str], rows: Sequence[Sequence]) -> str:
    """Renders an aligned plain-text table."""
    cells = [[str(h) for h in headers]] + [[str(c) for c in row] for row in rows]
    widths = [max(len(row[i]) for row in cells if i < len(row)) for i in range(len(headers))]
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(row):
        return "|" + "|".join(f" {cell.ljust(widths[i])} " for i, cell in enumerate(row)) + "|"

    out = [border, line(cells[0]), border]
    out.extend(line(row) for row in cells[1:])
    out.append(border)
    return "\n".join(out)


class TerminalConsole(Console):
    """
    Plain terminal I/O. Colours come from a palette of semantic text type to
    hex colour (see utils.get_semantic_colors) and are written as 24-bit ANSI
    escapes; types missing from the palette stay uncoloured.
    """

    RESET = '\033[0m'

    def __init__(self, input_func: Optional[Callable[[str], str]] = None, stream=None, use_color: Optional[bool] = None,
                 max_attempts: Optional[int] = None, palette: Optional[Dict[str, str]] = None):
        self.input_func = input_func or input
        self.stream = stream or sys.stdout
        if use_color is None:
            use_color = hasattr(self.stream, 'isatty') and self.stream.isatty()
        self.use_color = use_color
        self.max_attempts = max_attempts
        self.palette = palette or {}
        self.logger = logging.getLogger("TerminalConsole")

    def _write(self, text: str, style: Optional[str] = None):
        if style and self.use_color and style in self.palette:
            text = f"{self.ansi_color(self.palette[style])}{text}{self.RESET}"
        print(text, file=self.stream)

    @staticmethod
    def ansi_color(color_hex: str) -> str:
        red, green, blue = (int(color_hex[i:i + 2], 16) for i in (0, 2, 4))
        return f"\033[38;2;{red};{green};{blue}m"

    def print_title(self, text: str):
        self._write("")
        self._write(f"=== {text} ===", 'title')

    def print_text(self, text: str):
        self._write(text)

    def print_info(self, text: str):
        self._write(text, 'info')

    def print_success(self, text: str):
        self._write(text, 'success')

    def print_danger(self, text: str):
        self._write(text, 'danger')

    def print_table(self, headers: Sequence[str], rows: Sequence[Sequence]):
        self._write(format_table(headers, rows))

    def break_line(self):
        self._write("")

    def ask_choice(self, prompt: str, options: Sequence[str]) -> str:
        """
        Shows the numbered options and keeps asking until the answer is an
        option number or (case-insensitively) an option label.
        """
        options = list(options)
        if not options:
            raise ValueError("ask_choice needs at least one option")

        attempts = 0
        while True:
            self._write(prompt, 'info')
            for number, option in enumerate(options, start=1):
                self._write(f"  [{number}] {option}")
            answer = self.input_func("> ").strip()

            choice = self._match(answer, options)
            if choice is not None:
                self.logger.debug(f"ask_choice: '{answer}' -> '{choice}'")
                return choice

            attempts += 1
            self.logger.debug(f"ask_choice: rejected answer '{answer}'")
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise ValueError(f"No valid answer after {attempts} attempt(s)")
            self._write(f"'{answer}' is not an option. Pick a number between 1 and {len(options)}.", 'danger')

    @staticmethod
    def _match(answer: str, options: Sequence[str]) -> Optional[str]:
        # ASCII digits only; '²' passes isdigit() but not int()
        if answer.isdecimal() and answer.isascii():
            index = int(answer) - 1
            if 0 <= index < len(options):
                return options[index]
            return None
        for option in options:
            if option == answer:
                return option
        lowered = answer.lower()
        for option in options:
            if option.lower() == lowered:
                return option
        return None
