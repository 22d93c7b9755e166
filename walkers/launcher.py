# walkers/launcher.py
import argparse
import logging
import os
import random
import sys
from datetime import datetime

from .console import TerminalConsole
from .exceptions import WalkersError
from .game import Game, MenuActions
from .game_map import GameMap
from .resource_manager import ResourceManager
from .storage import JsonFileStorage
from .utils import cleanup_corrupted_saves, get_default_save_dir, get_semantic_colors

logger = logging.getLogger("Launcher")


def setup_initial_logging(debug: bool = False, log_dir: str = None):
    """
    Console logging goes to stderr and stays quiet unless --debug is given,
    so it never interleaves with the game's own text. A session log file is
    written to log_dir when it is writable.
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    handlers = [console_handler]

    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            file_handler = logging.FileHandler(os.path.join(log_dir, f"session_{timestamp}.txt"), encoding='utf-8')
            file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Could not create the session log in {log_dir}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        handlers=handlers,
        force=True,
    )
    logger.info("Logging initialized.")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="The Walking Dead: pick doors, dodge walkers, reach the sanctuary.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--terminal', dest='gui', action='store_false', help="Play in the terminal (default)")
    mode.add_argument('--gui', dest='gui', action='store_true', help="Play in a Kivy window")
    parser.add_argument('--data-dir', help="Directory holding the game's JSON data files")
    parser.add_argument('--save-dir', help="Directory for saved games (default: ./saves)")
    parser.add_argument('--slot', help="Save slot name")
    parser.add_argument('--seed', type=int, help="Random seed for a reproducible door order")
    parser.add_argument('--reset', action='store_true', help="Discard any saved game before starting")
    parser.add_argument('--log-dir', default='logs', help="Directory for session logs ('' to disable)")
    parser.add_argument('--debug', action='store_true', help="Log debug output to stderr")
    parser.set_defaults(gui=False)
    return parser


def run_terminal(args) -> int:
    resource_manager = ResourceManager(data_dir=args.data_dir)
    resource_manager.load_master_data()
    game_config = resource_manager.get_data('game_config', {})

    rng = random.Random(args.seed) if args.seed is not None else None
    game_map = GameMap.from_config(resource_manager, rng=rng)

    save_dir = args.save_dir or get_default_save_dir()
    cleanup_corrupted_saves(save_dir)
    storage = JsonFileStorage(save_dir, args.slot or game_config.get('DEFAULT_SAVE_SLOT', 'quicksave'))
    if args.reset:
        logger.info("--reset given; discarding any saved game.")
        storage.remove_saved_game()

    console = TerminalConsole(palette=get_semantic_colors(resource_manager))
    game = Game(
        console, storage, game_map,
        menu_actions=MenuActions.from_config(ResourceManager.get_menu_actions(game_config)),
        game_config=game_config,
    )
    try:
        outcome = game.play()
    except (KeyboardInterrupt, EOFError):
        console.break_line()
        console.print_danger("Leaving without saving. The walkers will still be here.")
        logger.warning("Session interrupted at a prompt.")
        return 1

    logger.info(f"Terminal session finished with outcome '{outcome.value}'.")
    return 0


def run_gui(args) -> int:
    # Kivy opens a window on import, so only pull it in when asked for.
    from .main import WalkersApp

    logger.info("Starting the WalkersApp.")
    WalkersApp(data_dir=args.data_dir, save_dir=args.save_dir, slot=args.slot).run()
    return 0


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_initial_logging(debug=args.debug, log_dir=args.log_dir or None)

    try:
        return run_gui(args) if args.gui else run_terminal(args)
    except WalkersError as e:
        logger.critical(f"The game cannot continue: {e}", exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
