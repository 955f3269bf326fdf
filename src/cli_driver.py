# cli_driver.py
# This file is intended to be run to play the sliding tile merge game on the CLI

from pathlib import Path
from typing import Optional
import logging

from pydantic import ValidationError

from config import GameSettings, load_settings
from core import Direction, GameProgressState, InvalidBoardStateError, max_tile, board_view
from game import GameState, keep_playing, new_game, play, progress, restart
from snapshot import from_snapshot, load_snapshot, save_snapshot, to_snapshot

SAVE_FILE = Path.home() / ".merge2048.json"

DIRECTION_MAP = {'W': Direction.UP, 'A': Direction.LEFT, 'S': Direction.DOWN, 'D': Direction.RIGHT}

logger = logging.getLogger(__name__)


def resume_or_start(settings: GameSettings, save_path: Path) -> GameState:
    """Loads the saved game if there is a usable one, otherwise starts a new game."""
    try:
        saved = load_snapshot(save_path)
    except ValidationError as e:
        logger.warning("Ignoring unreadable save file %s: %s", save_path, e)
        saved = None
    if saved is None:
        return new_game(settings)
    try:
        return from_snapshot(saved, settings)
    except InvalidBoardStateError as e:
        logger.warning("Ignoring invalid saved board in %s: %s", save_path, e)
        return new_game(settings, best_score=saved.best_score)


def main(settings: Optional[GameSettings] = None, save_path: Path = SAVE_FILE):
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    settings = settings or load_settings()

    # 1. Initialize or resume game
    state = resume_or_start(settings, save_path)
    display_board_state(state)

    # 2. Game Loop
    while True:
        move_input = input("Enter move (W/A/S/D for Up/Left/Down/Right, N new game, "
                           "K keep going, Q to quit): ").strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break

        if move_input == 'N':
            state = restart(state, settings)
        elif move_input == 'K':
            if not state.won:
                print("Nothing to keep going from.")
                continue
            state = keep_playing(state)
        else:
            chosen_direction = DIRECTION_MAP.get(move_input)
            if not chosen_direction:
                print("Invalid input. Use W, A, S, D.")
                continue
            if state.over:
                print("The game is over. Press N to start a new game.")
                continue

            # 3. Process the move, spawn and check for the end of the game
            state, outcome = play(state, chosen_direction, settings)
            if not outcome.moved and not state.over:
                print("Move did not change the board. Try a different direction.")

        try:
            save_snapshot(to_snapshot(state), save_path)
        except OSError as e:
            logger.warning("Could not save the game to %s: %s", save_path, e)
        display_board_state(state)

        current_progress = progress(state)
        if current_progress == GameProgressState.GAME_WON:
            print(f"Congratulations! You reached the {settings.win_tile} tile! Press K to keep going.")
        elif current_progress == GameProgressState.GAME_OVER:
            print("No more moves possible. Press N to try again.")


# --- Display Function ---
def display_board_state(state: GameState):
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {state.score}\tBest: {state.best_score}\tMax: {max_tile(state.tiles)}")
    current_progress = progress(state)
    status_message = {
        GameProgressState.IN_PROGRESS: f"Status: {current_progress.name}",
        GameProgressState.GAME_WON: "YOU WON!",
        GameProgressState.GAME_OVER: "GAME OVER!"
    }
    print(status_message[current_progress])

    for cells in board_view(state.tiles, state.size):
        print("\t".join(str(tile.value) if tile else "." for tile in cells))
    print("-" * (state.size * 6))  # Adjust width based on board size


if __name__ == "__main__":
    main()
