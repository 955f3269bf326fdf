# game.py
# Game session built on top of the stateless core: score, best score and win/over flags.

from dataclasses import dataclass, replace
from typing import Optional, Tuple
import logging
import random

import core
from config import GameSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a game in progress."""
    tiles: Tuple[core.Tile, ...]
    size: int
    score: int = 0
    best_score: int = 0
    over: bool = False
    won: bool = False
    keep_going: bool = False  # The win was acknowledged; don't announce it again.


def new_game(settings: GameSettings, best_score: int = 0,
             rng: Optional[random.Random] = None) -> GameState:
    """
    Starts a new game: an empty board with two spawned tiles.
    Args:
        settings (GameSettings): Board size, win tile and spawn bias.
        best_score (int): Best score carried over from earlier games.
        rng (Optional[random.Random]): Source of randomness for the spawns.
    Returns:
        GameState: The initial state.
    """
    tiles: Tuple[core.Tile, ...] = ()
    tiles = core.spawn_tile(tiles, settings.size, settings.spawn_bias, rng)
    tiles = core.spawn_tile(tiles, settings.size, settings.spawn_bias, rng)
    logger.info("New %dx%d game", settings.size, settings.size)
    return GameState(tiles=tiles, size=settings.size, best_score=best_score)


def restart(state: GameState, settings: GameSettings,
            rng: Optional[random.Random] = None) -> GameState:
    """New game at ``settings.size``, keeping the best score."""
    return new_game(settings, best_score=max(state.best_score, state.score), rng=rng)


def slide(state: GameState, direction: core.Direction,
          settings: GameSettings) -> Tuple[GameState, core.MoveOutcome]:
    """
    First stage of a move: slide and merge, without spawning.

    A rejected move leaves the state untouched, except that a stuck board is
    marked over. An accepted move updates the score and the win flag; the
    caller must follow it with :func:`settle`.
    """
    if state.over:
        return state, core.MoveOutcome(state.tiles, False, 0)

    outcome = core.apply_move(state.tiles, state.size, direction)
    if not outcome.moved:
        logger.debug("Move %s rejected", direction.name)
        if not core.has_moves_remaining(core.board_view(state.tiles, state.size)):
            logger.info("Game over with score %d", state.score)
            state = replace(state, over=True)
        return state, outcome

    score = state.score + outcome.gained
    won = state.won
    if not state.keep_going and core.has_won(outcome.tiles, settings.win_tile):
        if not won:
            logger.info("Reached %d with score %d", settings.win_tile, score)
        won = True
    logger.debug("Move %s accepted, gained %d", direction.name, outcome.gained)
    state = replace(
        state,
        tiles=outcome.tiles,
        score=score,
        best_score=max(state.best_score, score),
        won=won,
    )
    return state, outcome


def settle(state: GameState, settings: GameSettings,
           rng: Optional[random.Random] = None) -> GameState:
    """Second stage of an accepted move: spawn a tile, then check for game over."""
    if state.over:
        return state
    tiles = core.spawn_tile(state.tiles, state.size, settings.spawn_bias, rng)
    over = not core.has_moves_remaining(core.board_view(tiles, state.size))
    if over:
        logger.info("Game over with score %d", state.score)
    return replace(state, tiles=tiles, over=over)


def play(state: GameState, direction: core.Direction, settings: GameSettings,
         rng: Optional[random.Random] = None) -> Tuple[GameState, core.MoveOutcome]:
    """Runs a whole move: slide, then settle if the move was accepted."""
    state, outcome = slide(state, direction, settings)
    if outcome.moved:
        state = settle(state, settings, rng)
    return state, outcome


def keep_playing(state: GameState) -> GameState:
    """Dismisses the win so play continues without announcing it again."""
    return replace(state, won=False, keep_going=True)


def progress(state: GameState) -> core.GameProgressState:
    """Maps the state flags to a GameProgressState."""
    if state.over:
        return core.GameProgressState.GAME_OVER
    if state.won:
        return core.GameProgressState.GAME_WON
    return core.GameProgressState.IN_PROGRESS
