from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import List, Optional
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

import core
import game
from config import MAX_BOARD_SIZE, GameSettings
from snapshot import GameSnapshot, from_snapshot, to_snapshot

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="Sliding Tile Merge Game API",
    description="A stateless API for playing the sliding tile merge game. "\
                "The client keeps the game snapshot and sends it back with every move.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class NewGameRequest(GameSettings):
    """Settings for creating a new game."""
    best_score: int = Field(default=0, ge=0, description="Best score to carry into the new game.")


class TileData(BaseModel):
    """A tile as seen by a renderer."""
    id: int = Field(..., description="Identity used to follow the tile across moves.")
    row: int
    col: int
    value: int
    just_merged: bool = Field(..., description="True if the tile was produced by a merge in the last move.")


class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    snapshot: GameSnapshot = Field(..., description="Snapshot to send back with the next request.")
    tiles: List[TileData] = Field(..., description="Tiles with their identities and merge markers.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    over: bool = Field(..., description="True when no move remains.")
    won: bool = Field(..., description="True when the win tile was reached and not yet dismissed.")
    max_tile: int = Field(..., ge=0, description="Largest tile value on the board.")
    win_tile: int = Field(..., gt=1, description="The tile value required to win this game instance.")
    board_size: int = Field(..., ge=2, le=MAX_BOARD_SIZE, description="The dimension N of the N x N board.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    snapshot: GameSnapshot = Field(..., description="Current game snapshot before the move.")
    direction: core.Direction = Field(
        ...,
        description="Direction of the move (up, down, left, right)."
    )
    settings: GameSettings = Field(default_factory=GameSettings)


class KeepGoingRequestData(BaseModel):
    """Data required to dismiss a win and keep playing."""
    snapshot: GameSnapshot
    settings: GameSettings = Field(default_factory=GameSettings)


class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    gained: int = Field(..., ge=0, description="Score gained from merges in this move.")
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )


def _state_data(state: game.GameState, settings: GameSettings) -> dict:
    return dict(
        snapshot=to_snapshot(state),
        tiles=[
            TileData(id=t.id, row=t.row, col=t.col, value=t.value, just_merged=t.just_merged)
            for t in state.tiles
        ],
        progress=game.progress(state),
        over=state.over,
        won=state.won,
        max_tile=core.max_tile(state.tiles),
        win_tile=settings.win_tile,
        board_size=state.size,
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, settings: NewGameRequest):
    """
    Initializes a new game based on the provided settings.

    - **size**: Dimension of the N x N board (e.g., 4 for 4x4). Default is 4.
    - **win_tile**: Tile value to reach to win (e.g., 2048). Default is 2048.
    - **spawn_bias**: Probability that a spawned tile is a 2. Default is 0.9.
    - **best_score**: Best score to carry over. Default is 0.

    Returns the initial game state with two random tiles and a score of 0.
    """
    try:
        game_settings = GameSettings(
            size=settings.size, win_tile=settings.win_tile, spawn_bias=settings.spawn_bias
        )
        state = game.new_game(game_settings, best_score=settings.best_score)
        return GameStateData(**_state_data(state, game_settings))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error in /game/new")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `snapshot`, the `direction` of the move and,
    optionally, the game `settings`.

    The API will:
    1. Slide and merge the tiles.
    2. If the move changed the board, add a new random tile (2 or 4).
    3. Determine the new game status (IN_PROGRESS, GAME_WON, GAME_OVER).

    Returns the updated game state, whether the move was effective, and an optional message.
    """
    settings = request_data.settings
    try:
        state = from_snapshot(request_data.snapshot, settings)
        state, outcome = game.play(state, request_data.direction, settings)
    except ValueError as e:
        # Includes InvalidBoardStateError for overlapping or out-of-range tiles
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error in /game/move")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    message_for_client: Optional[str] = None
    if not outcome.moved:
        message_for_client = "Move was not effective; board state unchanged by slide."

    current_progress = game.progress(state)
    if current_progress == core.GameProgressState.GAME_WON:
        message_for_client = "Congratulations! You won!"
    elif current_progress == core.GameProgressState.GAME_OVER:
        message_for_client = "Game Over. No more valid moves."

    return MoveResponseData(
        **_state_data(state, settings),
        move_was_effective=outcome.moved,
        gained=outcome.gained,
        message=message_for_client,
    )


@app.post("/game/keep-going", response_model=GameStateData, summary="Keep Playing After a Win")
@limiter.limit("100/minute")
async def keep_going(request: Request, request_data: KeepGoingRequestData):
    """
    Dismisses the win so the game continues. Later wins are not announced again.
    """
    settings = request_data.settings
    try:
        state = game.keep_playing(from_snapshot(request_data.snapshot, settings))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid snapshot: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error in /game/keep-going")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while resuming the game: {str(e)}")
    return GameStateData(**_state_data(state, settings))
