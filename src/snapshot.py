# snapshot.py
# Serialized game snapshot: {gridSize, tiles:[{row,col,value}], score, bestScore, keepGoing}.

from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

import core
from config import MAX_BOARD_SIZE, GameSettings
from game import GameState


class TileRecord(BaseModel):
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)
    value: int = Field(..., ge=2)


class GameSnapshot(BaseModel):
    """Persisted game. Tile identities are not stored; they are regenerated on load."""
    model_config = ConfigDict(populate_by_name=True)

    grid_size: int = Field(..., alias="gridSize", ge=2, le=MAX_BOARD_SIZE, description="The dimension N of the N x N board.")
    tiles: List[TileRecord] = Field(default_factory=list)
    score: int = Field(default=0, ge=0)
    best_score: int = Field(default=0, alias="bestScore", ge=0)
    keep_going: bool = Field(default=False, alias="keepGoing")


def to_snapshot(state: GameState) -> GameSnapshot:
    return GameSnapshot(
        grid_size=state.size,
        tiles=[TileRecord(row=t.row, col=t.col, value=t.value) for t in state.tiles],
        score=state.score,
        best_score=state.best_score,
        keep_going=state.keep_going,
    )


def from_snapshot(snapshot: GameSnapshot, settings: GameSettings) -> GameState:
    """
    Rebuilds a GameState from a snapshot with fresh tile identities.
    The over and won flags are recomputed from the tiles.
    Raises:
        InvalidBoardStateError: If the tiles overlap, fall outside the grid or hold invalid values.
    """
    tiles = tuple(
        core.Tile(core.new_tile_id(), record.row, record.col, record.value)
        for record in snapshot.tiles
    )
    view = core.board_view(tiles, snapshot.grid_size)
    won = not snapshot.keep_going and core.has_won(tiles, settings.win_tile)
    return GameState(
        tiles=tiles,
        size=snapshot.grid_size,
        score=snapshot.score,
        best_score=max(snapshot.best_score, snapshot.score),
        over=not core.has_moves_remaining(view),
        won=won,
        keep_going=snapshot.keep_going,
    )


def save_snapshot(snapshot: GameSnapshot, path: Union[str, Path]) -> None:
    Path(path).write_text(snapshot.model_dump_json(by_alias=True), encoding="utf-8")


def load_snapshot(path: Union[str, Path]) -> Optional[GameSnapshot]:
    """Returns None when nothing was saved; malformed files raise pydantic.ValidationError."""
    path = Path(path)
    if not path.exists():
        return None
    return GameSnapshot.model_validate_json(path.read_bytes())
