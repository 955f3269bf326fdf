# core.py
# This file is the stateless board state machine of the sliding-tile merge game.
# Every function takes an immutable tile set and returns a new one.

from dataclasses import dataclass, replace
from enum import Enum
from itertools import count
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple
import random

DEFAULT_SPAWN_BIAS = 0.9
DEFAULT_WIN_TILE = 2048


class InvalidBoardStateError(ValueError):
    """Raised when a tile set breaks the board invariants (a programming error)."""


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


class Direction(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Tile:
    """A single numbered tile. ``id`` only lets renderers follow a tile across moves."""
    id: int
    row: int
    col: int
    value: int
    just_merged: bool = False


class LineResult(NamedTuple):
    cells: List[Optional[Tile]]
    moved: bool
    gained: int


class MoveOutcome(NamedTuple):
    tiles: Tuple[Tile, ...]
    moved: bool
    gained: int


BoardView = List[List[Optional[Tile]]]

# Process-wide monotonic source of tile identities; never rewinds so ids are never reused.
_tile_ids = count(1)


def new_tile_id() -> int:
    """Returns a fresh tile identity."""
    return next(_tile_ids)


# --- Board Helper Functions ---

def check_board_size(n: int) -> int:
    """
    Validates the grid dimension.
    Args:
        n (int): The dimension N of the N x N board.
    Returns:
        int: The same dimension.
    Raises:
        InvalidBoardStateError: If N is not an integer of at least 2.
    """
    if not isinstance(n, int) or isinstance(n, bool) or n < 2:
        raise InvalidBoardStateError(f"Board size must be an integer >= 2, got {n!r}.")
    return n


def _is_tile_value(value: int) -> bool:
    return isinstance(value, int) and value >= 2 and value & (value - 1) == 0


def board_view(tiles: Iterable[Tile], n: int) -> BoardView:
    """
    Builds a 2D lookup of tile-or-None by (row, col), checking the board invariants.
    Args:
        tiles (Iterable[Tile]): The tile set.
        n (int): The dimension of the board.
    Returns:
        BoardView: An N x N list of lists holding a Tile or None per cell.
    Raises:
        InvalidBoardStateError: On out-of-range coordinates, shared cells or invalid values.
    """
    check_board_size(n)
    view: BoardView = [[None] * n for _ in range(n)]
    for tile in tiles:
        if not (0 <= tile.row < n and 0 <= tile.col < n):
            raise InvalidBoardStateError(
                f"Tile {tile.id} at ({tile.row}, {tile.col}) is outside a {n}x{n} board."
            )
        if not _is_tile_value(tile.value):
            raise InvalidBoardStateError(
                f"Tile {tile.id} has value {tile.value!r}; values must be powers of two >= 2."
            )
        occupant = view[tile.row][tile.col]
        if occupant is not None:
            raise InvalidBoardStateError(
                f"Tiles {occupant.id} and {tile.id} both occupy ({tile.row}, {tile.col})."
            )
        view[tile.row][tile.col] = tile
    return view


def get_empty_cells(view: BoardView) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells in the given board view, in row-major order.
    Args:
        view (BoardView): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    return [
        (row, col)
        for row, cells in enumerate(view)
        for col, cell in enumerate(cells)
        if cell is None
    ]


def max_tile(tiles: Iterable[Tile]) -> int:
    """Largest tile value on the board, 0 for an empty board."""
    return max((tile.value for tile in tiles), default=0)


# --- Line Reducer ---

def reduce_line(cells: Sequence[Optional[Tile]], direction: int) -> LineResult:
    """
    Slides and merges a single row or column.

    Cells are processed starting from the end the tiles slide toward, so a tile
    already resting at that end is never disturbed by one processed later. A
    destination that received a merge is locked for the rest of the pass, which
    keeps any tile from merging twice in one move.

    Args:
        cells (Sequence[Optional[Tile]]): The line, each cell a Tile or None.
        direction (int): -1 to slide toward index 0, +1 to slide toward index n-1.
    Returns:
        LineResult: The resulting cells, whether anything moved, and the merge gain.
            Tiles keep their original row/col; the caller repositions them.
    Raises:
        ValueError: If direction is not -1 or +1.
    """
    if direction not in (-1, 1):
        raise ValueError(f"Line direction must be -1 or +1, got {direction!r}.")

    n = len(cells)
    line = list(cells)
    order = range(n - 1, -1, -1) if direction == 1 else range(n)
    locked = set()
    moved = False
    gained = 0

    for i in order:
        tile = line[i]
        if tile is None:
            continue

        rest = i
        j = i + direction
        while 0 <= j < n and line[j] is None:
            rest = j
            j += direction

        if 0 <= j < n and j not in locked and line[j].value == tile.value:
            merged_value = tile.value * 2
            line[j] = replace(line[j], value=merged_value, just_merged=True)
            line[i] = None
            locked.add(j)
            gained += merged_value
            moved = True
        elif rest != i:
            line[rest] = tile
            line[i] = None
            moved = True

    return LineResult(line, moved, gained)


# --- Board Mover ---

_LINE_DIRECTION = {
    Direction.LEFT: -1,
    Direction.RIGHT: 1,
    Direction.UP: -1,
    Direction.DOWN: 1,
}


def apply_move(tiles: Sequence[Tile], n: int, direction: Direction) -> MoveOutcome:
    """
    Processes a move in the specified direction without touching the input tiles.
    Args:
        tiles (Sequence[Tile]): The current tile set.
        n (int): The dimension of the board.
        direction (Direction): The direction to move.
    Returns:
        MoveOutcome:
            - The new tile set in row-major order (the input itself if nothing moved).
            - Whether any tile moved or merged.
            - The sum of the values created by merges.
    Raises:
        ValueError: If an invalid direction is specified.
        InvalidBoardStateError: If the tile set breaks the board invariants.
    """
    if direction not in _LINE_DIRECTION:
        raise ValueError("Invalid direction specified for apply_move.")

    view = board_view(tiles, n)
    # Merge markers only describe the move that produced them.
    view = [
        [replace(cell, just_merged=False) if cell is not None and cell.just_merged else cell
         for cell in cells]
        for cells in view
    ]
    line_direction = _LINE_DIRECTION[direction]
    horizontal = direction in (Direction.LEFT, Direction.RIGHT)

    moved = False
    gained = 0
    result: BoardView = [[None] * n for _ in range(n)]

    for k in range(n):
        if horizontal:
            line = view[k]
        else:
            line = [view[r][k] for r in range(n)]

        reduced = reduce_line(line, line_direction)
        moved = moved or reduced.moved
        gained += reduced.gained

        for index, cell in enumerate(reduced.cells):
            if cell is None:
                continue
            row, col = (k, index) if horizontal else (index, k)
            if (cell.row, cell.col) != (row, col):
                cell = replace(cell, row=row, col=col)
            result[row][col] = cell

    if not moved:
        return MoveOutcome(tuple(tiles), False, 0)

    next_tiles = tuple(cell for cells in result for cell in cells if cell is not None)
    return MoveOutcome(next_tiles, True, gained)


# --- Spawner ---

def spawn_tile(
    tiles: Sequence[Tile],
    n: int,
    bias: float = DEFAULT_SPAWN_BIAS,
    rng: Optional[random.Random] = None,
) -> Tuple[Tile, ...]:
    """
    Adds one new tile (2 with probability ``bias``, otherwise 4) to a random empty cell.
    Args:
        tiles (Sequence[Tile]): The current tile set.
        n (int): The dimension of the board.
        bias (float): Probability that the new tile is a 2. Default is 0.9.
        rng (Optional[random.Random]): Source of randomness; the module-level one if omitted.
    Returns:
        Tuple[Tile, ...]: The tile set plus the new tile, or the input unchanged
                          when the board is full.
    Raises:
        ValueError: If bias is outside [0, 1].
    """
    if not 0.0 <= bias <= 1.0:
        raise ValueError(f"Spawn bias must be within [0, 1], got {bias!r}.")
    rng = rng or random

    empty_cells = get_empty_cells(board_view(tiles, n))
    if not empty_cells:
        return tuple(tiles)

    row, col = rng.choice(empty_cells)
    value = 2 if rng.random() < bias else 4
    return tuple(tiles) + (Tile(new_tile_id(), row, col, value),)


# --- Game State Checks ---

def has_moves_remaining(view: BoardView) -> bool:
    """
    Checks if any move is possible: an empty cell or an adjacent pair of equal values.
    Args:
        view (BoardView): 2D lookup of tile-or-None by (row, col).
    Returns:
        bool: False only for a full board without adjacent equal values.
    """
    n = len(view)
    for r in range(n):
        for c in range(n):
            tile = view[r][c]
            if tile is None:
                return True
            below = view[r + 1][c] if r + 1 < n else None
            if below is not None and below.value == tile.value:
                return True
            right = view[r][c + 1] if c + 1 < n else None
            if right is not None and right.value == tile.value:
                return True
    return False


def has_won(tiles: Iterable[Tile], win_tile: int = DEFAULT_WIN_TILE) -> bool:
    """
    Check if a tile has reached the win target.
    Args:
        tiles (Iterable[Tile]): The tile set.
        win_tile (int): The tile value that signifies a win. Default is 2048.
    Returns:
        bool: True if the largest tile is at least win_tile.
    """
    return max_tile(tiles) >= win_tile
