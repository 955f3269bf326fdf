from __future__ import annotations

from typing import Optional, Sequence

from core import Tile, new_tile_id


def tiles_from_rows(rows: Sequence[Sequence[int]]) -> tuple[Tile, ...]:
    """Build a tile set from a grid of values, 0 meaning an empty cell."""
    return tuple(
        Tile(new_tile_id(), r, c, value)
        for r, row in enumerate(rows)
        for c, value in enumerate(row)
        if value
    )


def value_rows(tiles: Sequence[Tile], n: int) -> list[list[int]]:
    rows = [[0] * n for _ in range(n)]
    for tile in tiles:
        rows[tile.row][tile.col] = tile.value
    return rows


def line_of(*values: Optional[int]) -> list[Optional[Tile]]:
    return [
        Tile(new_tile_id(), 0, i, value) if value else None
        for i, value in enumerate(values)
    ]


def line_values(cells: Sequence[Optional[Tile]]) -> list[Optional[int]]:
    return [cell.value if cell else None for cell in cells]


def checkerboard(n: int, a: int = 2, b: int = 4) -> list[list[int]]:
    """A full board where no two adjacent cells share a value."""
    return [[a if (r + c) % 2 == 0 else b for c in range(n)] for r in range(n)]
