import random
from collections import Counter

import pytest

from core import (
    Direction,
    InvalidBoardStateError,
    Tile,
    apply_move,
    new_tile_id,
)
from helpers import tiles_from_rows, value_rows


BOARD = [
    [2, 2, 4, 0],
    [0, 4, 0, 4],
    [8, 0, 8, 8],
    [2, 0, 0, 2],
]


def test_move_left():
    outcome = apply_move(tiles_from_rows(BOARD), 4, Direction.LEFT)
    assert value_rows(outcome.tiles, 4) == [
        [4, 4, 0, 0],
        [8, 0, 0, 0],
        [16, 8, 0, 0],
        [4, 0, 0, 0],
    ]
    assert outcome.moved
    assert outcome.gained == 4 + 8 + 16 + 4


def test_move_right():
    outcome = apply_move(tiles_from_rows(BOARD), 4, Direction.RIGHT)
    assert value_rows(outcome.tiles, 4) == [
        [0, 0, 4, 4],
        [0, 0, 0, 8],
        [0, 0, 8, 16],
        [0, 0, 0, 4],
    ]
    assert outcome.gained == 4 + 8 + 16 + 4


def test_move_up():
    outcome = apply_move(tiles_from_rows(BOARD), 4, Direction.UP)
    assert value_rows(outcome.tiles, 4) == [
        [2, 2, 4, 4],
        [8, 4, 8, 8],
        [2, 0, 0, 2],
        [0, 0, 0, 0],
    ]
    assert outcome.moved
    assert outcome.gained == 0


def test_move_down():
    outcome = apply_move(tiles_from_rows(BOARD), 4, Direction.DOWN)
    assert value_rows(outcome.tiles, 4) == [
        [0, 0, 0, 0],
        [2, 0, 0, 4],
        [8, 2, 4, 8],
        [2, 4, 8, 2],
    ]
    assert outcome.gained == 0


def test_positions_follow_new_index():
    tiles = tiles_from_rows([
        [0, 0, 0],
        [0, 0, 0],
        [0, 0, 2],
    ])
    outcome = apply_move(tiles, 3, Direction.UP)
    (tile,) = outcome.tiles
    assert (tile.row, tile.col) == (0, 2)
    assert tile.id == tiles[0].id


def test_packed_edge_is_rejected_and_returns_input():
    tiles = tiles_from_rows([
        [2, 4, 0, 0],
        [8, 0, 0, 0],
        [4, 2, 8, 0],
        [0, 0, 0, 0],
    ])
    outcome = apply_move(tiles, 4, Direction.LEFT)
    assert not outcome.moved
    assert outcome.gained == 0
    assert outcome.tiles == tiles


def test_merge_markers_only_last_one_move():
    tiles = tiles_from_rows([
        [2, 2, 0],
        [0, 0, 0],
        [0, 0, 0],
    ])
    first = apply_move(tiles, 3, Direction.LEFT)
    assert [t.just_merged for t in first.tiles] == [True]
    second = apply_move(first.tiles, 3, Direction.DOWN)
    assert [t.just_merged for t in second.tiles] == [False]
    assert second.tiles[0].id == first.tiles[0].id


def test_input_tiles_are_not_modified():
    tiles = tiles_from_rows(BOARD)
    copy = tuple(Tile(t.id, t.row, t.col, t.value, t.just_merged) for t in tiles)
    apply_move(tiles, 4, Direction.RIGHT)
    assert tiles == copy


def _random_board(rng, n):
    rows = [[rng.choice([0, 0, 2, 2, 4, 8]) for _ in range(n)] for _ in range(n)]
    return tiles_from_rows(rows)


@pytest.mark.parametrize("seed", range(20))
@pytest.mark.parametrize("n", [4, 5])
def test_value_conservation_and_single_merge(seed, n):
    rng = random.Random(seed)
    tiles = _random_board(rng, n)
    for direction in Direction:
        outcome = apply_move(tiles, n, direction)
        merged = [t.value for t in outcome.tiles if t.just_merged]
        assert sum(t.value for t in outcome.tiles) == sum(t.value for t in tiles)
        # Drop each merged pair, add its result: what remains is the board after the move.
        expected = Counter(t.value for t in tiles)
        expected.subtract(Counter(v // 2 for v in merged for _ in range(2)))
        expected.update(merged)
        assert +expected == Counter(t.value for t in outcome.tiles)
        # Each merge removes exactly one tile and produces exactly one marked tile.
        assert len(tiles) - len(outcome.tiles) == len(merged)
        assert outcome.gained == sum(merged)
        ids = [t.id for t in outcome.tiles]
        assert len(ids) == len(set(ids))
        assert set(ids) <= {t.id for t in tiles}
        if not outcome.moved:
            assert outcome.tiles == tiles


def test_duplicate_cell_is_invalid():
    tiles = (Tile(new_tile_id(), 0, 0, 2), Tile(new_tile_id(), 0, 0, 4))
    with pytest.raises(InvalidBoardStateError):
        apply_move(tiles, 4, Direction.LEFT)


def test_out_of_range_tile_is_invalid():
    tiles = (Tile(new_tile_id(), 4, 0, 2),)
    with pytest.raises(InvalidBoardStateError):
        apply_move(tiles, 4, Direction.LEFT)


def test_non_power_of_two_is_invalid():
    tiles = (Tile(new_tile_id(), 1, 1, 6),)
    with pytest.raises(InvalidBoardStateError):
        apply_move(tiles, 4, Direction.UP)


def test_board_size_below_two_is_invalid():
    with pytest.raises(InvalidBoardStateError):
        apply_move((), 1, Direction.UP)


def test_unknown_direction():
    with pytest.raises(ValueError):
        apply_move(tiles_from_rows(BOARD), 4, "left")
