import pytest

from core import reduce_line
from helpers import line_of, line_values


def test_pair_then_single_slides_toward_start():
    result = reduce_line(line_of(2, 2, 4, None), -1)
    assert line_values(result.cells) == [4, 4, None, None]
    assert result.gained == 4
    assert result.moved


def test_trailing_tile_does_not_merge_twice():
    result = reduce_line(line_of(2, None, 2, 2), -1)
    assert line_values(result.cells) == [4, 2, None, None]
    assert result.gained == 4
    assert result.moved


def test_three_equal_tiles_merge_pair_nearest_target_edge():
    result = reduce_line(line_of(2, 2, 2, None), 1)
    assert line_values(result.cells) == [None, None, 2, 4]
    assert result.gained == 4


def test_four_equal_tiles_make_two_merges():
    result = reduce_line(line_of(2, 2, 2, 2), -1)
    assert line_values(result.cells) == [4, 4, None, None]
    assert result.gained == 8


def test_merged_tile_is_not_merged_again_in_same_pass():
    result = reduce_line(line_of(4, 2, 2, None), -1)
    assert line_values(result.cells) == [4, 4, None, None]
    assert result.gained == 4


def test_slide_without_merge_toward_end():
    result = reduce_line(line_of(2, None, 4, None, None), 1)
    assert line_values(result.cells) == [None, None, None, 2, 4]
    assert result.moved
    assert result.gained == 0


def test_merge_keeps_destination_identity_and_marks_it():
    cells = line_of(None, 8, None, 8)
    destination = cells[3]
    result = reduce_line(cells, 1)
    merged = result.cells[3]
    assert merged.id == destination.id
    assert merged.value == 16
    assert merged.just_merged
    assert [c for c in result.cells if c is not None] == [merged]


def test_empty_line_is_noop():
    result = reduce_line(line_of(None, None, None, None), -1)
    assert line_values(result.cells) == [None] * 4
    assert not result.moved
    assert result.gained == 0


@pytest.mark.parametrize("direction", [-1, 1])
def test_packed_line_without_pairs_is_noop(direction):
    cells = line_of(2, 4, 8, 16)
    result = reduce_line(cells, direction)
    assert result.cells == cells
    assert not result.moved
    assert result.gained == 0


def test_input_line_is_not_modified():
    cells = line_of(2, 2, None, 4)
    before = list(cells)
    reduce_line(cells, -1)
    assert cells == before


def test_invalid_direction():
    with pytest.raises(ValueError):
        reduce_line(line_of(2, 2), 0)
