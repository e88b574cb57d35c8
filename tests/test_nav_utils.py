import pytest

from access_nav.nav_utils import (
    EMPTY_INDEX,
    clamp_index,
    compass_direction,
    euclidean_distance,
    step_index,
    wrap_index,
)


@pytest.mark.parametrize(
    "index,count,expected",
    [(-1, 5, 4), (5, 5, 0), (7, 3, 1), (0, 1, 0), (-6, 5, 4), (3, 0, EMPTY_INDEX), (0, -2, EMPTY_INDEX)],
)
def test_wrap_index(index, count, expected):
    assert wrap_index(index, count) == expected


def test_wrap_index_stays_in_range():
    for count in range(1, 8):
        for index in range(-20, 20):
            assert 0 <= wrap_index(index, count) < count


def test_step_index_from_empty_selection():
    assert step_index(EMPTY_INDEX, 1, 4) == 0
    assert step_index(EMPTY_INDEX, -1, 4) == 3
    assert step_index(2, 1, 0) == EMPTY_INDEX


def test_step_index_wraps_both_ways():
    assert step_index(3, 1, 4) == 0
    assert step_index(0, -1, 4) == 3


def test_clamp_index():
    assert clamp_index(9, 3) == 2
    assert clamp_index(-4, 3) == 0
    assert clamp_index(1, 0) == EMPTY_INDEX


def test_euclidean_distance():
    assert euclidean_distance((0, 0), (3, 4)) == 5


@pytest.mark.parametrize(
    "dx,dy,expected",
    [
        (1, 0, "east"),
        (1, 1, "northeast"),
        (0, 1, "north"),
        (-1, 1, "northwest"),
        (-1, 0, "west"),
        (-1, -1, "southwest"),
        (0, -1, "south"),
        (1, -1, "southeast"),
        (10, 3, "east"),
        (3, 10, "north"),
        (0, 0, ""),
    ],
)
def test_compass_direction(dx, dy, expected):
    assert compass_direction(dx, dy) == expected
