import math

import pytest

from pcbmill.bridges import (
    find_bridge_segments,
    insert_bridges,
    intermediate_point,
    make_bridges,
)

SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]


def test_intermediate_point_endpoints():
    assert intermediate_point((1.0, 2.0), (5.0, 7.0), 0.0) == (1.0, 2.0)
    assert intermediate_point((1.0, 2.0), (5.0, 7.0), 1.0) == (5.0, 7.0)


def test_intermediate_point_midpoint():
    assert intermediate_point((0.0, 0.0), (2.0, 4.0), 0.5) == (1.0, 2.0)


def test_zero_bridges_requested():
    assert find_bridge_segments(SQUARE, 0, 1.0) == set()


def test_segments_too_short_are_skipped():
    assert find_bridge_segments(SQUARE, 2, 11.0) == set()


def test_square_bridges_on_opposite_sides():
    assert find_bridge_segments(SQUARE, 2, 1.0) == {0, 2}


def test_fewer_candidates_than_requested():
    path = [(0.0, 0.0), (10.0, 0.0), (10.0, 0.5)]
    assert find_bridge_segments(path, 3, 1.0) == {0}


def test_insert_bridges_geometry():
    new_path, starts = insert_bridges(SQUARE, {2, 0}, 2.0)
    assert len(new_path) == len(SQUARE) + 2 * len(starts)
    assert starts == sorted(starts)
    for start in starts:
        assert math.dist(new_path[start], new_path[start + 1]) == pytest.approx(2.0)


def test_insert_bridges_keeps_original_points():
    new_path, starts = insert_bridges(SQUARE, {1, 3}, 2.0)
    inserted = {index for start in starts for index in (start, start + 1)}
    remaining = [point for index, point in enumerate(new_path) if index not in inserted]
    assert remaining == SQUARE


def test_insert_bridges_does_not_modify_input():
    path = list(SQUARE)
    insert_bridges(path, {0}, 2.0)
    assert path == SQUARE


def test_make_bridges_points_lie_on_segments():
    new_path, starts = make_bridges(SQUARE, 2, 3.0)
    assert len(starts) == 2
    for start in starts:
        before, first, second, after = new_path[start - 1 : start + 3]
        total = math.dist(before, after)
        pieces = math.dist(before, first) + math.dist(first, second) + math.dist(second, after)
        assert pieces == pytest.approx(total)
        assert math.dist(first, second) == pytest.approx(3.0)


def test_make_bridges_none_requested():
    new_path, starts = make_bridges(SQUARE, 0, 1.0)
    assert starts == []
    assert new_path == SQUARE