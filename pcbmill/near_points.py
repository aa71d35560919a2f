"""Snap points that lie very close to one another onto a single location."""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Sequence

Point = tuple[float, float]
Path = list[Point]


def _squared_distance(a: Point, b: Point) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2


def _merge_point_map(points: dict[Point, Point], distance: float) -> int:
    """Redirect nearby points to a common target; return how many moved.

    This is a fast, greedy pass rather than a full clustering.
    """
    keys = sorted(points)
    limit = distance * distance
    merged = 0
    for index, key in enumerate(keys):
        target = points[key]
        end = bisect.bisect_right(keys, (target[0] + distance, target[1] + distance))
        for other in keys[index:end]:
            current = points[other]
            if current != target and _squared_distance(target, current) <= limit:
                merged += 1
                points[other] = target
    return merged


def _normalise(path: Iterable[Sequence[float]]) -> Path:
    return [(point[0], point[1]) for point in path]


def merge_near_points(
    paths: Iterable[Iterable[Sequence[float]]], distance: float
) -> tuple[list[Path], int]:
    """Merge points of ``paths`` closer than ``distance``.

    Returns the adjusted paths and the number of points that were moved.
    """
    result = [_normalise(path) for path in paths]
    mapping = {point: point for path in result for point in path}
    merged = _merge_point_map(mapping, distance)
    if merged:
        result = [[mapping[point] for point in path] for path in result]
    return result, merged


def merge_near_points_flagged(
    paths: Iterable[tuple[Iterable[Sequence[float]], bool]], distance: float
) -> tuple[list[tuple[Path, bool]], int]:
    """Like :func:`merge_near_points` for ``(path, allow_reversal)`` pairs."""
    result = [(_normalise(path), flag) for path, flag in paths]
    mapping = {point: point for path, _ in result for point in path}
    merged = _merge_point_map(mapping, distance)
    if merged:
        result = [([mapping[point] for point in path], flag) for path, flag in result]
    return result, merged