"""Placement of holding bridges along an outline cut path."""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterable, Sequence

Point = tuple[float, float]


def intermediate_point(p0: Sequence[float], p1: Sequence[float], position: float) -> Point:
    """Point at fraction ``position`` of the way from ``p0`` to ``p1``."""
    return (
        p0[0] + (p1[0] - p0[0]) * position,
        p0[1] + (p1[1] - p0[1]) * position,
    )


def _closest_pair(
    clique: set[int], locations: dict[int, Point], closest: tuple[int, int]
) -> tuple[float, tuple[int, int]]:
    best = math.inf
    for first, second in itertools.combinations(sorted(clique), 2):
        distance = math.dist(locations[first], locations[second])
        if distance < best:
            best = distance
            closest = (first, second)
    return best, closest


def _min_distance_to_clique(
    point: Point, excluded: tuple[int, int], clique: set[int], locations: dict[int, Point]
) -> list[float]:
    return [
        min(
            (math.dist(point, locations[member]) for member in clique if member != skip),
            default=math.inf,
        )
        for skip in excluded
    ]


def find_bridge_segments(path: Sequence[Sequence[float]], number: int, length: float) -> set[int]:
    """Choose up to ``number`` segment indices of ``path`` for bridges.

    Only segments at least ``length`` long qualify.  Starting from the first
    eligible segments, one of the two closest choices is repeatedly moved to
    whichever candidate most increases the minimum distance between choices.
    """
    if number < 1:
        return set()

    candidates = {
        index: intermediate_point(start, end, 0.5)
        for index, (start, end) in enumerate(itertools.pairwise(path))
        if math.dist(start, end) >= length
    }
    chosen = set(itertools.islice(candidates, number))
    closest = (0, 0)

    while True:
        best, closest = _closest_pair(chosen, candidates, closest)
        new_score = best
        swap: tuple[int, int] | None = None
        for index, location in candidates.items():
            if index in chosen:
                continue
            scores = _min_distance_to_clique(location, closest, chosen, candidates)
            for excluded, score in zip(closest, scores):
                if score > new_score:
                    swap = (excluded, index)
                    new_score = score
        if swap is None:
            return chosen
        chosen.remove(swap[0])
        chosen.add(swap[1])


def insert_bridges(
    path: Sequence[Sequence[float]], segments: Iterable[int], length: float
) -> tuple[list[Point], list[int]]:
    """Split the given segments with a centred bridge of ``length``.

    Returns the new path and the indices at which each bridge starts, in
    increasing order.
    """
    result = [(point[0], point[1]) for point in path]
    starts = []
    for offset, segment in enumerate(sorted(segments)):
        index = segment + 2 * offset
        start, end = result[index], result[index + 1]
        half = length / math.dist(start, end) / 2
        result[index + 1 : index + 1] = [
            intermediate_point(start, end, 0.5 - half),
            intermediate_point(start, end, 0.5 + half),
        ]
        starts.append(index + 1)
    return result, starts


def make_bridges(
    path: Sequence[Sequence[float]], number: int, length: float
) -> tuple[list[Point], list[int]]:
    """Insert at most ``number`` bridges of ``length`` into ``path``."""
    return insert_bridges(path, find_bridge_segments(path, number, length), length)