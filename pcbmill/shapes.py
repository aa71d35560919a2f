"""Geometric primitives used to turn Gerber apertures and draws into polygons."""

from __future__ import annotations

import itertools
import math
from collections.abc import Sequence

import shapely
from shapely.geometry import LineString, MultiPoint, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

Point = tuple[float, float]


def _point(p: Sequence[float]) -> Point:
    return (float(p[0]), float(p[1]))


def _as_multipolygon(geometry: BaseGeometry) -> MultiPolygon:
    """Keep only the polygonal parts of ``geometry`` as a MultiPolygon."""
    if geometry.is_empty:
        return MultiPolygon()
    if isinstance(geometry, MultiPolygon):
        return geometry
    if isinstance(geometry, Polygon):
        return MultiPolygon([geometry])
    if hasattr(geometry, "geoms"):
        parts = [poly for part in geometry.geoms for poly in _as_multipolygon(part).geoms]
        return MultiPolygon(parts)
    return MultiPolygon()


def _union(a: BaseGeometry, b: BaseGeometry) -> MultiPolygon:
    return _as_multipolygon(a.union(b))


def _difference(a: BaseGeometry, b: BaseGeometry) -> MultiPolygon:
    return _as_multipolygon(a.difference(b))


def _polygon(points: Sequence[Sequence[float]]) -> MultiPolygon:
    """A polygon from a ring of points; degenerate rings give an empty result."""
    ring = [_point(p) for p in points]
    if len(set(ring)) < 3:
        return MultiPolygon()
    polygon = Polygon(ring)
    if polygon.area == 0:
        return MultiPolygon()
    if not polygon.is_valid:
        return _as_multipolygon(shapely.make_valid(polygon))
    return MultiPolygon([polygon])


def _signed_area(ring: Sequence[Point]) -> float:
    if not ring:
        return 0.0
    closed = list(ring)
    if closed[0] != closed[-1]:
        closed.append(closed[0])
    return sum(x1 * y2 - x2 * y1 for (x1, y1), (x2, y2) in itertools.pairwise(closed)) / 2


def _quad_segs(circle_points: int) -> int:
    return max(1, math.ceil(circle_points / 4))


def make_regular_polygon(
    center: Sequence[float],
    diameter: float,
    vertices: float,
    offset: float = 0.0,
    hole_diameter: float = 0.0,
    circle_points: int = 0,
) -> MultiPolygon:
    """Regular polygon of outer ``diameter``, optionally with a round hole.

    ``offset`` is the angle in degrees of the first vertex.
    """
    cx, cy = _point(center)
    count = int(vertices)
    if count < 1:
        return MultiPolygon()
    step = -2 * math.pi / count
    start = math.radians(offset)
    ring = [
        (
            math.cos(step * i + start) * diameter / 2 + cx,
            math.sin(step * i + start) * diameter / 2 + cy,
        )
        for i in range(count)
    ]
    result = _polygon(ring)
    if hole_diameter > 0:
        result = _difference(result, make_regular_polygon(center, hole_diameter, circle_points, 0))
    return result


def make_rectangle(
    center: Sequence[float],
    width: float,
    height: float,
    hole_diameter: float = 0.0,
    circle_points: int = 0,
) -> MultiPolygon:
    """Axis-aligned rectangle centred on ``center``, optionally with a round hole."""
    x, y = _point(center)
    result = _polygon(
        [
            (x - width / 2, y - height / 2),
            (x - width / 2, y + height / 2),
            (x + width / 2, y + height / 2),
            (x + width / 2, y - height / 2),
        ]
    )
    if hole_diameter > 0:
        result = _difference(result, make_regular_polygon(center, hole_diameter, circle_points, 0))
    return result


def make_segment_rectangle(
    point1: Sequence[float], point2: Sequence[float], height: float
) -> MultiPolygon:
    """Rectangle of thickness ``height`` along the segment, with flat ends."""
    line = LineString([_point(point1), _point(point2)])
    return _as_multipolygon(line.buffer(height / 2, cap_style="flat", join_style="mitre"))


def make_oval(
    center: Sequence[float],
    width: float,
    height: float,
    hole_diameter: float = 0.0,
    circle_points: int = 0,
) -> MultiPolygon:
    """Stadium shape of the given size, optionally with a round hole."""
    cx, cy = _point(center)
    if width > height:
        start, end = (cx - (width - height) / 2, cy), (cx + (width - height) / 2, cy)
    elif width < height:
        start, end = (cx, cy - (height - width) / 2), (cx, cy + (height - width) / 2)
    else:
        return make_regular_polygon(center, width, circle_points, 0, hole_diameter, circle_points)

    oval = _as_multipolygon(
        LineString([start, end]).buffer(
            min(width, height) / 2,
            quad_segs=_quad_segs(circle_points),
            cap_style="round",
            join_style="round",
        )
    )
    if hole_diameter > 0:
        oval = _difference(oval, make_regular_polygon(center, hole_diameter, circle_points, 0))
    return oval


def linear_draw_rectangular_aperture(
    start: Sequence[float], end: Sequence[float], width: float, height: float
) -> MultiPolygon:
    """Area swept by a rectangular aperture moved from ``start`` to ``end``."""
    corners = [
        (x + w * width / 2, y + h * height / 2)
        for x, y in (_point(start), _point(end))
        for w in (-1, 1)
        for h in (-1, 1)
    ]
    return _as_multipolygon(MultiPoint(corners).convex_hull)


def get_angle(
    start: Sequence[float], center: Sequence[float], stop: Sequence[float], clockwise: bool
) -> float:
    """Angle swept from ``start`` to ``stop`` around ``center``, in radians.

    Negative when ``clockwise``, otherwise non-negative.
    """
    start_angle = math.atan2(start[1] - center[1], start[0] - center[0])
    stop_angle = math.atan2(stop[1] - center[1], stop[0] - center[0])
    delta = stop_angle - start_angle
    while clockwise and delta > 0:
        delta -= 2 * math.pi
    while not clockwise and delta < 0:
        delta += 2 * math.pi
    return delta


def circular_arc(
    start: Sequence[float],
    stop: Sequence[float],
    center: Sequence[float],
    radius: float,
    radius2: float,
    delta_angle: float,
    clockwise: bool,
    circle_points: int,
) -> list[Point]:
    """Approximate an arc by a polyline from ``start`` to ``stop``.

    Decides between single- and multi-quadrant interpretation and corrects the
    centre when the arc is single-quadrant.
    """
    start = _point(start)
    stop = _point(stop)
    center = _point(center)
    definitely_sq = radius != radius2
    if start == stop:
        if definitely_sq or abs(delta_angle) < math.pi:
            delta_angle = 0.0
        else:
            delta_angle = -2 * math.pi if clockwise else 2 * math.pi
    else:
        signs = (-1.0, 1.0) if definitely_sq else (1.0,)
        i = abs(center[0] - start[0])
        j = abs(center[1] - start[1])
        delta_angle = get_angle(start, center, stop, clockwise)
        for i_sign, j_sign in itertools.product(signs, signs):
            candidate = (start[0] + i * i_sign, start[1] + j * j_sign)
            new_angle = get_angle(start, candidate, stop, clockwise)
            if abs(new_angle) > math.pi:
                continue
            if abs(math.dist(start, candidate) - math.dist(stop, candidate)) < abs(
                math.dist(start, center) - math.dist(stop, center)
            ):
                delta_angle = new_angle
                center = candidate

    start_angle = math.atan2(start[1] - center[1], start[0] - center[0])
    stop_angle = start_angle + delta_angle
    start_radius = math.dist(start, center)
    stop_radius = math.dist(stop, center)
    steps = math.ceil(abs(delta_angle) / (2 * math.pi) * circle_points) + 1

    path = [start]
    for step in range(1, steps - 1):
        stop_weight = step / (steps - 1)
        start_weight = 1 - stop_weight
        angle = start_angle * start_weight + stop_angle * stop_weight
        current_radius = start_radius * start_weight + stop_radius * stop_weight
        path.append(
            (
                math.cos(angle) * current_radius + center[0],
                math.sin(angle) * current_radius + center[1],
            )
        )
    path.append(stop)
    return path


def get_all_ls(ls: Sequence[Sequence[float]]) -> list[list[Point]]:
    """Split a linestring at repeated points into loops plus the remainder.

    No returned linestring repeats a point except a loop's first and last.
    """
    points = [_point(p) for p in ls]
    last = len(points) - 1
    for first_index, first in enumerate(points):
        for second_index, second in enumerate(points[first_index + 1 :], start=first_index + 1):
            if first != second:
                continue
            if first_index == 0 and second_index == last:
                continue
            inner = points[first_index:second_index] + [first]
            outer = points[:first_index] + points[second_index:]
            return get_all_ls(outer) + get_all_ls(inner)
    return [points]


def get_all_rings(ring: Sequence[Sequence[float]]) -> list[list[Point]]:
    """Split a ring into simple rings at its repeated points."""
    return get_all_ls(ring)


def simplify_cutins(ring: Sequence[Sequence[float]]) -> MultiPolygon:
    """Turn a ring with cut-ins into polygons with holes.

    Sub-rings with the orientation of the whole ring are filled; those with
    the opposite orientation are cut out.
    """
    points = [_point(p) for p in ring]
    area = _signed_area(points)
    rings = [
        (r, ring_area)
        for r in get_all_rings(points)
        if len(r) >= 4 and (ring_area := _signed_area(r)) != 0
    ]
    result = MultiPolygon()
    for r, ring_area in rings:
        if ring_area * area > 0:
            result = _union(result, _polygon(r))
    for r, ring_area in rings:
        if ring_area * area < 0:
            result = _difference(result, _polygon(r))
    return result


def make_moire(parameters: Sequence[float], circle_points: int) -> MultiPolygon:
    """Moiré macro primitive: concentric rings with a crosshair."""
    center = (parameters[0], parameters[1])
    outer_diameter = parameters[2]
    ring_thickness = parameters[3]
    gap_thickness = parameters[4]
    max_rings = int(parameters[5])
    crosshair_thickness = parameters[6]
    crosshair_length = parameters[7]

    moire = make_rectangle(center, crosshair_thickness, crosshair_length, 0, 0)
    moire = _union(moire, make_rectangle(center, crosshair_length, crosshair_thickness, 0, 0))
    for index in range(max_rings):
        external = outer_diameter - 2 * (ring_thickness + gap_thickness) * index
        if external <= 0:
            break
        internal = max(external - 2 * ring_thickness, 0)
        moire = _union(
            moire, make_regular_polygon(center, external, circle_points, 0, internal, circle_points)
        )
    return moire


def make_thermal(
    center: Sequence[float],
    external_diameter: float,
    internal_diameter: float,
    gap_width: float,
    circle_points: int,
) -> MultiPolygon:
    """Thermal macro primitive: a ring split by two perpendicular gaps."""
    ring = make_regular_polygon(
        center, external_diameter, circle_points, 0, internal_diameter, circle_points
    )
    vertical = make_rectangle(center, gap_width, 2 * external_diameter, 0, 0)
    horizontal = make_rectangle(center, 2 * external_diameter, gap_width, 0, 0)
    return _difference(_difference(ring, vertical), horizontal)