"""Rendering of a parsed Gerber image into polygons and tool paths."""

from __future__ import annotations

import logging
import math
from collections import defaultdict, deque
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import pairwise

import shapely
from shapely import affinity
from shapely.geometry import LineString, MultiPolygon, Point as ShapelyPoint, Polygon
from shapely.geometry.base import BaseGeometry

from pcbmill.gerber_model import (
    Aperture,
    ApertureState,
    ApertureType,
    GerberImage,
    GerberLayer,
    Interpolation,
    Polarity,
    Unit,
    layers_equivalent,
)
from pcbmill.near_points import merge_near_points
from pcbmill.shapes import (
    circular_arc,
    get_all_ls,
    linear_draw_rectangular_aperture,
    make_moire,
    make_oval,
    make_rectangle,
    make_regular_polygon,
    make_segment_rectangle,
    make_thermal,
    simplify_cutins,
)

logger = logging.getLogger(__name__)

Point = tuple[float, float]
Path = list[Point]

_MACRO_PRIMITIVES = {
    ApertureType.MACRO_CIRCLE,
    ApertureType.MACRO_OUTLINE,
    ApertureType.MACRO_POLYGON,
    ApertureType.MACRO_MOIRE,
    ApertureType.MACRO_THERMAL,
    ApertureType.MACRO_LINE20,
    ApertureType.MACRO_LINE21,
    ApertureType.MACRO_LINE22,
}
_SIMPLE_APERTURES = {
    ApertureType.NONE,
    ApertureType.CIRCLE,
    ApertureType.RECTANGLE,
    ApertureType.OVAL,
    ApertureType.POLYGON,
}
_ZOOMED = {Interpolation.LINEAR_X10, Interpolation.LINEAR_X01, Interpolation.LINEAR_X001}


class UnsupportedPolarityError(Exception):
    """Raised for image or layer polarities that cannot be rendered."""

    def __init__(self) -> None:
        super().__init__(
            "Non-positive image polarity is deprecated by the Gerber standard and "
            "unsupported; re-run without the --vectorial flag"
        )


def _to_multipolygon(geometry: BaseGeometry) -> MultiPolygon:
    if geometry.is_empty:
        return MultiPolygon()
    if isinstance(geometry, MultiPolygon):
        return geometry
    if isinstance(geometry, Polygon):
        return MultiPolygon([geometry])
    if hasattr(geometry, "geoms"):
        return MultiPolygon(
            [poly for part in geometry.geoms for poly in _to_multipolygon(part).geoms]
        )
    return MultiPolygon()


def _union(a: BaseGeometry, b: BaseGeometry) -> MultiPolygon:
    return _to_multipolygon(a.union(b))


def _difference(a: BaseGeometry, b: BaseGeometry) -> MultiPolygon:
    return _to_multipolygon(a.difference(b))


def _xor(a: BaseGeometry, b: BaseGeometry) -> MultiPolygon:
    return _to_multipolygon(a.symmetric_difference(b))


def _loop_polygon(points: Sequence[Point]) -> MultiPolygon:
    if len(set(points)) < 3:
        return MultiPolygon()
    polygon = Polygon(points)
    if polygon.area == 0:
        return MultiPolygon()
    if not polygon.is_valid:
        return _to_multipolygon(shapely.make_valid(polygon))
    return MultiPolygon([polygon])


@dataclass
class MpPair:
    """Filled closed loops, combined by xor, and all other shapes, combined by union."""

    filled_closed_lines: MultiPolygon = field(default_factory=MultiPolygon)
    shapes: MultiPolygon = field(default_factory=MultiPolygon)

    def __add__(self, other: MpPair) -> MpPair:
        return MpPair(
            filled_closed_lines=_xor(self.filled_closed_lines, other.filled_closed_lines),
            shapes=_union(self.shapes, other.shapes),
        )


def merge_multi_draws(draws: Sequence[MpPair]) -> MpPair:
    """Combine all draws, pairing them up so merged shapes stay similar in size."""
    current = list(draws)
    if not current:
        return MpPair()
    while len(current) > 1:
        merged = [current[0]] if len(current) % 2 else []
        rest = current[len(merged):]
        merged.extend(a + b for a, b in zip(rest[::2], rest[1::2]))
        current = merged
    return current[0]


def generate_layers(
    layers: Sequence[tuple[GerberLayer, Sequence[MpPair]]], member: str, xor_layers: bool
) -> MultiPolygon:
    """Combine the ``member`` shapes of every layer, honouring step-and-repeat and polarity."""
    output = MultiPolygon()
    for layer, multi_draws in layers:
        draws = getattr(merge_multi_draws(multi_draws), member)
        repeat = layer.step_and_repeat

        original = draws
        for sr_x in range(1, repeat.x):
            draws = _union(draws, affinity.translate(original, repeat.dist_x * sr_x, 0))
        original = draws
        for sr_y in range(1, repeat.y):
            draws = _union(draws, affinity.translate(original, 0, repeat.dist_y * sr_y))

        if xor_layers:
            output = _xor(output, draws)
        elif layer.polarity == Polarity.DARK:
            output = _union(output, draws)
        elif layer.polarity == Polarity.CLEAR:
            output = _difference(output, draws)
        else:
            raise UnsupportedPolarityError()
    return output


def _padded(parameters: Sequence[float], count: int) -> list[float]:
    values = list(parameters)
    return values + [0.0] * max(0, count - len(values))


def _macro_shape(
    kind: ApertureType, parameters: Sequence[float], circle_points: int
) -> tuple[MultiPolygon, int, float] | None:
    """Shape, polarity and rotation of one macro primitive, or None to skip it."""
    p = _padded(parameters, 10)
    if kind == ApertureType.MACRO_CIRCLE:
        return make_regular_polygon((p[2], p[3]), p[1], circle_points, 0), int(p[0]), p[4]
    if kind == ApertureType.MACRO_OUTLINE:
        count = round(p[1])
        p = _padded(parameters, 2 * count + 5)
        ring = [(p[i * 2 + 2], p[i * 2 + 3]) for i in range(count + 1)]
        if ring and ring[0] != ring[-1]:
            ring.append(ring[0])
        return simplify_cutins(ring), int(p[0]), p[2 * count + 4]
    if kind == ApertureType.MACRO_POLYGON:
        return make_regular_polygon((p[2], p[3]), p[4], p[1], 0), int(p[0]), p[5]
    if kind == ApertureType.MACRO_MOIRE:
        return make_moire(p, circle_points), 1, p[8]
    if kind == ApertureType.MACRO_THERMAL:
        return make_thermal((p[0], p[1]), p[2], p[3], p[4], circle_points), 1, p[5]
    if kind == ApertureType.MACRO_LINE20:
        return make_segment_rectangle((p[2], p[3]), (p[4], p[5]), p[1]), int(p[0]), p[6]
    if kind == ApertureType.MACRO_LINE21:
        return make_rectangle((p[3], p[4]), p[1], p[2], 0, 0), int(p[0]), p[5]
    if kind == ApertureType.MACRO_LINE22:
        center = (p[3] + p[1] / 2, p[4] + p[2] / 2)
        return make_rectangle(center, p[1], p[2], 0, 0), int(p[0]), p[5]
    if kind in _SIMPLE_APERTURES:
        logger.warning("Non-macro aperture during macro drawing: skipping")
    elif kind == ApertureType.MACRO:
        logger.warning("Macro start aperture during macro drawing: skipping")
    else:
        logger.warning("Unrecognized aperture: skipping")
    return None


def _aperture_shape(number: int, aperture: Aperture, circle_points: int) -> MultiPolygon | None:
    origin = (0.0, 0.0)
    p = _padded(aperture.parameters, 4)
    kind = aperture.type
    if kind == ApertureType.NONE:
        return None
    if kind == ApertureType.CIRCLE:
        return make_regular_polygon(origin, p[0], circle_points, p[1], p[2], circle_points)
    if kind == ApertureType.RECTANGLE:
        return make_rectangle(origin, p[0], p[1], p[2], circle_points)
    if kind == ApertureType.OVAL:
        return make_oval(origin, p[0], p[1], p[2], circle_points)
    if kind == ApertureType.POLYGON:
        return make_regular_polygon(origin, p[0], p[1], p[2], p[3], circle_points)
    if kind == ApertureType.MACRO:
        if aperture.simplified is None:
            logger.warning("Macro aperture %d is not simplified: skipping", number)
            return None
        shape = MultiPolygon()
        for primitive in aperture.simplified:
            described = _macro_shape(primitive.type, primitive.parameters, circle_points)
            if described is None:
                continue
            mpoly, polarity, rotation = described
            rotated = affinity.rotate(mpoly, rotation, origin=(0, 0)) if not mpoly.is_empty else mpoly
            if polarity == 0:
                shape = _difference(shape, rotated)
            else:
                shape = _union(shape, rotated)
        return shape
    if kind in _MACRO_PRIMITIVES:
        logger.warning("Macro aperture during non-macro drawing: skipping")
    else:
        logger.warning("Unrecognized aperture: skipping")
    return None


def generate_apertures_map(
    apertures: Mapping[int, Aperture], circle_points: int
) -> dict[int, MultiPolygon]:
    """Shapes of all drawable apertures, centred on the origin, by aperture number."""
    result = {}
    for number, aperture in sorted(apertures.items()):
        if aperture is None:
            continue
        shape = _aperture_shape(number, aperture, circle_points)
        if shape is not None:
            result[number] = shape
    return result


def _join_segments(paths: Iterable[Sequence[Point]]) -> list[Path]:
    """Chain the segments of ``paths`` into as few long paths as possible."""
    edges: list[tuple[Point, Point]] = []
    for path in paths:
        edges.extend(((a[0], a[1]), (b[0], b[1])) for a, b in pairwise(path))
    adjacency: dict[Point, deque[int]] = defaultdict(deque)
    for index, (a, b) in enumerate(edges):
        adjacency[a].append(index)
        adjacency[b].append(index)
    used = [False] * len(edges)

    def next_edge(vertex: Point) -> int | None:
        queue = adjacency[vertex]
        while queue:
            index = queue.popleft()
            if not used[index]:
                return index
        return None

    def walk(start: Point) -> Path:
        path = [start]
        current = start
        while (index := next_edge(current)) is not None:
            used[index] = True
            a, b = edges[index]
            current = b if a == current else a
            path.append(current)
        return path

    vertices = list(adjacency)
    odd = [v for v in vertices if len(adjacency[v]) % 2]
    result = []
    for vertex in odd + vertices:
        while any(not used[i] for i in adjacency[vertex]):
            result.append(walk(vertex))
    return result


def _buffer_paths(paths: Sequence[Path], radius: float) -> MultiPolygon:
    geometries = [LineString(p) if len(p) >= 2 else ShapelyPoint(p[0]) for p in paths]
    return _to_multipolygon(shapely.union_all(shapely.buffer(geometries, radius)))


def paths_to_shapes(
    diameter: float, paths: Sequence[Sequence[Point]], fill_closed_lines: bool
) -> MpPair:
    """Turn paths drawn with a round tool of ``diameter`` into shapes.

    With ``fill_closed_lines`` closed loops become filled polygons, xored
    with one another; everything else is buffered to the tool's width.
    """
    segments = [list(p) for p in paths]
    if fill_closed_lines:
        segments, merged = merge_near_points(segments, diameter)
        if merged:
            logger.warning(
                "Some nearly-connected lines in the gerber input have been adjusted "
                "to properly connect"
            )
    euler_paths = [part for path in _join_segments(segments) for part in get_all_ls(path)]
    result = MpPair()
    if fill_closed_lines:
        remaining = []
        for path in euler_paths:
            if path and path[0] == path[-1]:
                result.filled_closed_lines = _xor(result.filled_closed_lines, _loop_polygon(path))
            else:
                remaining.append(path)
        euler_paths = remaining
    euler_paths = [path for path in euler_paths if path]
    if euler_paths:
        if fill_closed_lines:
            logger.warning(
                "Found an unconnected loop while parsing a gerber file while expecting only loops"
            )
        result.shapes = _union(result.shapes, _buffer_paths(euler_paths, diameter / 2))
    return result


def render(
    image: GerberImage,
    fill_closed_lines: bool = False,
    render_paths_to_shapes: bool = True,
    points_per_circle: int = 30,
) -> tuple[MultiPolygon, dict[float, list[Path]]]:
    """Render ``image`` into polygons and, unless rendered, round-tool paths by diameter."""
    if image.polarity != Polarity.POSITIVE:
        raise UnsupportedPolarityError()

    apertures_map = generate_apertures_map(image.apertures, points_per_circle)
    first_layer = image.nets[0].layer if image.nets else GerberLayer()
    layers: list[tuple[GerberLayer, list[MpPair]]] = [(first_layer, [])]
    linear_paths: dict[float, list[Path]] = defaultdict(list)
    region: Path = []
    contour = False

    def flush_paths() -> None:
        for diameter, paths in sorted(linear_paths.items()):
            layers[-1][1].append(paths_to_shapes(diameter, paths, fill_closed_lines))
        linear_paths.clear()

    for net in image.nets:
        start = (net.start_x, net.start_y)
        stop = (net.stop_x, net.stop_y)
        aperture = image.apertures.get(net.aperture)
        kind = aperture.type if aperture is not None else None
        parameters = _padded(aperture.parameters if aperture is not None else (), 2)

        if not layers_equivalent(net.layer, layers[-1][0]):
            if render_paths_to_shapes:
                flush_paths()
            layers.append((net.layer, []))
        draws = layers[-1][1]

        if net.interpolation == Interpolation.LINEAR_X1:
            if net.aperture_state == ApertureState.ON:
                if contour:
                    if not region:
                        region.append(start)
                    region.append(stop)
                elif kind == ApertureType.CIRCLE:
                    linear_paths[parameters[0]].append([start, stop])
                elif kind == ApertureType.RECTANGLE:
                    draws.append(
                        MpPair(
                            shapes=linear_draw_rectangular_aperture(
                                start, stop, parameters[0], parameters[1]
                            )
                        )
                    )
                else:
                    logger.warning(
                        "Drawing with an aperture different from a circle or a rectangle "
                        "is forbidden by the Gerber standard; skipping."
                    )
            elif net.aperture_state == ApertureState.FLASH:
                if contour:
                    logger.warning(
                        "D03 during contour mode is forbidden by the Gerber standard; skipping"
                    )
                else:
                    shape = apertures_map.get(net.aperture)
                    if shape is not None:
                        shape = _to_multipolygon(affinity.translate(shape, stop[0], stop[1]))
                    else:
                        logger.warning(
                            "Macro aperture %d not found in macros list; skipping", net.aperture
                        )
                        shape = MultiPolygon()
                    draws.append(MpPair(shapes=shape))
            elif net.aperture_state == ApertureState.OFF:
                if contour:
                    region.append(stop)
                    draws.append(MpPair(shapes=simplify_cutins(region)))
                    region = []
            else:
                logger.warning("Unrecognized aperture state: skipping")
        elif net.interpolation == Interpolation.PAREA_START:
            contour = True
        elif net.interpolation == Interpolation.PAREA_END:
            contour = False
            draws.append(MpPair(shapes=simplify_cutins(region)))
            region = []
        elif net.interpolation in (Interpolation.CW_CIRCULAR, Interpolation.CCW_CIRCULAR):
            clockwise = net.interpolation == Interpolation.CW_CIRCULAR
            if net.aperture_state == ApertureState.ON:
                cirseg = net.cirseg
                if cirseg is None:
                    logger.warning("Circular arc requested but no circular segment given")
                    continue
                delta_angle = math.radians(cirseg.angle1 - cirseg.angle2)
                if clockwise:
                    delta_angle = -delta_angle
                path = circular_arc(
                    start,
                    stop,
                    (cirseg.cp_x, cirseg.cp_y),
                    cirseg.width / 2,
                    cirseg.height / 2,
                    delta_angle,
                    clockwise,
                    points_per_circle,
                )
                if contour:
                    region.extend(path if not region else path[1:])
                elif kind == ApertureType.CIRCLE:
                    linear_paths[parameters[0]].extend([a, b] for a, b in pairwise(path))
                else:
                    logger.warning(
                        "Drawing an arc with an aperture different from a circle is forbidden "
                        "by the Gerber standard; skipping."
                    )
            elif net.aperture_state == ApertureState.FLASH:
                logger.warning(
                    "D03 during circular arc mode is forbidden by the Gerber standard; skipping"
                )
        elif net.interpolation in _ZOOMED:
            logger.warning("Linear zoomed interpolation modes are not supported")
        else:
            logger.warning("Unrecognized interpolation mode")

    if render_paths_to_shapes:
        flush_paths()

    result = generate_layers(layers, "filled_closed_lines", fill_closed_lines)
    shapes = generate_layers(layers, "shapes", False)
    result = _difference(result, shapes) if fill_closed_lines else _union(result, shapes)

    if image.unit == Unit.MM:
        result = _to_multipolygon(affinity.scale(result, 1 / 25.4, 1 / 25.4, origin=(0, 0)))

    paths = {diameter: _join_segments(p) for diameter, p in sorted(linear_paths.items())}
    return result, paths


class GerberImporter:
    """Renders one parsed Gerber image."""

    def __init__(self, image: GerberImage) -> None:
        self.image = image

    def render(
        self,
        fill_closed_lines: bool = False,
        render_paths_to_shapes: bool = True,
        points_per_circle: int = 30,
    ) -> tuple[MultiPolygon, dict[float, list[Path]]]:
        """Polygons of the image and any round-tool paths left unrendered."""
        return render(self.image, fill_closed_lines, render_paths_to_shapes, points_per_circle)