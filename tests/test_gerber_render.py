import math

import pytest
from shapely.geometry import MultiPolygon, Polygon, box

from pcbmill.gerber_model import (
    Aperture,
    ApertureState,
    ApertureType,
    CircularSegment,
    GerberImage,
    GerberLayer,
    Interpolation,
    MacroPrimitive,
    Net,
    Polarity,
    StepAndRepeat,
    Unit,
)
from pcbmill.gerber_render import (
    GerberImporter,
    MpPair,
    UnsupportedPolarityError,
    generate_apertures_map,
    generate_layers,
    merge_multi_draws,
    paths_to_shapes,
    render,
)

DARK = GerberLayer(Polarity.DARK)
CLEAR = GerberLayer(Polarity.CLEAR)


def square(x0, y0, x1, y1):
    return MultiPolygon([box(x0, y0, x1, y1)])


def flash(aperture, x, y, layer=DARK):
    return Net(x, y, x, y, aperture, ApertureState.FLASH, Interpolation.LINEAR_X1, layer)


def line(aperture, start, stop, state=ApertureState.ON, layer=DARK):
    return Net(*start, *stop, aperture, state, Interpolation.LINEAR_X1, layer)


def marker(interpolation):
    return Net(0, 0, 0, 0, 0, ApertureState.OFF, interpolation, DARK)


def test_mp_pair_add_xors_loops_and_unions_shapes():
    a = MpPair(square(0, 0, 2, 2), square(0, 0, 2, 2))
    b = MpPair(square(1, 0, 3, 2), square(1, 0, 3, 2))
    total = a + b
    assert total.filled_closed_lines.area == pytest.approx(4.0)
    assert total.shapes.area == pytest.approx(6.0)


def test_merge_multi_draws_empty_and_single():
    assert merge_multi_draws([]).shapes.is_empty
    only = MpPair(shapes=square(0, 0, 1, 1))
    assert merge_multi_draws([only]).shapes.area == pytest.approx(1.0)


def test_merge_multi_draws_odd_count():
    draws = [MpPair(shapes=square(i, 0, i + 1, 1)) for i in range(0, 6, 2)]
    assert merge_multi_draws(draws).shapes.area == pytest.approx(3.0)


def test_generate_layers_dark_then_clear():
    layers = [
        (DARK, [MpPair(shapes=square(0, 0, 2, 2))]),
        (CLEAR, [MpPair(shapes=square(0, 0, 1, 1))]),
    ]
    assert generate_layers(layers, "shapes", False).area == pytest.approx(3.0)


def test_generate_layers_step_and_repeat():
    layer = GerberLayer(Polarity.DARK, StepAndRepeat(x=3, y=2, dist_x=2.0, dist_y=5.0))
    result = generate_layers([(layer, [MpPair(shapes=square(0, 0, 1, 1))])], "shapes", False)
    assert result.area == pytest.approx(6.0)
    assert result.bounds == pytest.approx((0, 0, 5, 6))


def test_generate_layers_xor():
    layers = [
        (DARK, [MpPair(filled_closed_lines=square(0, 0, 2, 2))]),
        (CLEAR, [MpPair(filled_closed_lines=square(1, 0, 3, 2))]),
    ]
    assert generate_layers(layers, "filled_closed_lines", True).area == pytest.approx(4.0)


def test_generate_layers_rejects_other_polarity():
    layers = [(GerberLayer(Polarity.NEGATIVE), [MpPair(shapes=square(0, 0, 1, 1))])]
    with pytest.raises(UnsupportedPolarityError):
        generate_layers(layers, "shapes", False)


def test_apertures_map_basic_shapes():
    apertures = {
        10: Aperture(ApertureType.CIRCLE, (1.0, 0.0, 0.0)),
        11: Aperture(ApertureType.RECTANGLE, (2.0, 1.0, 0.0)),
        12: Aperture(ApertureType.MACRO_CIRCLE, (1, 1, 0, 0, 0)),
        13: Aperture(ApertureType.MACRO),
        14: Aperture(ApertureType.NONE),
    }
    shapes = generate_apertures_map(apertures, 360)
    assert sorted(shapes) == [10, 11]
    assert shapes[10].area == pytest.approx(math.pi / 4, rel=1e-3)
    assert shapes[11].bounds == pytest.approx((-1, -0.5, 1, 0.5))


def test_apertures_map_macro_rotation_and_polarity():
    macro = Aperture(
        ApertureType.MACRO,
        simplified=[
            MacroPrimitive(ApertureType.MACRO_LINE21, (1, 4, 2, 0, 0, 90)),
            MacroPrimitive(ApertureType.MACRO_LINE21, (0, 1, 1, 0, 0, 0)),
        ],
    )
    shape = generate_apertures_map({20: macro}, 30)[20]
    assert shape.bounds == pytest.approx((-1, -2, 1, 2))
    assert shape.area == pytest.approx(7.0)


def test_paths_to_shapes_buffers_segment():
    result = paths_to_shapes(1.0, [[(0, 0), (2, 0)]], False)
    assert result.filled_closed_lines.is_empty
    assert result.shapes.area == pytest.approx(2 + math.pi / 4, rel=1e-2)
    assert result.shapes.bounds == pytest.approx((-0.5, -0.5, 2.5, 0.5))


def test_paths_to_shapes_fills_loops():
    loop = [[(0, 0), (1, 0)], [(1, 0), (1, 1)], [(1, 1), (0, 1)], [(0, 1), (0, 0)]]
    result = paths_to_shapes(0.1, loop, True)
    assert result.filled_closed_lines.area == pytest.approx(1.0)
    assert result.shapes.is_empty


def test_render_flash_rectangle():
    image = GerberImage(
        apertures={10: Aperture(ApertureType.RECTANGLE, (2.0, 1.0))},
        nets=[flash(10, 5, 5)],
    )
    result, paths = render(image)
    assert result.bounds == pytest.approx((4, 4.5, 6, 5.5))
    assert paths == {}


def test_render_clear_layer_subtracts():
    image = GerberImage(
        apertures={10: Aperture(ApertureType.RECTANGLE, (2.0, 2.0)),
                   11: Aperture(ApertureType.RECTANGLE, (1.0, 1.0))},
        nets=[flash(10, 0, 0), flash(11, 0, 0, CLEAR)],
    )
    assert render(image)[0].area == pytest.approx(3.0)


def test_render_step_and_repeat_layer():
    layer = GerberLayer(Polarity.DARK, StepAndRepeat(x=2, dist_x=3.0))
    image = GerberImage(
        apertures={10: Aperture(ApertureType.RECTANGLE, (1.0, 1.0))},
        nets=[flash(10, 0, 0, layer)],
    )
    assert render(image)[0].area == pytest.approx(2.0)


def test_render_region():
    corners = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]
    nets = [marker(Interpolation.PAREA_START)]
    nets += [line(10, a, b) for a, b in zip(corners, corners[1:])]
    nets.append(marker(Interpolation.PAREA_END))
    image = GerberImage(apertures={10: Aperture(ApertureType.CIRCLE, (0.1,))}, nets=nets)
    result, _ = render(image)
    assert result.area == pytest.approx(1.0)


def test_render_keeps_paths_when_not_rendered():
    image = GerberImage(
        apertures={10: Aperture(ApertureType.CIRCLE, (0.1,))},
        nets=[line(10, (0, 0), (1, 0)), line(10, (1, 0), (1, 1))],
    )
    result, paths = render(image, render_paths_to_shapes=False)
    assert result.is_empty
    assert paths == {0.1: [[(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]]}


def test_render_arc_paths():
    arc = Net(1, 0, -1, 0, 10, ApertureState.ON, Interpolation.CCW_CIRCULAR, DARK,
              CircularSegment(0, 0, 2, 2, 0, 180))
    image = GerberImage(apertures={10: Aperture(ApertureType.CIRCLE, (0.1,))}, nets=[arc])
    _, paths = render(image, render_paths_to_shapes=False, points_per_circle=30)
    assert list(paths) == [0.1]
    (path,) = paths[0.1]
    assert path[0] == (1.0, 0.0)
    assert path[-1] == (-1.0, 0.0)
    assert len(path) == 16
    assert all(math.hypot(x, y) == pytest.approx(1.0) for x, y in path)
    assert max(y for _, y in path) == pytest.approx(1.0, abs=1e-2)


def test_render_ignores_oval_line():
    image = GerberImage(
        apertures={10: Aperture(ApertureType.OVAL, (1.0, 2.0))},
        nets=[line(10, (0, 0), (1, 0))],
    )
    assert render(image)[0].area == 0


def test_render_metric_scaling():
    image = GerberImage(
        apertures={10: Aperture(ApertureType.RECTANGLE, (25.4, 25.4))},
        nets=[flash(10, 0, 0)],
        unit=Unit.MM,
    )
    assert render(image)[0].area == pytest.approx(1.0)


def test_render_rejects_negative_image():
    image = GerberImage(polarity=Polarity.NEGATIVE)
    with pytest.raises(UnsupportedPolarityError):
        render(image)


def test_importer_renders_image():
    image = GerberImage(
        apertures={10: Aperture(ApertureType.CIRCLE, (1.0,))},
        nets=[flash(10, 2, 3)],
    )
    result, _ = GerberImporter(image).render(False, True, 360)
    assert result.area == pytest.approx(math.pi / 4, rel=1e-3)
    assert result.centroid.coords[0] == pytest.approx((2, 3))
    assert isinstance(result.geoms[0], Polygon)