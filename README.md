# pcbmill

`pcbmill` turns the geometry of a printed circuit board's Gerber artwork into
polygons and tool paths, places holding bridges on outline cuts, and writes
the G-code moves a CNC mill needs to isolate traces or cut a board out along
a path.

Geometry is handled with Shapely polygons; all coordinates are in inches
unless stated otherwise.

## What is inside

| Module | Purpose |
| --- | --- |
| `pcbmill.gerber_model` | Data classes describing a parsed Gerber image: `GerberImage`, `Aperture`, `MacroPrimitive`, `Net`, `CircularSegment`, `GerberLayer`, `StepAndRepeat`, and the enums `ApertureType`, `Interpolation`, `ApertureState`, `Polarity`, `Unit`. |
| `pcbmill.shapes` | Shape builders: `make_regular_polygon`, `make_rectangle`, `make_segment_rectangle`, `make_oval`, `make_moire`, `make_thermal`, `linear_draw_rectangular_aperture`, `circular_arc`, and `simplify_cutins` for outlines that touch themselves. |
| `pcbmill.gerber_render` | `render` and `GerberImporter` turn a `GerberImage` into one `MultiPolygon` plus the round-tool paths grouped by diameter, honouring layer polarity and step-and-repeat. |
| `pcbmill.near_points` | `merge_near_points` and `merge_near_points_flagged` snap nearly coincident points together so loops close. |
| `pcbmill.bridges` | `make_bridges` places holding tabs on an outline path, spread as far apart as it can. |
| `pcbmill.gcode` | `isolation_milling` and `cutter_milling` write the G-code moves for one path, including multi-pass cuts that lift over bridges; `MillSettings` and `CutterSettings` hold the tool parameters. |
| `pcbmill.preamble` | `preamble_from_text`, `read_preamble_text`, `read_preamble` and `read_postamble` load user-supplied header and footer G-code. |
| `pcbmill.errors` | `ErrorCode`, `ParseError` and `maybe_raise` for reporting invalid settings. |

## Rendering a Gerber image

Build a `GerberImage` from `pcbmill.gerber_model` and hand it to the importer:

```python
from pcbmill.gerber_model import (
    Aperture, ApertureState, ApertureType, GerberImage, Interpolation, Net,
)
from pcbmill.gerber_render import GerberImporter

image = GerberImage(
    apertures={10: Aperture(ApertureType.CIRCLE, (0.05,))},
    nets=[
        Net(0.0, 0.0, 1.0, 0.0, 10, ApertureState.ON, Interpolation.LINEAR_X1),
        Net(1.0, 0.0, 1.0, 0.0, 10, ApertureState.FLASH, Interpolation.LINEAR_X1),
    ],
)
copper, paths_by_diameter = GerberImporter(image).render(
    fill_closed_lines=False,
    render_paths_to_shapes=True,
    points_per_circle=30,
)
print(copper.area)
```

With `render_paths_to_shapes=True` lines drawn with round apertures are
buffered into the result; with `False` they are returned instead in the
dictionary, keyed by aperture diameter. With `fill_closed_lines=True`, closed
loops of drawn lines become filled areas, which suits an outline layer.
Images whose polarity is not `Polarity.POSITIVE`, and layers that are neither
dark nor clear, raise `UnsupportedPolarityError`. Problems that can be
skipped, such as unsupported apertures or interpolation modes, are reported
through the `pcbmill.gerber_render` logger.

## Adding bridges to an outline

```python
from pcbmill.bridges import make_bridges

outline = [(0.0, 0.0), (0.0, 2.0), (3.0, 2.0), (3.0, 0.0), (0.0, 0.0)]
new_outline, bridge_starts = make_bridges(outline, 2, 0.1)
```

The input is left untouched. `new_outline` has two extra points per bridge,
and `bridge_starts` lists the index at which each bridge begins, in
increasing order. Only segments at least as long as the bridge qualify, so
fewer bridges than requested may be placed.

## Writing G-code for a path

```python
import io
from pcbmill.gcode import CutterSettings, cutter_milling

cutter = CutterSettings(zwork=-0.06, stepsize=0.03, feed=10, vertfeed=5,
                        bridges_height=-0.03)
out = io.StringIO()
cutter_milling(out, cutter, new_outline, bridge_starts, 0.0, 0.0, 1.0)
print(out.getvalue())
```

Numbers are written with five decimals (`format_number`). The last argument
is the factor applied to every output value: 1 for inches, 25.4 for
millimetres.

## Closing nearly-connected paths

```python
from pcbmill.near_points import merge_near_points

paths = [[(0.0, 0.0), (1.0, 0.0)], [(1.0000001, 0.0), (1.0, 1.0)]]
merged_paths, moved = merge_near_points(paths, 0.001)
```

The adjusted paths are returned together with the number of points that were
moved.

## Preambles

```python
from pcbmill.preamble import preamble_from_text

header = preamble_from_text("Board rev. 2 (top)\n\nMade for the shop mill")
```

Each non-blank line becomes a G-code comment, with round brackets replaced by
angle brackets so the comment stays well formed. The file readers raise
`ParseError` with `ErrorCode.INVALID_PARAMETER` when a file cannot be read,
or, with `ignore_warnings=True`, report it on standard error and use empty
text.

## Errors

Invalid settings raise `pcbmill.errors.ParseError`, which carries an
`ErrorCode` in its `code` attribute. `maybe_raise` only prints the problem to
standard error instead of raising when warnings are to be ignored.

## What it does not do

- It does not read Gerber or Excellon files; a `GerberImage` has to be built
  by the caller.
- There is no command-line program and no option parsing.
- It writes the moves for single paths only: there is no complete G-code file
  export with tool changes, tiling or autolevelling, and no drilling output.