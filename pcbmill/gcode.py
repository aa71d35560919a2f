"""G-code emitted for single toolpaths: isolation milling and outline cutting."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

DWELL = "G04 P0 ( dwell for no time -- G64 should not smooth over this point )\n"


@dataclass
class MillSettings:
    """Parameters of a routing mill, in inches and inches per minute."""

    zwork: float = 0.0
    zsafe: float = 0.0
    zchange: float = 0.0
    feed: float = 0.0
    vertfeed: float = 0.0
    speed: int = 0
    tolerance: float = 0.0
    explicit_tolerance: bool = True
    spinup_time: float = 0.0
    spindown_time: float = 0.0
    pre_milling_gcode: str = ""
    post_milling_gcode: str = ""


@dataclass
class CutterSettings(MillSettings):
    """A mill that cuts the board out, possibly in several passes and with bridges."""

    tool_diameter: float = 0.0
    stepsize: float = 0.0
    bridges_num: int = 0
    bridges_width: float = 0.0
    bridges_height: float = 0.0


def format_number(value: float) -> str:
    """Fixed-point notation with five decimals, as used for all coordinates."""
    return f"{value:.5f}"


def _move(point: Sequence[float], x_offset: float, y_offset: float, cfactor: float) -> str:
    x = format_number((point[0] - x_offset) * cfactor)
    y = format_number((point[1] - y_offset) * cfactor)
    return f"G01 X{x} Y{y}\n"


def cutter_milling(
    out: TextIO,
    cutter: CutterSettings,
    path: Sequence[Sequence[float]],
    bridges: Sequence[int],
    x_offset: float,
    y_offset: float,
    cfactor: float,
) -> None:
    """Cut around ``path`` in as many passes as the step size requires.

    Starts from a safe height above the first point.  Each index in
    ``bridges`` marks a bridge from that point to the next; a pass below the
    bridge height lifts over it, a pass above crosses it in one move.
    """
    steps = math.ceil(-cutter.zwork / cutter.stepsize) if cutter.stepsize else 0
    steps = max(steps, 0)
    vertfeed = format_number(cutter.vertfeed * cfactor)
    feed = format_number(cutter.feed * cfactor)

    for step in range(steps):
        z = cutter.zwork / steps * (step + 1)
        z_text = format_number(z * cfactor)
        out.write(f"G01 Z{z_text} F{vertfeed} ( plunge. )\n")
        out.write(DWELL)
        out.write(f"G01 F{feed}\n")

        bridge = 0
        current = 1
        while current < len(path):
            if bridge < len(bridges) and bridges[bridge] == current and z >= cutter.bridges_height:
                # No need to stop at the bridge: mill straight across it.
                current += 2
                bridge += 1
            is_bridge_cut = bridge < len(bridges) and bridges[bridge] == current - 1
            if is_bridge_cut:
                out.write(f"G00 Z{format_number(cutter.bridges_height * cfactor)}\n")
            out.write(_move(path[current], x_offset, y_offset, cfactor))
            if is_bridge_cut:
                out.write(f"G01 Z{z_text} F{vertfeed}\n")
                out.write(f"G01 F{feed}\n")
                bridge += 1
            current += 1


def isolation_milling(
    out: TextIO,
    mill: MillSettings,
    path: Sequence[Sequence[float]],
    x_offset: float,
    y_offset: float,
    cfactor: float,
) -> None:
    """Plunge to the working depth and mill along every point of ``path`` once."""
    out.write(f"G01 F{format_number(mill.vertfeed * cfactor)}\n")
    if mill.pre_milling_gcode:
        out.write("( begin pre-milling-gcode )\n")
        out.write(f"{mill.pre_milling_gcode}\n")
        out.write("( end pre-milling-gcode )\n")
    out.write(f"G01 Z{format_number(mill.zwork * cfactor)}\n")
    out.write(DWELL)
    out.write(f"G01 F{format_number(mill.feed * cfactor)}\n")
    for point in path:
        out.write(_move(point, x_offset, y_offset, cfactor))
    if mill.post_milling_gcode:
        out.write("( begin post-milling-gcode )\n")
        out.write(f"{mill.post_milling_gcode}\n")
        out.write("( end post-milling-gcode )\n")