"""Error codes and the exception raised for invalid parameters."""

from __future__ import annotations

import sys
from enum import IntEnum


class ErrorCode(IntEnum):
    """Process exit codes for parameter errors."""

    OK = 0
    NO_ZWORK = 1
    NO_CUTTER_DIAMETER = 2
    NO_ZSAFE = 3
    NO_OFFSET = 4
    NO_ZCUT = 5
    NO_CUT_FEED = 6
    NO_CUT_SPEED = 7
    NO_CUT_INFEED = 8
    NO_ZDRILL = 9
    NO_ZCHANGE = 10
    NO_DRILL_FEED = 11
    NO_DRILL_SPEED = 12
    NO_MILL_FEED = 13
    NO_MILL_SPEED = 14
    ZSAFE_LOWER_ZWORK = 15
    NEGATIVE_MILL_FEED = 16
    NEGATIVE_MILL_SPEED = 17
    ZSAFE_LOWER_ZDRILL = 18
    ZSAFE_LOWER_ZCHANGE = 19
    NEGATIVE_DRILL_FEED = 20
    ZSAFE_LOWER_ZCUT = 21
    NEGATIVE_CUT_FEED = 22
    NEGATIVE_SPINDLE_SPEED = 23
    LOW_CUT_INFEED = 24
    NO_OUTLINE_WIDTH = 25
    NEGATIVE_OUTLINE_WIDTH = 26
    ZERO_OUTLINE_WIDTH = 27
    NEGATIVE_DRILL_SPEED = 28
    NO_SOFTWARE = 29
    NO_AL_X = 30
    NO_AL_Y = 31
    NO_AL_PROBE_FEED = 32
    NEGATIVE_BRIDGE = 33
    BRIDGE_NO_OPTIMISE = 34
    NEGATIVE_AL_X = 35
    NEGATIVE_AL_Y = 36
    NEGATIVE_PROBE_FEED = 37
    NEGATIVE_CUT_VERT_FEED = 39
    NEGATIVE_MILL_VERT_FEED = 40
    NEGATIVE_TILE_X = 41
    NEGATIVE_TILE_Y = 42
    BOTH_DRILL_FRONT_SIDE = 43
    UNKNOWN_DRILL_SIDE = 44
    BOTH_CUT_FRONT_SIDE = 45
    UNKNOWN_CUT_SIDE = 46
    VORONOI_NO_VECTORIAL = 47
    VORONOI_NO_OUTLINE = 48
    BOTH_TOLERANCE_G64 = 49
    NEGATIVE_TOLERANCE = 50
    NEGATIVE_ZWORK = 51
    NEGATIVE_SPINUP = 52
    NEGATIVE_SPINDOWN = 53
    FALSE_MIRROR_ABSOLUTE = 54
    INVALID_PARAMETER = 100
    UNKNOWN_PARAMETER = 101


class ParseError(Exception):
    """An invalid parameter, carrying the exit code to report."""

    def __init__(self, what: str, code: ErrorCode | int) -> None:
        super().__init__(what)
        self.what = what
        self.code = ErrorCode(code)


def maybe_raise(what: str, code: ErrorCode | int, ignore_warnings: bool) -> None:
    """Raise :class:`ParseError`, or only report it when warnings are ignored."""
    if ignore_warnings:
        print(f"Ignoring error code {int(code)}: {what}", file=sys.stderr)
    else:
        raise ParseError(what, code)