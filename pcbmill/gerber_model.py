"""Data model of a parsed Gerber image."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class ApertureType(Enum):
    NONE = auto()
    CIRCLE = auto()
    RECTANGLE = auto()
    OVAL = auto()
    POLYGON = auto()
    MACRO = auto()
    MACRO_CIRCLE = auto()
    MACRO_OUTLINE = auto()
    MACRO_POLYGON = auto()
    MACRO_MOIRE = auto()
    MACRO_THERMAL = auto()
    MACRO_LINE20 = auto()
    MACRO_LINE21 = auto()
    MACRO_LINE22 = auto()


class Interpolation(Enum):
    LINEAR_X1 = auto()
    LINEAR_X10 = auto()
    LINEAR_X01 = auto()
    LINEAR_X001 = auto()
    CW_CIRCULAR = auto()
    CCW_CIRCULAR = auto()
    PAREA_START = auto()
    PAREA_END = auto()
    DELETED = auto()


class ApertureState(Enum):
    OFF = auto()
    ON = auto()
    FLASH = auto()


class Polarity(Enum):
    POSITIVE = auto()
    NEGATIVE = auto()
    DARK = auto()
    CLEAR = auto()


class Unit(Enum):
    INCH = auto()
    MM = auto()
    UNSPECIFIED = auto()


@dataclass(frozen=True)
class StepAndRepeat:
    """Repetition of a layer: counts and spacing along each axis."""

    x: int = 1
    y: int = 1
    dist_x: float = 0.0
    dist_y: float = 0.0


@dataclass(frozen=True)
class GerberLayer:
    polarity: Polarity = Polarity.DARK
    step_and_repeat: StepAndRepeat = field(default_factory=StepAndRepeat)


@dataclass(frozen=True)
class MacroPrimitive:
    """One primitive of an aperture macro with its variables substituted."""

    type: ApertureType
    parameters: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))


@dataclass(frozen=True)
class Aperture:
    """An aperture definition; ``simplified`` holds macro primitives, if any."""

    type: ApertureType
    parameters: tuple[float, ...] = ()
    simplified: tuple[MacroPrimitive, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))
        if self.simplified is not None:
            object.__setattr__(self, "simplified", tuple(self.simplified))


@dataclass(frozen=True)
class CircularSegment:
    """Centre, size and angles (degrees) of a circular arc."""

    cp_x: float
    cp_y: float
    width: float
    height: float
    angle1: float
    angle2: float


@dataclass
class Net:
    """One drawing command of the image."""

    start_x: float
    start_y: float
    stop_x: float
    stop_y: float
    aperture: int
    aperture_state: ApertureState
    interpolation: Interpolation
    layer: GerberLayer = field(default_factory=GerberLayer)
    cirseg: CircularSegment | None = None


@dataclass
class GerberImage:
    """A whole image: apertures by number, drawing commands and bounds."""

    apertures: dict[int, Aperture] = field(default_factory=dict)
    nets: list[Net] = field(default_factory=list)
    polarity: Polarity = Polarity.POSITIVE
    unit: Unit = Unit.INCH
    min_x: float = 0.0
    max_x: float = 0.0
    min_y: float = 0.0
    max_y: float = 0.0


def layers_equivalent(layer1: GerberLayer, layer2: GerberLayer) -> bool:
    """True when both layers share polarity and step-and-repeat settings."""
    return (
        layer1.polarity == layer2.polarity
        and layer1.step_and_repeat == layer2.step_and_repeat
    )