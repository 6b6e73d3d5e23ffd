"""
Renderable scene description.

A frame is a flat list of vector shapes in paint order. Backends (SVG,
Pillow, pygame) only read these records; they never look at simulation state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple, Union

from commit_rush.colors import GradientHandle

Paint = Union[str, GradientHandle]


class Layer(IntEnum):
    BACKGROUND = 0
    OUTLINES = 1
    CONNECTIONS = 2
    EFFECTS = 3
    ENTITIES = 4
    LABELS = 5
    LEGEND = 6
    CONTRIBUTIONS = 7
    LANGUAGES = 8


@dataclass(frozen=True)
class Circle:
    x: float
    y: float
    r: float
    layer: Layer
    fill: Optional[Paint] = None
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    layer: Layer
    width: float = 1.0
    opacity: float = 1.0
    round_cap: bool = False


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Tuple[float, float], ...]
    stroke: str
    layer: Layer
    width: float = 1.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    layer: Layer
    radius: float = 0.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    fill: str
    layer: Layer
    size: float = 11.0
    opacity: float = 1.0
    bold: bool = False


Shape = Union[Circle, Line, Polyline, Rect, Text]


@dataclass
class Frame:
    width: int
    height: int
    background: Tuple[Shape, ...]
    shapes: List[Shape] = field(default_factory=list)
    gradients: List[GradientHandle] = field(default_factory=list)
    stats: str = ""
    commit_line: Optional[str] = None
    index: int = 0

    def layer(self, layer: Layer) -> List[Shape]:
        return [shape for shape in self.shapes if shape.layer == layer]
