"""Simulated entities for both visualization modes.

Standard mode owns particles, static outlines and edges. Elaborate mode owns
tree nodes, branches and the decorative effects spawned next to new nodes.
The two sets never mix.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from commit_rush.colors import GradientHandle


@dataclass
class Particle:
    id: str
    x: float
    y: float
    z: float
    vx: float
    vy: float
    vz: float
    color: GradientHandle
    file_color: str
    radius: float
    filename: str
    path: str
    author: str
    commit_hash: str
    age: int = 0
    max_age: float = math.inf

    @property
    def expired(self) -> bool:
        return self.age >= self.max_age


@dataclass(frozen=True)
class StaticOutline:
    x: float
    y: float
    r: float
    color: GradientHandle
    opacity: float = 0.6


@dataclass(frozen=True)
class Edge:
    source_id: str
    target_id: str
    directory: str


@dataclass(eq=False)
class TreeNode:
    x: float
    y: float
    color: str
    size: float
    vx: float = 0.0
    vy: float = 0.0
    author_color: Optional[str] = None
    author: Optional[str] = None
    filename: Optional[str] = None
    commit_hash: Optional[str] = None
    is_root: bool = False
    age: int = 0


@dataclass(eq=False)
class Branch:
    source: TreeNode
    target: TreeNode
    color: str
    width: float
    age: int = 0
    max_age: int = 120

    @property
    def expired(self) -> bool:
        return self.age > self.max_age


@dataclass
class PulseEffect:
    x: float
    y: float
    color: str
    max_radius: float
    age: int = 0
    max_age: int = 60

    @property
    def radius(self) -> float:
        return (self.age / self.max_age) * self.max_radius

    @property
    def expired(self) -> bool:
        return self.age > self.max_age


@dataclass
class SpiralPath:
    center_x: float
    center_y: float
    color: str
    angle: float = 0.0
    radius: float = 5.0
    age: int = 0
    max_age: int = 180
    max_points: int = 60
    points: List[Tuple[float, float]] = field(default_factory=list)

    def advance(self) -> None:
        self.age += 1
        self.angle += 0.15
        self.radius += 0.5
        self.points.append(
            (
                self.center_x + math.cos(self.angle) * self.radius,
                self.center_y + math.sin(self.angle) * self.radius,
            )
        )
        if len(self.points) > self.max_points:
            del self.points[0]

    @property
    def expired(self) -> bool:
        return self.age > self.max_age


@dataclass
class GrowthPoint:
    x: float
    y: float
    petals: int
    color: str
    file_color: str
    size: float
    rotation: float
    age: int = 0
    max_age: int = 150

    @property
    def progress(self) -> float:
        return self.age / self.max_age

    def petal_tips(self) -> List[Tuple[float, float]]:
        length = self.size * self.progress
        tips = []
        for i in range(self.petals):
            angle = (i / self.petals) * math.pi * 2.0 + self.rotation
            tips.append((self.x + math.cos(angle) * length, self.y + math.sin(angle) * length))
        return tips

    @property
    def expired(self) -> bool:
        return self.age > self.max_age
