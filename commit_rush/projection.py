from __future__ import annotations

from dataclasses import dataclass

CULL_MARGIN = 100.0


@dataclass(frozen=True)
class Projection:
    x: float
    y: float
    scale: float


@dataclass(frozen=True)
class Viewport:
    width: int = 1200
    height: int = 800
    focal_length: float = 600.0

    @property
    def center(self) -> tuple:
        return (self.width / 2.0, self.height / 2.0)

    def project(self, x: float, y: float, z: float) -> Projection:
        # Points at or behind the camera plane collapse to a huge scale; the
        # depth bound in the physics keeps z well away from -focal_length.
        denom = self.focal_length + z
        scale = self.focal_length / denom if denom > 1e-6 else 1e6
        return Projection(
            x=self.width / 2.0 + x * scale,
            y=self.height / 2.0 + y * scale,
            scale=scale,
        )

    def is_culled(self, x: float, y: float, margin: float = CULL_MARGIN) -> bool:
        return x < -margin or x > self.width + margin or y < -margin or y > self.height + margin
