from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Iterable, List, Optional

from commit_rush.colors import GradientHandle
from commit_rush.scene import Circle, Frame, Line, Paint, Polyline, Rect, Shape, Text


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _paint(paint: Optional[Paint]) -> str:
    if paint is None:
        return "none"
    if isinstance(paint, GradientHandle):
        return paint.ref
    return paint


def svg_gradient(handle: GradientHandle) -> str:
    return (
        f'<radialGradient id="{handle.id}" cx="{handle.cx * 100:.0f}%" '
        f'cy="{handle.cy * 100:.0f}%" r="{handle.r * 100:.0f}%">'
        f'<stop offset="0%" stop-color="{handle.inner}" stop-opacity="{handle.inner_opacity}" />'
        f'<stop offset="100%" stop-color="{handle.outer}" stop-opacity="{handle.outer_opacity}" />'
        "</radialGradient>"
    )


def svg_shape(shape: Shape) -> str:
    if isinstance(shape, Circle):
        stroke = ""
        if shape.stroke:
            stroke = f' stroke="{shape.stroke}" stroke-width="{shape.stroke_width:.2f}"'
        return (
            f'<circle cx="{shape.x:.2f}" cy="{shape.y:.2f}" r="{max(0.0, shape.r):.2f}" '
            f'fill="{_paint(shape.fill)}"{stroke} opacity="{clamp01(shape.opacity):.3f}" />'
        )
    if isinstance(shape, Line):
        cap = ' stroke-linecap="round"' if shape.round_cap else ""
        return (
            f'<line x1="{shape.x1:.2f}" y1="{shape.y1:.2f}" x2="{shape.x2:.2f}" y2="{shape.y2:.2f}" '
            f'stroke="{shape.stroke}" stroke-width="{shape.width:.2f}"{cap} '
            f'opacity="{clamp01(shape.opacity):.3f}" />'
        )
    if isinstance(shape, Polyline):
        first, rest = shape.points[0], shape.points[1:]
        path = f"M {first[0]:.2f} {first[1]:.2f}" + "".join(f" L {x:.2f} {y:.2f}" for x, y in rest)
        return (
            f'<path d="{path}" stroke="{shape.stroke}" stroke-width="{shape.width:.2f}" '
            f'fill="none" opacity="{clamp01(shape.opacity):.3f}" />'
        )
    if isinstance(shape, Rect):
        rounded = f' rx="{shape.radius:.1f}" ry="{shape.radius:.1f}"' if shape.radius else ""
        return (
            f'<rect x="{shape.x:.2f}" y="{shape.y:.2f}" width="{max(0.0, shape.width):.2f}" '
            f'height="{max(0.0, shape.height):.2f}" fill="{shape.fill}"{rounded} '
            f'opacity="{clamp01(shape.opacity):.3f}" />'
        )
    if isinstance(shape, Text):
        weight = ' font-weight="bold"' if shape.bold else ""
        return (
            f'<text x="{shape.x:.2f}" y="{shape.y:.2f}" fill="{shape.fill}" '
            f'font-family="monospace" font-size="{shape.size:.1f}px"{weight} '
            f'opacity="{clamp01(shape.opacity):.3f}">{escape(shape.text)}</text>'
        )
    raise TypeError(f"Unsupported shape: {type(shape).__name__}")


def _join(shapes: Iterable[Shape]) -> str:
    return "\n    ".join(svg_shape(shape) for shape in shapes)


def frame_to_svg(frame: Frame) -> str:
    defs = "".join(svg_gradient(handle) for handle in frame.gradients)
    overlay: List[str] = []
    if frame.stats:
        overlay.append(
            f'<text x="20" y="20" fill="#ffffff" font-family="monospace" '
            f'font-size="12px">{escape(frame.stats)}</text>'
        )
    if frame.commit_line:
        overlay.append(
            f'<text x="20" y="{frame.height - 40}" fill="#cccccc" font-family="monospace" '
            f'font-size="12px">{escape(frame.commit_line)}</text>'
        )
    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{frame.width}" height="{frame.height}" viewBox="0 0 {frame.width} {frame.height}">
  <defs>{defs}</defs>
  <g class="background">
    {_join(frame.background)}
  </g>
  <g class="scene">
    {_join(frame.shapes)}
  </g>
  {''.join(overlay)}
</svg>
"""


def write_svg(frame: Frame, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(frame_to_svg(frame), encoding="utf-8")
    return out_path
