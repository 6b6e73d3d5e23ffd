"""Rasterise frames to PNG with Pillow."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from commit_rush.colors import GradientHandle, hex_to_rgb, mix
from commit_rush.scene import Circle, Frame, Line, Polyline, Rect, Shape, Text

GRADIENT_RINGS = 6

RGBA = Tuple[int, int, int, int]


def _rgba(color: str, opacity: float) -> RGBA:
    r, g, b = hex_to_rgb(color)
    return (r, g, b, int(round(255 * max(0.0, min(1.0, opacity)))))


def _draw_gradient_disc(draw: ImageDraw.ImageDraw, shape: Circle, handle: GradientHandle) -> None:
    inner = hex_to_rgb(handle.inner)
    outer = hex_to_rgb(handle.outer)
    # Highlight sits up-left of the centre, like the SVG gradient focus.
    fx = shape.x - shape.r * (0.5 - handle.cx)
    fy = shape.y - shape.r * (0.5 - handle.cy)
    for ring in range(GRADIENT_RINGS):
        t = ring / (GRADIENT_RINGS - 1)
        r = shape.r * (1.0 - t * 0.85)
        cx = shape.x + (fx - shape.x) * t
        cy = shape.y + (fy - shape.y) * t
        stop_opacity = handle.outer_opacity + (handle.inner_opacity - handle.outer_opacity) * t
        r_, g_, b_ = mix(outer, inner, t)
        alpha = int(round(255 * shape.opacity * stop_opacity))
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=(r_, g_, b_, alpha))


def draw_shape(draw: ImageDraw.ImageDraw, shape: Shape, font: ImageFont.ImageFont) -> None:
    if isinstance(shape, Circle):
        if shape.r <= 0:
            return
        box = (shape.x - shape.r, shape.y - shape.r, shape.x + shape.r, shape.y + shape.r)
        if isinstance(shape.fill, GradientHandle):
            _draw_gradient_disc(draw, shape, shape.fill)
        elif shape.fill is not None:
            draw.ellipse(box, fill=_rgba(shape.fill, shape.opacity))
        if shape.stroke:
            width = max(1, int(round(shape.stroke_width)))
            draw.ellipse(box, outline=_rgba(shape.stroke, shape.opacity), width=width)
    elif isinstance(shape, Line):
        width = max(1, int(round(shape.width)))
        draw.line((shape.x1, shape.y1, shape.x2, shape.y2), fill=_rgba(shape.stroke, shape.opacity), width=width)
    elif isinstance(shape, Polyline):
        width = max(1, int(round(shape.width)))
        draw.line(list(shape.points), fill=_rgba(shape.stroke, shape.opacity), width=width, joint="curve")
    elif isinstance(shape, Rect):
        if shape.width <= 0 or shape.height <= 0:
            return
        box = (shape.x, shape.y, shape.x + shape.width, shape.y + shape.height)
        draw.rounded_rectangle(box, radius=shape.radius, fill=_rgba(shape.fill, shape.opacity))
    elif isinstance(shape, Text):
        # Text baseline in the scene; Pillow anchors at the top-left.
        draw.text((shape.x, shape.y - shape.size), shape.text, fill=_rgba(shape.fill, shape.opacity), font=font)
    else:
        raise TypeError(f"Unsupported shape: {type(shape).__name__}")


def frame_to_image(frame: Frame, font: Optional[ImageFont.ImageFont] = None) -> Image.Image:
    font = font or ImageFont.load_default()
    image = Image.new("RGBA", (frame.width, frame.height), (0, 0, 0, 255))
    draw = ImageDraw.Draw(image, "RGBA")
    for shape in frame.background:
        draw_shape(draw, shape, font)
    for shape in frame.shapes:
        draw_shape(draw, shape, font)
    if frame.stats:
        draw.text((20, 8), frame.stats, fill=(255, 255, 255, 255), font=font)
    if frame.commit_line:
        draw.text((20, frame.height - 52), frame.commit_line, fill=(204, 204, 204, 255), font=font)
    return image


def write_png(frame: Frame, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    frame_to_image(frame).convert("RGB").save(out_path)
    return out_path
