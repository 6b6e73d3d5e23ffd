"""Deterministic colour assignment for authors, files and extensions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

AUTHOR_PALETTE = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)

FILE_PALETTE = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEAA7",
    "#DDA0DD",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E9",
    "#F8C471",
    "#82E0AA",
    "#F1948A",
    "#85C1E9",
    "#D7BDE2",
    "#A3E4D7",
    "#FAD7A0",
    "#D5A6BD",
    "#AED6F1",
    "#A9DFBF",
)

FALLBACK_COLOR = "#ffffff"
NO_EXTENSION = "(no extension)"
NO_EXTENSION_COLOR = "#7f7f7f"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def string_hash(text: str) -> int:
    # Only the shifted operand is truncated to 32 bits; the running sum is not.
    h = 0
    for char in text:
        h = ord(char) + (_to_int32(_to_int32(h) << 5) - h)
    return h


def palette_index(text: str, size: int = len(FILE_PALETTE)) -> int:
    return abs(string_hash(text)) % size


def file_color(path: str) -> str:
    if not path:
        return FALLBACK_COLOR
    return FILE_PALETTE[palette_index(path)]


def extension_color(ext: str) -> str:
    if ext == NO_EXTENSION:
        return NO_EXTENSION_COLOR
    if not ext:
        return FALLBACK_COLOR
    return FILE_PALETTE[palette_index(ext)]


class AuthorColors:
    def __init__(self, authors: Iterable[str], palette: Sequence[str] = AUTHOR_PALETTE) -> None:
        self.palette = tuple(palette)
        self.colors: Dict[str, str] = {}
        for author in authors:
            if author not in self.colors:
                self.colors[author] = self.palette[len(self.colors) % len(self.palette)]

    def color(self, author: str) -> str:
        if not author:
            return FALLBACK_COLOR
        return self.colors.get(author, FALLBACK_COLOR)

    __call__ = color

    def __len__(self) -> int:
        return len(self.colors)


@dataclass(frozen=True)
class GradientHandle:
    id: str
    inner: str
    outer: str
    inner_opacity: float = 0.95
    outer_opacity: float = 0.85
    cx: float = 0.3
    cy: float = 0.3
    r: float = 0.7

    @property
    def ref(self) -> str:
        return f"url(#{self.id})"


def gradient_id(inner: str, outer: str) -> str:
    def canon(color: str) -> str:
        return color.replace("#", "").replace(".", "")

    return f"gradient-{canon(inner)}-{canon(outer)}"


class GradientCache:
    """Memoized radial gradients, file colour at the centre and author colour at the rim."""

    def __init__(self) -> None:
        self._handles: Dict[str, GradientHandle] = {}
        self.registered: List[GradientHandle] = []

    def get(self, inner: str, outer: str) -> GradientHandle:
        key = gradient_id(inner, outer)
        handle = self._handles.get(key)
        if handle is None:
            handle = GradientHandle(id=key, inner=inner, outer=outer)
            self._handles[key] = handle
            self.registered.append(handle)
        return handle

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: str) -> bool:
        return key in self._handles


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return (255, 255, 255)
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        return (255, 255, 255)


def mix(a: Tuple[int, int, int], b: Tuple[int, int, int], t: float) -> Tuple[int, int, int]:
    t = max(0.0, min(1.0, t))
    return (
        int(round(a[0] + (b[0] - a[0]) * t)),
        int(round(a[1] + (b[1] - a[1]) * t)),
        int(round(a[2] + (b[2] - a[2]) * t)),
    )
