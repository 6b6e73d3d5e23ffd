"""
Builds one Frame per tick from the session.

Paint order is fixed: outlines, connections, effects, entities, labels, then
the three overlays (author legend, contribution bars, language bars). The
background is built once and reused for every frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from commit_rush.colors import GradientHandle, extension_color
from commit_rush.scene import Circle, Frame, Layer, Line, Polyline, Rect, Shape, Text
from commit_rush.session import Mode, Session

BACKGROUND_COLOR = "#05050c"
BACKGROUND_GLOW = "#0f0f1f"
EDGE_COLOR = "#444444"
TITLE_COLOR = "#ffffff"
NOTE_COLOR = "#aaaaaa"
TRACK_COLOR = "#333333"
HINT_COLOR = "#888888"

PARTICLE_OPACITY = 0.9
LABEL_SCALE_THRESHOLD = 0.8
NODE_LABEL_MAX_AGE = 200
LEGEND_LIMIT = 10
LEGEND_NAME_LIMIT = 20
BAR_LIMIT = 15
BAR_WIDTH = 150.0
BAR_HEIGHT = 15.0
BAR_SPACING = 5.0
BAR_X = 20.0

CONTROLS_HINT = "[SPACE] pause | [+/-] speed | [R] restart | [E] mode"


@dataclass(frozen=True)
class ProjectedParticle:
    id: str
    x: float
    y: float
    z: float
    scale: float
    r: float
    color: GradientHandle
    file_color: str
    filename: str
    radius: float


def truncate(name: str, limit: int = LEGEND_NAME_LIMIT) -> str:
    if len(name) > limit:
        return name[:limit] + "..."
    return name


class SceneRenderer:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.frames = 0
        self.background = self._build_background()

    def _build_background(self) -> Tuple[Shape, ...]:
        width = self.session.viewport.width
        height = self.session.viewport.height
        cx, cy = self.session.viewport.center
        shapes: List[Shape] = [
            Rect(0.0, 0.0, float(width), float(height), BACKGROUND_COLOR, Layer.BACKGROUND)
        ]
        # Cheap radial vignette: a few stacked translucent discs.
        max_r = math.hypot(cx, cy)
        for step in range(4, 0, -1):
            shapes.append(
                Circle(
                    cx,
                    cy,
                    max_r * step / 4.0,
                    Layer.BACKGROUND,
                    fill=BACKGROUND_GLOW,
                    opacity=0.25,
                )
            )
        shapes.append(Text(20.0, height - 20.0, CONTROLS_HINT, HINT_COLOR, Layer.BACKGROUND, size=12.0))
        return tuple(shapes)

    def render(self) -> Frame:
        session = self.session
        self.frames += 1
        frame = Frame(
            width=session.viewport.width,
            height=session.viewport.height,
            background=self.background,
            index=self.frames,
        )
        if session.mode is Mode.ELABORATE:
            self._render_elaborate(frame)
        else:
            self._render_standard(frame)
        frame.shapes.extend(self._author_legend())
        frame.shapes.extend(self._contribution_bars())
        frame.shapes.extend(self._language_bars())
        frame.stats = session.stats().summary()
        frame.commit_line = session.commit_line()
        return frame

    def project_particles(self) -> List[ProjectedParticle]:
        viewport = self.session.viewport
        projected: List[ProjectedParticle] = []
        for p in self.session.standard.particles:
            proj = viewport.project(p.x, p.y, p.z)
            if viewport.is_culled(proj.x, proj.y):
                continue
            projected.append(
                ProjectedParticle(
                    id=p.id,
                    x=proj.x,
                    y=proj.y,
                    z=p.z,
                    scale=proj.scale,
                    r=p.radius * proj.scale,
                    color=p.color,
                    file_color=p.file_color,
                    filename=p.filename,
                    radius=p.radius,
                )
            )
        return projected

    def _render_standard(self, frame: Frame) -> None:
        engine = self.session.standard
        gradients: Dict[str, GradientHandle] = {}

        for outline in engine.outlines:
            frame.shapes.append(
                Circle(
                    outline.x,
                    outline.y,
                    outline.r,
                    Layer.OUTLINES,
                    stroke=outline.color.inner,
                    stroke_width=1.0,
                    opacity=outline.opacity,
                )
            )

        projected = self.project_particles()
        by_id = {p.id: p for p in projected}

        for edge in engine.edges:
            source = by_id.get(edge.source_id)
            target = by_id.get(edge.target_id)
            # Endpoints flushed or culled this frame: nothing to join.
            if source is None or target is None:
                continue
            frame.shapes.append(
                Line(source.x, source.y, target.x, target.y, EDGE_COLOR, Layer.CONNECTIONS, opacity=0.4)
            )

        projected.sort(key=lambda p: p.z, reverse=True)
        for p in projected:
            gradients.setdefault(p.color.id, p.color)
            frame.shapes.append(
                Circle(p.x, p.y, p.r, Layer.ENTITIES, fill=p.color, opacity=PARTICLE_OPACITY)
            )

        for p in projected:
            if p.scale <= LABEL_SCALE_THRESHOLD:
                continue
            frame.shapes.append(
                Text(
                    p.x + (p.radius + 2.0) * p.scale,
                    p.y - (p.radius + 2.0) * p.scale,
                    p.filename,
                    p.file_color,
                    Layer.LABELS,
                    size=max(8.0, 10.0 * p.scale),
                    opacity=PARTICLE_OPACITY * 0.8,
                )
            )

        frame.gradients = list(gradients.values())

    def _render_elaborate(self, frame: Frame) -> None:
        engine = self.session.elaborate
        viewport = self.session.viewport

        for branch in engine.branches:
            opacity = max(0.0, 1.0 - branch.age / branch.max_age) * 0.7
            frame.shapes.append(
                Line(
                    branch.source.x,
                    branch.source.y,
                    branch.target.x,
                    branch.target.y,
                    branch.color,
                    Layer.CONNECTIONS,
                    width=branch.width,
                    opacity=opacity,
                    round_cap=True,
                )
            )

        for spiral in engine.spirals:
            if len(spiral.points) < 2:
                continue
            opacity = max(0.0, 1.0 - spiral.age / spiral.max_age) * 0.8
            frame.shapes.append(
                Polyline(tuple(spiral.points), spiral.color, Layer.EFFECTS, width=2.0, opacity=opacity)
            )

        for pulse in engine.pulses:
            opacity = max(0.0, 1.0 - pulse.age / pulse.max_age) * 0.5
            frame.shapes.append(
                Circle(
                    pulse.x,
                    pulse.y,
                    pulse.radius,
                    Layer.EFFECTS,
                    stroke=pulse.color,
                    stroke_width=2.0,
                    opacity=opacity,
                )
            )

        for gp in engine.growth_points:
            opacity = max(0.0, math.sin(gp.progress * math.pi) * 0.8)
            for tip_x, tip_y in gp.petal_tips():
                frame.shapes.append(
                    Line(gp.x, gp.y, tip_x, tip_y, gp.color, Layer.EFFECTS, width=2.0, opacity=opacity)
                )
                frame.shapes.append(
                    Circle(
                        tip_x,
                        tip_y,
                        4.0 + gp.progress * 3.0,
                        Layer.EFFECTS,
                        fill=gp.file_color,
                        opacity=opacity,
                    )
                )

        visible = [node for node in engine.nodes if not viewport.is_culled(node.x, node.y)]
        for node in visible:
            if node.is_root:
                frame.shapes.append(Circle(node.x, node.y, node.size, Layer.ENTITIES, fill=node.color))
                continue
            frame.shapes.append(
                Circle(
                    node.x,
                    node.y,
                    node.size,
                    Layer.ENTITIES,
                    fill=node.color,
                    stroke=node.author_color,
                    stroke_width=2.0 if node.author_color else 0.0,
                    opacity=0.9,
                )
            )

        for node in visible:
            if node.is_root or not node.filename or node.age >= NODE_LABEL_MAX_AGE:
                continue
            frame.shapes.append(
                Text(
                    node.x + node.size + 5.0,
                    node.y + 3.0,
                    node.filename,
                    node.color,
                    Layer.LABELS,
                    size=10.0,
                    opacity=max(0.0, 1.0 - node.age / NODE_LABEL_MAX_AGE),
                )
            )

    def _author_legend(self) -> List[Shape]:
        authors = self.session.active_authors()
        x = self.session.viewport.width - 200.0
        y = 50.0
        shapes: List[Shape] = [
            Text(x, y, "Active Authors:", TITLE_COLOR, Layer.LEGEND, size=12.0, bold=True)
        ]
        y += 20.0
        for author in authors[:LEGEND_LIMIT]:
            color = self.session.author_colors(author)
            shapes.append(Circle(x, y, 4.0, Layer.LEGEND, fill=color))
            shapes.append(Text(x + 10.0, y + 4.0, truncate(author), color, Layer.LEGEND))
            y += 18.0
        return shapes

    def _bars(
        self,
        title: str,
        start_y: float,
        rows: Sequence[Tuple[str, float, str]],
        noun: str,
        layer: Layer,
    ) -> List[Shape]:
        shapes: List[Shape] = [
            Text(BAR_X, start_y - 10.0, title, TITLE_COLOR, layer, size=12.0, bold=True)
        ]
        for index, (label, percentage, color) in enumerate(rows[:BAR_LIMIT]):
            bar_y = start_y + index * (BAR_HEIGHT + BAR_SPACING)
            shapes.append(Rect(BAR_X, bar_y, BAR_WIDTH, BAR_HEIGHT, TRACK_COLOR, layer, radius=3.0))
            shapes.append(
                Rect(BAR_X, bar_y, percentage / 100.0 * BAR_WIDTH, BAR_HEIGHT, color, layer, radius=3.0)
            )
            shapes.append(Text(BAR_X + BAR_WIDTH + 5.0, bar_y + BAR_HEIGHT - 3.0, label, color, layer))
        if len(rows) > BAR_LIMIT:
            shapes.append(
                Text(
                    BAR_X,
                    start_y + BAR_LIMIT * (BAR_HEIGHT + BAR_SPACING) + 10.0,
                    f"... and {len(rows) - BAR_LIMIT} more {noun}",
                    NOTE_COLOR,
                    layer,
                    size=10.0,
                )
            )
        return shapes

    def _contribution_bars(self) -> List[Shape]:
        session = self.session
        ranked = session.aggregator.sorted_contributions(session.cursor - 1)
        if not ranked:
            return []
        rows = [
            (f"{author}: {pct:.1f}%", pct, session.author_colors(author)) for author, pct in ranked
        ]
        return self._bars("Contribution Percentages:", 50.0, rows, "authors", Layer.CONTRIBUTIONS)

    def _language_bars(self) -> List[Shape]:
        languages = self.session.aggregator.language_percentages()
        if not languages:
            return []
        rows = [
            (f"{ext}: {pct:.1f}% ({count} files)", pct, extension_color(ext))
            for ext, pct, count in languages
        ]
        start_y = self.session.viewport.height - 300.0
        return self._bars("Language Distribution:", start_y, rows, "languages", Layer.LANGUAGES)

