"""
Live pygame window for the commit visualization.

Keys: SPACE pause/resume, +/- speed, R restart, E toggle elaborate mode,
ESC quit.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

import pygame

from commit_rush.colors import GradientHandle, hex_to_rgb, mix
from commit_rush.driver import AnimationDriver, Command
from commit_rush.log import get_logger
from commit_rush.scene import Circle, Frame, Line, Polyline, Rect, Shape, Text

logger = get_logger(__name__)

KEY_COMMANDS: Dict[int, Command] = {
    pygame.K_SPACE: Command.TOGGLE_PAUSE,
    pygame.K_EQUALS: Command.SPEED_UP,
    pygame.K_PLUS: Command.SPEED_UP,
    pygame.K_KP_PLUS: Command.SPEED_UP,
    pygame.K_MINUS: Command.SPEED_DOWN,
    pygame.K_KP_MINUS: Command.SPEED_DOWN,
    pygame.K_r: Command.RESTART,
    pygame.K_e: Command.TOGGLE_MODE,
}

GRADIENT_RINGS = 5


def _alpha(opacity: float) -> int:
    return int(round(255 * max(0.0, min(1.0, opacity))))


class PygamePainter:
    def __init__(self, screen: pygame.Surface) -> None:
        self.screen = screen
        self.background: Optional[pygame.Surface] = None
        self._background_key: Optional[Tuple[Shape, ...]] = None
        self._fonts: Dict[Tuple[int, bool], pygame.font.Font] = {}

    def font(self, size: float, bold: bool = False) -> pygame.font.Font:
        key = (int(round(size)), bold)
        if key not in self._fonts:
            self._fonts[key] = pygame.font.SysFont("monospace", key[0], bold=bold)
        return self._fonts[key]

    def _blit_alpha(
        self,
        target: pygame.Surface,
        bounds: Tuple[float, float, float, float],
        draw: Callable[[pygame.Surface, float, float], None],
    ) -> None:
        # Draw into a small per-shape layer so translucency blends with the scene.
        x0, y0, x1, y1 = bounds
        ix0, iy0 = int(x0) - 2, int(y0) - 2
        w, h = int(x1 - ix0) + 3, int(y1 - iy0) + 3
        if w <= 0 or h <= 0 or w > 4 * target.get_width() or h > 4 * target.get_height():
            return
        layer = pygame.Surface((w, h), pygame.SRCALPHA)
        draw(layer, -ix0, -iy0)
        target.blit(layer, (ix0, iy0))

    def _circle(self, target: pygame.Surface, shape: Circle) -> None:
        r = shape.r
        if r <= 0:
            return

        def draw(layer: pygame.Surface, ox: float, oy: float) -> None:
            center = (shape.x + ox, shape.y + oy)
            if isinstance(shape.fill, GradientHandle):
                inner = hex_to_rgb(shape.fill.inner)
                outer = hex_to_rgb(shape.fill.outer)
                for ring in range(GRADIENT_RINGS):
                    t = ring / (GRADIENT_RINGS - 1)
                    color = (*mix(outer, inner, t), _alpha(shape.opacity * 0.9))
                    pygame.draw.circle(layer, color, center, max(1.0, r * (1.0 - t * 0.8)))
            elif shape.fill is not None:
                pygame.draw.circle(layer, (*hex_to_rgb(shape.fill), _alpha(shape.opacity)), center, r)
            if shape.stroke:
                width = max(1, int(round(shape.stroke_width)))
                pygame.draw.circle(
                    layer, (*hex_to_rgb(shape.stroke), _alpha(shape.opacity)), center, r, width
                )

        self._blit_alpha(target, (shape.x - r, shape.y - r, shape.x + r, shape.y + r), draw)

    def draw_shape(self, target: pygame.Surface, shape: Shape) -> None:
        if isinstance(shape, Circle):
            self._circle(target, shape)
        elif isinstance(shape, Line):
            color = (*hex_to_rgb(shape.stroke), _alpha(shape.opacity))
            width = max(1, int(round(shape.width)))
            bounds = (
                min(shape.x1, shape.x2) - width,
                min(shape.y1, shape.y2) - width,
                max(shape.x1, shape.x2) + width,
                max(shape.y1, shape.y2) + width,
            )
            self._blit_alpha(
                target,
                bounds,
                lambda layer, ox, oy: pygame.draw.line(
                    layer, color, (shape.x1 + ox, shape.y1 + oy), (shape.x2 + ox, shape.y2 + oy), width
                ),
            )
        elif isinstance(shape, Polyline):
            color = (*hex_to_rgb(shape.stroke), _alpha(shape.opacity))
            width = max(1, int(round(shape.width)))
            xs = [p[0] for p in shape.points]
            ys = [p[1] for p in shape.points]
            self._blit_alpha(
                target,
                (min(xs) - width, min(ys) - width, max(xs) + width, max(ys) + width),
                lambda layer, ox, oy: pygame.draw.lines(
                    layer, color, False, [(x + ox, y + oy) for x, y in shape.points], width
                ),
            )
        elif isinstance(shape, Rect):
            if shape.width <= 0 or shape.height <= 0:
                return
            color = (*hex_to_rgb(shape.fill), _alpha(shape.opacity))
            self._blit_alpha(
                target,
                (shape.x, shape.y, shape.x + shape.width, shape.y + shape.height),
                lambda layer, ox, oy: pygame.draw.rect(
                    layer,
                    color,
                    pygame.Rect(int(shape.x + ox), int(shape.y + oy), int(shape.width), int(shape.height)),
                    border_radius=int(shape.radius),
                ),
            )
        elif isinstance(shape, Text):
            rendered = self.font(shape.size, shape.bold).render(shape.text, True, hex_to_rgb(shape.fill))
            rendered.set_alpha(_alpha(shape.opacity))
            target.blit(rendered, (shape.x, shape.y - rendered.get_height() + 3))
        else:
            raise TypeError(f"Unsupported shape: {type(shape).__name__}")

    def _ensure_background(self, frame: Frame) -> pygame.Surface:
        if self.background is None or self._background_key is not frame.background:
            surface = pygame.Surface((frame.width, frame.height))
            for shape in frame.background:
                self.draw_shape(surface, shape)
            self.background = surface
            self._background_key = frame.background
        return self.background

    def paint(self, frame: Frame, stats: Optional[str] = None) -> None:
        self.screen.blit(self._ensure_background(frame), (0, 0))
        for shape in frame.shapes:
            self.draw_shape(self.screen, shape)
        font = self.font(12)
        status = stats if stats is not None else frame.stats
        if status:
            self.screen.blit(font.render(status, True, (255, 255, 255)), (20, 8))
        if frame.commit_line:
            self.screen.blit(font.render(frame.commit_line, True, (204, 204, 204)), (20, frame.height - 52))


def run_live(driver: AnimationDriver, caption: str = "Commit Rush") -> int:
    viewport = driver.session.viewport
    pygame.init()
    screen = pygame.display.set_mode((viewport.width, viewport.height))
    pygame.display.set_caption(caption)
    clock = pygame.time.Clock()
    painter = PygamePainter(screen)
    # Paint failures are logged by the driver and the loop carries on.
    driver.add_listener(painter.paint)

    try:
        running = True
        while running and not driver.stopped:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                        continue
                    command = KEY_COMMANDS.get(event.key)
                    if command is not None:
                        driver.dispatch(command)

            if driver.tick() is None:
                driver.refresh()
            pygame.display.flip()
            clock.tick(driver.fps)
    finally:
        driver.stop()
        pygame.quit()
    logger.info("Window closed after %d frames", driver.session.frame_count)
    return 0
