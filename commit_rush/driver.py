"""
Animation driver: paces commit ingestion, physics and rendering.

One tick is ingest-if-due, physics step, render, stats publish. Ticks never
overlap; control commands run between ticks.
"""

from __future__ import annotations

import math
import time
from enum import Enum
from typing import Callable, List, Optional

from commit_rush.log import get_logger
from commit_rush.renderer import SceneRenderer
from commit_rush.scene import Frame
from commit_rush.session import Mode, RunState, Session

logger = get_logger(__name__)

FrameListener = Callable[[Frame], None]


class Command(Enum):
    TOGGLE_PAUSE = "toggle_pause"
    SPEED_UP = "speed_up"
    SPEED_DOWN = "speed_down"
    RESTART = "restart"
    TOGGLE_MODE = "toggle_mode"


class AnimationDriver:
    def __init__(self, session: Session, renderer: Optional[SceneRenderer] = None) -> None:
        self.session = session
        self.renderer = renderer or SceneRenderer(session)
        self.listeners: List[FrameListener] = []
        self.last_frame: Optional[Frame] = None
        self.render_errors = 0
        self._stopped = False

    # Controls

    def toggle_pause(self) -> RunState:
        session = self.session
        if session.state is RunState.RUNNING:
            session.state = RunState.PAUSED
        elif session.state is RunState.PAUSED:
            session.state = RunState.RUNNING
        return session.state

    def set_speed(self, speed: float) -> float:
        self.session.speed = self.session.config.clamp_speed(speed)
        return self.session.speed

    def change_speed(self, delta: float) -> float:
        return self.set_speed(self.session.speed + delta)

    def restart(self) -> None:
        self.session.reset()
        logger.info("Restarted from the first commit")

    def toggle_mode(self) -> Mode:
        session = self.session
        if session.state is RunState.COMPLETED:
            return session.mode
        mode = Mode.STANDARD if session.mode is Mode.ELABORATE else Mode.ELABORATE
        session.set_mode(mode)
        logger.info("Switched to %s mode", mode.name.lower())
        return mode

    def dispatch(self, command: Command) -> None:
        step = self.session.config.speed_step
        if command is Command.TOGGLE_PAUSE:
            self.toggle_pause()
        elif command is Command.SPEED_UP:
            self.change_speed(step)
        elif command is Command.SPEED_DOWN:
            self.change_speed(-step)
        elif command is Command.RESTART:
            self.restart()
        elif command is Command.TOGGLE_MODE:
            self.toggle_mode()
        else:
            raise ValueError(f"Unknown command: {command}")

    # Ticking

    @property
    def commit_interval(self) -> int:
        return max(1, math.floor(self.session.profile.commit_interval / self.session.speed))

    @property
    def fps(self) -> int:
        return self.session.profile.base_fps

    def add_listener(self, listener: FrameListener) -> None:
        self.listeners.append(listener)

    def _render(self) -> Optional[Frame]:
        try:
            return self.renderer.render()
        except Exception:
            self.render_errors += 1
            logger.exception("Render failed on frame %d", self.session.frame_count)
            return None

    def tick(self) -> Optional[Frame]:
        session = self.session
        if self._stopped or session.state is RunState.PAUSED or session.settled:
            return None

        if session.state is RunState.RUNNING:
            session.frame_count += 1
            if session.frame_count % self.commit_interval == 0 and not session.exhausted:
                session.ingest()

        session.engine.tick()
        frame = self._render()

        if session.state is RunState.RUNNING and session.exhausted:
            session.state = RunState.COMPLETED
            logger.info("All %d commits visualized", len(session.commits))

        if frame is not None:
            self.last_frame = frame
            self._publish(frame)
        return frame

    def _publish(self, frame: Frame) -> None:
        frame.stats = self.session.stats().summary()
        for listener in self.listeners:
            try:
                listener(frame)
            except Exception:
                logger.exception("Frame listener failed on frame %d", frame.index)

    def refresh(self) -> Optional[Frame]:
        """Re-publish the last frame with current stats, for ticks that draw nothing."""
        if self.last_frame is not None:
            self._publish(self.last_frame)
        return self.last_frame

    def stop(self) -> None:
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def run(
        self,
        max_frames: Optional[int] = None,
        realtime: bool = True,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Tick until stopped, settled or ``max_frames`` ticks have run.

        With ``realtime`` the loop waits between ticks to hold the base frame
        rate; otherwise it fast-forwards. Returns the number of ticks run.
        """
        interval = 1.0 / self.fps
        ticks = 0
        deadline = clock()
        while not self._stopped and not self.session.settled:
            if max_frames is not None and ticks >= max_frames:
                break
            self.tick()
            ticks += 1
            if realtime:
                deadline += interval
                delay = deadline - clock()
                if delay > 0:
                    sleep(delay)
                else:
                    deadline = clock()
        return ticks
