"""
Per-session state: everything a restart has to put back.

The animation driver owns one Session. Control handlers and ticks mutate it;
``reset`` is the only place that reinitialises it.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set

from commit_rush.aggregator import Aggregator
from commit_rush.colors import AuthorColors, GradientCache
from commit_rush.config import RushConfig
from commit_rush.engine import ElaborateEngine, StandardEngine, files_to_process
from commit_rush.feed import CommitFeed, CommitRecord, FeedError
from commit_rush.projection import Viewport


class Mode(Enum):
    STANDARD = "standard"
    ELABORATE = "elaborate"


class RunState(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Stats:
    commit_index: int
    total_commits: int
    unique_files: int
    entities: int
    speed: float
    mode: Mode
    state: RunState

    def summary(self) -> str:
        return (
            f"Commits: {self.commit_index}/{self.total_commits} | "
            f"Files: {self.unique_files} | "
            f"Entities: {self.entities} | "
            f"Speed: {self.speed:.1f}x | "
            f"Mode: {self.mode.name} | "
            f"Status: {self.state.name}"
        )


class Session:
    def __init__(
        self,
        feed: CommitFeed,
        config: Optional[RushConfig] = None,
        mode: Mode = Mode.STANDARD,
        speed: float = 1.0,
        rand: Optional[random.Random] = None,
    ) -> None:
        if not feed.commits:
            raise FeedError("Cannot start a session on an empty commit feed")
        self.config = config or RushConfig()
        self.commits = feed.commits
        self.large = feed.large
        self.profile = self.config.profile(feed.large)
        self.viewport = Viewport(
            width=self.config.width,
            height=self.config.height,
            focal_length=self.config.focal_length,
        )
        self.rand = rand or random.Random(self.config.seed)
        self.author_colors = AuthorColors(commit.author for commit in self.commits)
        self.gradients = GradientCache()
        self.standard = StandardEngine(
            self.viewport, self.profile, self.gradients, self.author_colors, self.rand
        )
        self.elaborate = ElaborateEngine(self.viewport, self.profile, self.author_colors, self.rand)
        self.aggregator = Aggregator(self.commits)
        self.mode = mode
        self.speed = self.config.clamp_speed(speed)
        self.cursor = 0
        self.frame_count = 0
        self.state = RunState.RUNNING
        self.unique_files: Set[str] = set()
        self.reset()

    def reset(self) -> None:
        """Clear simulation and aggregates; mode, speed and colours survive."""
        self.standard.clear()
        self.elaborate.clear()
        self.aggregator.reset()
        self.cursor = 0
        self.frame_count = 0
        self.state = RunState.RUNNING
        self.unique_files = set()
        if self.mode is Mode.ELABORATE:
            self.elaborate.seed_root()

    def set_mode(self, mode: Mode) -> None:
        self.mode = mode
        self.standard.clear()
        self.elaborate.clear()
        if mode is Mode.ELABORATE:
            self.elaborate.seed_root()

    @property
    def engine(self):
        if self.mode is Mode.ELABORATE:
            return self.elaborate
        return self.standard

    @property
    def exhausted(self) -> bool:
        return self.cursor >= len(self.commits)

    @property
    def settled(self) -> bool:
        return self.state is RunState.COMPLETED and not self.engine.has_decaying()

    def ingest(self) -> CommitRecord:
        commit = self.commits[self.cursor]
        self.engine.spawn(commit)
        self.unique_files.update(files_to_process(commit, self.profile))
        self.aggregator.record(self.cursor, commit)
        self.cursor += 1
        return commit

    def current_commit(self) -> Optional[CommitRecord]:
        if self.cursor == 0:
            return None
        return self.commits[self.cursor - 1]

    def active_authors(self) -> List[str]:
        return self.engine.authors()

    def live_entities(self) -> int:
        return self.engine.live_count()

    def stats(self) -> Stats:
        return Stats(
            commit_index=self.cursor,
            total_commits=len(self.commits),
            unique_files=len(self.unique_files),
            entities=self.live_entities(),
            speed=self.speed,
            mode=self.mode,
            state=self.state,
        )

    def commit_line(self) -> Optional[str]:
        commit = self.current_commit()
        if commit is None:
            return None
        message = commit.message[:50] + ("..." if len(commit.message) > 50 else "")
        when = commit.timestamp.strftime("%Y-%m-%d %H:%M:%S") if commit.timestamp else "----"
        author = commit.author or "unknown"
        return f"{when} {author}: {message}"
