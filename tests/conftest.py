from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

from commit_rush.config import RushConfig
from commit_rush.feed import CommitFeed, CommitRecord
from commit_rush.session import Mode, Session

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FixedRandom(random.Random):
    """Random whose ``random()`` always returns the same value."""

    def __init__(self, value: float, seed: int = 0) -> None:
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


def make_commit(
    index: int,
    files: Sequence[str],
    author: str = "Ada",
    message: str = "change",
) -> CommitRecord:
    return CommitRecord(
        hash=f"{index:040x}",
        author=author,
        timestamp=START + timedelta(hours=index),
        message=message,
        files=tuple(files),
    )


def make_feed(commits: List[CommitRecord], large: bool = False) -> CommitFeed:
    return CommitFeed(commits=tuple(commits), large=large, total=len(commits))


def make_session(
    commits: List[CommitRecord],
    mode: Mode = Mode.STANDARD,
    large: bool = False,
    rand: Optional[random.Random] = None,
    config: Optional[RushConfig] = None,
) -> Session:
    return Session(
        make_feed(commits, large=large),
        config or RushConfig(),
        mode=mode,
        rand=rand or random.Random(7),
    )


@pytest.fixture
def config() -> RushConfig:
    return RushConfig()


@pytest.fixture
def three_pair_commits() -> List[CommitRecord]:
    return [make_commit(i, [f"src/a{i}.py", f"src/b{i}.py"]) for i in range(3)]
