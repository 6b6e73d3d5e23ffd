"""
Commit feed: the ordered list of commit records the visualization consumes.

The feed is produced outside this package (``commits-data.json`` written by a
git log exporter) and is only read here. A synthetic feed is available for
demos and tests.
"""

from __future__ import annotations

import json
import math
import os
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from commit_rush.config import RushConfig
from commit_rush.log import get_logger

logger = get_logger(__name__)


class FeedError(ValueError):
    """Raised when a commit feed is missing, malformed or empty."""


@dataclass(frozen=True)
class CommitRecord:
    hash: str
    author: str
    timestamp: Optional[datetime]
    message: str
    files: Tuple[str, ...]
    insertions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class CommitFeed:
    commits: Tuple[CommitRecord, ...]
    large: bool
    total: int


def _parse_timestamp(raw: Dict[str, Any]) -> Optional[datetime]:
    if raw.get("timestamp") is not None:
        try:
            return datetime.fromtimestamp(float(raw["timestamp"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError) as exc:
            raise FeedError(f"Invalid commit timestamp: {raw['timestamp']!r}") from exc
    date = raw.get("date")
    if not date:
        return None
    if not isinstance(date, str):
        raise FeedError(f"Invalid commit date: {date!r}")
    try:
        # fromisoformat only learned the trailing "Z" in 3.11.
        parsed = datetime.fromisoformat(date.replace("Z", "+00:00"))
    except ValueError as exc:
        raise FeedError(f"Invalid commit date: {date!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_commit(raw: Any) -> CommitRecord:
    if not isinstance(raw, dict):
        raise FeedError(f"Commit entry must be an object, got {type(raw).__name__}")
    commit_hash = raw.get("hash")
    if not isinstance(commit_hash, str) or not commit_hash:
        raise FeedError("Commit entry is missing its hash")
    files = raw.get("files", [])
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise FeedError(f"Commit {commit_hash} has a malformed file list")
    author = raw.get("author") or ""
    message = raw.get("message") or ""
    if not isinstance(author, str) or not isinstance(message, str):
        raise FeedError(f"Commit {commit_hash} has a malformed author or message")
    try:
        insertions = int(raw.get("insertions") or 0)
        deletions = int(raw.get("deletions") or 0)
    except (TypeError, ValueError) as exc:
        raise FeedError(f"Commit {commit_hash} has malformed line counts") from exc
    return CommitRecord(
        hash=commit_hash,
        author=author,
        timestamp=_parse_timestamp(raw),
        message=message,
        files=tuple(files),
        insertions=insertions,
        deletions=deletions,
    )


def sample_commits(commits: List[CommitRecord], limit: int) -> List[CommitRecord]:
    if limit <= 0 or len(commits) <= limit:
        return list(commits)
    step = math.ceil(len(commits) / limit)
    return commits[::step]


def build_feed(
    raw_commits: Iterable[Any],
    config: RushConfig,
    large: bool = False,
) -> CommitFeed:
    commits = [parse_commit(raw) for raw in raw_commits]
    if not commits:
        raise FeedError("Commit feed is empty")
    total = len(commits)
    large = large or total > config.large_feed_threshold
    if large:
        commits = sample_commits(commits, config.large_feed_sample_limit)
        logger.info(
            "Large feed detected. Using %d commits out of %d total.", len(commits), total
        )
    return CommitFeed(commits=tuple(commits), large=large, total=total)


def load_commit_feed(path: str, config: RushConfig, force_large: bool = False) -> CommitFeed:
    if not os.path.exists(path):
        raise FeedError(f"Commit feed not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise FeedError(f"Commit feed is not valid JSON: {path}: {exc}") from exc

    metadata: Dict[str, Any] = {}
    if isinstance(data, dict):
        raw_commits = data.get("commits")
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise FeedError(f"Commit feed metadata must be an object: {path}")
    else:
        raw_commits = data
    if not isinstance(raw_commits, list):
        raise FeedError(f"Commit feed has no commit list: {path}")

    large = force_large or bool(metadata.get("isMassiveRepo", False))
    feed = build_feed(raw_commits, config, large=large)
    logger.info("Loaded %d commits from %s", len(feed.commits), path)
    return feed


class SyntheticCommitFeed:
    AUTHORS = [
        "Ada Lovelace",
        "Grace Hopper",
        "Linus Torvalds",
        "Margaret Hamilton",
        "Ken Thompson",
        "Barbara Liskov",
    ]
    DIRECTORIES = ["", "src", "src/core", "src/ui", "tests", "docs", "scripts"]
    NAMES = ["main", "util", "parser", "render", "config", "index", "model", "README"]
    EXTENSIONS = [".py", ".ts", ".go", ".md", ".json", ".css", ""]
    MESSAGES = [
        "Fix edge case in parser",
        "Add rendering pass",
        "Refactor configuration loading",
        "Update docs",
        "Tune physics constants",
        "Initial import",
    ]

    def __init__(self, seed: int = 1) -> None:
        self.rand = random.Random(seed)
        self.start = datetime(2020, 1, 1, tzinfo=timezone.utc)

    def _path(self) -> str:
        directory = self.rand.choice(self.DIRECTORIES)
        name = self.rand.choice(self.NAMES) + self.rand.choice(self.EXTENSIONS)
        return f"{directory}/{name}" if directory else name

    def commits(self, count: int) -> List[CommitRecord]:
        records: List[CommitRecord] = []
        when = self.start
        # A few authors dominate, like most real histories.
        weights = [1.0 / (i + 1) for i in range(len(self.AUTHORS))]
        for index in range(count):
            when += timedelta(hours=self.rand.uniform(1.0, 36.0))
            file_count = max(1, int(self.rand.expovariate(0.35)))
            files = sorted({self._path() for _ in range(file_count)})
            records.append(
                CommitRecord(
                    hash=f"{self.rand.getrandbits(160):040x}",
                    author=self.rand.choices(self.AUTHORS, weights=weights)[0],
                    timestamp=when,
                    message=self.rand.choice(self.MESSAGES),
                    files=tuple(files),
                    insertions=self.rand.randint(0, 400),
                    deletions=self.rand.randint(0, 200),
                )
            )
        return records

    def feed(self, count: int, config: RushConfig, large: bool = False) -> CommitFeed:
        commits = self.commits(count)
        if not commits:
            raise FeedError("Commit feed is empty")
        large = large or count > config.large_feed_threshold
        if large:
            commits = sample_commits(commits, config.large_feed_sample_limit)
        return CommitFeed(commits=tuple(commits), large=large, total=count)
