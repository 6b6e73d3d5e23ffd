"""Running statistics behind the overlay charts."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Set, Tuple

from commit_rush.colors import NO_EXTENSION
from commit_rush.feed import CommitRecord

EMPTY_SNAPSHOT: Mapping[str, float] = MappingProxyType({})


def extension_of(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return NO_EXTENSION
    return "." + name.rsplit(".", 1)[-1].lower()


class Aggregator:
    def __init__(self, commits: Sequence[CommitRecord]) -> None:
        self.commits = commits
        self.contributions: Dict[int, Mapping[str, float]] = {}
        self.languages: Dict[str, Set[str]] = {}
        self.reset()

    def reset(self) -> None:
        self.contributions = {-1: EMPTY_SNAPSHOT}
        self.languages = {}

    def record_contribution(self, commit_index: int) -> Mapping[str, float]:
        # Recounted from the start every time; the tick rate bounds the cost.
        counts: Dict[str, int] = {}
        total = 0
        for commit in self.commits[: commit_index + 1]:
            counts[commit.author] = counts.get(commit.author, 0) + 1
            total += 1
        if total == 0:
            snapshot = EMPTY_SNAPSHOT
        else:
            snapshot = MappingProxyType(
                {author: count / total * 100.0 for author, count in counts.items()}
            )
        self.contributions[commit_index] = snapshot
        return snapshot

    def record_file_extensions(self, commit: CommitRecord) -> None:
        for path in commit.files:
            self.languages.setdefault(extension_of(path), set()).add(path)

    def record(self, commit_index: int, commit: CommitRecord) -> None:
        self.record_contribution(commit_index)
        self.record_file_extensions(commit)

    def snapshot(self, commit_index: int) -> Mapping[str, float]:
        return self.contributions.get(commit_index, EMPTY_SNAPSHOT)

    def sorted_contributions(self, commit_index: int) -> List[Tuple[str, float]]:
        return sorted(self.snapshot(commit_index).items(), key=lambda item: item[1], reverse=True)

    def total_files(self) -> int:
        return sum(len(files) for files in self.languages.values())

    def language_percentages(self) -> List[Tuple[str, float, int]]:
        total = self.total_files()
        if total == 0:
            return []
        rows = [(ext, len(files) / total * 100.0, len(files)) for ext, files in self.languages.items()]
        rows.sort(key=lambda row: row[1], reverse=True)
        return rows
