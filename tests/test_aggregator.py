from __future__ import annotations

import pytest

from commit_rush.aggregator import EMPTY_SNAPSHOT, Aggregator, extension_of
from commit_rush.colors import NO_EXTENSION

from conftest import make_commit


@pytest.mark.parametrize(
    "path,expected",
    [
        ("src/App.TSX", ".tsx"),
        ("Makefile", NO_EXTENSION),
        ("pkg.v2/README", NO_EXTENSION),
        ("archive.tar.gz", ".gz"),
    ],
)
def test_extension_of(path: str, expected: str) -> None:
    assert extension_of(path) == expected


def test_contributions_are_cumulative_percentages() -> None:
    commits = [
        make_commit(0, ["a.py"], author="Ada"),
        make_commit(1, ["b.py"], author="Bo"),
        make_commit(2, ["c.py"], author="Ada"),
        make_commit(3, ["d.py"], author="Ada"),
    ]
    agg = Aggregator(commits)
    for index, commit in enumerate(commits):
        agg.record(index, commit)
        assert sum(agg.snapshot(index).values()) == pytest.approx(100.0)

    assert agg.snapshot(0) == {"Ada": 100.0}
    assert agg.snapshot(1) == {"Ada": 50.0, "Bo": 50.0}
    assert agg.sorted_contributions(3) == [("Ada", 75.0), ("Bo", 25.0)]


def test_snapshot_before_first_commit_is_empty() -> None:
    agg = Aggregator([make_commit(0, ["a.py"])])
    assert agg.snapshot(-1) is EMPTY_SNAPSHOT
    assert agg.snapshot(42) == {}


def test_snapshots_are_read_only() -> None:
    agg = Aggregator([make_commit(0, ["a.py"])])
    snapshot = agg.record_contribution(0)
    with pytest.raises(TypeError):
        snapshot["Ada"] = 1.0  # type: ignore[index]


def test_language_distribution_counts_unique_paths() -> None:
    agg = Aggregator([])
    agg.record_file_extensions(make_commit(0, ["a.py", "b.py", "README"]))
    agg.record_file_extensions(make_commit(1, ["a.py", "c.js"]))
    assert agg.total_files() == 4
    rows = agg.language_percentages()
    assert rows[0] == (".py", 50.0, 2)
    assert {row[0] for row in rows} == {".py", ".js", NO_EXTENSION}
    assert sum(row[1] for row in rows) == pytest.approx(100.0)


def test_reset_clears_everything() -> None:
    commits = [make_commit(0, ["a.py"])]
    agg = Aggregator(commits)
    agg.record(0, commits[0])
    agg.reset()
    assert agg.contributions == {-1: EMPTY_SNAPSHOT}
    assert agg.languages == {}
    assert agg.language_percentages() == []
