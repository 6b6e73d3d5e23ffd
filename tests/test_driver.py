from __future__ import annotations

import logging

import pytest

from commit_rush.driver import AnimationDriver, Command
from commit_rush.session import Mode, RunState

from conftest import make_commit, make_session


def make_driver(count: int = 5, mode: Mode = Mode.STANDARD, files=("src/a",)) -> AnimationDriver:
    commits = [make_commit(i, [f"{name}{i}.py" for name in files]) for i in range(count)]
    return AnimationDriver(make_session(commits, mode=mode))


class ExplodingRenderer:
    def __init__(self, fail_on=(1,)) -> None:
        self.calls = 0
        self.fail_on = set(fail_on)

    def render(self):
        self.calls += 1
        if self.calls in self.fail_on:
            raise RuntimeError("boom")
        return None


def test_speed_is_clamped() -> None:
    driver = make_driver()
    assert driver.set_speed(2.0) == 2.0
    assert driver.set_speed(0.05) == 0.1
    assert driver.set_speed(50.0) == 10.0


def test_commit_interval_follows_speed() -> None:
    driver = make_driver()
    assert driver.commit_interval == 30
    driver.set_speed(2.0)
    assert driver.commit_interval == 15
    driver.set_speed(0.5)
    assert driver.commit_interval == 60
    driver.set_speed(10.0)
    assert driver.commit_interval == 3
    assert driver.fps == 75


def test_large_feed_uses_slower_profile() -> None:
    commits = [make_commit(0, ["a.py"])]
    driver = AnimationDriver(make_session(commits, large=True))
    assert driver.fps == 60
    assert driver.commit_interval == 60


def test_commits_ingest_on_interval() -> None:
    driver = make_driver()
    for _ in range(29):
        driver.tick()
    assert driver.session.cursor == 0
    frame = driver.tick()
    assert driver.session.cursor == 1
    assert frame is driver.last_frame
    assert frame.stats.startswith("Commits: 1/5")


def test_pause_freezes_everything() -> None:
    driver = make_driver()
    driver.set_speed(10.0)
    for _ in range(3):
        driver.tick()
    particle = driver.session.standard.particles[0]
    position = (particle.x, particle.y, particle.z)

    assert driver.toggle_pause() is RunState.PAUSED
    for _ in range(20):
        assert driver.tick() is None
    assert driver.session.cursor == 1
    assert (particle.x, particle.y, particle.z) == position

    assert driver.toggle_pause() is RunState.RUNNING
    driver.tick()
    assert (particle.x, particle.y, particle.z) != position


def test_completion_and_settling() -> None:
    driver = make_driver(count=2)
    driver.set_speed(10.0)
    for _ in range(6):
        driver.tick()
    session = driver.session
    assert session.cursor == 2
    assert session.state is RunState.COMPLETED
    assert session.settled
    assert driver.tick() is None

    # Pause and mode switches are ignored once completed.
    assert driver.toggle_pause() is RunState.COMPLETED
    assert driver.toggle_mode() is Mode.STANDARD


def test_elaborate_keeps_ticking_until_decorations_expire() -> None:
    driver = make_driver(count=1, mode=Mode.ELABORATE)
    driver.set_speed(10.0)
    for _ in range(3):
        driver.tick()
    session = driver.session
    assert session.state is RunState.COMPLETED
    assert not session.settled
    ticks = driver.run(realtime=False)
    assert 0 < ticks <= 200
    assert session.settled
    assert session.elaborate.branches == []


def test_restart_resets_progress() -> None:
    driver = make_driver(count=2)
    driver.set_speed(10.0)
    for _ in range(6):
        driver.tick()
    driver.dispatch(Command.RESTART)
    session = driver.session
    assert session.state is RunState.RUNNING
    assert session.cursor == 0
    assert session.frame_count == 0
    assert session.standard.particles == []
    assert session.speed == 10.0


def test_dispatch_speed_and_mode() -> None:
    driver = make_driver()
    driver.dispatch(Command.SPEED_UP)
    assert driver.session.speed == 1.5
    driver.dispatch(Command.SPEED_DOWN)
    driver.dispatch(Command.SPEED_DOWN)
    assert driver.session.speed == 0.5
    driver.dispatch(Command.TOGGLE_MODE)
    assert driver.session.mode is Mode.ELABORATE
    assert driver.session.elaborate.root is not None
    driver.dispatch(Command.TOGGLE_PAUSE)
    assert driver.session.state is RunState.PAUSED
    with pytest.raises(ValueError):
        driver.dispatch("warp")  # type: ignore[arg-type]


def test_render_failure_is_logged_and_loop_continues(caplog) -> None:
    driver = make_driver()
    renderer = ExplodingRenderer(fail_on={1})
    driver.renderer = renderer
    with caplog.at_level(logging.ERROR, logger="commit_rush"):
        assert driver.tick() is None
        driver.tick()
    assert renderer.calls == 2
    assert driver.render_errors == 1
    assert driver.session.frame_count == 2
    assert any("Render failed" in record.getMessage() for record in caplog.records)


def test_listener_receives_frames_and_failures_are_contained(caplog) -> None:
    driver = make_driver()
    seen = []

    def broken(frame):
        raise RuntimeError("listener broke")

    driver.add_listener(broken)
    driver.add_listener(seen.append)
    with caplog.at_level(logging.ERROR, logger="commit_rush"):
        frame = driver.tick()
    assert seen == [frame]
    assert any("listener failed" in record.getMessage() for record in caplog.records)


def test_refresh_republishes_last_frame_while_paused() -> None:
    driver = make_driver()
    seen = []
    driver.add_listener(seen.append)
    assert driver.refresh() is None
    assert seen == []

    frame = driver.tick()
    driver.toggle_pause()
    assert driver.tick() is None
    assert driver.refresh() is frame
    assert seen == [frame, frame]
    assert frame.stats.endswith("Status: PAUSED")


def test_failing_painter_does_not_stop_the_loop(caplog) -> None:
    driver = make_driver()
    painted = []

    def painter(frame):
        if not painted:
            painted.append(None)
            raise RuntimeError("surface lost")
        painted.append(frame)

    driver.add_listener(painter)
    with caplog.at_level(logging.ERROR, logger="commit_rush"):
        first = driver.tick()
        driver.toggle_pause()
        driver.refresh()
    assert painted == [None, first]
    assert driver.stopped is False
    assert any("listener failed" in record.getMessage() for record in caplog.records)


def test_stop_is_idempotent() -> None:
    driver = make_driver()
    driver.stop()
    driver.stop()
    assert driver.stopped
    assert driver.tick() is None
    assert driver.run(realtime=False) == 0


def test_run_respects_max_frames_and_paces_ticks() -> None:
    driver = make_driver()
    now = [0.0]
    sleeps = []

    def sleep(delay: float) -> None:
        sleeps.append(delay)
        now[0] += delay

    ticks = driver.run(max_frames=10, clock=lambda: now[0], sleep=sleep)
    assert ticks == 10
    assert len(sleeps) == 10
    assert sleeps[0] == pytest.approx(1.0 / 75)


def test_run_fast_forwards_to_completion() -> None:
    driver = make_driver(count=4)
    ticks = driver.run(realtime=False)
    assert ticks == 4 * 30
    assert driver.session.state is RunState.COMPLETED
