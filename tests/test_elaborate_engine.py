from __future__ import annotations

import random

from commit_rush.colors import AuthorColors
from commit_rush.config import RushConfig
from commit_rush.engine import ElaborateEngine
from commit_rush.entities import Branch, GrowthPoint, PulseEffect, SpiralPath, TreeNode
from commit_rush.projection import Viewport
from commit_rush.session import Mode

from conftest import FixedRandom, make_commit, make_session


def make_engine(rand: random.Random = None) -> ElaborateEngine:
    return ElaborateEngine(
        Viewport(),
        RushConfig().profile(False),
        AuthorColors(["Ada", "Bo"]),
        rand or random.Random(5),
    )


def test_elaborate_session_starts_with_root_only() -> None:
    session = make_session([make_commit(0, ["a.py"])], mode=Mode.ELABORATE)
    engine = session.elaborate
    assert len(engine.nodes) == 1
    root = engine.nodes[0]
    assert root.is_root
    assert (root.x, root.y) == (600.0, 750.0)
    assert root.color == "#ffffff"
    assert root.size == 8.0
    assert engine.branches == []
    assert session.standard.particles == []


def test_spawn_adds_node_branch_and_pulse_per_file() -> None:
    engine = make_engine()
    engine.seed_root()
    created = engine.spawn(make_commit(0, ["a.py", "b.py", "c.py"]))
    assert len(created) == 3
    assert len(engine.nodes) == 4
    assert len(engine.branches) == 3
    assert len(engine.pulses) == 3
    for node in created:
        assert node.author == "Ada"
        assert node.author_color == engine.author_color("Ada")
        assert 4.0 <= node.size <= 8.0
        # New nodes grow upward from their parent.
        assert node.vy < 0


def test_spawn_caps_branches_per_commit() -> None:
    engine = make_engine()
    engine.seed_root()
    created = engine.spawn(make_commit(0, [f"f{i}.py" for i in range(12)]))
    assert len(created) == 5
    assert len(engine.branches) == 5


def test_spawn_without_root_creates_one() -> None:
    engine = make_engine()
    engine.spawn(make_commit(0, ["a.py"]))
    assert engine.root is not None
    assert engine.branches[0].source is engine.root


def test_parent_is_chosen_from_recent_nodes() -> None:
    engine = make_engine(random.Random(9))
    engine.seed_root()
    for i in range(40):
        engine.spawn(make_commit(i, [f"f{i}.py"]))
    for i in range(40, 60):
        recent = engine.nodes[-20:]
        engine.spawn(make_commit(i, [f"f{i}.py"]))
        assert any(engine.branches[-1].source is node for node in recent)


def test_low_rolls_add_spirals_and_a_growth_point() -> None:
    engine = make_engine(FixedRandom(0.1))
    engine.seed_root()
    engine.spawn(make_commit(0, [f"f{i}.py" for i in range(5)]))
    assert len(engine.spirals) == 5
    assert len(engine.growth_points) == 1
    assert engine.growth_points[0].petals == 5
    assert engine.has_decaying()


def test_high_rolls_skip_decorations() -> None:
    engine = make_engine(FixedRandom(0.9))
    engine.seed_root()
    engine.spawn(make_commit(0, [f"f{i}.py" for i in range(5)]))
    assert engine.spirals == []
    assert engine.growth_points == []


def test_root_never_moves() -> None:
    engine = make_engine()
    root = engine.seed_root()
    engine.spawn(make_commit(0, ["a.py", "b.py"]))
    for _ in range(50):
        engine.tick()
    assert (root.x, root.y) == (600.0, 750.0)
    assert root.age == 0


def test_nodes_are_kept_inside_margin() -> None:
    engine = make_engine()
    node = TreeNode(x=5.0, y=400.0, color="#fff", size=4.0, vx=-1.0)
    engine.nodes = [node]
    engine.tick()
    assert node.x == 20.0
    assert node.vx > 0


def test_decorations_expire() -> None:
    engine = make_engine()
    a = TreeNode(x=100.0, y=100.0, color="#fff", size=4.0)
    b = TreeNode(x=150.0, y=100.0, color="#fff", size=4.0)
    engine.nodes = [a, b]
    engine.branches = [Branch(source=a, target=b, color="#fff", width=2.0)]
    engine.pulses = [PulseEffect(x=0.0, y=0.0, color="#fff", max_radius=50.0)]
    engine.spirals = [SpiralPath(center_x=0.0, center_y=0.0, color="#fff")]
    engine.growth_points = [
        GrowthPoint(x=0.0, y=0.0, petals=4, color="#fff", file_color="#000", size=30.0, rotation=0.0)
    ]

    for _ in range(61):
        engine.tick()
    assert engine.pulses == []
    assert len(engine.branches) == 1

    for _ in range(60):
        engine.tick()
    assert engine.branches == []

    for _ in range(60):
        engine.tick()
    assert engine.spirals == []
    assert engine.growth_points == []
    assert not engine.has_decaying()
    # Nodes do not decay.
    assert len(engine.nodes) == 2


def test_spiral_trail_keeps_last_sixty_points() -> None:
    spiral = SpiralPath(center_x=0.0, center_y=0.0, color="#fff")
    for _ in range(100):
        spiral.advance()
    assert len(spiral.points) == 60
    assert spiral.age == 100
    assert spiral.radius == 5.0 + 100 * 0.5


def test_pulse_radius_grows_with_age() -> None:
    pulse = PulseEffect(x=0.0, y=0.0, color="#fff", max_radius=60.0, age=30)
    assert pulse.radius == 30.0


def test_growth_point_petals_spread_evenly() -> None:
    gp = GrowthPoint(x=0.0, y=0.0, petals=4, color="#fff", file_color="#000", size=20.0, rotation=0.0, age=75)
    tips = gp.petal_tips()
    assert len(tips) == 4
    assert tips[0][0] == 10.0
    assert abs(tips[0][1]) < 1e-9
