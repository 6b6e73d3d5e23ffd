from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from commit_rush.colors import GradientCache
from commit_rush.renderer import SceneRenderer
from commit_rush.scene import Circle, Layer, Line, Polyline, Rect, Text
from commit_rush.session import Mode
from commit_rush.svg import frame_to_svg, svg_gradient, svg_shape, write_svg

from conftest import make_commit, make_session

SVG_NS = "{http://www.w3.org/2000/svg}"


def test_gradient_definition() -> None:
    handle = GradientCache().get("#FF6B6B", "#1f77b4")
    markup = svg_gradient(handle)
    assert markup.startswith('<radialGradient id="gradient-FF6B6B-1f77b4" cx="30%" cy="30%" r="70%">')
    assert 'stop-color="#FF6B6B" stop-opacity="0.95"' in markup
    assert 'stop-color="#1f77b4" stop-opacity="0.85"' in markup


def test_shapes() -> None:
    handle = GradientCache().get("#ffffff", "#000000")
    circle = svg_shape(Circle(1.0, 2.0, 3.0, Layer.ENTITIES, fill=handle, opacity=0.9))
    assert 'fill="url(#gradient-ffffff-000000)"' in circle
    assert "stroke=" not in circle

    outline = svg_shape(Circle(1.0, 2.0, 3.0, Layer.OUTLINES, stroke="#abcdef", stroke_width=1.0))
    assert 'fill="none"' in outline
    assert 'stroke="#abcdef"' in outline

    line = svg_shape(Line(0.0, 0.0, 5.0, 5.0, "#444444", Layer.CONNECTIONS, round_cap=True))
    assert 'stroke-linecap="round"' in line

    path = svg_shape(Polyline(((0.0, 0.0), (1.0, 1.0)), "#fff", Layer.EFFECTS, width=2.0))
    assert 'd="M 0.00 0.00 L 1.00 1.00"' in path

    rect = svg_shape(Rect(0.0, 0.0, 10.0, 5.0, "#333333", Layer.CONTRIBUTIONS, radius=3.0))
    assert 'rx="3.0"' in rect

    text = svg_shape(Text(0.0, 0.0, "<a & b>", "#fff", Layer.LABELS, bold=True))
    assert "&lt;a &amp; b&gt;" in text
    assert 'font-weight="bold"' in text


def test_unknown_shape_is_rejected() -> None:
    with pytest.raises(TypeError):
        svg_shape("circle")  # type: ignore[arg-type]


@pytest.mark.parametrize("mode", [Mode.STANDARD, Mode.ELABORATE])
def test_frame_is_well_formed_svg(mode: Mode, tmp_path) -> None:
    commits = [make_commit(i, [f"src/f{i}.py", f"docs/g{i}.md"], author=f"dev & co {i % 2}") for i in range(12)]
    session = make_session(commits, mode=mode)
    for _ in commits:
        session.ingest()
        session.engine.tick()
    frame = SceneRenderer(session).render()

    root = ET.fromstring(frame_to_svg(frame))
    assert root.tag == f"{SVG_NS}svg"
    assert root.get("width") == "1200"
    defs = root.find(f"{SVG_NS}defs")
    assert len(list(defs)) == len(frame.gradients)

    out = write_svg(frame, tmp_path / "nested" / "frame.svg")
    assert out.exists()
    assert "Commits: 12/12" in out.read_text(encoding="utf-8")
