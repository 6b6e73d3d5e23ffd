"""
Particle and tree-node simulation.

StandardEngine launches one particle per changed file from the origin and
integrates it under gravity and drag inside a projected box. ElaborateEngine
grows a tree of nodes in screen space, each new node linked to a recent node
by a decaying branch and decorated with pulses, spirals and blooms.
"""

from __future__ import annotations

import math
import random
from typing import Callable, Dict, List, Optional, Sequence

from commit_rush.colors import GradientCache, file_color
from commit_rush.config import FeedProfile
from commit_rush.entities import (
    Branch,
    Edge,
    GrowthPoint,
    Particle,
    PulseEffect,
    SpiralPath,
    StaticOutline,
    TreeNode,
)
from commit_rush.feed import CommitRecord
from commit_rush.projection import Viewport

GRAVITY = 0.02
DRAG = 0.99
RESTITUTION = 0.7
GROUND_FRICTION = 0.9
MAX_DEPTH = 400.0
OUTLINE_OPACITY = 0.6

NODE_JITTER = 0.1
NODE_DRAG = 0.95
NODE_MARGIN = 20.0
MAX_BRANCHES_PER_COMMIT = 5
RECENT_PARENTS = 20
SPIRAL_CHANCE = 0.3

AuthorColorFn = Callable[[str], str]


def basename(path: str) -> str:
    return path.rsplit("/", 1)[-1] or path


def directory_of(path: str) -> str:
    index = path.rfind("/")
    if index <= 0:
        return "/"
    return path[:index]


def files_to_process(commit: CommitRecord, profile: FeedProfile) -> Sequence[str]:
    if profile.max_files_per_commit is None:
        return commit.files
    return commit.files[: profile.max_files_per_commit]


class StandardEngine:
    def __init__(
        self,
        viewport: Viewport,
        profile: FeedProfile,
        gradients: GradientCache,
        author_color: AuthorColorFn,
        rand: Optional[random.Random] = None,
    ) -> None:
        self.viewport = viewport
        self.profile = profile
        self.gradients = gradients
        self.author_color = author_color
        self.rand = rand or random.Random()
        self.particles: List[Particle] = []
        self.outlines: List[StaticOutline] = []
        self.edges: List[Edge] = []

    def clear(self) -> None:
        self.particles = []
        self.outlines = []
        self.edges = []

    def flush(self) -> None:
        for p in self.particles:
            proj = self.viewport.project(p.x, p.y, p.z)
            self.outlines.append(
                StaticOutline(
                    x=proj.x,
                    y=proj.y,
                    r=p.radius * proj.scale,
                    color=p.color,
                    opacity=OUTLINE_OPACITY,
                )
            )
        self.particles = []
        # Edges only ever join particles of one commit, so none survive a flush.
        self.edges = []

    def spawn(self, commit: CommitRecord) -> List[Particle]:
        cap = self.profile.max_particles
        files = files_to_process(commit, self.profile)[:cap]
        if len(self.particles) >= cap or len(self.particles) + len(files) > cap:
            self.flush()

        author_color = self.author_color(commit.author)
        spawned: List[Particle] = []
        groups: Dict[str, List[Particle]] = {}

        for i, path in enumerate(files):
            angle = (i / len(files)) * math.pi * 2.0
            elevation = (self.rand.random() - 0.5) * math.pi * 0.5
            speed = 1.5 + self.rand.random() * 1.5
            color = file_color(path)
            particle = Particle(
                id=f"{commit.hash}-{path}",
                x=0.0,
                y=0.0,
                z=0.0,
                vx=math.cos(angle) * math.cos(elevation) * speed,
                vy=math.sin(elevation) * speed,
                vz=math.sin(angle) * math.cos(elevation) * speed,
                color=self.gradients.get(color, author_color),
                file_color=color,
                radius=6.0 + self.rand.random() * 5.0,
                filename=basename(path),
                path=path,
                author=commit.author,
                commit_hash=commit.hash,
            )
            spawned.append(particle)
            groups.setdefault(directory_of(path), []).append(particle)

        self.particles.extend(spawned)

        if self.profile.edges_enabled:
            for directory, members in groups.items():
                for a in range(len(members)):
                    for b in range(a + 1, len(members)):
                        self.edges.append(Edge(members[a].id, members[b].id, directory))
        return spawned

    def tick(self) -> None:
        width = self.viewport.width
        height = self.viewport.height
        for p in self.particles:
            p.age += 1
            p.vy += GRAVITY
            p.x += p.vx
            p.y += p.vy
            p.z += p.vz
            p.vx *= DRAG
            p.vy *= DRAG
            p.vz *= DRAG

            proj = self.viewport.project(p.x, p.y, p.z)
            r = p.radius * proj.scale

            if proj.y + r > height:
                p.y = (height - r - height / 2.0) / proj.scale
                p.vy = -p.vy * RESTITUTION
                p.vx *= GROUND_FRICTION
                p.vz *= GROUND_FRICTION
            elif proj.y - r < 0:
                p.y = (r - height / 2.0) / proj.scale
                p.vy = -p.vy * RESTITUTION

            if proj.x - r < 0:
                p.x = (r - width / 2.0) / proj.scale
                p.vx = -p.vx * RESTITUTION
            elif proj.x + r > width:
                p.x = (width / 2.0 - r) / proj.scale
                p.vx = -p.vx * RESTITUTION

            if p.z < -MAX_DEPTH or p.z > MAX_DEPTH:
                p.z = max(-MAX_DEPTH, min(MAX_DEPTH, p.z))
                p.vz = -p.vz * RESTITUTION

        self.particles = [p for p in self.particles if not p.expired]

    def live_count(self) -> int:
        return len(self.particles)

    def authors(self) -> List[str]:
        seen: Dict[str, None] = {}
        for p in self.particles:
            seen.setdefault(p.author, None)
        return list(seen)

    def has_decaying(self) -> bool:
        return any(math.isfinite(p.max_age) for p in self.particles)


class ElaborateEngine:
    def __init__(
        self,
        viewport: Viewport,
        profile: FeedProfile,
        author_color: AuthorColorFn,
        rand: Optional[random.Random] = None,
    ) -> None:
        self.viewport = viewport
        self.profile = profile
        self.author_color = author_color
        self.rand = rand or random.Random()
        self.nodes: List[TreeNode] = []
        self.branches: List[Branch] = []
        self.pulses: List[PulseEffect] = []
        self.spirals: List[SpiralPath] = []
        self.growth_points: List[GrowthPoint] = []

    def clear(self) -> None:
        self.nodes = []
        self.branches = []
        self.pulses = []
        self.spirals = []
        self.growth_points = []

    def make_root(self) -> TreeNode:
        return TreeNode(
            x=self.viewport.width / 2.0,
            y=self.viewport.height - 50.0,
            color="#ffffff",
            size=8.0,
            is_root=True,
        )

    def seed_root(self) -> TreeNode:
        self.clear()
        root = self.make_root()
        self.nodes.append(root)
        return root

    @property
    def root(self) -> Optional[TreeNode]:
        for node in self.nodes:
            if node.is_root:
                return node
        return None

    def _pick_parent(self) -> TreeNode:
        if not self.nodes:
            root = self.make_root()
            self.nodes.append(root)
            return root
        recent = self.nodes[-RECENT_PARENTS:]
        return recent[self.rand.randrange(len(recent))]

    def spawn(self, commit: CommitRecord) -> List[TreeNode]:
        author_color = self.author_color(commit.author)
        selected = list(files_to_process(commit, self.profile))[:MAX_BRANCHES_PER_COMMIT]
        created: List[TreeNode] = []

        for path in selected:
            parent = self._pick_parent()
            color = file_color(path)
            # Forward arc of +/-72 degrees around straight up.
            angle = (self.rand.random() - 0.5) * math.pi * 0.8 - math.pi / 2.0
            distance = 40.0 + self.rand.random() * 60.0
            node = TreeNode(
                x=parent.x + math.cos(angle) * distance,
                y=parent.y + math.sin(angle) * distance,
                vx=math.cos(angle) * 2.0,
                vy=math.sin(angle) * 2.0,
                color=color,
                author_color=author_color,
                author=commit.author,
                size=4.0 + self.rand.random() * 4.0,
                filename=basename(path),
                commit_hash=commit.hash,
            )
            self.nodes.append(node)
            created.append(node)

            self.branches.append(
                Branch(
                    source=parent,
                    target=node,
                    color=author_color,
                    width=2.0 + self.rand.random() * 2.0,
                )
            )
            self.pulses.append(
                PulseEffect(
                    x=node.x,
                    y=node.y,
                    color=color,
                    max_radius=40.0 + self.rand.random() * 30.0,
                )
            )
            if self.rand.random() < SPIRAL_CHANCE:
                self.spirals.append(SpiralPath(center_x=node.x, center_y=node.y, color=author_color))

        if len(selected) > 3 and self.rand.random() < 0.5:
            anchor = self.nodes[-1]
            self.growth_points.append(
                GrowthPoint(
                    x=anchor.x,
                    y=anchor.y,
                    petals=len(selected),
                    color=author_color,
                    file_color=file_color(selected[0]),
                    size=20.0 + self.rand.random() * 20.0,
                    rotation=self.rand.random() * math.pi * 2.0,
                )
            )
        return created

    def tick(self) -> None:
        low_x = NODE_MARGIN
        high_x = self.viewport.width - NODE_MARGIN
        low_y = NODE_MARGIN
        high_y = self.viewport.height - NODE_MARGIN

        for node in self.nodes:
            if node.is_root:
                continue
            node.age += 1
            node.vx += (self.rand.random() - 0.5) * NODE_JITTER
            node.vy += (self.rand.random() - 0.5) * NODE_JITTER
            node.vx *= NODE_DRAG
            node.vy *= NODE_DRAG
            node.x += node.vx
            node.y += node.vy

            if node.x < low_x:
                node.x = low_x
                node.vx = abs(node.vx)
            elif node.x > high_x:
                node.x = high_x
                node.vx = -abs(node.vx)
            if node.y < low_y:
                node.y = low_y
                node.vy = abs(node.vy)
            elif node.y > high_y:
                node.y = high_y
                node.vy = -abs(node.vy)

        for branch in self.branches:
            branch.age += 1
        self.branches = [b for b in self.branches if not b.expired]

        for pulse in self.pulses:
            pulse.age += 1
        self.pulses = [p for p in self.pulses if not p.expired]

        for spiral in self.spirals:
            spiral.advance()
        self.spirals = [s for s in self.spirals if not s.expired]

        for gp in self.growth_points:
            gp.age += 1
            gp.rotation += 0.02
        self.growth_points = [g for g in self.growth_points if not g.expired]

    def live_count(self) -> int:
        return len(self.nodes)

    def authors(self) -> List[str]:
        seen: Dict[str, None] = {}
        for node in self.nodes:
            if node.author:
                seen.setdefault(node.author, None)
        return list(seen)

    def has_decaying(self) -> bool:
        return bool(self.branches or self.pulses or self.spirals or self.growth_points)
