"""
Tunable constants for the commit visualization.

Values come from a JSON config file (keys match the field names below) and
can be overridden per run on the command line.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


DEFAULT_CONFIG_PATH = "rush_config.json"


@dataclass(frozen=True)
class FeedProfile:
    max_particles: int
    max_files_per_commit: Optional[int]
    edges_enabled: bool
    base_fps: int
    commit_interval: int


@dataclass(frozen=True)
class RushConfig:
    width: int = 1200
    height: int = 800
    focal_length: float = 600.0
    max_particles: int = 90
    large_max_particles: int = 45
    large_max_files_per_commit: int = 10
    base_fps: int = 75
    large_base_fps: int = 60
    commit_interval: int = 30
    large_commit_interval: int = 60
    min_speed: float = 0.1
    max_speed: float = 10.0
    speed_step: float = 0.5
    large_feed_threshold: int = 100000
    large_feed_sample_limit: int = 10000
    seed: Optional[int] = None

    @classmethod
    def from_mapping(cls, config: Dict[str, Any]) -> "RushConfig":
        values: Dict[str, Any] = {}
        for field in fields(cls):
            if field.name not in config or config[field.name] is None:
                continue
            default = getattr(cls, field.name)
            raw = config[field.name]
            if isinstance(default, bool):
                values[field.name] = bool(raw)
            elif isinstance(default, int):
                values[field.name] = int(raw)
            elif isinstance(default, float):
                values[field.name] = float(raw)
            else:
                values[field.name] = raw
        return cls(**values)

    def profile(self, large: bool) -> FeedProfile:
        if large:
            return FeedProfile(
                max_particles=self.large_max_particles,
                max_files_per_commit=self.large_max_files_per_commit,
                edges_enabled=False,
                base_fps=self.large_base_fps,
                commit_interval=self.large_commit_interval,
            )
        return FeedProfile(
            max_particles=self.max_particles,
            max_files_per_commit=None,
            edges_enabled=True,
            base_fps=self.base_fps,
            commit_interval=self.commit_interval,
        )

    def clamp_speed(self, speed: float) -> float:
        return max(self.min_speed, min(self.max_speed, speed))


def load_config(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a JSON object: {path}")
    return data
