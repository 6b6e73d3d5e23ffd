"""
Command line entry point.

Loads a commit feed (``commits-data.json`` or a synthetic one), then either
opens a live pygame window or fast-forwards headless and writes frames.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from commit_rush.config import DEFAULT_CONFIG_PATH, RushConfig, load_config
from commit_rush.driver import AnimationDriver
from commit_rush.feed import CommitFeed, FeedError, SyntheticCommitFeed, load_commit_feed
from commit_rush.log import get_logger, setup_logging
from commit_rush.scene import Frame
from commit_rush.session import Mode, Session

logger = get_logger(__name__)


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Animated particle view of a repository's commit history")
    parser.add_argument("--config", type=str, default=config_path, help="Config file")
    parser.add_argument(
        "--input",
        type=str,
        default=config.get("input", "commits-data.json"),
        help="Commit feed JSON file or 'synthetic'",
    )
    parser.add_argument(
        "--synthetic-commits",
        type=int,
        default=config.get("synthetic_commits", 300),
        help="Number of commits to generate for the synthetic feed",
    )
    parser.add_argument(
        "--large",
        action="store_true",
        default=config.get("large", False),
        help="Force large feed mode (sampled commits, lower caps, no edges)",
    )
    parser.add_argument(
        "--elaborate",
        action="store_true",
        default=config.get("elaborate", False),
        help="Start in elaborate (tree) mode",
    )
    parser.add_argument("--speed", type=float, default=config.get("speed", 1.0))
    parser.add_argument("--seed", type=int, default=config.get("seed", None))
    parser.add_argument(
        "--pygame",
        action="store_true",
        default=config.get("pygame", False),
        help="Show the animation live with pygame",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=config.get("frames", 0),
        help="Stop after N ticks (0 runs until every commit is shown)",
    )
    parser.add_argument(
        "--render-every",
        type=int,
        default=config.get("render_every", 0),
        help="Save a frame every N ticks (0 saves only the final frame)",
    )
    parser.add_argument("--output-dir", type=str, default=config.get("output_dir", "output"))
    parser.add_argument("--output-prefix", type=str, default=config.get("output_prefix", "rush"))
    parser.add_argument(
        "--output-format",
        type=str,
        default=config.get("output_format", "svg"),
        choices=["svg", "png"],
    )
    parser.add_argument("--log-level", type=str, default=config.get("log_level", "INFO"))
    parser.add_argument("--log-file", type=str, default=config.get("log_file", None))
    return parser


def load_feed(args: argparse.Namespace, rush_config: RushConfig) -> CommitFeed:
    if args.input == "synthetic":
        seed = args.seed if args.seed is not None else 1
        return SyntheticCommitFeed(seed=seed).feed(args.synthetic_commits, rush_config, large=args.large)
    return load_commit_feed(args.input, rush_config, force_large=args.large)


class FrameWriter:
    def __init__(self, output_dir: str, prefix: str, fmt: str, every: int) -> None:
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.fmt = fmt
        self.every = every
        self.written: List[Path] = []

    def path_for(self, frame: Frame) -> Path:
        return self.output_dir / f"{self.prefix}_{frame.index:05d}.{self.fmt}"

    def write(self, frame: Frame) -> Path:
        path = self.path_for(frame)
        if self.fmt == "png":
            from commit_rush.raster import write_png

            write_png(frame, path)
        else:
            from commit_rush.svg import write_svg

            write_svg(frame, path)
        self.written.append(path)
        return path

    def __call__(self, frame: Frame) -> None:
        if self.every > 0 and frame.index % self.every == 0:
            self.write(frame)


def main(argv: Optional[List[str]] = None) -> int:
    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH)
    config_args, remaining = config_parser.parse_known_args(argv)
    config = load_config(config_args.config)

    args = build_parser(config, config_args.config).parse_args(remaining)
    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.seed is not None:
        config = dict(config, seed=args.seed)
    rush_config = RushConfig.from_mapping(config)

    try:
        feed = load_feed(args, rush_config)
        mode = Mode.ELABORATE if args.elaborate else Mode.STANDARD
        session = Session(feed, rush_config, mode=mode, speed=args.speed)
    except FeedError as exc:
        logger.error("Could not start: %s", exc)
        return 1

    driver = AnimationDriver(session)

    if args.pygame:
        from commit_rush.display import run_live

        return run_live(driver)

    writer = FrameWriter(args.output_dir, args.output_prefix, args.output_format, args.render_every)
    driver.add_listener(writer)
    max_frames = args.frames if args.frames > 0 else None
    ticks = driver.run(max_frames=max_frames, realtime=False)

    final = driver.last_frame
    if final is not None and (not writer.written or writer.written[-1] != writer.path_for(final)):
        writer.write(final)
    if writer.written:
        logger.info("Saved: %s", writer.written[-1])
    logger.info(session.stats().summary())
    logger.info("Ran %d ticks, wrote %d frames", ticks, len(writer.written))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
