#!/usr/bin/env python
"""Command-line stitch runner.

Fetches every game in the games list, merges them into one project and
publishes it, optionally writing the bundle to a directory as well.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import StitchConfig
from .errors import StitchError
from .runner import StitchRunner


def main(argv: list[str] | None = None) -> int:
    """Run a stitch and print the share link or output directory."""
    parser = argparse.ArgumentParser(description="Merge jam games into one MakeCode project")
    parser.add_argument("project", nargs="?", default=".", help="Directory holding games.json and .jamstitch/")
    parser.add_argument("--games", help="Games list, overriding the configured path")
    parser.add_argument("--out", type=Path, help="Also write the bundle files to this directory")
    parser.add_argument("--no-publish", action="store_true", help="Compose only; requires --out")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.no_publish and args.out is None:
        parser.error("--no-publish needs --out, otherwise the bundle goes nowhere")

    project_path = Path(args.project)
    if not project_path.exists():
        print(f"Path does not exist: {project_path}", file=sys.stderr)
        return 1

    try:
        config = StitchConfig.load(project_path)
        if args.games:
            config.games_path = args.games
        result = StitchRunner(project_path, config).stitch(
            publish=not args.no_publish, output_dir=args.out
        )
    except (StitchError, ValueError, OSError) as e:
        print(f"Stitch failed: {e}", file=sys.stderr)
        return 1

    if result.share_url:
        print(result.share_url)
    if result.output_dir:
        print(f"Bundle written to {result.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
