"""Command line entry point: ``python -m beamshare --dir ./shared``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from beamshare import __version__
from beamshare.config import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beamshare",
        description="Share a directory over HTTP with live usage statistics",
    )
    parser.add_argument("--dir", default=".", help="Directory to share files from (default: .)")
    parser.add_argument(
        "--port", type=int, default=0,
        help="Port to listen on; falls back to a default list when taken (default: auto)",
    )
    parser.add_argument("-p", "--password", default="", help="Password (accepted, not enforced)")
    parser.add_argument("--reset-stats", action="store_true", help="Zero the usage counters on startup")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("-v", "--version", action="version", version=f"beamshare {__version__}")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment/.env settings with command line values layered on top."""
    overrides = {
        "shared_dir": args.dir,
        "port": args.port,
        "reset_stats_on_startup": args.reset_stats,
    }
    if args.password:
        overrides["password"] = args.password
    if args.log_level:
        overrides["log_level"] = args.log_level
    return Settings(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    if not Path(settings.shared_dir).is_dir():
        print(f"Shared directory does not exist: {settings.shared_dir}", file=sys.stderr)
        return 1

    from beamshare.main import run

    run(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
