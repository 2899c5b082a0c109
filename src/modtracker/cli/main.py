#!/usr/bin/env python3
"""Main CLI entry point for modtracker."""

import argparse
import sys
import time
from pathlib import Path

from .. import __version__
from ..config.parser import TrackerConfig, load_config
from ..exceptions import ModtrackerError
from ..logging import configure_logging, get_logger
from ..models.snapshot import load_snapshot, save_snapshot
from ..tracker import ModuleTracker

DEFAULT_SNAPSHOT = Path(".modtracker") / "snapshot.json"

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modtracker",
        description="Find changed Python modules and the order to reload them in",
    )
    parser.add_argument("--version", action="version", version=f"modtracker {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "dirs",
        nargs="*",
        help="Source directories to track (default: tracker.dirs from config)",
    )
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: from config, INFO)",
    )
    common.add_argument("--json-logs", action="store_true", help="Write logs as JSON lines")
    common.add_argument("-q", "--quiet", action="store_true", help="Minimal output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "order", parents=[common], help="Print every module in dependency order"
    )

    check_parser = subparsers.add_parser(
        "check", parents=[common], help="Report modules changed since the saved snapshot"
    )
    check_parser.add_argument(
        "-s",
        "--snapshot",
        type=str,
        help=f"Snapshot file (default: tracker.snapshot_file or {DEFAULT_SNAPSHOT})",
    )

    watch_parser = subparsers.add_parser(
        "watch", parents=[common], help="Poll for changes and print the reload order"
    )
    watch_parser.add_argument(
        "-i", "--interval", type=float, default=None, help="Seconds between checks (default: 1.0)"
    )
    watch_parser.add_argument(
        "--max-checks", type=int, default=None, help="Stop after this many checks"
    )

    return parser


def _cli_overrides(args) -> dict:
    overrides: dict = {}
    if args.dirs:
        overrides.setdefault("tracker", {})["dirs"] = list(args.dirs)
    if args.log_level:
        overrides.setdefault("logging", {})["level"] = args.log_level
    if args.json_logs:
        overrides.setdefault("logging", {})["json_output"] = True
    if getattr(args, "snapshot", None):
        overrides.setdefault("tracker", {})["snapshot_file"] = args.snapshot
    if getattr(args, "interval", None) is not None:
        overrides.setdefault("watch", {})["interval"] = args.interval
    return overrides


def _make_tracker(config: TrackerConfig, initial_snapshot=None) -> ModuleTracker:
    return ModuleTracker(
        config.tracker.dirs,
        initial_snapshot=initial_snapshot,
        exclude_patterns=config.tracker.exclude_patterns,
    )


def print_order(args, config: TrackerConfig) -> None:
    """Print every tracked module, dependencies first."""
    tracker = _make_tracker(config)
    for name in tracker.load_order():
        print(name)


def check_once(args, config: TrackerConfig) -> None:
    """Compare against the saved snapshot, report, and save the new one."""
    snapshot_path = Path(config.tracker.snapshot_file or DEFAULT_SNAPSHOT)

    if snapshot_path.exists():
        tracker = _make_tracker(config, load_snapshot(snapshot_path))
        affected = tracker.check()
    else:
        tracker = _make_tracker(config)
        affected = None
        if not args.quiet:
            print(f"Snapshot created: {snapshot_path}")

    save_snapshot(tracker.snapshot, tracker.dirs, snapshot_path)

    if affected:
        for name in affected:
            print(name)
    elif not args.quiet:
        print("No changes.")


def watch(args, config: TrackerConfig) -> None:
    """Poll the tracker until interrupted or ``--max-checks`` is reached."""
    tracker = _make_tracker(config)
    if not args.quiet:
        dirs = ", ".join(str(d) for d in tracker.dirs)
        print(f"Watching {dirs} (every {config.watch.interval}s, Ctrl+C to stop)")

    checks = 0
    try:
        while args.max_checks is None or checks < args.max_checks:
            time.sleep(config.watch.interval)
            checks += 1
            try:
                affected = tracker.check()
            except (ModtrackerError, OSError) as e:
                # Keep polling; the next check retries once the file is fixed
                print(f"Error: {e}", file=sys.stderr)
                continue
            if affected:
                print(f"Reload: {', '.join(affected)}", flush=True)
    except KeyboardInterrupt:
        if not args.quiet:
            print("Stopped.")


COMMANDS = {
    "order": print_order,
    "check": check_once,
    "watch": watch,
}


def main(argv=None):
    """Main CLI function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config, _ = load_config(Path.cwd(), _cli_overrides(args))
    except ModtrackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging.level, config.logging.json_output)

    try:
        COMMANDS[args.command](args, config)
    except (ModtrackerError, OSError) as e:
        logger.debug("command.failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
