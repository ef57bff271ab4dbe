#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Command-line entry point for worktrack.

Usage:
    worktrack                # Full TUI mode
    worktrack list           # Print the most recent sessions (no TUI)
    worktrack list -n 10     # Limit the listing to 10 sessions
    worktrack --version
"""

import argparse
import sys
from datetime import datetime

from worktrack._version import __version__
from worktrack.models import CorruptDataError, StoreError


def _print_sessions(manager, limit: int) -> None:
    """One-shot plain-text listing, newest first."""
    sessions = manager.sessions.sessions
    if not sessions:
        print("No sessions recorded.")
        return

    now = datetime.now()
    for session in list(reversed(sessions))[:limit]:
        end = session.end_time_string() or "running"
        print(
            f"{session.date_string()}  {session.start_time_string()}-{end:<8}  "
            f"{session.duration_string(now)}  [{session.tag}] {session.description}"
        )


def main(argv=None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="worktrack",
        description="worktrack - keyboard-driven work-session tracker",
    )
    parser.add_argument(
        "--version", action="version", version=f"worktrack {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    list_parser = subparsers.add_parser("list", help="Print recent sessions (no TUI)")
    list_parser.add_argument(
        "--lines", "-n", type=int, default=20, help="Number of sessions to print"
    )

    args = parser.parse_args(argv)

    from worktrack.manager import TrackerManager

    try:
        manager = TrackerManager()
    except CorruptDataError as e:
        print(f"Error: corrupted data file: {e}", file=sys.stderr)
        return 1
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "list":
        _print_sessions(manager, args.lines)
        return 0

    try:
        from worktrack.tui.app import WorktrackApp
    except ImportError as e:
        print(f"Error: TUI requires textual package: {e}", file=sys.stderr)
        print("Install with: pip install textual", file=sys.stderr)
        return 1

    WorktrackApp(manager).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
