"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys
from pathlib import Path

from .meter_cli import check_log, replay


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="suggestion-meter",
        description="Estimate the energy cost of AI-suggested insertions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-path",
        type=Path,
        default=None,
        help="Suggestion log file (default: from configuration)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser(
        "replay", help="Replay a JSONL edit recording through the capture pipeline"
    )
    replay_parser.add_argument("events", type=Path, help="JSONL recording")
    replay_parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Replay speed factor (default: 1.0)",
    )
    replay_parser.add_argument(
        "--no-flush-on-exit",
        action="store_true",
        help="Drop an episode still open after the last step",
    )
    replay_parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Serve Prometheus metrics on this port",
    )

    subparsers.add_parser("test-log", help="Append a test entry to the suggestion log")

    return parser.parse_args(argv)


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    if args.command == "test-log":
        sys.exit(0 if check_log(args.log_path) else 1)

    if args.speed <= 0:
        sys.stderr.write("--speed must be positive\n")
        sys.exit(2)

    try:
        asyncio.run(
            replay(
                args.events,
                speed=args.speed,
                flush_on_exit=not args.no_flush_on_exit,
                log_path=args.log_path,
                metrics_port=args.metrics_port,
                debug=args.debug,
            )
        )
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
