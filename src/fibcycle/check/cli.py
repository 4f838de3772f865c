"""Command-line interface for the output checker.

Provides the `fibcycle-check` command with subcommands for:
- Checking emitter commands against the expected cycle
- Showing the expected cycle
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from fibcycle.check.runner import (
    default_config,
    load_check_config,
    run_target,
    validate_config,
)
from fibcycle.check.verify import digest_lines, expected_cycle
from fibcycle.emitter import LIMIT

logger = logging.getLogger(__name__)


def cmd_run(args: argparse.Namespace) -> int:
    """Check emitter targets."""
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Check configuration not found: {config_path}")
            return 1
        try:
            config = load_check_config(config_path)
        except Exception as e:
            print(f"Error loading check configuration: {e}")
            return 1
    else:
        config = default_config()

    if args.lines is not None:
        config.lines = args.lines
    if args.timeout is not None:
        config.timeout = args.timeout

    try:
        validate_config(config)
    except (ValueError, OverflowError) as e:
        print(f"Error: {e}")
        return 1

    targets = [
        t
        for t in config.targets
        if (t.name == args.target if args.target else t.enabled)
    ]
    if not targets:
        print("No targets to check.")
        return 1

    print(f"fibcycle check: {config.name}")
    print("=" * 70)
    print(f"{'Target':<20} {'Lines':>6} {'Cycles':>7} {'Time':>9} {'Digest':>17}  Result")
    print("-" * 70)

    failed = 0
    for target in targets:
        try:
            capture, report = run_target(target, config)
        except OSError as e:
            print(f"{target.name:<20} {'-':>6} {'-':>7} {'-':>9} {'-':>17}  ERROR")
            print(f"  {e}")
            failed += 1
            continue

        result = "ok" if report.passed else "FAIL"
        print(
            f"{target.name:<20} {len(capture.lines):>6} {report.cycles_complete:>7} "
            f"{capture.elapsed * 1000:>7.1f}ms {report.digest:>17}  {result}"
        )
        for problem in report.problems:
            print(f"  {problem}")
        if not report.passed:
            failed += 1

    print("-" * 70)
    print(f"Total: {len(targets)} target(s), {failed} failed")

    return 1 if failed else 0


def cmd_expected(args: argparse.Namespace) -> int:
    """Show the expected cycle."""
    try:
        values = expected_cycle(args.limit)
    except (ValueError, OverflowError) as e:
        print(f"Error: {e}")
        return 1

    for value in values:
        print(value)
    print(f"# {len(values)} values, digest {digest_lines(str(v) for v in values)}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fibcycle-check",
        description="Check restarting Fibonacci emitters against the expected cycle",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Check emitter targets")
    run_parser.add_argument(
        "--config",
        help="Path to a YAML check configuration (default: check `python -m fibcycle`)",
    )
    run_parser.add_argument(
        "--target",
        help="Check only the specified target, even if disabled",
    )
    run_parser.add_argument(
        "--lines",
        type=int,
        help="Number of lines to capture per target (default: 32)",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        help="Capture timeout per target in seconds (default: 10)",
    )
    run_parser.set_defaults(func=cmd_run)

    # expected command
    expected_parser = subparsers.add_parser("expected", help="Show the expected cycle")
    expected_parser.add_argument(
        "--limit",
        type=int,
        default=LIMIT,
        help=f"Restart threshold (default: {LIMIT})",
    )
    expected_parser.set_defaults(func=cmd_expected)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
