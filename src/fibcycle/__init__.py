"""fibcycle: restarting Fibonacci sequence printer."""

from __future__ import annotations

import logging
import os
import sys

from fibcycle.emitter import EXPECTED_CYCLE, LIMIT, cycle, emit, sequence

logger = logging.getLogger(__name__)


def main() -> None:
    """Entry point for the fibcycle command. Runs until killed."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        emit(sys.stdout)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    except BrokenPipeError:
        # Reader went away; silence the flush at interpreter shutdown
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(1)


__all__ = ["EXPECTED_CYCLE", "LIMIT", "cycle", "emit", "main", "sequence"]
