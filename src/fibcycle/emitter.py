"""Fibonacci emitter: a restarting sequence written one value per line.

Each cycle starts from (0, 1) and runs execute-then-check: the first value
that reaches the limit is still emitted, then the state is reset. At the
default limit of 255 every cycle therefore ends with 377, not 233.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from typing import TextIO

logger = logging.getLogger(__name__)

# Restart threshold
LIMIT: int = 255

# Values are kept within 32-bit signed width
INT32_MAX: int = 2**31 - 1


def reset() -> tuple[int, int]:
    """Return the initial (current, next) pair of a cycle."""
    return 0, 1


def step(current: int, nxt: int) -> tuple[int, int]:
    """Advance the sequence by one position.

    Args:
        current: Value that was just emitted.
        nxt: Value following it.

    Returns:
        The new (current, next) pair.

    Raises:
        OverflowError: If the new value does not fit in 32 bits.
    """
    temp = current + nxt
    if temp > INT32_MAX:
        msg = f"Fibonacci value {temp} exceeds 32-bit range"
        raise OverflowError(msg)
    return nxt, temp


def cycle(limit: int = LIMIT) -> Iterator[int]:
    """Yield one cycle of the sequence.

    The cycle ends right after the first value >= limit has been yielded.

    Args:
        limit: Restart threshold, between 0 and INT32_MAX.

    Raises:
        ValueError: If limit is out of range.
    """
    if not 0 <= limit <= INT32_MAX:
        msg = f"limit must be between 0 and {INT32_MAX}, got {limit}"
        raise ValueError(msg)

    current, nxt = reset()
    while True:
        yield current
        if current >= limit:
            return
        current, nxt = step(current, nxt)


def sequence(limit: int = LIMIT) -> Iterator[int]:
    """Yield cycles back to back, forever."""
    restarts = 0
    while True:
        yield from cycle(limit)
        restarts += 1
        logger.debug("Cycle %d complete, restarting", restarts)


def emit(
    stream: TextIO | None = None,
    limit: int = LIMIT,
    max_lines: int | None = None,
) -> int:
    """Write the sequence to a text stream, one decimal value per line.

    Without max_lines this never returns.

    Args:
        stream: Output stream (default: standard output).
        limit: Restart threshold.
        max_lines: Stop after this many lines.

    Returns:
        Number of lines written.
    """
    if max_lines is not None and max_lines < 0:
        msg = f"max_lines must be non-negative, got {max_lines}"
        raise ValueError(msg)

    out = stream if stream is not None else sys.stdout
    written = 0
    for value in sequence(limit):
        if max_lines is not None and written >= max_lines:
            break
        out.write(f"{value}\n")
        written += 1
    return written


# One full cycle at the default threshold
EXPECTED_CYCLE: tuple[int, ...] = tuple(cycle())
