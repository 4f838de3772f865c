"""Verification of captured emitter output.

Checks a capped run of an emitter against the expected cycle:
- Every line is a non-negative decimal integer
- Output starts with 0 and restarts right after the first value >= limit
- Every complete cycle matches the expected cycle exactly
- The trailing, incomplete cycle is a prefix of the expected cycle
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from fibcycle.emitter import LIMIT, cycle

_INTEGER_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class Problem:
    """A violated property.

    Attributes:
        line: 1-based line number in the captured output (0 if not tied to a line).
        message: Human-readable description.
    """

    line: int
    message: str

    def __str__(self) -> str:
        if self.line:
            return f"line {self.line}: {self.message}"
        return self.message


@dataclass
class CheckReport:
    """Outcome of verifying one capture.

    Attributes:
        lines_checked: Number of output lines examined.
        cycles_complete: Number of complete cycles seen.
        problems: Violations found, in line order.
        digest: Short hash of the captured output.
    """

    lines_checked: int
    cycles_complete: int
    problems: list[Problem] = field(default_factory=list)
    digest: str = ""

    @property
    def passed(self) -> bool:
        return not self.problems


def expected_cycle(limit: int = LIMIT) -> tuple[int, ...]:
    """Return the values of one cycle at the given threshold."""
    return tuple(cycle(limit))


def hash_output(output: str) -> str:
    """Create a hash of emitter output for comparison between runs."""
    return hashlib.sha256(output.encode("utf-8")).hexdigest()[:16]


def digest_lines(lines: Iterable[str]) -> str:
    """Hash output lines, ignoring how their line endings were captured."""
    return hash_output("".join(line.rstrip("\r\n") + "\n" for line in lines))


def parse_lines(lines: Iterable[str]) -> tuple[list[int], list[Problem]]:
    """Parse output lines as decimal integers.

    Lines that fail to parse are reported and left out of the values.

    Args:
        lines: Output lines, with or without trailing newlines.

    Returns:
        Tuple of (values, problems).
    """
    values: list[int] = []
    problems: list[Problem] = []

    for lineno, raw in enumerate(lines, start=1):
        text = raw.rstrip("\r\n")
        if not _INTEGER_RE.fullmatch(text):
            problems.append(Problem(lineno, f"not an integer: {text!r}"))
            continue
        value = int(text)
        if value < 0:
            problems.append(Problem(lineno, f"negative value: {value}"))
            continue
        values.append(value)

    return values, problems


def split_cycles(values: list[int]) -> list[list[int]]:
    """Split values into cycles. Each 0 starts a new cycle."""
    cycles: list[list[int]] = []
    for value in values:
        if value == 0 or not cycles:
            cycles.append([])
        cycles[-1].append(value)
    return cycles


def verify_output(lines: list[str], limit: int = LIMIT) -> CheckReport:
    """Verify captured emitter output.

    Args:
        lines: Captured output lines.
        limit: Restart threshold the emitter is expected to use.

    Returns:
        CheckReport with every problem found.
    """
    expected = expected_cycle(limit)
    values, problems = parse_lines(lines)

    if problems:
        # Line numbers no longer line up with values; report parse errors only
        return CheckReport(
            lines_checked=len(lines),
            cycles_complete=0,
            problems=problems,
            digest=digest_lines(lines),
        )

    cycles = split_cycles(values)
    complete = 0
    lineno = 1
    for index, got in enumerate(cycles):
        is_last = index == len(cycles) - 1
        if is_last and len(got) < len(expected) and tuple(got) == expected[: len(got)]:
            # Capture ended mid-cycle
            lineno += len(got)
            continue

        for offset, value in enumerate(got):
            if offset >= len(expected):
                problems.append(
                    Problem(
                        lineno + offset,
                        f"no restart after {expected[-1]}, got {value}",
                    )
                )
                break
            if value != expected[offset]:
                problems.append(
                    Problem(
                        lineno + offset,
                        f"expected {expected[offset]}, got {value}",
                    )
                )
                break
        else:
            if len(got) == len(expected):
                complete += 1
            elif not is_last:
                problems.append(
                    Problem(
                        lineno + len(got),
                        f"restarted after {got[-1]}, before reaching {limit}",
                    )
                )
        lineno += len(got)

    return CheckReport(
        lines_checked=len(lines),
        cycles_complete=complete,
        problems=problems,
        digest=digest_lines(lines),
    )
