"""Output checker for restarting Fibonacci emitters.

This package launches emitter commands, captures a capped number of output
lines and verifies them against the expected cycle.
"""

from __future__ import annotations

from fibcycle.check.runner import (
    CaptureResult,
    CheckConfig,
    CheckTarget,
    capture_lines,
    default_config,
    load_check_config,
    run_target,
    validate_config,
)
from fibcycle.check.verify import CheckReport, Problem, expected_cycle, verify_output

__all__ = [
    "CaptureResult",
    "CheckConfig",
    "CheckReport",
    "CheckTarget",
    "Problem",
    "capture_lines",
    "default_config",
    "expected_cycle",
    "load_check_config",
    "run_target",
    "validate_config",
    "verify_output",
]
