"""Check orchestration and execution.

Provides the runner that:
- Loads check configurations from YAML
- Launches emitter commands and captures a capped number of lines
- Verifies the captured output
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from fibcycle.check.verify import CheckReport, Problem, expected_cycle, verify_output
from fibcycle.emitter import LIMIT

logger = logging.getLogger(__name__)

# Replaced by the running interpreter in target commands
PYTHON_PLACEHOLDER = "{python}"


@dataclass
class CheckTarget:
    """An emitter command to check.

    Attributes:
        name: Target identifier.
        command: Argument vector used to launch the emitter.
        enabled: Whether the target is checked by default.
    """

    name: str
    command: list[str]
    enabled: bool = True


@dataclass
class CheckConfig:
    """Collection of targets and capture settings.

    Attributes:
        name: Configuration name.
        targets: Emitter commands to check.
        lines: Number of output lines to capture per target.
        timeout: Seconds allowed to capture them.
        limit: Restart threshold the targets are expected to use.
    """

    name: str
    targets: list[CheckTarget] = field(default_factory=list)
    lines: int = 32
    timeout: float = 10.0
    limit: int = LIMIT


@dataclass
class CaptureResult:
    """Raw output of a capped run.

    Attributes:
        lines: Captured lines, without line endings.
        returncode: Exit status if the process ended on its own, else None.
        timed_out: Whether the watchdog had to kill the process.
        elapsed: Wall-clock seconds spent capturing.
    """

    lines: list[str]
    returncode: int | None
    timed_out: bool = False
    elapsed: float = 0.0


def expand_command(command: list[str] | str) -> list[str]:
    """Turn a configured command into an argument vector.

    Args:
        command: Argument list, or a shell-like string split with shlex.

    Returns:
        Argument vector with the {python} placeholder expanded.
    """
    argv = shlex.split(command) if isinstance(command, str) else list(command)
    return [str(arg).replace(PYTHON_PLACEHOLDER, sys.executable) for arg in argv]


def default_config() -> CheckConfig:
    """Return the configuration used when no file is given."""
    return CheckConfig(
        name="fibcycle",
        targets=[
            CheckTarget(
                name="fibcycle",
                command=expand_command([PYTHON_PLACEHOLDER, "-m", "fibcycle"]),
            )
        ],
    )


def validate_config(config: CheckConfig) -> None:
    """Reject settings that would make a check meaningless or crash it.

    Raises:
        ValueError: If lines or timeout is not positive, or limit is out of range.
        OverflowError: If the expected cycle does not fit in 32 bits.
    """
    if config.lines < 1:
        msg = f"lines must be at least 1, got {config.lines}"
        raise ValueError(msg)
    if config.timeout <= 0:
        msg = f"timeout must be positive, got {config.timeout:g}"
        raise ValueError(msg)
    expected_cycle(config.limit)


def load_check_config(config_path: Path | str) -> CheckConfig:
    """Load check configuration from YAML.

    Args:
        config_path: Path to a YAML file.

    Returns:
        CheckConfig configuration.

    Raises:
        ValueError: If the file does not hold a mapping, or a setting is
            out of range.
    """
    with Path(config_path).open() as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"{config_path}: expected a mapping at top level"
        raise ValueError(msg)

    targets = []
    for target_data in data.get("targets", []):
        command = target_data.get("command")
        argv = expand_command(command) if command else []
        if not argv:
            logger.warning(
                "Skipping target %r: no command", target_data.get("name", "?")
            )
            continue

        target = CheckTarget(
            name=target_data.get("name", Path(argv[0]).name),
            command=argv,
            enabled=target_data.get("enabled", True),
        )
        targets.append(target)

    config = CheckConfig(
        name=data.get("name", "checks"),
        targets=targets,
        lines=int(data.get("lines", 32)),
        timeout=float(data.get("timeout", 10.0)),
        limit=int(data.get("limit", LIMIT)),
    )
    validate_config(config)
    return config


def capture_lines(
    command: list[str],
    lines: int,
    timeout: float = 10.0,
) -> CaptureResult:
    """Run a command and capture at most `lines` lines of its output.

    The process is killed once enough lines are read, or by a watchdog
    after `timeout` seconds.

    Args:
        command: Argument vector.
        lines: Number of lines to capture.
        timeout: Seconds before the watchdog kills the process.

    Returns:
        CaptureResult for the run.

    Raises:
        FileNotFoundError: If the executable does not exist.
    """
    logger.debug("Launching %s", " ".join(command))
    start = time.perf_counter()
    proc = subprocess.Popen(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
    )

    expired = threading.Event()

    def on_timeout() -> None:
        expired.set()
        proc.kill()

    watchdog = threading.Timer(timeout, on_timeout)
    watchdog.daemon = True
    watchdog.start()

    captured: list[str] = []
    eof = False
    exited = False
    try:
        while len(captured) < lines:
            line = proc.stdout.readline()
            if not line:
                eof = True
                break
            captured.append(line.rstrip("\r\n"))
    finally:
        watchdog.cancel()
        if eof and not expired.is_set():
            # Output closed on its own; give the process a chance to exit
            try:
                proc.wait(timeout=timeout)
                exited = True
            except subprocess.TimeoutExpired:
                logger.debug("Process closed stdout but kept running")
        if proc.poll() is None:
            proc.kill()
        proc.stdout.close()
        returncode = proc.wait()

    elapsed = time.perf_counter() - start
    timed_out = expired.is_set()
    logger.debug(
        "Captured %d line(s) in %.3fs%s",
        len(captured),
        elapsed,
        " (timed out)" if timed_out else "",
    )

    return CaptureResult(
        lines=captured,
        returncode=returncode if exited and not timed_out else None,
        timed_out=timed_out,
        elapsed=elapsed,
    )


def run_target(
    target: CheckTarget, config: CheckConfig
) -> tuple[CaptureResult, CheckReport]:
    """Capture and verify one target.

    Args:
        target: Target to check.
        config: Capture settings.

    Returns:
        Tuple of (capture, report).
    """
    logger.info("Checking %s (%d lines)", target.name, config.lines)
    capture = capture_lines(target.command, config.lines, config.timeout)
    report = verify_output(capture.lines, config.limit)

    if len(capture.lines) < config.lines:
        if capture.timed_out:
            reason = f"timed out after {config.timeout:g}s"
        else:
            reason = f"exited with status {capture.returncode}"
        report.problems.append(
            Problem(0, f"{reason} with {len(capture.lines)} of {config.lines} lines")
        )

    for problem in report.problems:
        logger.debug("%s: %s", target.name, problem)

    return capture, report
