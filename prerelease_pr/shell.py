"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running shell commands
and git operations, plus the console reporting helpers used by every phase
of the pre-release run.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "log", "-n", "1").
        check: If True (default), raise on non-zero exit.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def capture(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a command and capture its text output without checking the exit code.

    Callers inspect ``returncode`` themselves: tools like ``diff`` use
    non-zero codes to report results, not only failures.
    """
    return subprocess.run(args, capture_output=True, text=True, cwd=cwd, check=False)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of the pre-release run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def detail(msg: str) -> None:
    """Print an indented detail line under the current step."""
    print(f"  - {msg}")


def warn(msg: str) -> None:
    """Print a warning to stderr without stopping the run."""
    print(f"WARNING: {msg}", file=sys.stderr)
