"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running git and gh
commands, plus output formatting helpers used by the release pipeline.
"""

from __future__ import annotations

import subprocess
import sys


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., upstream lookup).

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def gh(*args: str, check: bool = True) -> str:
    """Run a GitHub CLI command and return stdout."""
    result = subprocess.run(["gh", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of the release pipeline in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a warning to stderr without stopping the pipeline."""
    print(f"WARNING: {msg}", file=sys.stderr)
