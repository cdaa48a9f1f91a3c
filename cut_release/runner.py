"""External process execution for the test command and the version hook.

Commands stream straight to the terminal so users can follow test output.
Each call blocks until the process exits and reports its exit code.
"""

from __future__ import annotations

import re
import subprocess
from collections.abc import Sequence

from .errors import ProcessError


class ProcessRunner:
    """Spawns external commands and waits for them to finish."""

    def spawn(self, command: str, args: Sequence[str] = ()) -> int:
        """Run command with args and return its exit code.

        Raises:
            ProcessError: If the command cannot be started.
        """
        try:
            result = subprocess.run([command, *args], check=False)
        except OSError as exc:
            raise ProcessError(f"Could not run {command}: {exc}", exc) from exc
        return result.returncode

    def has_task(self, list_command: Sequence[str], task: str) -> bool:
        """Return True if list_command's output names task.

        The list command is expected to print one task per line with the
        task name first (as `grunt --help` does). A missing or failing
        tool means no task is registered.
        """
        if not list_command:
            return False
        try:
            result = subprocess.run(
                list(list_command), capture_output=True, text=True, check=False
            )
        except OSError:
            return False
        if result.returncode != 0:
            return False
        pattern = re.compile(rf"^\s*{re.escape(task)}(\s|$)", re.MULTILINE)
        return bool(pattern.search(result.stdout))
