"""Runners for external commands, the seam between the harness and its tools.

Only the exit status of a command is consumed. Tests substitute a runner
that records invocations instead of spawning processes.
"""

from __future__ import annotations

import subprocess
from typing import Protocol, Sequence

from review.errors import ToolLaunchError


class CommandRunner(Protocol):
    """Runs an external command and returns its exit status."""

    def run(self, command: str, args: Sequence[str]) -> int: ...


class SubprocessRunner:
    """Runs commands as child processes, inheriting the terminal.

    Blocks until the child exits; there is no timeout.
    """

    def __init__(self, cwd: str | None = None):
        self.cwd = cwd

    def run(self, command: str, args: Sequence[str]) -> int:
        try:
            proc = subprocess.run([command, *args], cwd=self.cwd)
        except OSError as e:
            raise ToolLaunchError(command, str(e)) from e
        return proc.returncode
