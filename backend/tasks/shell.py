"""
taskwatch Shell Tasks.

Runs shell commands as watcher tasks.
Requires Python 3.11+.
"""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from utils.errors import TaskFailedError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ShellTask:
    """A shell command run as a task."""

    command: str
    cwd: Path | None = None
    env: dict[str, str] | None = None

    def __call__(self) -> int:
        """
        Run the command and wait for it to exit.

        Output goes straight to the terminal.

        Raises:
            TaskFailedError: If the command exits with a non-zero status
        """
        env = {**os.environ, **self.env} if self.env else None

        logger.info("running_command", command=self.command)
        completed = subprocess.run(self.command, shell=True, cwd=self.cwd, env=env)

        if completed.returncode != 0:
            raise TaskFailedError(self.command, completed.returncode)
        return completed.returncode
