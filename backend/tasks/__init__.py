"""
taskwatch Tasks Package.

Named tasks run in response to file changes.
Requires Python 3.11+.
"""

from tasks.runner import TaskRunner
from tasks.shell import ShellTask

__all__ = ["TaskRunner", "ShellTask"]
