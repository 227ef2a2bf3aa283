"""
taskwatch Utilities Package.

Common utilities shared across all taskwatch modules.
Requires Python 3.11+.
"""

from utils.config import Settings, get_settings
from utils.colors import highlight_path
from utils.errors import (
    ConfigurationError,
    TaskFailedError,
    TaskWatchError,
    UnknownTaskError,
)
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "get_settings",
    "highlight_path",
    "TaskWatchError",
    "ConfigurationError",
    "UnknownTaskError",
    "TaskFailedError",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
