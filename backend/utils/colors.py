"""
taskwatch Terminal Styling.

Highlights file paths embedded in log messages.
Requires Python 3.11+.
"""

from os import PathLike

from structlog.dev import BRIGHT, CYAN, RESET_ALL

from utils.config import get_settings


def colors_enabled() -> bool:
    """Check whether log output is rendered with ANSI colors."""
    settings = get_settings().logging
    return settings.colors and settings.format == "console"


def highlight_path(path: str | PathLike[str]) -> str:
    """
    Format a path for display inside a log message.

    Args:
        path: File or directory path

    Returns:
        The path wrapped in ANSI styles, or as plain text when colors are off
    """
    text = str(path)
    if not colors_enabled():
        return text
    return f"{BRIGHT}{CYAN}{text}{RESET_ALL}"
