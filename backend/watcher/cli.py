"""
taskwatch Command Line Interface.

Watches files and runs shell commands when they change.
Requires Python 3.11+.

Usage:
    taskwatch 'src/**/*.py' -c test='pytest -q' -t test
    taskwatch src docs -t 'make html' --debounce 200
"""

import argparse
import sys
import time
from collections.abc import Sequence

from tasks.runner import TaskRunner
from tasks.shell import ShellTask
from utils.config import get_settings
from utils.errors import ConfigurationError
from utils.logger import configure_logging, get_logger
from watcher.task_watcher import TaskWatcher

logger = get_logger("taskwatch")


def _parse_command(value: str) -> tuple[str, str]:
    name, sep, command = value.partition("=")
    if not sep or not name.strip() or not command.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=COMMAND, got '{value}'")
    return name.strip(), command.strip()


def _parse_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build the command line argument parser."""
    parser = argparse.ArgumentParser(prog="taskwatch", description=TaskWatcher.description)
    parser.add_argument(
        "files",
        nargs="+",
        help="Files, directories or glob patterns to watch",
    )
    parser.add_argument(
        "-t",
        "--task",
        dest="tasks",
        action="append",
        default=[],
        help="Task to run on change, in order (repeatable). "
        "A name not defined with --command is run as a shell command",
    )
    parser.add_argument(
        "-c",
        "--command",
        dest="commands",
        action="append",
        type=_parse_command,
        default=[],
        metavar="NAME=COMMAND",
        help="Define a named shell task (repeatable)",
    )
    parser.add_argument(
        "--debounce",
        type=int,
        default=None,
        metavar="MS",
        help="Milliseconds of quiet before running tasks",
    )
    parser.add_argument(
        "--events",
        type=_parse_list,
        default=None,
        help="Comma-separated change kinds: added, modified, removed, dir_added, dir_removed",
    )
    parser.add_argument(
        "--poll",
        action="store_true",
        default=None,
        help="Poll the filesystem instead of using native notifications",
    )
    parser.add_argument(
        "--no-recursive",
        dest="recursive",
        action="store_false",
        default=None,
        help="Only watch the top level of directories",
    )
    parser.add_argument(
        "--ignore",
        dest="ignore_patterns",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Glob pattern to ignore (repeatable, replaces the defaults)",
    )
    return parser


def build_runner(tasks: Sequence[str], commands: Sequence[tuple[str, str]]) -> TaskRunner:
    """Register named commands, and any other task as its own command."""
    runner = TaskRunner({name: ShellTask(command) for name, command in commands})
    for name in tasks:
        if name not in runner:
            runner.register(name, ShellTask(name))
    return runner


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging()
    settings = get_settings()

    options = {
        key: value
        for key, value in (
            ("polling", args.poll),
            ("recursive", args.recursive),
            ("ignore_patterns", args.ignore_patterns),
        )
        if value is not None
    }

    try:
        watcher = TaskWatcher(
            files=args.files,
            task=args.tasks,
            runner=build_runner(args.tasks, args.commands),
            debounce_ms=args.debounce,
            events=args.events,
            options=options,
        )
    except ConfigurationError as e:
        parser.error(str(e))

    logger.debug("starting", app=settings.app_name, version=settings.app_version)

    with watcher:
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            logger.info("Stopped watching")

    return 0


if __name__ == "__main__":
    sys.exit(main())
