"""Command line entry point of the tabedit shell."""

from __future__ import annotations

import argparse
import sys

from .commands.command import Command, CommandType
from .commands.command_loop import CommandLoop
from .commands.help import version_text
from .commands.processor import Processor
from .exceptions import TabeditError
from .utils.logging_config import set_correlation_id, setup_logging

SCRIPT_EXTENSION = ".ced"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabedit", description="Edit CSV tables with typed, constrained columns"
    )
    parser.add_argument(
        "file",
        nargs="?",
        help=f"CSV file to import, or a {SCRIPT_EXTENSION} script to execute",
    )
    parser.add_argument(
        "-c", "--command", help="Run semicolon separated commands and exit"
    )
    parser.add_argument("-s", "--schema", help="Schema file applied after import")
    parser.add_argument(
        "-C",
        "--confirm",
        action="store_true",
        help="Print the table and ask for confirmation before write",
    )
    parser.add_argument(
        "--no-log", action="store_true", help="Do not print command feedback messages"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level",
    )
    parser.add_argument("-v", "--version", action="store_true", help="Print version and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the shell. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    if args.version:
        print(version_text())
        return 0

    setup_logging(args.log_level)
    set_correlation_id()

    is_script = args.file is not None and args.file.endswith(SCRIPT_EXTENSION)
    processor = Processor(
        no_loop=is_script or args.command is not None,
        print_log=not args.no_log,
        confirm_write=args.confirm,
    )
    processor.add_empty_page()

    try:
        if is_script:
            processor.execute_command(Command(CommandType.EXECUTE, [args.file]))
            return 0
        if args.file is not None:
            processor.import_file(args.file)
        if args.schema is not None:
            processor.execute_command(Command(CommandType.SCHEMA, [args.schema]))
        if args.command is not None:
            processor.execute_script(args.command)
            return 0
    except TabeditError as e:
        print(e.message, file=sys.stderr)
        return 1

    CommandLoop(processor).start_loop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
