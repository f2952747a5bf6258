"""Interactive read-eval loop of the shell."""

from __future__ import annotations

import logging
import sys

from ..exceptions import TabeditError
from .command import Command, CommandType
from .processor import Processor

logger = logging.getLogger(__name__)

PROMPT = ">> "


class CommandLoop:
    """Reads command lines and feeds them to a processor until exit."""

    def __init__(self, processor: Processor):
        self.processor = processor
        self.running = False

    def feed_command(self, line: str, raise_errors: bool = False) -> bool:
        """Execute one command line.

        Returns False once the line asked the editor to exit. Errors are reported
        on stderr unless ``raise_errors`` is set.
        """
        try:
            command = Command.parse(line)
            if command.command_type is CommandType.EXIT:
                return False
            self.processor.execute_command(command)
        except TabeditError as e:
            if raise_errors:
                raise
            logger.debug("Command \"%s\" failed: %s", line, e.message)
            print(e.message, file=sys.stderr)
        return True

    def start_loop(self) -> None:
        """Prompt for commands until exit or end of input."""
        self.running = True
        while self.running:
            try:
                line = self.processor.prompt(PROMPT)
            except (EOFError, KeyboardInterrupt):
                self.processor.write("")
                break
            if not line.strip():
                continue
            self.running = self.feed_command(line)
        self.running = False
