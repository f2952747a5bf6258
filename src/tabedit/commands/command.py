"""Command grammar: command types, aliases and tokenization."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import CommandError


class CommandType(str, Enum):
    """Every command the editor understands."""

    VERSION = "version"
    HELP = "help"
    IMPORT = "import"
    EXPORT = "export"
    WRITE = "write"
    EXECUTE = "execute"
    CREATE = "create"
    PRINT = "print"
    PRINT_CELL = "print-cell"
    PRINT_ROW = "print-row"
    PRINT_COLUMN = "print-column"
    ADD_ROW = "add-row"
    ADD_COLUMN = "add-column"
    DELETE_ROW = "delete-row"
    DELETE_COLUMN = "delete-column"
    EDIT_CELL = "edit"
    EDIT_ROW = "edit-row"
    EDIT_ROW_MULTIPLE = "edit-row-multiple"
    EDIT_COLUMN = "edit-column"
    RENAME_COLUMN = "rename-column"
    MOVE_ROW = "move-row"
    MOVE_COLUMN = "move-column"
    LIMIT = "limit"
    LIMIT_PRESET = "limit-preset"
    SCHEMA = "schema"
    SCHEMA_INIT = "schema-init"
    SCHEMA_EXPORT = "schema-export"
    HISTORY = "history"
    UNDO = "undo"
    REDO = "redo"
    EXIT = "exit"

    @property
    def aliases(self) -> tuple[str, ...]:
        """Names accepted for this command, canonical name first."""
        return _ALIASES[self]

    @property
    def is_history_tracked(self) -> bool:
        """Whether running this command records an undo snapshot."""
        return self in _HISTORY_TRACKED

    @classmethod
    def from_str(cls, token: str) -> CommandType:
        command_type = _LOOKUP.get(token.lower())
        if command_type is None:
            raise CommandError(f"No such command \"{token}\"", details={"command": token})
        return command_type


_ALIASES: dict[CommandType, tuple[str, ...]] = {
    CommandType.VERSION: ("version", "v"),
    CommandType.HELP: ("help", "h"),
    CommandType.IMPORT: ("import", "i"),
    CommandType.EXPORT: ("export", "x"),
    CommandType.WRITE: ("write", "w"),
    CommandType.EXECUTE: ("execute", "ex"),
    CommandType.CREATE: ("create", "c"),
    CommandType.PRINT: ("print", "p"),
    CommandType.PRINT_CELL: ("print-cell", "pc"),
    CommandType.PRINT_ROW: ("print-row", "pr"),
    CommandType.PRINT_COLUMN: ("print-column", "pl"),
    CommandType.ADD_ROW: ("add-row", "ar"),
    CommandType.ADD_COLUMN: ("add-column", "ac"),
    CommandType.DELETE_ROW: ("delete-row", "dr"),
    CommandType.DELETE_COLUMN: ("delete-column", "dc"),
    CommandType.EDIT_CELL: ("edit", "edit-cell", "e"),
    CommandType.EDIT_ROW: ("edit-row", "er"),
    CommandType.EDIT_ROW_MULTIPLE: ("edit-row-multiple", "erm"),
    CommandType.EDIT_COLUMN: ("edit-column", "ec"),
    CommandType.RENAME_COLUMN: ("rename-column", "rc"),
    CommandType.MOVE_ROW: ("move-row", "move", "m"),
    CommandType.MOVE_COLUMN: ("move-column", "mc"),
    CommandType.LIMIT: ("limit", "l"),
    CommandType.LIMIT_PRESET: ("limit-preset", "lp"),
    CommandType.SCHEMA: ("schema", "s"),
    CommandType.SCHEMA_INIT: ("schema-init", "si"),
    CommandType.SCHEMA_EXPORT: ("schema-export", "se"),
    CommandType.HISTORY: ("history", "y"),
    CommandType.UNDO: ("undo", "u"),
    CommandType.REDO: ("redo", "r"),
    CommandType.EXIT: ("exit", "quit", "q"),
}

_LOOKUP: dict[str, CommandType] = {
    alias: command_type for command_type, aliases in _ALIASES.items() for alias in aliases
}

_HISTORY_TRACKED = frozenset(
    {
        CommandType.CREATE,
        CommandType.ADD_ROW,
        CommandType.ADD_COLUMN,
        CommandType.DELETE_ROW,
        CommandType.DELETE_COLUMN,
        CommandType.EDIT_CELL,
        CommandType.EDIT_ROW,
        CommandType.EDIT_ROW_MULTIPLE,
        CommandType.EDIT_COLUMN,
        CommandType.RENAME_COLUMN,
        CommandType.MOVE_ROW,
        CommandType.MOVE_COLUMN,
        CommandType.LIMIT,
        CommandType.LIMIT_PRESET,
        CommandType.SCHEMA,
    }
)


@dataclass
class Command:
    """A parsed command line."""

    command_type: CommandType
    arguments: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, line: str) -> Command:
        """Tokenize a command line with shell quoting rules."""
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            raise CommandError(f"Failed to parse command \"{line.strip()}\": {e}") from e
        if not tokens:
            raise CommandError("Empty command")
        return cls(CommandType.from_str(tokens[0]), tokens[1:])


def split_script(text: str) -> list[tuple[int, str]]:
    """Split script text into ``(line_number, command)`` pairs.

    Commands are separated by newlines or semicolons. A semicolon inside
    quotes belongs to the argument. Blank entries and lines starting with
    ``#`` are skipped.
    """
    commands = []
    for number, line in enumerate(text.splitlines(), start=1):
        if line.lstrip().startswith("#"):
            continue
        for part in _split_unquoted(line, ";"):
            if part.strip():
                commands.append((number, part.strip()))
    return commands


def _split_unquoted(line: str, separator: str) -> list[str]:
    """Split ``line`` on ``separator`` outside shell-style quotes, keeping the text as is."""
    parts = []
    start = 0
    quote = ""
    escaped = False
    for position, char in enumerate(line):
        if escaped:
            escaped = False
        elif char == "\\" and quote != "'":
            escaped = True
        elif quote:
            if char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
        elif char == separator:
            parts.append(line[start:position])
            start = position + 1
    parts.append(line[start:])
    return parts
