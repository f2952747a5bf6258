"""Command dispatch.

The processor resolves every :class:`CommandType` to a handler working on the current
page. Commands whose type is history tracked run inside the session's tracked
execution, so a snapshot is recorded for undo.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TextIO

from ..core.session import EditorSession, SessionManager
from ..core.settings import TabeditSettings, get_settings
from ..exceptions import (
    CommandError,
    OutOfRangeError,
    TabeditError,
    TabeditIOError,
    TypeMismatchError,
)
from ..models.limiter import LIMITER_ATTRIBUTE_LEN, ValueLimiter
from ..models.table import DEFAULT_DELIMITER, Table
from ..models.value import NUMBER_PATTERN, Value, ValueType
from ..services.io_operations import (
    init_schema_file,
    load_table,
    overwrite_to_file,
    read_schema_file,
    write_schema_file,
    write_table,
)
from ..services.presets import PresetRegistry
from ..services.viewer import pipe_to_viewer, resolve_viewer
from ..utils.validators import is_valid_cell_text
from .command import Command, CommandType, split_script
from .help import command_help, help_text, version_text

logger = logging.getLogger(__name__)

EMPTY_PAGE = "\\EMPTY"
INTERRUPT_INPUT = DEFAULT_DELIMITER

Handler = Callable[[list[str]], None]


class PrintMode(str, Enum):
    """Detail level of print-cell and print-column."""

    SIMPLE = "simple"
    VERBOSE = "verbose"
    DEBUG = "debug"

    @classmethod
    def from_str(cls, token: str) -> PrintMode:
        token = token.lower()
        for mode in cls:
            if token in (mode.value, mode.value[0]):
                return mode
        return cls.SIMPLE


def format_table(table: Table) -> str:
    """Render a table with row numbers and column indices."""
    if table.row_count == 0:
        return ": CSV is empty :"
    digits = len(str(table.row_count))
    header = "".join(f"[{i}]:{name}" for i, name in enumerate(table.column_names()))
    lines = [f"{'H':<{digits}} | {header}"]
    for index in range(table.row_count):
        cells = "".join(f"[{i}]:{value}" for i, value in enumerate(table.get_row_values(index)))
        lines.append(f"{index:<{digits}} | {cells}")
    return "\n".join(lines)


def format_row(table: Table, index: int) -> str:
    if table.row_count == 0:
        return ": CSV is empty :"
    if index >= table.row_count:
        return ": Given row index is not available :"
    digits = len(str(table.row_count))
    return f"{index:<{digits}} | {table.get_row(index).to_line(table.columns)}"


class Processor:
    """Executes commands against the pages of a session manager."""

    def __init__(
        self,
        session_manager: SessionManager | None = None,
        settings: TabeditSettings | None = None,
        presets: PresetRegistry | None = None,
        output: TextIO | None = None,
        prompt: Callable[[str], str] = input,
        no_loop: bool = False,
        print_log: bool = True,
        confirm_write: bool = False,
    ):
        self.settings = settings or get_settings()
        self.session_manager = session_manager or SessionManager(
            max_sessions=self.settings.max_sessions,
            history_capacity=self.settings.history_capacity,
        )
        self.presets = presets or PresetRegistry.load(self.settings.preset_file)
        self.prompt = prompt
        self.no_loop = no_loop
        self.print_log = print_log
        self.confirm_write = confirm_write
        self._output = output

        self._handlers: dict[CommandType, Handler] = {
            CommandType.VERSION: self._version,
            CommandType.HELP: self._help,
            CommandType.IMPORT: self._import,
            CommandType.EXPORT: self._export,
            CommandType.WRITE: self._write,
            CommandType.EXECUTE: self._execute,
            CommandType.CREATE: self._create,
            CommandType.PRINT: self._print,
            CommandType.PRINT_CELL: self._print_cell,
            CommandType.PRINT_ROW: self._print_row,
            CommandType.PRINT_COLUMN: self._print_column,
            CommandType.ADD_ROW: self._add_row,
            CommandType.ADD_COLUMN: self._add_column,
            CommandType.DELETE_ROW: self._delete_row,
            CommandType.DELETE_COLUMN: self._delete_column,
            CommandType.EDIT_CELL: self._edit_cell,
            CommandType.EDIT_ROW: self._edit_row,
            CommandType.EDIT_ROW_MULTIPLE: self._edit_row_multiple,
            CommandType.EDIT_COLUMN: self._edit_column,
            CommandType.RENAME_COLUMN: self._rename_column,
            CommandType.MOVE_ROW: self._move_row,
            CommandType.MOVE_COLUMN: self._move_column,
            CommandType.LIMIT: self._limit,
            CommandType.LIMIT_PRESET: self._limit_preset,
            CommandType.SCHEMA: self._schema,
            CommandType.SCHEMA_INIT: self._schema_init,
            CommandType.SCHEMA_EXPORT: self._schema_export,
            CommandType.HISTORY: self._history,
            CommandType.UNDO: self._undo,
            CommandType.REDO: self._redo,
            CommandType.EXIT: lambda args: None,
        }

    # ========================================================================
    # PAGES
    # ========================================================================

    def add_empty_page(self) -> EditorSession:
        return self.session_manager.add_session(EMPTY_PAGE, replace=True)

    def current_session(self) -> EditorSession:
        return self.session_manager.current_session()

    @property
    def table(self) -> Table:
        return self.current_session().table

    def import_file(
        self, file_path: str, has_header: bool = True, line_delimiter: str = "\n"
    ) -> EditorSession:
        """Replace every page with a page holding the imported file."""
        table = load_table(
            file_path,
            has_header=has_header,
            line_delimiter=line_delimiter,
            strict=self.settings.read_strict,
        )
        self.session_manager.clear()
        return self.session_manager.add_session(file_path, table, source_file=file_path)

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def execute_command(self, command: Command) -> None:
        """Run one command on the current page."""
        handler = self._handlers[command.command_type]
        logger.debug("Executing %s %s", command.command_type.value, command.arguments)

        if command.command_type.is_history_tracked:
            session = self.current_session()
            with session.track(command.command_type.value, {"arguments": command.arguments}):
                handler(command.arguments)
        else:
            handler(command.arguments)

    def execute_line(self, line: str) -> Command:
        command = Command.parse(line)
        self.execute_command(command)
        return command

    def execute_script(self, text: str) -> None:
        """Run script commands, stopping at the first failure or at exit."""
        for number, line in split_script(text):
            try:
                command = Command.parse(line)
                if command.command_type is CommandType.EXIT:
                    return
                self.execute_command(command)
            except TabeditError as e:
                raise CommandError(
                    f"Line : {number} -> Failed to execute command : \"{line}\"\n{e.message}",
                    details={"line": number, "command": line},
                ) from e

    # ========================================================================
    # OUTPUT HELPERS
    # ========================================================================

    def write(self, text: str) -> None:
        output = self._output or sys.stdout
        output.write(text if text.endswith("\n") else text + "\n")
        output.flush()

    def log(self, message: str) -> None:
        logger.debug(message)
        if self.print_log:
            self.write(message)

    def _check_no_loop(self) -> None:
        if self.no_loop:
            raise CommandError("Interactive loop is restricted. Breaking...")

    def _ask(self, message: str) -> str | None:
        """Prompt for input; None when the user interrupts."""
        try:
            text = self.prompt(message)
        except EOFError:
            text = INTERRUPT_INPUT
        if text == INTERRUPT_INPUT:
            self.write(": Prompt interrupted :")
            return None
        return text

    # ========================================================================
    # META AND FILES
    # ========================================================================

    def _version(self, args: list[str]) -> None:
        self.write(version_text())

    def _help(self, args: list[str]) -> None:
        if args:
            self.write(command_help(CommandType.from_str(args[0])))
        else:
            self.write(help_text())

    def _import(self, args: list[str]) -> None:
        if not args:
            raise CommandError("You have to specify a file name to import from")
        has_header = _parse_bool(args[1], "has_header") if len(args) >= 2 else True
        line_delimiter = "\r" if len(args) >= 3 and args[2].lower() == "cr" else "\n"
        self.import_file(args[0], has_header=has_header, line_delimiter=line_delimiter)
        self.log(f"File \"{args[0]}\" imported")

    def _export(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Export requires file path")
        write_table(self.table, args[0])
        self.log(f"File exported to \"{args[0]}\"")

    def _write(self, args: list[str]) -> None:
        cache = _parse_bool(args[0], "cache") if args else True
        session = self.current_session()

        if self.confirm_write and session.source_file is not None:
            self.write(format_table(session.table))
            answer = self._ask(f"Overwrite \"{session.source_file}\"? (y/N) ")
            if answer is None or answer.strip().lower() not in ("y", "yes"):
                self.log("Write cancelled")
                return

        written = overwrite_to_file(
            session.table, session.source_file, cache=cache, cache_dir=self.settings.cache_dir
        )
        if written:
            self.log("File overwritten successfully")
        else:
            self.log(": No source file to write. Use export instead :")

    def _execute(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Execute needs a file to read from")
        try:
            text = Path(args[0]).read_text(encoding="utf-8")
        except OSError as e:
            raise TabeditIOError(
                f"Failed to read file \"{args[0]}\" for execution", path=args[0], cause=e
            ) from e
        self.execute_script(text)

    # ========================================================================
    # PRINTING
    # ========================================================================

    def _print(self, args: list[str]) -> None:
        viewer = resolve_viewer(args, self.settings.viewer)
        if viewer:
            self.write(pipe_to_viewer(viewer, self.table.to_string()))
        else:
            self.write(format_table(self.table))

    def _print_cell(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Cannot print cell without a coordinate")
        row, column = self._coordinate(args[0])
        mode = PrintMode.from_str(args[1]) if len(args) >= 2 else PrintMode.SIMPLE

        cell = self.table.get_cell(row, column)
        if cell is None:
            self.write("No such cell")
        elif mode is PrintMode.VERBOSE:
            self.write(repr(cell))
        elif mode is PrintMode.DEBUG:
            self.write(f"{self.table.get_column(column)!r}\nCell data : {cell!r}")
        else:
            self.write(str(cell))

    def _print_row(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Print-row needs row number")
        index = _parse_index(args[0])
        viewer = resolve_viewer(args[1:], self.settings.viewer)
        if viewer:
            line = self.table.get_row(index).to_line(self.table.columns)
            self.write(pipe_to_viewer(viewer, line + "\n"))
        else:
            self.write(format_row(self.table, index))

    def _print_column(self, args: list[str]) -> None:
        if not args:
            self.write(f": --{','.join(self.table.column_names())}-- :")
            return

        index = self.table.try_get_column_index(args[0])
        if index is None:
            self.write("No such column")
            return

        column = self.table.get_column(index)
        mode = PrintMode.from_str(args[1]) if len(args) >= 2 else PrintMode.SIMPLE
        if mode is PrintMode.DEBUG:
            self.write(repr(column))
        elif mode is PrintMode.VERBOSE:
            self.write(
                f"Column = \nName: {column.name}\nType: {column.column_type}\n"
                f"---\nLimiter =\n{column.limiter}"
            )
        else:
            self.write(f"Name: {column.name}\nType: {column.column_type}")

    # ========================================================================
    # ROWS
    # ========================================================================

    def _add_row(self, args: list[str]) -> None:
        table = self.table
        if len(args) < 2:
            self._check_no_loop()
            index = _parse_index(args[0]) if args else table.row_count
            if index > table.row_count:
                raise OutOfRangeError(index, table.row_count, "row")
            self.write("Type comma(,) to exit input")
            values = self._prompt_row(None)
            if values is None:
                return
            table.insert_row(index, values)
        else:
            index = _parse_index(args[0])
            table.insert_row(index, self._split_values(args[1]))
        self.log(f"New row added to \"{index}\"")

    def _delete_row(self, args: list[str]) -> None:
        table = self.table
        index = _parse_index(args[0]) if args else table.row_count - 1
        if table.delete_row(index) is None:
            self.write("No such row to remove")
            return
        self.log(f"A row removed from \"{index}\"")

    def _edit_row(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Insufficient arguments for edit-row")
        table = self.table
        index = _parse_index(args[0])
        if len(args) == 1:
            self._check_no_loop()
            table.get_row(index)
            self.write("Type comma(,) to exit input")
            values = self._prompt_row(index)
            if values is None:
                return
            table.edit_row(index, values)
        else:
            table.set_row(index, self._split_values(args[1]))
        self.log(f"Row \"{index}\" changed")

    def _edit_row_multiple(self, args: list[str]) -> None:
        self._check_no_loop()
        table = self.table
        start = _parse_index(args[0]) if args else 0
        end = _parse_index(args[1]) if len(args) >= 2 else max(table.row_count, 1) - 1
        table.get_row(start)
        table.get_row(end)

        self.write("Type comma(,) to exit input")
        edits: list[tuple[int, list[Value | None]]] = []
        for index in range(start, end + 1):
            values = self._prompt_row(index)
            if values is None:
                return
            edits.append((index, values))

        for index, values in edits:
            table.edit_row(index, values)
        self.log(f"Rows {start}~{end} contents changed")

    def _prompt_row(self, index: int | None) -> list[Value | None] | None:
        """Ask for every cell of a row.

        With an index the current cells are shown and empty input keeps them,
        otherwise the column defaults are used.
        """
        table = self.table
        if table.is_empty():
            self.write(": CSV is empty :")
            return None

        values: list[Value | None] = []
        for column_index, column in enumerate(table.columns):
            if index is not None:
                shown = table.get_cell(index, column_index)
            else:
                shown = column.get_default_value()

            while True:
                text = self._ask(f"{column.name}~{{{shown}}} = ")
                if text is None:
                    return None
                if text == "":
                    value = None if index is not None else shown
                    break
                if not is_valid_cell_text(text):
                    self.write("Given value is not a valid csv value")
                    continue
                try:
                    value = column.parse(text)
                except TypeMismatchError:
                    self.write(f"Given value is not a valid {column.column_type.value}")
                    continue
                if column.qualify(value):
                    break
                self.write("Given value doesn't qualify column limiter")
            values.append(value)
        return values

    def _move_row(self, args: list[str]) -> None:
        if len(args) < 2:
            raise CommandError("Insufficient arguments for move-row")
        src, dst = _parse_index(args[0]), _parse_index(args[1])
        self.table.move_row(src, dst)
        self.log(f"Row moved from \"{src}\" to \"{dst}\"")

    # ========================================================================
    # COLUMNS AND CELLS
    # ========================================================================

    def _create(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Create needs at least one column name")
        table = self.table
        for name in args:
            table.insert_column(table.column_count, name)
        self.log("New columns added")

    def _add_column(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Cannot add column without name")
        table = self.table
        name = args[0]
        index = _parse_index(args[1]) if len(args) >= 2 else table.column_count
        column_type = ValueType.from_str(args[2]) if len(args) >= 3 else ValueType.TEXT
        placeholder = args[3] if len(args) >= 4 else None

        table.insert_column(index, name, column_type, placeholder=placeholder)
        self.log(f"New column \"{name}\" added to \"{index}\"")

    def _delete_column(self, args: list[str]) -> None:
        table = self.table
        if args:
            index = table.get_column_index(args[0])
        elif table.column_count:
            index = table.column_count - 1
        else:
            raise CommandError("No column to remove")
        column = table.delete_column(index)
        self.log(f"A column \"{column.name}\" removed")

    def _edit_cell(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Edit needs coordinate")
        value = " ".join(args[1:])
        if not is_valid_cell_text(value):
            raise CommandError("Given cell value is not a valid csv value")
        row, column = self._coordinate(args[0])
        self.table.set_cell(row, column, value)
        self.log(f"Cell \"({row},{args[0].split(',')[1]})\" content changed to \"{value}\"")

    def _edit_column(self, args: list[str]) -> None:
        if len(args) < 2:
            raise CommandError("Insufficient arguments for edit-column")
        if not is_valid_cell_text(args[1]):
            raise CommandError("Given cell value is not a valid csv value")
        table = self.table
        table.set_column(table.get_column_index(args[0]), args[1])
        self.log(f"Column \"{args[0]}\" content changed to \"{args[1]}\"")

    def _rename_column(self, args: list[str]) -> None:
        if len(args) < 2:
            raise CommandError("Insufficient arguments for rename-column")
        table = self.table
        table.rename_column(table.get_column_index(args[0]), args[1])
        self.log(f"Column renamed from \"{args[0]}\" to \"{args[1]}\"")

    def _move_column(self, args: list[str]) -> None:
        if len(args) < 2:
            raise CommandError("Insufficient arguments for move-column")
        table = self.table
        src, dst = table.get_column_index(args[0]), table.get_column_index(args[1])
        table.move_column(src, dst)
        self.log(f"Column moved from \"{src}\" to \"{dst}\"")

    # ========================================================================
    # LIMITERS AND SCHEMA
    # ========================================================================

    def _limit(self, args: list[str]) -> None:
        if not args:
            self._check_no_loop()
            attributes = self._prompt_limiter()
            if attributes is None:
                return
        elif len(args) == 1:
            attributes = args[0].split(",")
        else:
            raise CommandError("Incorrect arguments for limit")

        if len(attributes) != LIMITER_ATTRIBUTE_LEN + 2:
            raise CommandError(
                f"Incorrect arguments for limit, needs {LIMITER_ATTRIBUTE_LEN + 2} values"
            )

        column, *limiter_attributes, force_token = attributes
        force = _parse_bool(force_token, "force") if force_token.strip() else True
        limiter = ValueLimiter.from_line(limiter_attributes)

        table = self.table
        table.set_limiter(table.get_column_index(column), limiter, panic=not force)
        self.log(f"Limited column \"{column}\"")

    def _prompt_limiter(self) -> list[str] | None:
        table = self.table
        if table.is_empty():
            self.write(": CSV is empty :")
            return None
        self.write(f": --{','.join(table.column_names())}-- :")

        attributes = []
        for message in (
            "Column = ",
            "Type (Text|Number) = ",
            "Default = ",
            "Variants(a b c) = ",
            "Pattern = ",
            "Force update(default=true) = ",
        ):
            text = self._ask(message)
            if text is None:
                return None
            attributes.append(text)
        return attributes

    def _limit_preset(self, args: list[str]) -> None:
        if len(args) < 2:
            raise CommandError("Limit-preset needs column and preset_name")
        column, preset_name = args[0], args[1]
        panic = not _parse_bool(args[2], "force") if len(args) >= 3 else True

        limiter = self.presets.get(preset_name)
        if limiter is None:
            raise CommandError(
                f"No such preset \"{preset_name}\"",
                details={"available": self.presets.names()},
            )
        table = self.table
        table.set_limiter(table.get_column_index(column), limiter, panic=panic)
        self.log(f"Limited column \"{column}\" with preset \"{preset_name}\"")

    def _schema(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Schema needs a file path")
        force = _parse_bool(args[1], "force") if len(args) >= 2 else False
        entries = read_schema_file(args[0])

        errors = self.table.apply_schema(entries, panic=not force)
        if errors:
            raise CommandError(
                f"Schema \"{args[0]}\" partially applied:\n"
                + "\n".join(error.message for error in errors),
                details={"failed_entries": len(errors)},
            )
        self.log(f"Schema \"{args[0]}\" applied")

    def _schema_init(self, args: list[str]) -> None:
        file_name = args[0] if args else self.settings.schema_file_name
        init_schema_file(file_name)
        self.log(f"Schema initiated to \"{file_name}\"")

    def _schema_export(self, args: list[str]) -> None:
        if not args:
            raise CommandError("Schema export needs a file path")
        write_schema_file(self.table, args[0])
        self.log(f"Schema exported to \"{args[0]}\"")

    # ========================================================================
    # HISTORY
    # ========================================================================

    def _history(self, args: list[str]) -> None:
        entries = self.current_session().history.get_history()
        if not entries:
            self.write(": History is empty :")
            return
        lines = []
        for entry in entries:
            arguments = " ".join(entry["details"].get("arguments", []))
            marker = " (undone)" if entry["is_undone"] else ""
            line = f"{entry['index']} | {entry['operation_type']} {arguments}".rstrip()
            lines.append(line + marker)
        self.write("\n".join(lines))

    def _undo(self, args: list[str]) -> None:
        operation = self.current_session().undo()
        if operation is None:
            self.log("Nothing to undo")
        else:
            self.log(f"Undid \"{operation}\"")

    def _redo(self, args: list[str]) -> None:
        operation = self.current_session().redo()
        if operation is None:
            self.log("Nothing to redo")
        else:
            self.log(f"Redid \"{operation}\"")

    # ========================================================================
    # ARGUMENT PARSING
    # ========================================================================

    def _coordinate(self, token: str) -> tuple[int, int]:
        parts = token.split(",")
        if len(parts) != 2:
            raise CommandError("Cell coordinate should be in a form of \"row,column\"")
        return _parse_index(parts[0]), self.table.get_column_index(parts[1])

    @staticmethod
    def _split_values(text: str) -> list[str]:
        values = text.split(DEFAULT_DELIMITER)
        for value in values:
            if not is_valid_cell_text(value):
                raise CommandError("Given cell value is not a valid csv value")
        return values


def _parse_index(token: str) -> int:
    if not NUMBER_PATTERN.fullmatch(token) or int(token) < 0:
        raise CommandError(f"\"{token}\" is not a valid index")
    return int(token)


def _parse_bool(token: str, name: str) -> bool:
    lowered = token.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    raise CommandError(f"Given value \"{token}\" should be a valid boolean value. ( {name} )")
