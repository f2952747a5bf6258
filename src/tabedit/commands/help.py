"""Help texts for the shell."""

from __future__ import annotations

from .._version import __version__
from .command import CommandType

COMMAND_HELP: dict[CommandType, str] = {
    CommandType.VERSION: "version\n  Print the program version.",
    CommandType.HELP: "help [command]\n  Print all commands, or the usage of one command.",
    CommandType.IMPORT: (
        "import <file> [has_header=true] [cr]\n"
        "  Import a file as a new page. Pass \"cr\" for carriage return row delimiters.\n"
        "  Importing drops other pages and starts a new undo history."
    ),
    CommandType.EXPORT: "export <file>\n  Write the current page to a file.",
    CommandType.WRITE: (
        "write [cache=true]\n"
        "  Overwrite the imported file. With cache the previous content is backed up first."
    ),
    CommandType.EXECUTE: (
        "execute <file>\n"
        "  Run commands from a file. Commands are separated by newlines or by semicolons\n"
        "  outside quotes.\n"
        "  Execution stops at the first failing command."
    ),
    CommandType.CREATE: "create <name>...\n  Append text columns with the given names.",
    CommandType.PRINT: "print [viewer...]\n  Print the page, optionally through a viewer command.",
    CommandType.PRINT_CELL: (
        "print-cell <row,column> [simple|verbose|debug]\n  Print one cell."
    ),
    CommandType.PRINT_ROW: "print-row <row> [viewer...]\n  Print one row.",
    CommandType.PRINT_COLUMN: (
        "print-column [column [simple|verbose|debug]]\n"
        "  Print all column names, or the definition of one column."
    ),
    CommandType.ADD_ROW: (
        "add-row [row [values]]\n"
        "  Insert a row. Values are comma separated; without values you are prompted\n"
        "  for every column. Type a single comma to cancel the prompt."
    ),
    CommandType.ADD_COLUMN: (
        "add-column <name> [index] [type] [placeholder]\n"
        "  Insert a column filled with the placeholder or the column default."
    ),
    CommandType.DELETE_ROW: "delete-row [row]\n  Delete a row, the last one by default.",
    CommandType.DELETE_COLUMN: (
        "delete-column [column]\n  Delete a column, the last one by default."
    ),
    CommandType.EDIT_CELL: "edit <row,column> [value...]\n  Set one cell.",
    CommandType.EDIT_ROW: (
        "edit-row <row> [values]\n"
        "  Set a whole row from comma separated values, or edit it cell by cell.\n"
        "  Empty input keeps a cell unchanged."
    ),
    CommandType.EDIT_ROW_MULTIPLE: (
        "edit-row-multiple [start] [end]\n"
        "  Edit a range of rows cell by cell. Nothing changes unless every row is entered."
    ),
    CommandType.EDIT_COLUMN: "edit-column <column> <value>\n  Set every cell of a column.",
    CommandType.RENAME_COLUMN: "rename-column <column> <new_name>\n  Rename a column.",
    CommandType.MOVE_ROW: "move-row <src> <dst>\n  Move a row, shifting the rows in between.",
    CommandType.MOVE_COLUMN: (
        "move-column <src> <dst>\n  Move a column, shifting the columns in between."
    ),
    CommandType.LIMIT: (
        "limit [column,type,default,variants,pattern,force]\n"
        "  Set a column limiter; without arguments you are prompted.\n"
        "  Variants are space separated. force=true (the default) replaces values\n"
        "  that do not qualify with the default, force=false rejects the change."
    ),
    CommandType.LIMIT_PRESET: (
        "limit-preset <column> <preset> [force=false]\n"
        "  Set a column limiter from a preset (text, number, float, email, date, time, url\n"
        "  or one from the preset file)."
    ),
    CommandType.SCHEMA: (
        "schema <file> [force=false]\n  Apply limiters from a schema file."
    ),
    CommandType.SCHEMA_INIT: "schema-init [file]\n  Create an empty schema file.",
    CommandType.SCHEMA_EXPORT: "schema-export <file>\n  Write the limiters of the page.",
    CommandType.HISTORY: "history\n  List the operations that can be undone.",
    CommandType.UNDO: "undo\n  Undo the last editing command.",
    CommandType.REDO: "redo\n  Redo the last undone command.",
    CommandType.EXIT: "exit\n  Leave the editor.",
}


def version_text() -> str:
    return f"tabedit, {__version__}"


def help_text() -> str:
    """Summary of every command with its aliases."""
    lines = [version_text(), "", "Commands:"]
    for command_type in CommandType:
        usage = COMMAND_HELP[command_type].splitlines()[0]
        aliases = ", ".join(command_type.aliases[1:])
        suffix = f"  ({aliases})" if aliases else ""
        lines.append(f"  {usage}{suffix}")
    lines.append("")
    lines.append("Type \"help <command>\" for details.")
    return "\n".join(lines)


def command_help(command_type: CommandType) -> str:
    return COMMAND_HELP[command_type]
