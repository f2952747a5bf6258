"""Reading and writing tables and schema files."""

from __future__ import annotations

import io
import logging
import shutil
from pathlib import Path

import pandas as pd

from ..exceptions import TabeditIOError
from ..models.schema import SchemaEntry, format_schema, parse_schema
from ..models.table import Table

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "tabedit_cache.csv"


def read_table(
    text: str,
    has_header: bool = True,
    line_delimiter: str = "\n",
    strict: bool = False,
) -> Table:
    """Build a table from delimited text.

    Every column is text. Without a header the columns are named ``Column_0``,
    ``Column_1`` and so on. Blank rows are skipped, or rejected in strict mode.
    In a single column table an empty line is a row holding one empty cell.
    """
    try:
        df = _read_frame(text, line_delimiter, skip_blank_lines=True)
        if len(df.columns) == 1:
            df = _read_frame(text, line_delimiter, skip_blank_lines=False)
    except pd.errors.EmptyDataError:
        return Table()
    except pd.errors.ParserError as e:
        raise TabeditIOError("Failed to parse delimited text", cause=e) from e

    if strict and len(df.columns) > 1:
        lines = text.split(line_delimiter)
        if lines and lines[-1] == "":
            lines.pop()
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                raise TabeditIOError(f"Blank row at line {number}")

    records = df.to_numpy().tolist()
    if has_header:
        header, records = records[0], records[1:]
    else:
        header = [f"Column_{i}" for i in range(len(df.columns))]

    table = Table.from_records([str(name) for name in header], records)
    logger.debug("Read %s rows and %s columns", table.row_count, table.column_count)
    return table


def _read_frame(text: str, line_delimiter: str, skip_blank_lines: bool) -> pd.DataFrame:
    read_params: dict = {
        "header": None,
        "dtype": str,
        "keep_default_na": False,
        "skip_blank_lines": skip_blank_lines,
    }
    if line_delimiter != "\n":
        read_params["lineterminator"] = line_delimiter
    return pd.read_csv(io.StringIO(text), **read_params).fillna("")


def table_to_csv(table: Table) -> str:
    """Render a table as CSV with quoting, or an empty string for an empty table."""
    if table.is_empty():
        return ""
    df = pd.DataFrame(table.to_records(), columns=table.column_names())
    return df.to_csv(index=False, lineterminator="\n")


def load_table(
    file_path: str | Path,
    has_header: bool = True,
    line_delimiter: str = "\n",
    strict: bool = False,
) -> Table:
    """Read a table from a file."""
    path = Path(file_path)
    try:
        # newline="" keeps carriage returns for tables using them as row delimiter
        with path.open(encoding="utf-8", newline="") as f:
            text = f.read()
    except OSError as e:
        raise TabeditIOError(f"Failed to import file \"{path}\"", path=str(path), cause=e) from e

    table = read_table(text, has_header=has_header, line_delimiter=line_delimiter, strict=strict)
    logger.info("Imported %s (%s rows)", path, table.row_count)
    return table


def write_table(table: Table, file_path: str | Path) -> None:
    """Write a table to a file."""
    path = Path(file_path)
    try:
        path.write_text(table_to_csv(table), encoding="utf-8")
    except OSError as e:
        raise TabeditIOError("Failed to write table to file", path=str(path), cause=e) from e
    logger.info("Exported table to %s", path)


def overwrite_to_file(
    table: Table, source_file: str | None, cache: bool = True, cache_dir: Path | None = None
) -> bool:
    """Write a table back to the file it came from.

    With ``cache`` the previous file content is first copied into ``cache_dir``.
    Returns True when a write occurred and False when there is no source file.
    """
    if source_file is None:
        return False

    if cache:
        backup = (cache_dir or Path.cwd()) / CACHE_FILE_NAME
        try:
            shutil.copyfile(source_file, backup)
        except OSError as e:
            raise TabeditIOError(
                "Failed to create cache for overwrite", path=str(backup), cause=e
            ) from e
        logger.debug("Cached %s to %s", source_file, backup)

    write_table(table, source_file)
    return True


# ============================================================================
# SCHEMA FILES
# ============================================================================


def read_schema_file(file_path: str | Path) -> list[SchemaEntry]:
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TabeditIOError(
            f"Failed to read schema file \"{path}\"", path=str(path), cause=e
        ) from e
    return parse_schema(text)


def write_schema_file(table: Table, file_path: str | Path) -> None:
    path = Path(file_path)
    try:
        path.write_text(format_schema(table.export_schema()), encoding="utf-8")
    except OSError as e:
        raise TabeditIOError("Failed to export schema", path=str(path), cause=e) from e
    logger.info("Exported schema to %s", path)


def init_schema_file(file_path: str | Path) -> None:
    """Create a schema file that only holds the header line."""
    path = Path(file_path)
    if path.exists():
        raise TabeditIOError(f"Schema file \"{path}\" already exists", path=str(path))
    try:
        path.write_text(format_schema([]), encoding="utf-8")
    except OSError as e:
        raise TabeditIOError("Failed to create schema file", path=str(path), cause=e) from e
    logger.info("Created schema file %s", path)
