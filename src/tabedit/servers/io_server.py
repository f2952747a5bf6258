"""I/O server for tabedit using FastMCP server composition.

Loads tables into sessions from text or files, writes them back, and moves limiter
schemas in and out of a session.
"""

from __future__ import annotations

import logging
from typing import Annotated, Literal

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from ..core.session import get_session_manager
from ..core.settings import get_settings
from ..exceptions import TabeditError
from ..models.data_models import describe_columns
from ..models.schema import parse_schema
from ..models.tool_responses import (
    CloseSessionResult,
    ExportResult,
    LoadResult,
    OverwriteResult,
    SchemaResult,
    SessionInfoResult,
    TableTextResult,
)
from ..services.io_operations import (
    load_table,
    overwrite_to_file,
    read_schema_file,
    read_table,
    write_schema_file,
    write_table,
)
from ..utils.validators import validate_file_path
from .server_utils import get_session_data

logger = logging.getLogger(__name__)

LineDelimiter = Literal["lf", "cr"]

_LINE_DELIMITERS = {"lf": "\n", "cr": "\r"}


# ============================================================================
# LOADING
# ============================================================================


async def load_table_from_content(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    content: Annotated[str, Field(description="Comma separated table text")],
    has_header: Annotated[
        bool, Field(description="Whether the first line holds the column names")
    ] = True,
    line_delimiter: Annotated[
        LineDelimiter, Field(description="Row delimiter: lf (newline) or cr (carriage return)")
    ] = "lf",
) -> LoadResult:
    """Load a table from text into the session.

    Every column starts as an unrestricted text column. Loading replaces the session
    table and starts a new undo history.
    """
    session_id = ctx.session_id
    await ctx.info("Loading table from content string")

    try:
        table = read_table(
            content,
            has_header=has_header,
            line_delimiter=_LINE_DELIMITERS[line_delimiter],
            strict=get_settings().read_strict,
        )
    except TabeditError as e:
        logger.error("Failed to parse table content: %s", e.message)
        raise ToolError(e.message) from e

    session = get_session_manager().get_or_create_session(session_id)
    session.load_table(table, None)

    await ctx.info(f"Loaded {table.row_count} rows and {table.column_count} columns")
    return LoadResult(
        session_id=session_id,
        rows_affected=table.row_count,
        columns_affected=table.column_names(),
    )


async def load_table_from_file(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    file_path: Annotated[str, Field(description="Path of the file to import")],
    has_header: Annotated[
        bool, Field(description="Whether the first line holds the column names")
    ] = True,
    line_delimiter: Annotated[
        LineDelimiter, Field(description="Row delimiter: lf (newline) or cr (carriage return)")
    ] = "lf",
) -> LoadResult:
    """Import a file into the session.

    The file becomes the session's source file, so overwrite_table writes back to it.
    """
    session_id = ctx.session_id

    is_valid, validated = validate_file_path(file_path)
    if not is_valid:
        raise ToolError(f"Invalid file path: {validated}")

    await ctx.info(f"Importing {validated}")
    try:
        table = load_table(
            validated,
            has_header=has_header,
            line_delimiter=_LINE_DELIMITERS[line_delimiter],
            strict=get_settings().read_strict,
        )
    except TabeditError as e:
        logger.error("Failed to import %s: %s", validated, e.message)
        raise ToolError(e.message) from e

    session = get_session_manager().get_or_create_session(session_id)
    session.load_table(table, validated)

    return LoadResult(
        session_id=session_id,
        rows_affected=table.row_count,
        columns_affected=table.column_names(),
        file_path=validated,
    )


# ============================================================================
# WRITING
# ============================================================================


async def export_table(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    file_path: Annotated[str, Field(description="Destination file path")],
) -> ExportResult:
    """Write the session table to a file. The source file of the session is unchanged."""
    try:
        session = get_session_data(ctx.session_id)

        is_valid, validated = validate_file_path(file_path, must_exist=False)
        if not is_valid:
            raise ToolError(f"Invalid file path: {validated}")

        write_table(session.table, validated)
        await ctx.info(f"Exported {session.table.row_count} rows to {validated}")
        return ExportResult(file_path=validated, rows_exported=session.table.row_count)

    except TabeditError as e:
        logger.error("Failed to export table: %s", e.message)
        raise ToolError(e.message) from e


async def overwrite_table(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    cache: Annotated[
        bool, Field(description="Back up the current file content before overwriting")
    ] = True,
) -> OverwriteResult:
    """Write the session table back to the file it was imported from."""
    try:
        session = get_session_data(ctx.session_id)
        written = overwrite_to_file(
            session.table, session.source_file, cache=cache, cache_dir=get_settings().cache_dir
        )
    except TabeditError as e:
        logger.error("Failed to overwrite source file: %s", e.message)
        raise ToolError(e.message) from e

    if not written:
        await ctx.info("Session has no source file; use export_table instead")
    return OverwriteResult(
        written=written, file_path=session.source_file, cached=written and cache
    )


async def get_table_text(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> TableTextResult:
    """Return the table as comma separated text with a header line."""
    try:
        session = get_session_data(ctx.session_id)
    except TabeditError as e:
        raise ToolError(e.message) from e

    table = session.table
    return TableTextResult(
        text=table.to_string(), row_count=table.row_count, column_count=table.column_count
    )


async def get_session_info(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> SessionInfoResult:
    """Get session metadata together with every column definition."""
    try:
        session = get_session_data(ctx.session_id)
    except TabeditError as e:
        raise ToolError(e.message) from e

    await ctx.info(f"Retrieved info for session {ctx.session_id}")
    return SessionInfoResult(info=session.get_info(), columns=describe_columns(session.table))


# ============================================================================
# SCHEMA
# ============================================================================


async def export_schema(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    file_path: Annotated[
        str | None, Field(description="Optional schema file to write the limiters to")
    ] = None,
) -> SchemaResult:
    """Describe the limiter of every column, optionally writing a schema file."""
    try:
        session = get_session_data(ctx.session_id)
        if file_path is not None:
            is_valid, validated = validate_file_path(file_path, must_exist=False)
            if not is_valid:
                raise ToolError(f"Invalid file path: {validated}")
            write_schema_file(session.table, validated)
            file_path = validated
    except TabeditError as e:
        logger.error("Failed to export schema: %s", e.message)
        raise ToolError(e.message) from e

    return SchemaResult(entries=session.table.export_schema(), file_path=file_path)


async def apply_schema(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    content: Annotated[
        str | None, Field(description="Schema text: column,type,default,variant,pattern")
    ] = None,
    file_path: Annotated[str | None, Field(description="Schema file to read instead")] = None,
    force: Annotated[
        bool,
        Field(description="Replace values that do not qualify with the default"),
    ] = False,
) -> SchemaResult:
    """Apply limiters from a schema to the session table.

    Entries are applied column by column. A failing entry leaves its column
    unchanged and is reported in ``errors``.
    """
    if (content is None) == (file_path is None):
        raise ToolError("Provide exactly one of content or file_path")

    try:
        session = get_session_data(ctx.session_id)
        if content is not None:
            entries = parse_schema(content)
        else:
            is_valid, validated = validate_file_path(file_path)
            if not is_valid:
                raise ToolError(f"Invalid file path: {validated}")
            entries = read_schema_file(validated)

        errors = session.execute(
            "schema",
            lambda table: table.apply_schema(entries, panic=not force),
            {"entries": len(entries), "force": force},
        )
    except TabeditError as e:
        logger.error("Failed to apply schema: %s", e.message)
        raise ToolError(e.message) from e

    for error in errors:
        await ctx.warning(error.message)
    return SchemaResult(
        entries=entries,
        applied=len(entries) - len(errors),
        errors=[error.message for error in errors],
        file_path=file_path,
    )


async def close_session(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> CloseSessionResult:
    """Drop the session together with its table and history."""
    session_id = ctx.session_id
    closed = get_session_manager().remove_session(session_id)
    if not closed:
        raise ToolError(f"Session '{session_id}' not found")
    await ctx.info(f"Closed session {session_id}")
    return CloseSessionResult(session_id=session_id, closed=closed)


# ============================================================================
# FASTMCP SERVER SETUP
# ============================================================================


io_server = FastMCP(
    "tabedit-IO",
    instructions="I/O server for tabedit: load tables from text or files, write them back, "
    "and exchange limiter schemas",
)

io_server.tool(name="load_table_from_content")(load_table_from_content)
io_server.tool(name="load_table_from_file")(load_table_from_file)
io_server.tool(name="export_table")(export_table)
io_server.tool(name="overwrite_table")(overwrite_table)
io_server.tool(name="get_table_text")(get_table_text)
io_server.tool(name="get_session_info")(get_session_info)
io_server.tool(name="export_schema")(export_schema)
io_server.tool(name="apply_schema")(apply_schema)
io_server.tool(name="close_session")(close_session)
