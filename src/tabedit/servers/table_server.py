"""Table editing server for tabedit using FastMCP server composition.

Row, column, cell and limiter operations on the session table. Every mutation runs
through the session's tracked execution, so it can be undone like a shell command.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from ..core.settings import get_settings
from ..exceptions import OutOfRangeError, TabeditError
from ..models.data_models import CellValue, ColumnInfo, describe_columns, to_cell_value
from ..models.limiter import ValueLimiter
from ..models.table import Table
from ..models.tool_responses import (
    CellValueResult,
    ColumnOperationResult,
    ColumnsResult,
    LimiterResult,
    RowDataResult,
    RowOperationResult,
    SetCellResult,
)
from ..models.value import Value, ValueType
from ..services.presets import PresetRegistry
from .server_utils import get_session_data, to_cell_text

logger = logging.getLogger(__name__)

ColumnRef = Annotated[
    str | int, Field(description="Column name (str) or 0-based column index (int)")
]
RowIndex = Annotated[int, Field(description="Row index (0-based)", ge=0)]
Force = Annotated[
    bool,
    Field(
        description="Replace values that do not qualify with the column default "
        "instead of rejecting the change"
    ),
]


def _row_data(table: Table, row_index: int) -> dict[str, CellValue]:
    return {
        name: value.data
        for name, value in zip(table.column_names(), table.get_row_values(row_index), strict=True)
    }


# ============================================================================
# CELLS
# ============================================================================


async def get_cell(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    row_index: RowIndex,
    column: ColumnRef,
) -> CellValueResult:
    """Get the value of one cell."""
    try:
        table = get_session_data(ctx.session_id).table
        column_index = table.get_column_index(column)
        value = table.get_cell(row_index, column_index)
        if value is None:
            raise OutOfRangeError(row_index, table.row_count, "row")
    except TabeditError as e:
        logger.error("Failed to get cell: %s", e.message)
        raise ToolError(e.message) from e

    return CellValueResult(
        row_index=row_index,
        column=table.get_column(column_index).name,
        value=value.data,
        data_type=value.get_type().value,
    )


async def set_cell(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    row_index: RowIndex,
    column: ColumnRef,
    value: Annotated[CellValue, Field(description="New cell value")],
    force: Force = False,
) -> SetCellResult:
    """Set one cell. The value is parsed against the column type and checked by its limiter."""
    try:
        session = get_session_data(ctx.session_id)
        table = session.table
        column_index = table.get_column_index(column)
        old_value = to_cell_value(table.get_cell(row_index, column_index))

        session.execute(
            "edit",
            lambda t: t.set_cell(row_index, column_index, to_cell_text(value), panic=not force),
            {"row": row_index, "column": column, "value": value},
        )
        new_value = session.table.get_cell(row_index, column_index)
    except TabeditError as e:
        logger.error("Failed to set cell: %s", e.message)
        raise ToolError(e.message) from e

    assert new_value is not None
    return SetCellResult(
        row_index=row_index,
        column=session.table.get_column(column_index).name,
        old_value=old_value if old_value is not None else "",
        new_value=new_value.data,
    )


# ============================================================================
# ROWS
# ============================================================================


async def get_row(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    row_index: RowIndex,
) -> RowDataResult:
    """Get every cell of a row keyed by column name."""
    try:
        table = get_session_data(ctx.session_id).table
        table.get_row(row_index)
    except TabeditError as e:
        raise ToolError(e.message) from e
    return RowDataResult(row_index=row_index, data=_row_data(table, row_index))


async def insert_row(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    row_index: Annotated[
        int | None, Field(description="Position to insert at (0-based); appends when omitted")
    ] = None,
    values: Annotated[
        list[CellValue] | None,
        Field(description="One value per column; column defaults when omitted"),
    ] = None,
    force: Force = False,
) -> RowOperationResult:
    """Insert a row at a position, shifting the rows after it."""
    try:
        session = get_session_data(ctx.session_id)
        rows_before = session.table.row_count
        index = rows_before if row_index is None else row_index
        cells = [to_cell_text(v) for v in values] if values is not None else None

        session.execute(
            "add-row",
            lambda t: t.insert_row(index, cells, panic=not force),
            {"row": index, "values": values},
        )
    except TabeditError as e:
        logger.error("Failed to insert row: %s", e.message)
        raise ToolError(e.message) from e

    await ctx.info(f"Inserted row at {index}")
    return RowOperationResult(
        operation="insert_row",
        row_index=index,
        rows_before=rows_before,
        rows_after=session.table.row_count,
        data=_row_data(session.table, index),
    )


async def delete_row(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    row_index: RowIndex,
) -> RowOperationResult:
    """Delete a row and return its former content."""
    try:
        session = get_session_data(ctx.session_id)
        rows_before = session.table.row_count
        if row_index >= rows_before:
            raise OutOfRangeError(row_index, rows_before, "row")
        deleted = _row_data(session.table, row_index)
        session.execute("delete-row", lambda t: t.delete_row(row_index), {"row": row_index})
    except TabeditError as e:
        logger.error("Failed to delete row: %s", e.message)
        raise ToolError(e.message) from e

    return RowOperationResult(
        operation="delete_row",
        row_index=row_index,
        rows_before=rows_before,
        rows_after=session.table.row_count,
        data=deleted,
    )


async def update_row(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    row_index: RowIndex,
    values: Annotated[
        list[CellValue | None],
        Field(description="One entry per column; null leaves that cell unchanged"),
    ],
    force: Force = False,
) -> RowOperationResult:
    """Update the cells of a row in one step.

    Either every given value is written or, when one of them is rejected, none are.
    """
    try:
        session = get_session_data(ctx.session_id)
        cells = [to_cell_text(v) for v in values]
        session.execute(
            "edit-row",
            lambda t: t.edit_row(row_index, cells, panic=not force),
            {"row": row_index, "values": values},
        )
    except TabeditError as e:
        logger.error("Failed to update row: %s", e.message)
        raise ToolError(e.message) from e

    row_count = session.table.row_count
    return RowOperationResult(
        operation="update_row",
        row_index=row_index,
        rows_before=row_count,
        rows_after=row_count,
        data=_row_data(session.table, row_index),
    )


async def move_row(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    src: RowIndex,
    dst: RowIndex,
) -> RowOperationResult:
    """Move a row; the rows in between shift by one toward the vacated position."""
    try:
        session = get_session_data(ctx.session_id)
        session.execute("move-row", lambda t: t.move_row(src, dst), {"src": src, "dst": dst})
    except TabeditError as e:
        logger.error("Failed to move row: %s", e.message)
        raise ToolError(e.message) from e

    row_count = session.table.row_count
    return RowOperationResult(
        operation="move_row",
        row_index=dst,
        rows_before=row_count,
        rows_after=row_count,
        data=_row_data(session.table, dst),
    )


# ============================================================================
# COLUMNS
# ============================================================================


async def get_columns(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> ColumnsResult:
    """List the column definitions with their limiters."""
    try:
        table = get_session_data(ctx.session_id).table
    except TabeditError as e:
        raise ToolError(e.message) from e
    return ColumnsResult(columns=describe_columns(table))


async def insert_column(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    name: Annotated[str, Field(description="Name of the new column")],
    column_index: Annotated[
        int | None, Field(description="Position to insert at (0-based); appends when omitted")
    ] = None,
    column_type: Annotated[ValueType, Field(description="Value type of the column")] = (
        ValueType.TEXT
    ),
    placeholder: Annotated[
        CellValue | None, Field(description="Value for existing rows; column default if omitted")
    ] = None,
) -> ColumnOperationResult:
    """Insert a column, filling existing rows with the placeholder."""
    try:
        session = get_session_data(ctx.session_id)
        index = session.table.column_count if column_index is None else column_index
        session.execute(
            "add-column",
            lambda t: t.insert_column(
                index, name, column_type, placeholder=to_cell_text(placeholder)
            ),
            {"name": name, "index": index, "type": column_type.value},
        )
    except TabeditError as e:
        logger.error("Failed to insert column: %s", e.message)
        raise ToolError(e.message) from e

    return ColumnOperationResult(
        operation="insert_column",
        column=name,
        column_index=index,
        columns=session.table.column_names(),
    )


async def delete_column(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    column: ColumnRef,
) -> ColumnOperationResult:
    """Delete a column. Deleting the last column also drops every row."""
    try:
        session = get_session_data(ctx.session_id)
        index = session.table.get_column_index(column)
        removed = session.execute(
            "delete-column", lambda t: t.delete_column(index), {"column": column}
        )
    except TabeditError as e:
        logger.error("Failed to delete column: %s", e.message)
        raise ToolError(e.message) from e

    return ColumnOperationResult(
        operation="delete_column",
        column=removed.name,
        column_index=index,
        columns=session.table.column_names(),
    )


async def rename_column(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    column: ColumnRef,
    new_name: Annotated[str, Field(description="New column name")],
) -> ColumnOperationResult:
    """Rename a column."""
    try:
        session = get_session_data(ctx.session_id)
        index = session.table.get_column_index(column)
        session.execute(
            "rename-column",
            lambda t: t.rename_column(index, new_name),
            {"column": column, "new_name": new_name},
        )
    except TabeditError as e:
        logger.error("Failed to rename column: %s", e.message)
        raise ToolError(e.message) from e

    return ColumnOperationResult(
        operation="rename_column",
        column=new_name,
        column_index=index,
        columns=session.table.column_names(),
    )


async def move_column(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    src: ColumnRef,
    dst: ColumnRef,
) -> ColumnOperationResult:
    """Move a column; the columns in between shift by one."""
    try:
        session = get_session_data(ctx.session_id)
        src_index = session.table.get_column_index(src)
        dst_index = session.table.get_column_index(dst)
        session.execute(
            "move-column",
            lambda t: t.move_column(src_index, dst_index),
            {"src": src, "dst": dst},
        )
    except TabeditError as e:
        logger.error("Failed to move column: %s", e.message)
        raise ToolError(e.message) from e

    return ColumnOperationResult(
        operation="move_column",
        column=session.table.get_column(dst_index).name,
        column_index=dst_index,
        columns=session.table.column_names(),
    )


async def set_column(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    column: ColumnRef,
    value: Annotated[CellValue, Field(description="Value written into every row")],
    force: Force = False,
) -> ColumnOperationResult:
    """Write the same value into every cell of a column."""
    try:
        session = get_session_data(ctx.session_id)
        index = session.table.get_column_index(column)
        session.execute(
            "edit-column",
            lambda t: t.set_column(index, to_cell_text(value), panic=not force),
            {"column": column, "value": value},
        )
    except TabeditError as e:
        logger.error("Failed to set column: %s", e.message)
        raise ToolError(e.message) from e

    return ColumnOperationResult(
        operation="set_column",
        column=session.table.get_column(index).name,
        column_index=index,
        columns=session.table.column_names(),
    )


# ============================================================================
# LIMITERS
# ============================================================================


async def set_limiter(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    column: ColumnRef,
    value_type: Annotated[ValueType, Field(description="Declared value type")] = ValueType.TEXT,
    default: Annotated[
        CellValue | None, Field(description="Default value; must qualify itself")
    ] = None,
    variants: Annotated[
        list[CellValue] | None, Field(description="Allowed values; overrides the pattern")
    ] = None,
    pattern: Annotated[
        str | None, Field(description="Regular expression searched in the value text")
    ] = None,
    force: Force = False,
) -> LimiterResult:
    """Attach a limiter to a column and re-validate its cells.

    Without force any existing cell that does not convert and qualify rejects the
    change. With force such cells are replaced by the new default.
    """
    try:
        limiter = ValueLimiter(
            value_type,
            default=Value.from_str(str(default), value_type) if default is not None else None,
            variants=[Value.from_str(str(v), value_type) for v in variants] if variants else None,
            pattern=pattern or None,
        )
        return await _apply_limiter(ctx, column, limiter, force, "limit")
    except TabeditError as e:
        logger.error("Failed to set limiter: %s", e.message)
        raise ToolError(e.message) from e


async def apply_preset(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    column: ColumnRef,
    preset: Annotated[str, Field(description="Preset name, e.g. email, date, number")],
    force: Force = False,
) -> LimiterResult:
    """Attach a named limiter preset to a column."""
    registry = PresetRegistry.load(get_settings().preset_file)
    limiter = registry.get(preset)
    if limiter is None:
        raise ToolError(f"No such preset '{preset}'. Available: {', '.join(registry.names())}")
    try:
        return await _apply_limiter(ctx, column, limiter, force, "limit-preset")
    except TabeditError as e:
        logger.error("Failed to apply preset: %s", e.message)
        raise ToolError(e.message) from e


async def _apply_limiter(
    ctx: Context, column: str | int, limiter: ValueLimiter, force: bool, operation_type: str
) -> LimiterResult:
    session = get_session_data(ctx.session_id)
    index = session.table.get_column_index(column)
    session.execute(
        operation_type,
        lambda t: t.set_limiter(index, limiter, panic=not force),
        {"column": column, "limiter": limiter.to_line(), "force": force},
    )
    await ctx.info(f"Limited column {column}")
    return LimiterResult(
        column=ColumnInfo.from_column(index, session.table.get_column(index)),
        rows_checked=session.table.row_count,
    )


# ============================================================================
# FASTMCP SERVER SETUP
# ============================================================================


table_server = FastMCP(
    "tabedit-Table",
    instructions="Table editing server for tabedit: rows, columns, cells and column limiters",
)

table_server.tool(name="get_cell")(get_cell)
table_server.tool(name="set_cell")(set_cell)
table_server.tool(name="get_row")(get_row)
table_server.tool(name="insert_row")(insert_row)
table_server.tool(name="delete_row")(delete_row)
table_server.tool(name="update_row")(update_row)
table_server.tool(name="move_row")(move_row)
table_server.tool(name="get_columns")(get_columns)
table_server.tool(name="insert_column")(insert_column)
table_server.tool(name="delete_column")(delete_column)
table_server.tool(name="rename_column")(rename_column)
table_server.tool(name="move_column")(move_column)
table_server.tool(name="set_column")(set_column)
table_server.tool(name="set_limiter")(set_limiter)
table_server.tool(name="apply_preset")(apply_preset)
