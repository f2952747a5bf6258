"""History server for tabedit using FastMCP server composition.

Undo, redo and inspection of the snapshot history kept by each session.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from ..exceptions import TabeditError
from ..models.tool_responses import (
    ClearHistoryResult,
    ExportHistoryResult,
    HistoryResult,
    UndoRedoResult,
)
from ..utils.validators import validate_file_path
from .server_utils import get_session_data

logger = logging.getLogger(__name__)


async def undo(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> UndoRedoResult:
    """Restore the table as it was before the last operation."""
    try:
        session = get_session_data(ctx.session_id)
    except TabeditError as e:
        raise ToolError(e.message) from e

    operation = session.undo()
    if operation is None:
        raise ToolError("No operations to undo")

    await ctx.info(f"Undid {operation}")
    return UndoRedoResult(
        operation=operation,
        can_undo=session.history.can_undo(),
        can_redo=session.history.can_redo(),
        history_position=session.history.current_index,
    )


async def redo(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> UndoRedoResult:
    """Re-apply the last undone operation."""
    try:
        session = get_session_data(ctx.session_id)
    except TabeditError as e:
        raise ToolError(e.message) from e

    operation = session.redo()
    if operation is None:
        raise ToolError("No operations to redo")

    await ctx.info(f"Redid {operation}")
    return UndoRedoResult(
        operation=operation,
        can_undo=session.history.can_undo(),
        can_redo=session.history.can_redo(),
        history_position=session.history.current_index,
    )


async def get_history(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    limit: Annotated[
        int | None, Field(description="Only return the most recent operations", ge=1)
    ] = None,
) -> HistoryResult:
    """List recorded operations, oldest first, marking the undone ones."""
    try:
        session = get_session_data(ctx.session_id)
    except TabeditError as e:
        raise ToolError(e.message) from e

    history = session.history
    return HistoryResult(
        operations=history.get_history(limit),
        total_operations=len(history.history),
        current_position=history.current_index,
        can_undo=history.can_undo(),
        can_redo=history.can_redo(),
    )


async def clear_history(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
) -> ClearHistoryResult:
    """Drop every snapshot. The current table is kept."""
    try:
        session = get_session_data(ctx.session_id)
    except TabeditError as e:
        raise ToolError(e.message) from e

    cleared = session.history.clear_history()
    await ctx.info(f"Cleared {cleared} history records")
    return ClearHistoryResult(cleared=cleared)


async def export_history(
    ctx: Annotated[Context, Field(description="FastMCP context for session access")],
    file_path: Annotated[str, Field(description="JSON file to write the history listing to")],
) -> ExportHistoryResult:
    """Write the history listing to a JSON file."""
    is_valid, validated = validate_file_path(file_path, must_exist=False, extensions=[".json"])
    if not is_valid:
        raise ToolError(f"Invalid file path: {validated}")

    try:
        session = get_session_data(ctx.session_id)
        total = session.history.export_history(validated)
    except TabeditError as e:
        logger.error("Failed to export history: %s", e.message)
        raise ToolError(e.message) from e

    return ExportHistoryResult(file_path=validated, total_operations=total)


# ============================================================================
# FASTMCP SERVER SETUP
# ============================================================================


history_server = FastMCP(
    "tabedit-History",
    instructions="History server for tabedit: undo, redo and operation history per session",
)

history_server.tool(name="undo")(undo)
history_server.tool(name="redo")(redo)
history_server.tool(name="get_history")(get_history)
history_server.tool(name="clear_history")(clear_history)
history_server.tool(name="export_history")(export_history)
