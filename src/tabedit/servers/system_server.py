"""System server for tabedit using FastMCP server composition.

Health monitoring and capability reporting.
"""

from __future__ import annotations

import logging
import os
from typing import Annotated

import psutil
from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from .._version import __version__
from ..commands.command import CommandType
from ..core.session import SessionManager, get_session_manager
from ..core.settings import get_settings
from ..models.tool_responses import HealthResult, ServerInfoResult
from ..models.value import ValueType
from ..services.presets import PresetRegistry

logger = logging.getLogger(__name__)

# ============================================================================
# MEMORY MONITORING UTILITIES
# ============================================================================


def get_memory_usage() -> float:
    """Get current process memory usage in MB."""
    try:
        process = psutil.Process(os.getpid())
        memory_bytes: int = process.memory_info().rss
        return float(memory_bytes / 1024 / 1024)
    except (psutil.Error, OSError):
        return 0.0


def count_total_history_operations(session_manager: SessionManager) -> int:
    """Count snapshots across all session histories."""
    return sum(len(session.history.history) for session in session_manager.sessions.values())


# ============================================================================
# SYSTEM OPERATIONS
# ============================================================================


async def health_check(
    ctx: Annotated[Context, Field(description="FastMCP context for progress reporting")],
) -> HealthResult:
    """Check tabedit server health: session capacity, memory and history usage."""
    await ctx.info("Performing tabedit health check")

    session_manager = get_session_manager()
    settings = get_settings()
    active_sessions = len(session_manager.sessions)

    status = "healthy"
    if active_sessions >= session_manager.max_sessions * 0.9:
        status = "degraded"
        await ctx.warning(
            f"Session capacity warning: {active_sessions}/{session_manager.max_sessions}"
        )

    ttl = session_manager.ttl_seconds
    return HealthResult(
        status=status,
        version=__version__,
        active_sessions=active_sessions,
        max_sessions=session_manager.max_sessions,
        session_ttl_minutes=ttl // 60 if ttl is not None else 0,
        memory_usage_mb=get_memory_usage(),
        history_operations_total=count_total_history_operations(session_manager),
        history_capacity_per_session=settings.history_capacity,
    )


async def get_server_info(
    ctx: Annotated[Context, Field(description="FastMCP context for progress reporting")],
) -> ServerInfoResult:
    """Get tabedit server capabilities, value types and available limiter presets."""
    try:
        settings = get_settings()
        presets = PresetRegistry.load(settings.preset_file)
        return ServerInfoResult(
            name="tabedit",
            version=__version__,
            description="CSV editing with typed, constrained columns and undo history",
            capabilities={
                "io": [
                    "load_table_from_content",
                    "load_table_from_file",
                    "export_table",
                    "overwrite_table",
                    "get_table_text",
                    "export_schema",
                    "apply_schema",
                ],
                "rows": ["get_row", "insert_row", "delete_row", "update_row", "move_row"],
                "columns": [
                    "get_columns",
                    "insert_column",
                    "delete_column",
                    "rename_column",
                    "move_column",
                    "set_column",
                ],
                "cells": ["get_cell", "set_cell"],
                "limiters": ["set_limiter", "apply_preset"],
                "history": ["undo", "redo", "get_history", "clear_history", "export_history"],
                "shell_commands": [command_type.value for command_type in CommandType],
            },
            value_types=[value_type.value for value_type in ValueType],
            presets=presets.names(),
            session_timeout_minutes=settings.session_timeout // 60,
        )
    except Exception as e:
        logger.error("Failed to get server information: %s", str(e))
        await ctx.error(f"Failed to get server information: {e}")
        raise ToolError(f"Failed to get server information: {e}") from e


# ============================================================================
# FASTMCP SERVER SETUP
# ============================================================================

system_server = FastMCP(
    "tabedit-System",
    instructions="System monitoring and information server for tabedit",
)

system_server.tool(name="health_check")(health_check)
system_server.tool(name="get_server_info")(get_server_info)
