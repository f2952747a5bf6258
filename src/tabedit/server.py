"""Main FastMCP server for tabedit."""

from __future__ import annotations

import argparse

from fastmcp import FastMCP

from .core.session import get_session_manager
from .servers.history_server import history_server
from .servers.io_server import io_server
from .servers.system_server import system_server
from .servers.table_server import table_server
from .utils.logging_config import get_logger, set_correlation_id, setup_logging

logger = get_logger(__name__)

INSTRUCTIONS = """tabedit edits comma separated tables whose columns are typed and constrained.

Each MCP session holds one table. Load it with load_table_from_content or
load_table_from_file, then edit rows, columns and cells. Rows and columns use
0-based indices; columns may also be addressed by name.

Columns are either text or number. A column limiter (set_limiter, apply_preset,
apply_schema) can add a default value, a list of allowed variants or a regular
expression. Values that do not qualify are rejected unless force is set, in which
case they are replaced by the column default.

Every edit can be undone with undo and re-applied with redo.
"""

mcp = FastMCP("tabedit", instructions=INSTRUCTIONS)

mcp.mount(system_server)
mcp.mount(io_server)
mcp.mount(table_server)
mcp.mount(history_server)


# ============================================================================
# RESOURCES
# ============================================================================


@mcp.resource("table://{session_id}/text")
async def get_table_resource(session_id: str) -> str:
    """Current table of a session as comma separated text."""
    session = get_session_manager().get_session(session_id)
    if session is None:
        return ""
    return session.table.to_string()


@mcp.resource("sessions://active")
async def list_active_sessions() -> list[dict[str, str | int | bool | None]]:
    """List all active sessions."""
    return [info.model_dump(mode="json") for info in get_session_manager().list_sessions()]


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================


def main() -> None:
    """Main entry point for the server."""
    parser = argparse.ArgumentParser(description="tabedit MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport method",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host for HTTP/SSE transport")  # nosec B104  # noqa: S104
    parser.add_argument("--port", type=int, default=8000, help="Port for HTTP/SSE transport")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    server_id = set_correlation_id()
    logger.info("Starting tabedit with %s transport (server %s)", args.transport, server_id)

    if args.transport == "stdio":
        mcp.run()
    else:
        mcp.run(transport=args.transport, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
