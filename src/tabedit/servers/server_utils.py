"""Shared utilities for tabedit MCP servers."""

from __future__ import annotations

from ..core.session import EditorSession, get_session_manager
from ..exceptions import SessionNotFoundError
from ..models.data_models import CellValue


def get_session_data(session_id: str) -> EditorSession:
    """Get session for the given session_id.

    Raises:
        SessionNotFoundError: If the session doesn't exist
    """
    session = get_session_manager().get_session(session_id)
    if not session:
        raise SessionNotFoundError(session_id)
    return session


def to_cell_text(value: CellValue | None) -> str | None:
    """Cell input from a tool call as text, parsed later against the column type."""
    if value is None:
        return None
    return str(value)
