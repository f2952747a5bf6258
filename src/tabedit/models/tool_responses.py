"""Pydantic response models for all MCP tools."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .data_models import CellValue, ColumnInfo, SessionInfo
from .schema import SchemaEntry


class BaseToolResponse(BaseModel):
    """Base response model for all MCP tool operations."""

    success: bool = True


# =============================================================================
# SYSTEM TOOL RESPONSES
# =============================================================================


class HealthResult(BaseToolResponse):
    """Response model for system health check."""

    status: str
    version: str
    active_sessions: int
    max_sessions: int
    session_ttl_minutes: int
    memory_usage_mb: float
    history_operations_total: int
    history_capacity_per_session: int


class ServerInfoResult(BaseToolResponse):
    """Response model for server information and capabilities."""

    name: str
    version: str
    description: str
    capabilities: dict[str, list[str]]
    value_types: list[str]
    presets: list[str]
    session_timeout_minutes: int


# =============================================================================
# IO TOOL RESPONSES
# =============================================================================


class LoadResult(BaseToolResponse):
    """Response model for loading a table into a session."""

    session_id: str
    rows_affected: int
    columns_affected: list[str]
    file_path: str | None = None


class ExportResult(BaseToolResponse):
    """Response model for writing a table to a file."""

    file_path: str
    rows_exported: int


class OverwriteResult(BaseToolResponse):
    """Response model for writing a table back to its source file."""

    written: bool = Field(description="False when the session has no source file")
    file_path: str | None = None
    cached: bool = False


class TableTextResult(BaseToolResponse):
    """Response model for the delimited text of a table."""

    text: str
    row_count: int
    column_count: int


class SessionInfoResult(BaseToolResponse):
    """Response model for session metadata."""

    info: SessionInfo
    columns: list[ColumnInfo]


class SchemaResult(BaseToolResponse):
    """Response model for schema export and application."""

    entries: list[SchemaEntry]
    applied: int = 0
    errors: list[str] = Field(default_factory=list)
    file_path: str | None = None


class CloseSessionResult(BaseToolResponse):
    """Response model for closing a session."""

    session_id: str
    closed: bool


# =============================================================================
# TABLE TOOL RESPONSES
# =============================================================================


class CellValueResult(BaseToolResponse):
    """Response model for cell value lookups."""

    row_index: int
    column: str
    value: CellValue
    data_type: str


class SetCellResult(BaseToolResponse):
    """Response model for cell updates."""

    row_index: int
    column: str
    old_value: CellValue
    new_value: CellValue


class RowDataResult(BaseToolResponse):
    """Response model for row lookups."""

    row_index: int
    data: dict[str, CellValue]


class RowOperationResult(BaseToolResponse):
    """Response model for row mutations."""

    operation: str
    row_index: int
    rows_before: int
    rows_after: int
    data: dict[str, CellValue] | None = None


class ColumnOperationResult(BaseToolResponse):
    """Response model for column mutations."""

    operation: str
    column: str
    column_index: int
    columns: list[str]


class ColumnsResult(BaseToolResponse):
    """Response model for column definitions."""

    columns: list[ColumnInfo]


class LimiterResult(BaseToolResponse):
    """Response model for limiter changes."""

    column: ColumnInfo
    rows_checked: int


# =============================================================================
# HISTORY TOOL RESPONSES
# =============================================================================


class UndoRedoResult(BaseToolResponse):
    """Response model for undo and redo."""

    operation: str | None = Field(
        default=None, description="Operation type that was undone or redone"
    )
    can_undo: bool
    can_redo: bool
    history_position: int


class HistoryResult(BaseToolResponse):
    """Response model for the history listing."""

    operations: list[dict[str, Any]]
    total_operations: int
    current_position: int
    can_undo: bool
    can_redo: bool


class ClearHistoryResult(BaseToolResponse):
    """Response model for clearing history."""

    cleared: int


class ExportHistoryResult(BaseToolResponse):
    """Response model for exporting history."""

    file_path: str
    total_operations: int
