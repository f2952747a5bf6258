"""Data models for tabedit."""

from __future__ import annotations

from .data_models import CellValue, ColumnInfo, SessionInfo, describe_columns, to_cell_value
from .history_manager import DEFAULT_HISTORY_CAPACITY, HistoryManager, HistoryRecord
from .limiter import LIMITER_ATTRIBUTE_LEN, ValueLimiter
from .schema import SCHEMA_HEADER, SchemaEntry, format_schema, parse_schema
from .table import Column, Row, Table
from .value import Value, ValueType

__all__ = [
    "DEFAULT_HISTORY_CAPACITY",
    "LIMITER_ATTRIBUTE_LEN",
    "SCHEMA_HEADER",
    "CellValue",
    "Column",
    "ColumnInfo",
    "HistoryManager",
    "HistoryRecord",
    "Row",
    "SchemaEntry",
    "SessionInfo",
    "Table",
    "Value",
    "ValueLimiter",
    "ValueType",
    "describe_columns",
    "format_schema",
    "parse_schema",
    "to_cell_value",
]
