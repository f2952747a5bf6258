"""Custom exceptions for tabedit."""

from __future__ import annotations

from typing import Any


class TabeditError(Exception):
    """Base exception for all tabedit errors."""

    error_code = "TABEDIT_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize with a message, an optional error code and error details."""
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for tool responses."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


# ============================================================================
# TABLE ERRORS
# ============================================================================


class OutOfRangeError(TabeditError):
    """Row or column index exceeds the current bounds."""

    error_code = "OUT_OF_RANGE"

    def __init__(self, index: int, count: int, axis: str = "row"):
        """Initialize with the offending index and the current count."""
        super().__init__(
            f"{axis.capitalize()} index {index} is out of range ({count} {axis}s)",
            details={"index": index, "count": count, "axis": axis},
        )
        self.index = index
        self.count = count
        self.axis = axis


class UnknownColumnError(TabeditError):
    """A column token resolves neither to a name nor to a position."""

    error_code = "UNKNOWN_COLUMN"

    def __init__(self, column: str, available_columns: list[str] | None = None):
        """Initialize with the missing column and the columns that do exist."""
        available_columns = available_columns or []
        super().__init__(
            f"Column '{column}' not found. Available columns: {available_columns}",
            details={"missing_column": column, "available_columns": available_columns},
        )
        self.column = column
        self.available_columns = available_columns


class TypeMismatchError(TabeditError):
    """Text cannot be parsed as a type, or a value has the wrong type."""

    error_code = "TYPE_MISMATCH"


class ConstraintViolationError(TabeditError):
    """A value fails its column's limiter."""

    error_code = "CONSTRAINT_VIOLATION"

    def __init__(self, column: str, value: Any, reason: str | None = None):
        """Initialize with the column name and the rejected value."""
        message = f"Value '{value}' does not qualify for column '{column}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"column": column, "value": str(value)})
        self.column = column
        self.value = value


class RowLengthMismatchError(TabeditError):
    """A supplied row does not match the column count."""

    error_code = "ROW_LENGTH_MISMATCH"

    def __init__(self, given: int, expected: int):
        """Initialize with the given and expected value counts."""
        super().__init__(
            f"Row has {given} values but the table has {expected} columns",
            details={"given": given, "expected": expected},
        )
        self.given = given
        self.expected = expected


class InvalidColumnNameError(TabeditError):
    """A column name is already taken or looks like a position."""

    error_code = "INVALID_COLUMN_NAME"

    def __init__(self, name: str, reason: str):
        """Initialize with the rejected name and why it was rejected."""
        super().__init__(f"Invalid column name '{name}': {reason}", details={"name": name})
        self.name = name


class InvalidLimiterError(TabeditError):
    """A limiter cannot be constructed from its attributes."""

    error_code = "INVALID_LIMITER"


# ============================================================================
# I/O, COMMAND AND SESSION ERRORS
# ============================================================================


class TabeditIOError(TabeditError):
    """File system failure wrapped with context."""

    error_code = "IO_ERROR"

    def __init__(self, description: str, path: str | None = None, cause: Exception | None = None):
        """Initialize with what was attempted and the underlying error."""
        message = description
        if cause is not None:
            message = f"{description}: {cause}"
        super().__init__(message, details={"path": path})
        self.path = path
        self.cause = cause


class CommandError(TabeditError):
    """A command is unknown or was given bad arguments."""

    error_code = "COMMAND_ERROR"


class SessionNotFoundError(TabeditError):
    """Session (page) not found."""

    error_code = "SESSION_NOT_FOUND"

    def __init__(self, session_id: str):
        """Initialize with the session ID that could not be found."""
        super().__init__(
            f"Session '{session_id}' not found", details={"session_id": session_id}
        )
        self.session_id = session_id


class PageOperationError(TabeditError):
    """A page could not be added, removed or selected."""

    error_code = "PAGE_OPERATION"
