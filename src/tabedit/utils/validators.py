"""Validation utilities for tabedit."""

from __future__ import annotations

from pathlib import Path

from ..models.table import DEFAULT_DELIMITER

VALID_EXTENSIONS = [".csv", ".tsv", ".txt", ".dat"]


def validate_file_path(
    file_path: str, must_exist: bool = True, extensions: list[str] | None = None
) -> tuple[bool, str]:
    """Validate a file path for security and existence."""
    try:
        path = Path(file_path).resolve()

        # Security: Check for path traversal attempts
        if ".." in Path(file_path).parts:
            return False, "Path traversal not allowed"

        if must_exist and not path.exists():
            return False, f"File not found: {file_path}"

        if must_exist and not path.is_file():
            return False, f"Not a file: {file_path}"

        allowed = extensions if extensions is not None else VALID_EXTENSIONS
        if path.suffix.lower() not in allowed:
            return False, f"Invalid file extension. Supported: {allowed}"

        return True, str(path)

    except OSError as e:
        return False, f"Error validating path: {e!s}"


def is_valid_cell_text(text: str, delimiter: str = DEFAULT_DELIMITER) -> bool:
    """Check that text typed as a cell value cannot break a delimited line."""
    return delimiter not in text and "\n" not in text and "\r" not in text
