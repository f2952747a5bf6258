"""In-memory tabular container with constraint-checked mutation.

A :class:`Table` owns an ordered list of :class:`Column` definitions and an ordered
list of :class:`Row` records. Rows are keyed by column name; every structural
operation keeps each row's key set equal to the set of column names.

Every index is 0-based. Mutations that take a ``panic`` flag either reject a value
that does not qualify for its column (``panic=True``) or replace it with the column
default (``panic=False``).
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..exceptions import (
    ConstraintViolationError,
    InvalidColumnNameError,
    OutOfRangeError,
    RowLengthMismatchError,
    TabeditError,
    TypeMismatchError,
    UnknownColumnError,
)
from .limiter import ValueLimiter
from .schema import SchemaEntry
from .value import NUMBER_PATTERN, Value, ValueType

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ","

CellInput = Value | str


@dataclass
class Column:
    """Named, typed field definition shared by all rows."""

    name: str
    column_type: ValueType = ValueType.TEXT
    limiter: ValueLimiter | None = None

    def __post_init__(self) -> None:
        if self.limiter is None:
            self.limiter = ValueLimiter(self.column_type)
        else:
            self.column_type = self.limiter.value_type

    def rename(self, new_name: str) -> str:
        """Rename the column and return the previous name."""
        old_name, self.name = self.name, new_name
        return old_name

    def set_limiter(self, limiter: ValueLimiter) -> None:
        """Replace the limiter and adopt its type. Existing cells are not checked."""
        self.limiter = limiter
        self.column_type = limiter.value_type

    def get_default_value(self) -> Value:
        """Return the explicit default, else the first variant, else the zero value."""
        assert self.limiter is not None
        if self.limiter.default is not None:
            return self.limiter.default
        if self.limiter.variants:
            return self.limiter.variants[0]
        return self.column_type.zero_value()

    def qualify(self, value: Value) -> bool:
        """Check a value against this column's limiter."""
        assert self.limiter is not None
        return self.limiter.qualify(value)

    def parse(self, value: CellInput) -> Value:
        """Turn raw text into a value of this column's type."""
        if isinstance(value, Value):
            return value
        return Value.from_str(value, self.column_type)


@dataclass
class Row:
    """One record, keyed by column name."""

    values: dict[str, Value] = field(default_factory=dict)

    def insert_value(self, key: str, value: Value) -> None:
        self.values[key] = value

    def get_value(self, key: str) -> Value | None:
        return self.values.get(key)

    def update_value(self, key: str, value: Value) -> None:
        """Overwrite an existing entry. A missing key is an internal error."""
        if key not in self.values:
            raise KeyError(key)
        self.values[key] = value

    def remove_value(self, key: str) -> Value | None:
        return self.values.pop(key, None)

    def rename_key(self, old_key: str, new_key: str) -> None:
        if old_key in self.values:
            self.values[new_key] = self.values.pop(old_key)

    def to_ordered_values(self, columns: Sequence[Column]) -> list[Value]:
        """Project the row into column order."""
        return [self.values[column.name] for column in columns]

    def to_line(self, columns: Sequence[Column], delimiter: str = DEFAULT_DELIMITER) -> str:
        return delimiter.join(str(value) for value in self.to_ordered_values(columns))


@dataclass
class Table:
    """Ordered columns and ordered rows."""

    columns: list[Column] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    # ========================================================================
    # CONSTRUCTION
    # ========================================================================

    @classmethod
    def from_records(cls, header: Sequence[str], records: Iterable[Sequence[str]]) -> Table:
        """Build a table of text columns from a header and parsed records."""
        table = cls()
        for index, name in enumerate(header):
            table.insert_column(index, name)
        for record in records:
            table.insert_row(table.row_count, [Value.text(item) for item in record])
        return table

    def clone(self) -> Table:
        """Return a deep copy sharing no state with this table."""
        return copy.deepcopy(self)

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def is_empty(self) -> bool:
        return not self.columns

    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def try_get_column_index(self, token: str | int) -> int | None:
        """Resolve a column name or a position to a column index.

        Integer-like tokens are positions and must be within bounds.
        """
        if isinstance(token, int):
            return token if 0 <= token < self.column_count else None
        if NUMBER_PATTERN.fullmatch(token):
            index = int(token)
            return index if 0 <= index < self.column_count else None
        for index, column in enumerate(self.columns):
            if column.name == token:
                return index
        return None

    def get_column_index(self, token: str | int) -> int:
        index = self.try_get_column_index(token)
        if index is None:
            raise UnknownColumnError(str(token), self.column_names())
        return index

    def get_column(self, index: int) -> Column:
        self._check_index(index, self.column_count, "column")
        return self.columns[index]

    def get_row(self, index: int) -> Row:
        self._check_index(index, self.row_count, "row")
        return self.rows[index]

    def get_row_values(self, index: int) -> list[Value]:
        return self.get_row(index).to_ordered_values(self.columns)

    def get_cell(self, row_index: int, column_index: int) -> Value | None:
        """Read one cell, or None when either index is out of range."""
        if not 0 <= row_index < self.row_count or not 0 <= column_index < self.column_count:
            return None
        return self.rows[row_index].get_value(self.columns[column_index].name)

    # ========================================================================
    # COLUMN OPERATIONS
    # ========================================================================

    def insert_column(
        self,
        index: int,
        name: str,
        column_type: ValueType = ValueType.TEXT,
        limiter: ValueLimiter | None = None,
        placeholder: CellInput | None = None,
    ) -> Column:
        """Insert a column and back-fill every row with the placeholder or default."""
        self._check_index(index, self.column_count + 1, "column")
        self._validate_column_name(name)

        column = Column(name, column_type, limiter)
        if placeholder is None:
            fill = column.get_default_value()
        else:
            fill = column.parse(placeholder)
            if not column.qualify(fill):
                raise ConstraintViolationError(name, fill, "placeholder does not qualify")

        self.columns.insert(index, column)
        for row in self.rows:
            row.insert_value(name, fill)

        logger.info("Inserted column '%s' at %s", name, index)
        return column

    def delete_column(self, index: int) -> Column:
        """Remove a column from the table and from every row."""
        self._check_index(index, self.column_count, "column")
        column = self.columns.pop(index)
        for row in self.rows:
            row.remove_value(column.name)

        if not self.columns:
            self.rows.clear()

        logger.info("Deleted column '%s'", column.name)
        return column

    def rename_column(self, index: int, new_name: str) -> str:
        """Rename a column and every row key. Returns the previous name."""
        column = self.get_column(index)
        if new_name == column.name:
            return column.name
        self._validate_column_name(new_name)

        old_name = column.rename(new_name)
        for row in self.rows:
            row.rename_key(old_name, new_name)

        logger.info("Renamed column '%s' to '%s'", old_name, new_name)
        return old_name

    def set_column(self, index: int, value: CellInput, panic: bool = True) -> None:
        """Write the same value into every row of a column."""
        column = self.get_column(index)
        checked = self._checked_value(column, column.parse(value), panic)
        for row in self.rows:
            row.update_value(column.name, checked)

    def move_column(self, src: int, dst: int) -> None:
        self._check_index(src, self.column_count, "column")
        self._check_index(dst, self.column_count, "column")
        _rotate(self.columns, src, dst)

    def set_limiter(self, index: int, limiter: ValueLimiter, panic: bool = True) -> None:
        """Attach a limiter and re-validate the existing cells of the column.

        Every cell is converted to the limiter's type and qualified. A failing cell
        raises before anything changes when ``panic`` is set, and otherwise is
        replaced by the new default.
        """
        column = self.get_column(index)

        converted: list[Value | None] = []
        for row_index, row in enumerate(self.rows):
            current = row.values[column.name]
            new_value = limiter.convert(current)
            if new_value is None or not limiter.qualify(new_value):
                if panic:
                    raise ConstraintViolationError(
                        column.name, current, f"row {row_index} does not fit the new limiter"
                    )
                new_value = None
            converted.append(new_value)

        column.set_limiter(limiter)
        default = column.get_default_value()
        for row, new_value in zip(self.rows, converted, strict=True):
            row.update_value(column.name, default if new_value is None else new_value)

        logger.info("Set limiter on column '%s' (%s)", column.name, limiter.value_type.value)

    # ========================================================================
    # ROW OPERATIONS
    # ========================================================================

    def insert_row(
        self, index: int, values: Sequence[CellInput] | None = None, panic: bool = True
    ) -> Row:
        """Insert a row. Missing values fall back to the column defaults."""
        self._check_index(index, self.row_count + 1, "row")
        if self.is_empty():
            raise TabeditError("Cannot insert a row into a table without columns")

        if values is None:
            checked = [column.get_default_value() for column in self.columns]
        else:
            checked = self._checked_row(values, panic)

        row = Row({column.name: value for column, value in zip(self.columns, checked, strict=True)})
        self.rows.insert(index, row)
        return row

    def delete_row(self, index: int) -> Row | None:
        """Remove and return a row, or None when the index is out of range."""
        if not 0 <= index < self.row_count:
            return None
        return self.rows.pop(index)

    def set_row(self, index: int, values: Sequence[CellInput], panic: bool = True) -> None:
        """Overwrite a whole row. Nothing is written unless every value passes."""
        row = self.get_row(index)
        checked = self._checked_row(values, panic)
        for column, value in zip(self.columns, checked, strict=True):
            row.update_value(column.name, value)

    def edit_row(
        self, index: int, values: Sequence[CellInput | None], panic: bool = True
    ) -> None:
        """Overwrite selected cells of a row; ``None`` leaves a cell unchanged."""
        row = self.get_row(index)
        if len(values) != self.column_count:
            raise RowLengthMismatchError(len(values), self.column_count)

        pending: list[tuple[str, Value]] = []
        for column, value in zip(self.columns, values, strict=True):
            if value is None:
                continue
            pending.append((column.name, self._checked_value(column, column.parse(value), panic)))

        for name, value in pending:
            row.update_value(name, value)

    def set_cell(
        self, row_index: int, column_index: int, value: CellInput, panic: bool = True
    ) -> None:
        """Write one cell; text is parsed against the column type first."""
        row = self.get_row(row_index)
        column = self.get_column(column_index)
        row.update_value(column.name, self._checked_value(column, column.parse(value), panic))

    def move_row(self, src: int, dst: int) -> None:
        self._check_index(src, self.row_count, "row")
        self._check_index(dst, self.row_count, "row")
        _rotate(self.rows, src, dst)

    # ========================================================================
    # SCHEMA
    # ========================================================================

    def export_schema(self) -> list[SchemaEntry]:
        """Describe every column limiter as a schema entry."""
        entries = []
        for column in self.columns:
            assert column.limiter is not None
            entries.append(SchemaEntry.from_limiter(column.name, column.limiter))
        return entries

    def apply_schema(
        self, entries: Iterable[SchemaEntry], panic: bool = True, fail_fast: bool = False
    ) -> list[TabeditError]:
        """Apply schema entries column by column.

        A failing entry leaves its column untouched and does not stop the remaining
        entries unless ``fail_fast`` is set. Returns the errors of failed entries.
        """
        errors: list[TabeditError] = []
        for entry in entries:
            try:
                index = self.get_column_index(entry.column)
                self.set_limiter(index, entry.to_limiter(), panic)
            except TabeditError as e:
                if fail_fast:
                    raise
                logger.warning("Schema entry for '%s' not applied: %s", entry.column, e.message)
                errors.append(e)
        return errors

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_records(self) -> list[list[str]]:
        """Rows as lists of text in column order."""
        return [[str(value) for value in row.to_ordered_values(self.columns)] for row in self.rows]

    def to_string(self, delimiter: str = DEFAULT_DELIMITER) -> str:
        """Header line followed by one line per row, without a trailing newline."""
        if self.is_empty():
            return ""
        lines = [delimiter.join(self.column_names())]
        lines.extend(row.to_line(self.columns, delimiter) for row in self.rows)
        return "\n".join(lines)

    # ========================================================================
    # HELPERS
    # ========================================================================

    @staticmethod
    def _check_index(index: int, count: int, axis: str) -> None:
        if not 0 <= index < count:
            raise OutOfRangeError(index, count, axis)

    def _validate_column_name(self, name: str) -> None:
        if not name:
            raise InvalidColumnNameError(name, "name cannot be empty")
        if NUMBER_PATTERN.fullmatch(name):
            raise InvalidColumnNameError(name, "integer names are reserved for positions")
        if name in self.column_names():
            raise InvalidColumnNameError(name, "a column with this name already exists")

    def _checked_value(self, column: Column, value: Value, panic: bool) -> Value:
        if column.qualify(value):
            return value
        if not panic:
            return column.get_default_value()
        if value.get_type() is not column.column_type:
            raise TypeMismatchError(
                f"Column '{column.name}' expects {column.column_type.value} "
                f"but got {value.get_type().value} '{value}'",
                details={"column": column.name, "value": str(value)},
            )
        raise ConstraintViolationError(column.name, value)

    def _checked_row(self, values: Sequence[CellInput], panic: bool) -> list[Value]:
        if len(values) != self.column_count:
            raise RowLengthMismatchError(len(values), self.column_count)
        return [
            self._checked_value(column, column.parse(value), panic)
            for column, value in zip(self.columns, values, strict=True)
        ]


def _rotate(items: list, src: int, dst: int) -> None:
    """Carry ``items[src]`` to ``dst`` by adjacent swaps."""
    step = 1 if src < dst else -1
    for i in range(src, dst, step):
        items[i], items[i + step] = items[i + step], items[i]
