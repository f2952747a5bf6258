"""Typed cell values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..exceptions import TypeMismatchError

NUMBER_PATTERN = re.compile(r"[+-]?[0-9]+")


class ValueType(str, Enum):
    """Declared type of a column or a value."""

    NUMBER = "number"
    TEXT = "text"

    @classmethod
    def from_str(cls, name: str) -> ValueType:
        """Parse a type name, ignoring case."""
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            raise TypeMismatchError(
                f"'{name}' is not a valid type, expected 'number' or 'text'"
            ) from e

    def zero_value(self) -> Value:
        """Return the empty value of this type."""
        if self is ValueType.NUMBER:
            return Value.number(0)
        return Value.text("")

    def __str__(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Value:
    """A single cell: either a number or a piece of text."""

    value_type: ValueType
    data: int | str

    @classmethod
    def number(cls, data: int) -> Value:
        """Create a number value."""
        if isinstance(data, bool) or not isinstance(data, int):
            raise TypeMismatchError(f"'{data}' is not an integer")
        return cls(ValueType.NUMBER, data)

    @classmethod
    def text(cls, data: str) -> Value:
        """Create a text value."""
        return cls(ValueType.TEXT, str(data))

    @classmethod
    def from_str(cls, text: str, value_type: ValueType) -> Value:
        """Parse text into a value of the requested type.

        Text always succeeds. A number must be a signed decimal integer without
        surrounding whitespace.
        """
        if value_type is ValueType.TEXT:
            return cls.text(text)
        if not NUMBER_PATTERN.fullmatch(text):
            raise TypeMismatchError(
                f"'{text}' is not a valid number", details={"text": text}
            )
        return cls.number(int(text))

    def get_type(self) -> ValueType:
        """Return the runtime type of the value."""
        return self.value_type

    def __str__(self) -> str:
        return str(self.data)
