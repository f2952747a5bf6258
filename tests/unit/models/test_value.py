"""Tests for typed cell values."""

import pytest

from tabedit.exceptions import TypeMismatchError
from tabedit.models.value import Value, ValueType


class TestValueType:
    """Test value type parsing and zero values."""

    def test_from_str_ignores_case(self) -> None:
        assert ValueType.from_str("Number") is ValueType.NUMBER
        assert ValueType.from_str("TEXT") is ValueType.TEXT

    def test_from_str_rejects_unknown(self) -> None:
        with pytest.raises(TypeMismatchError):
            ValueType.from_str("float")

    def test_zero_values(self) -> None:
        assert ValueType.NUMBER.zero_value() == Value.number(0)
        assert ValueType.TEXT.zero_value() == Value.text("")

    def test_display_name(self) -> None:
        assert str(ValueType.TEXT) == "Text"


class TestValueParsing:
    """Test parsing text into values."""

    @pytest.mark.parametrize(("text", "expected"), [("42", 42), ("-7", -7), ("+3", 3)])
    def test_number_from_str(self, text: str, expected: int) -> None:
        value = Value.from_str(text, ValueType.NUMBER)
        assert value.get_type() is ValueType.NUMBER
        assert value.data == expected

    @pytest.mark.parametrize("text", ["", "4.2", " 42", "42\n", "abc", "1e3"])
    def test_number_from_str_rejects(self, text: str) -> None:
        with pytest.raises(TypeMismatchError):
            Value.from_str(text, ValueType.NUMBER)

    def test_text_from_str_always_succeeds(self) -> None:
        value = Value.from_str("42", ValueType.TEXT)
        assert value == Value.text("42")
        assert value != Value.number(42)

    def test_number_rejects_bool(self) -> None:
        with pytest.raises(TypeMismatchError):
            Value.number(True)

    def test_str_renders_data(self) -> None:
        assert str(Value.number(-5)) == "-5"
        assert str(Value.text("hello")) == "hello"
