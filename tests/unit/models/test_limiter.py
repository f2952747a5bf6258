"""Tests for column limiters."""

import pytest

from tabedit.exceptions import InvalidLimiterError, TypeMismatchError
from tabedit.models.limiter import ValueLimiter
from tabedit.models.value import Value, ValueType


class TestValueLimiterQualify:
    """Test qualification rules."""

    def test_unrestricted_limiter_checks_type_only(self) -> None:
        limiter = ValueLimiter(ValueType.NUMBER)
        assert limiter.is_unrestricted()
        assert limiter.qualify(Value.number(9))
        assert not limiter.qualify(Value.text("9"))

    def test_variants_take_precedence_over_pattern(self) -> None:
        limiter = ValueLimiter(
            ValueType.TEXT,
            variants=[Value.text("red"), Value.text("green")],
            pattern="^z",
        )
        assert limiter.qualify(Value.text("red"))
        assert not limiter.qualify(Value.text("zebra"))

    def test_pattern_is_searched_not_anchored(self) -> None:
        limiter = ValueLimiter(ValueType.TEXT, pattern="[0-9]+")
        assert limiter.qualify(Value.text("abc123"))
        assert not limiter.qualify(Value.text("abc"))

    def test_default_must_qualify(self) -> None:
        with pytest.raises(InvalidLimiterError):
            ValueLimiter(ValueType.TEXT, default=Value.text("blue"), variants=[Value.text("red")])

    def test_variants_must_match_type(self) -> None:
        with pytest.raises(InvalidLimiterError):
            ValueLimiter(ValueType.NUMBER, variants=[Value.text("one")])

    def test_invalid_pattern(self) -> None:
        with pytest.raises(InvalidLimiterError):
            ValueLimiter(ValueType.TEXT, pattern="([a-z")


class TestValueLimiterFromLine:
    """Test building limiters from attribute tokens."""

    def test_full_line(self) -> None:
        limiter = ValueLimiter.from_line(["number", "2", "1 2 3", ""])
        assert limiter.value_type is ValueType.NUMBER
        assert limiter.default == Value.number(2)
        assert limiter.variants == [Value.number(1), Value.number(2), Value.number(3)]
        assert limiter.pattern is None

    def test_empty_type_means_text(self) -> None:
        limiter = ValueLimiter.from_line(["", "", "", ""])
        assert limiter.value_type is ValueType.TEXT
        assert limiter.is_unrestricted()

    def test_wrong_arity(self) -> None:
        with pytest.raises(InvalidLimiterError):
            ValueLimiter.from_line(["text", "", ""])

    def test_non_numeric_variant_for_number(self) -> None:
        with pytest.raises(TypeMismatchError):
            ValueLimiter.from_line(["number", "", "1 two", ""])

    def test_to_line_round_trip(self) -> None:
        line = ["text", "a", "a b", "^[ab]$"]
        assert ValueLimiter.from_line(line).to_line() == line
        assert ValueLimiter.from_line(line) == ValueLimiter.from_line(line)


class TestValueLimiterConvert:
    """Test re-typing values for a limiter."""

    def test_convert_text_to_number(self) -> None:
        limiter = ValueLimiter(ValueType.NUMBER)
        assert limiter.convert(Value.text("12")) == Value.number(12)
        assert limiter.convert(Value.text("twelve")) is None

    def test_convert_number_to_text(self) -> None:
        limiter = ValueLimiter(ValueType.TEXT)
        assert limiter.convert(Value.number(12)) == Value.text("12")

    def test_str_lists_attributes(self) -> None:
        limiter = ValueLimiter.from_line(["text", "x", "x y", ""])
        assert str(limiter) == "type : text\ndefault : x\nvariants : x y\npattern : "
