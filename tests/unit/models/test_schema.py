"""Tests for schema text parsing and formatting."""

import pytest

from tabedit.exceptions import InvalidLimiterError
from tabedit.models.schema import SCHEMA_HEADER, SchemaEntry, format_schema, parse_schema
from tabedit.models.value import Value, ValueType


class TestParseSchema:
    """Test parsing schema files."""

    def test_parse_entries(self) -> None:
        text = (
            "column,type,default,variant,pattern\n"
            "age,number,0,,\n"
            "status,text,open,open closed,\n"
        )
        entries = parse_schema(text)
        assert [entry.column for entry in entries] == ["age", "status"]
        assert entries[0].to_limiter().value_type is ValueType.NUMBER
        assert entries[1].to_limiter().variants == [Value.text("open"), Value.text("closed")]

    def test_header_only(self) -> None:
        assert parse_schema("column,type,default,variant,pattern\n") == []

    def test_empty_text(self) -> None:
        assert parse_schema("") == []

    def test_wrong_field_count(self) -> None:
        with pytest.raises(InvalidLimiterError):
            parse_schema("column,type\nage,number\n")

    def test_quoted_pattern_with_comma(self) -> None:
        text = 'column,type,default,variant,pattern\ncode,text,,,"^[a-z]{2,3}$"\n'
        entry = parse_schema(text)[0]
        assert entry.pattern == "^[a-z]{2,3}$"


class TestFormatSchema:
    """Test rendering schema entries."""

    def test_header_line(self) -> None:
        assert format_schema([]).splitlines() == [",".join(SCHEMA_HEADER)]

    def test_format_then_parse(self) -> None:
        entries = [SchemaEntry(column="age", type="number", default="1", variants="1 2")]
        assert parse_schema(format_schema(entries)) == entries
