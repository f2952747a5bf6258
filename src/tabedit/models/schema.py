"""Schema entries and their delimited text form.

A schema holds one line per column::

    column,type,default,variant,pattern
    age,number,0,,
    grade,text,,a b c,
"""

from __future__ import annotations

import io

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import InvalidLimiterError
from .limiter import ValueLimiter

SCHEMA_HEADER = ["column", "type", "default", "variant", "pattern"]


class SchemaEntry(BaseModel):
    """Limiter attributes for one column."""

    model_config = ConfigDict(extra="forbid")

    column: str = Field(description="Column name or position")
    type: str = Field(default="text", description="Value type (number or text)")
    default: str = Field(default="", description="Default value, empty when unset")
    variants: str = Field(default="", description="Space or comma separated variants")
    pattern: str = Field(default="", description="Regular expression, empty when unset")

    @classmethod
    def from_limiter(cls, column: str, limiter: ValueLimiter) -> SchemaEntry:
        type_name, default, variants, pattern = limiter.to_line()
        return cls(
            column=column, type=type_name, default=default, variants=variants, pattern=pattern
        )

    def to_limiter(self) -> ValueLimiter:
        return ValueLimiter.from_line([self.type, self.default, self.variants, self.pattern])

    def to_record(self) -> list[str]:
        return [self.column, self.type, self.default, self.variants, self.pattern]


def parse_schema(text: str) -> list[SchemaEntry]:
    """Parse schema text. The first line is always treated as the header."""
    if not text.strip():
        return []
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            header=0,
        ).fillna("")
    except (pd.errors.ParserError, ValueError) as e:
        raise InvalidLimiterError(f"Schema text could not be parsed: {e}") from e

    if len(df.columns) != len(SCHEMA_HEADER):
        raise InvalidLimiterError(
            f"Schema needs {len(SCHEMA_HEADER)} fields ({','.join(SCHEMA_HEADER)}) "
            f"but has {len(df.columns)}"
        )

    return [
        SchemaEntry(
            column=name.strip(), type=type_name, default=default, variants=variants, pattern=pattern
        )
        for name, type_name, default, variants, pattern in df.itertuples(index=False, name=None)
    ]


def format_schema(entries: list[SchemaEntry]) -> str:
    """Render schema entries with the header line."""
    df = pd.DataFrame([entry.to_record() for entry in entries], columns=SCHEMA_HEADER)
    return df.to_csv(index=False, lineterminator="\n")
