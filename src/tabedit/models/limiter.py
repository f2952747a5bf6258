"""Per-column value constraints."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..exceptions import InvalidLimiterError, TypeMismatchError
from .value import Value, ValueType

logger = logging.getLogger(__name__)

# type, default, variants, pattern
LIMITER_ATTRIBUTE_LEN = 4

VARIANT_SEPARATOR = re.compile(r"[\s,]+")


class ValueLimiter:
    """Constraint attached to a column.

    A value qualifies when its type matches the declared type and, if set, it is
    one of the variants or, failing that, the pattern matches somewhere in its text.
    Variants take precedence over the pattern.
    """

    def __init__(
        self,
        value_type: ValueType = ValueType.TEXT,
        default: Value | None = None,
        variants: list[Value] | None = None,
        pattern: re.Pattern[str] | str | None = None,
    ):
        """Initialize a limiter, rejecting a default that does not qualify."""
        self.value_type = value_type
        self.default = default
        self.variants = list(variants) if variants else None
        if isinstance(pattern, str):
            pattern = _compile_pattern(pattern)
        self.pattern = pattern

        if self.variants:
            for variant in self.variants:
                if variant.get_type() is not value_type:
                    raise InvalidLimiterError(
                        f"Variant '{variant}' is not of type {value_type}"
                    )

        if default is not None and not self.qualify(default):
            raise InvalidLimiterError(
                f"Default value '{default}' does not qualify for its own limiter",
                details={"default": str(default)},
            )

    @classmethod
    def from_line(cls, attributes: Sequence[str]) -> ValueLimiter:
        """Build a limiter from ``[type, default, variants, pattern]`` tokens.

        Empty tokens mean the attribute is unset.
        """
        if len(attributes) != LIMITER_ATTRIBUTE_LEN:
            raise InvalidLimiterError(
                f"Limiter needs {LIMITER_ATTRIBUTE_LEN} attributes "
                f"(type, default, variants, pattern) but got {len(attributes)}"
            )

        type_token, default_token, variants_token, pattern_token = (
            token.strip() for token in attributes
        )
        value_type = ValueType.from_str(type_token) if type_token else ValueType.TEXT

        default = Value.from_str(default_token, value_type) if default_token else None

        variants = None
        if variants_token:
            variants = [
                Value.from_str(item, value_type)
                for item in VARIANT_SEPARATOR.split(variants_token)
                if item
            ]

        pattern = _compile_pattern(pattern_token) if pattern_token else None
        return cls(value_type, default=default, variants=variants, pattern=pattern)

    def qualify(self, value: Value) -> bool:
        """Check whether a value satisfies this limiter."""
        if value.get_type() is not self.value_type:
            return False
        if self.variants:
            return value in self.variants
        if self.pattern is not None:
            return self.pattern.search(str(value)) is not None
        return True

    def convert(self, value: Value) -> Value | None:
        """Re-type a value through its text form, or None when it cannot be parsed."""
        if value.get_type() is self.value_type:
            return value
        try:
            return Value.from_str(str(value), self.value_type)
        except TypeMismatchError:
            return None

    def is_unrestricted(self) -> bool:
        """Return True when only the type is checked."""
        return self.default is None and not self.variants and self.pattern is None

    def to_line(self) -> list[str]:
        """Return the ``[type, default, variants, pattern]`` tokens of this limiter."""
        return [
            self.value_type.value,
            "" if self.default is None else str(self.default),
            " ".join(str(v) for v in self.variants) if self.variants else "",
            self.pattern.pattern if self.pattern is not None else "",
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueLimiter):
            return NotImplemented
        return self.to_line() == other.to_line()

    def __repr__(self) -> str:
        return (
            f"ValueLimiter(value_type={self.value_type.value!r}, default={self.default!r}, "
            f"variants={self.variants!r}, pattern={self.to_line()[3]!r})"
        )

    def __str__(self) -> str:
        type_name, default, variants, pattern = self.to_line()
        return (
            f"type : {type_name}\n"
            f"default : {default}\n"
            f"variants : {variants}\n"
            f"pattern : {pattern}"
        )


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.debug("Rejected limiter pattern %r: %s", pattern, e)
        raise InvalidLimiterError(
            f"Pattern '{pattern}' is not a valid regular expression: {e}",
            details={"pattern": pattern},
        ) from e
