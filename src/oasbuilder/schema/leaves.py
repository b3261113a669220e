"""Primitive schema nodes: string, boolean, date, number and string enum."""

import re
from dataclasses import dataclass, replace
from typing import Any

from oasbuilder.context import BuildContext
from oasbuilder.schema.base import Schema


@dataclass(frozen=True)
class StringNode(Schema):
    _min_length: int | None = None
    _max_length: int | None = None
    _pattern: str | None = None

    def min(self, length: int) -> "StringNode":
        return replace(self, _min_length=length)

    def max(self, length: int) -> "StringNode":
        return replace(self, _max_length=length)

    def pattern(self, regex: "str | re.Pattern[str]") -> "StringNode":
        """Restrict values to *regex*; compiled patterns contribute their source."""
        source = regex.pattern if isinstance(regex, re.Pattern) else regex
        return replace(self, _pattern=source)

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {
            "type": "string",
            "minLength": self._min_length,
            "maxLength": self._max_length,
            "pattern": self._pattern,
        }


@dataclass(frozen=True)
class BooleanNode(Schema):
    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {"type": "boolean"}


@dataclass(frozen=True)
class DateNode(Schema):
    _iso: bool = False

    def iso(self) -> "DateNode":
        """Mark the value as an ISO 8601 timestamp (``format: date-time``)."""
        return replace(self, _iso=True)

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {"type": "string", "format": "date-time" if self._iso else None}


@dataclass(frozen=True)
class NumberNode(Schema):
    _minimum: float | None = None
    _maximum: float | None = None
    _default: float | None = None

    def min(self, value: float) -> "NumberNode":
        return replace(self, _minimum=value)

    def max(self, value: float) -> "NumberNode":
        return replace(self, _maximum=value)

    def default(self, value: float) -> "NumberNode":
        return replace(self, _default=value)

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {
            "type": "number",
            "minimum": self._minimum,
            "maximum": self._maximum,
            "default": self._default,
        }


@dataclass(frozen=True)
class EnumNode(Schema):
    """A string restricted to an ordered set of allowed values."""

    _values: tuple[str, ...] = ()

    @property
    def values(self) -> tuple[str, ...]:
        return self._values

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {"type": "string", "enum": list(self._values)}
