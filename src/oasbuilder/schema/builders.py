"""Entry points of the schema DSL.

Import the module under a short name and chain modifiers::

    from oasbuilder.schema import builders as oas

    user = oas.object(
        {
            "id": oas.string().required(),
            "age": oas.number().min(0),
            "roles": oas.array().items(oas.allow("admin", "member")),
        }
    ).label("User")
"""

from enum import Enum
from typing import Mapping

from oasbuilder.schema.base import Schema
from oasbuilder.schema.composite import (
    AnyOfNode,
    ArrayNode,
    ExternalReferenceNode,
    FixedNode,
    ObjectNode,
    OneOfNode,
)
from oasbuilder.schema.leaves import BooleanNode, DateNode, EnumNode, NumberNode, StringNode

__all__ = [
    "allow",
    "any_of",
    "array",
    "boolean",
    "date",
    "number",
    "object",
    "one_of",
    "ref",
    "string",
    "Schema",
    "FixedNode",
    "ObjectNode",
]


def string() -> StringNode:
    return StringNode()


def boolean() -> BooleanNode:
    return BooleanNode()


def date() -> DateNode:
    return DateNode()


def number() -> NumberNode:
    return NumberNode()


def allow(*values: "str | type[Enum]") -> EnumNode:
    """Build a string enum from literal values or from a string-valued Enum class.

    Raises:
        TypeError: If any allowed value is not a string.
    """
    if len(values) == 1 and isinstance(values[0], type) and issubclass(values[0], Enum):
        values = tuple(member.value for member in values[0])
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"Only string enum values are supported, got {value!r}")
    return EnumNode(_values=tuple(values))


def object(fields: Mapping[str, Schema] | None = None) -> ObjectNode:  # noqa: A001
    return ObjectNode(_fields=dict(fields or {}))


def array() -> ArrayNode:
    return ArrayNode()


def ref(file: str, path: str) -> ExternalReferenceNode:
    """Reference the schema found at JSON pointer *path* inside *file*.

    *file* is a filesystem path or an ``http(s)`` URL. A leading ``#`` on
    *path* is optional.
    """
    pointer = path[1:] if path.startswith("#") else path
    return ExternalReferenceNode(_file=file, _path=pointer)


def one_of(*alternatives: Schema) -> OneOfNode:
    return OneOfNode(_alternatives=tuple(alternatives))


def any_of(*alternatives: Schema) -> AnyOfNode:
    return AnyOfNode(_alternatives=tuple(alternatives))
