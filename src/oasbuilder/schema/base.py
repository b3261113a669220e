"""Base value type for JSON-Schema-producing nodes.

A schema node is a frozen dataclass. Every modifier (``required()``,
``description()``, ...) returns a new node built with
:func:`dataclasses.replace`, so a node can be shared between routes and
refined independently without affecting the original.

Variants implement ``_own_fields`` (the keys specific to their kind) and,
when they contain other nodes, ``children``. Serialization goes through
:meth:`Schema.to_schema`, which takes the :class:`BuildContext` of the
current build.
"""

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Mapping

from pydantic_core import core_schema

from oasbuilder.context import BuildContext

if TYPE_CHECKING:
    from oasbuilder.schema.composite import FixedNode

# Characters allowed in a component name; anything else becomes "_".
_LABEL_UNSAFE_RE = re.compile(r"[^A-Za-z0-9\-._]")


def ignore_none(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *fields* without the keys whose value is ``None``."""
    return {key: value for key, value in fields.items() if value is not None}


def normalize_label(name: str) -> str:
    """Turn an arbitrary label into a valid ``components.schemas`` key."""
    return _LABEL_UNSAFE_RE.sub("_", name)


def ensure_context(ctx: BuildContext | None) -> BuildContext:
    return ctx if ctx is not None else BuildContext()


@dataclass(frozen=True)
class Schema:
    """Common attributes and modifiers of every schema node."""

    _description: str | None = None
    _example: Any = None
    _required: bool = False
    _deprecated: bool = False
    _explode: bool = False
    _examples: Mapping[str, Mapping[str, Any]] | None = None

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        # Route models hold nodes as opaque values, never re-validated.
        return core_schema.is_instance_schema(cls)

    # --- modifiers ---

    def description(self, text: str):
        return replace(self, _description=text)

    def example(self, value: Any):
        return replace(self, _example=value)

    def required(self):
        return replace(self, _required=True)

    def deprecated(self):
        return replace(self, _deprecated=True)

    def explode(self, value: bool = True):
        return replace(self, _explode=value)

    def examples(self, examples: Mapping[str, Mapping[str, Any]]):
        """Attach named examples, each a mapping with ``value`` and optional
        ``summary``/``description``.
        """
        return replace(
            self, _examples={name: ignore_none(entry) for name, entry in examples.items()}
        )

    def label(self, name: str) -> "FixedNode":
        """Promote this node to a named component."""
        from oasbuilder.schema.composite import FixedNode

        return FixedNode(
            _required=self._required,
            _explode=self._explode,
            _label=normalize_label(name),
            _wrapped=self,
        )

    # --- accessors ---

    @property
    def is_required(self) -> bool:
        return self._required

    @property
    def explodes(self) -> bool:
        return self._explode

    @property
    def named_examples(self) -> dict[str, dict[str, Any]] | None:
        if not self._examples:
            return None
        return {name: dict(entry) for name, entry in self._examples.items()}

    def children(self) -> tuple["Schema", ...]:
        """Nodes directly contained in this one."""
        return ()

    # --- serialization ---

    def to_schema(self, ctx: BuildContext | None = None) -> dict[str, Any]:
        """Render this node as a JSON Schema fragment.

        Keys are emitted in a stable order (``type``, ``format``,
        ``description``, ``example``, kind-specific keys, ``deprecated``) and
        absent values are left out.
        """
        own = self._own_fields(ensure_context(ctx))
        return ignore_none(
            {
                "type": own.pop("type", None),
                "format": own.pop("format", None),
                "description": self._description,
                "example": self._example,
                **own,
                "deprecated": True if self._deprecated else None,
            }
        )

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        raise NotImplementedError(f"{type(self).__name__} does not render a schema")
