"""Schema nodes that contain or point to other schemas.

``ObjectNode`` also projects its fields into OpenAPI parameter objects and
response headers, since those are derived from an object's field map.
"""

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Mapping

from oasbuilder.context import BuildContext
from oasbuilder.exceptions import ConfigurationError
from oasbuilder.schema.base import Schema, ensure_context, ignore_none, normalize_label

COMPONENTS_SCHEMAS_POINTER = "#/components/schemas/"

PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")


def _unwrapped_schema(node: Schema, ctx: BuildContext) -> dict[str, Any]:
    # Parameters and headers cannot point at components, so labeled fields
    # are always inlined.
    if isinstance(node, FixedNode):
        return node.unwrapped_schema(ctx)
    return node.to_schema(ctx)


@dataclass(frozen=True)
class ObjectNode(Schema):
    _fields: Mapping[str, Schema] = field(default_factory=dict)
    _additional_properties: bool | None = None

    @property
    def fields(self) -> dict[str, Schema]:
        return dict(self._fields)

    def additional_properties(self, allowed: bool = True) -> "ObjectNode":
        return replace(self, _additional_properties=allowed)

    def children(self) -> tuple[Schema, ...]:
        return tuple(self._fields.values())

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        required = [name for name, node in self._fields.items() if node.is_required]
        properties = {name: node.to_schema(ctx) for name, node in self._fields.items()}
        return {
            "type": "object",
            "properties": properties or None,
            "required": required or None,
            "additionalProperties": self._additional_properties,
        }

    def as_parameter_list(
        self, location: str, ctx: BuildContext | None = None
    ) -> list[dict[str, Any]]:
        """Project every field into an OpenAPI parameter object.

        ``example``/``examples`` are removed from the field schema so that
        interactive documentation does not pre-fill request values. Path
        parameters are always required.

        Args:
            location: One of ``path``, ``query``, ``header`` or ``cookie``.
            ctx: Context of the current build.

        Raises:
            ValueError: If *location* is not a valid parameter location.
        """
        if location not in PARAMETER_LOCATIONS:
            raise ValueError(
                f"Invalid parameter location: {location}. Expected one of {PARAMETER_LOCATIONS}"
            )
        ctx = ensure_context(ctx)

        parameters = []
        for name, node in self._fields.items():
            schema = _unwrapped_schema(node, ctx)
            description = schema.pop("description", None)
            schema.pop("example", None)
            schema.pop("examples", None)
            parameters.append(
                ignore_none(
                    {
                        "name": name,
                        "in": location,
                        "description": description,
                        "explode": node.explodes,
                        "required": True if location == "path" else node.is_required,
                        "schema": schema,
                    }
                )
            )
        return parameters

    def as_response_headers(self, ctx: BuildContext | None = None) -> dict[str, Any]:
        """Project every field into a response header object.

        Headers only carry the primitive ``type`` and a ``description``; any
        other schema facet is dropped.

        Raises:
            ConfigurationError: If a field renders as a ``$ref``, which has no
                primitive type to project.
        """
        ctx = ensure_context(ctx)
        headers = {}
        for name, node in self._fields.items():
            schema = _unwrapped_schema(node, ctx)
            if "$ref" in schema:
                raise ConfigurationError(
                    f"Response header '{name}' must be a primitive schema, not a $ref"
                )
            headers[name] = ignore_none(
                {
                    "schema": ignore_none({"type": schema.get("type")}),
                    "description": schema.get("description"),
                }
            )
        return headers


@dataclass(frozen=True)
class ArrayNode(Schema):
    _explode: bool = True
    _items: Schema | None = None

    def items(self, node: Schema) -> "ArrayNode":
        return replace(self, _items=node)

    def children(self) -> tuple[Schema, ...]:
        return (self._items,) if self._items is not None else ()

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {
            "type": "array",
            "items": self._items.to_schema(ctx) if self._items is not None else None,
        }


@dataclass(frozen=True)
class FixedNode(Schema):
    """A schema promoted to a named entry of ``components.schemas``."""

    _label: str = ""
    _wrapped: Schema | None = None

    @property
    def component_name(self) -> str:
        return self._label

    @property
    def wrapped(self) -> Schema | None:
        return self._wrapped

    def label(self, name: str) -> "FixedNode":
        return replace(self, _label=normalize_label(name))

    def children(self) -> tuple[Schema, ...]:
        return (self._wrapped,) if self._wrapped is not None else ()

    def unwrapped_schema(self, ctx: BuildContext | None = None) -> dict[str, Any]:
        """The wrapped schema with this node's own description/example applied."""
        ctx = ensure_context(ctx)
        fragment = self._wrapped.to_schema(ctx) if self._wrapped is not None else {}
        fragment.update(ignore_none({"description": self._description, "example": self._example}))
        if self._deprecated:
            fragment["deprecated"] = True
        return fragment

    def to_schema(self, ctx: BuildContext | None = None) -> dict[str, Any]:
        ctx = ensure_context(ctx)
        if ctx.referenced:
            return {"$ref": f"{COMPONENTS_SCHEMAS_POINTER}{self._label}"}
        return self.unwrapped_schema(ctx)

    def to_component(self, ctx: BuildContext | None = None) -> dict[str, Any]:
        """Single-entry ``components.schemas`` mapping for this label.

        The body is the wrapped schema alone; description, example and
        deprecation set on this node belong to the place it is used.
        """
        ctx = ensure_context(ctx)
        body = self._wrapped.to_schema(ctx) if self._wrapped is not None else {}
        return {self._label: body}


@dataclass(frozen=True)
class ExternalReferenceNode(Schema):
    """Points at ``path`` (a JSON pointer) inside an external JSON/YAML file."""

    _file: str = ""
    _path: str = ""

    @property
    def file(self) -> str:
        return self._file

    @property
    def pointer(self) -> str:
        return self._path

    def to_schema(self, ctx: BuildContext | None = None) -> dict[str, Any]:
        ctx = ensure_context(ctx)
        return {"$ref": f"{ctx.resolved_path(self._file)}#{self._path}"}


@dataclass(frozen=True)
class _CompositionNode(Schema):
    keyword: ClassVar[str] = ""

    _alternatives: tuple[Schema, ...] = ()

    def children(self) -> tuple[Schema, ...]:
        return self._alternatives

    def _own_fields(self, ctx: BuildContext) -> dict[str, Any]:
        return {self.keyword: [node.to_schema(ctx) for node in self._alternatives]}


@dataclass(frozen=True)
class OneOfNode(_CompositionNode):
    keyword: ClassVar[str] = "oneOf"


@dataclass(frozen=True)
class AnyOfNode(_CompositionNode):
    keyword: ClassVar[str] = "anyOf"
