"""Discovery of labeled schemas and assembly of ``components.schemas``.

Every labeled (:class:`FixedNode`) schema reachable from a route's validation
or response schemas becomes one component. In referenced mode two different
schemas must not share a label, since only one of them could be emitted.
"""

from collections.abc import Iterable, Iterator
from typing import Any

from oasbuilder.context import BuildContext
from oasbuilder.exceptions import DuplicateLabelError
from oasbuilder.routes import DefinedRoute
from oasbuilder.schema.base import Schema
from oasbuilder.schema.composite import FixedNode


def walk_nodes(node: Schema) -> Iterator[Schema]:
    """Yield *node* and every node nested inside it, depth-first."""
    yield node
    for child in node.children():
        yield from walk_nodes(child)


def iter_route_schemas(route: Any, include_headers: bool = False) -> Iterator[Schema]:
    """Yield the top-level schemas attached to a defined route.

    Referenced routes carry no schemas and yield nothing.

    Args:
        route: A :class:`DefinedRoute` or :class:`ReferencedRoute`.
        include_headers: Also yield response header objects.
    """
    if not isinstance(route, DefinedRoute):
        return
    validation = route.validation
    for node in (validation.path, validation.query, validation.headers, validation.body):
        if node is not None:
            yield node
    for response in [route.success_response, *route.error_responses]:
        if response.response_schema is not None:
            yield response.response_schema
        if include_headers and response.headers is not None:
            yield response.headers


def collect_fixed_nodes(routes: Iterable[Any]) -> list[FixedNode]:
    """Return every labeled node reachable from *routes*, in discovery order."""
    return [
        node
        for route in routes
        for schema in iter_route_schemas(route)
        for node in walk_nodes(schema)
        if isinstance(node, FixedNode)
    ]


def check_duplicate_labels(nodes: Iterable[FixedNode]) -> None:
    """
    Fail when two different labeled schemas share a component name.

    Only the labeled content is compared: the same labeled schema reused in
    several places is a single component even when one use adds
    ``required()``, a description or an example.

    Raises:
        DuplicateLabelError: On the first label bound to two different schemas.
    """
    seen: dict[str, Schema | None] = {}
    for node in nodes:
        first = seen.setdefault(node.component_name, node.wrapped)
        if first is not node.wrapped and first != node.wrapped:
            raise DuplicateLabelError(node.component_name)


def build_component_schemas(
    nodes: Iterable[FixedNode], ctx: BuildContext
) -> dict[str, dict[str, Any]]:
    """Merge the component entries of *nodes*; a later entry replaces an earlier one."""
    schemas: dict[str, dict[str, Any]] = {}
    for node in nodes:
        schemas.update(node.to_component(ctx))
    return schemas
