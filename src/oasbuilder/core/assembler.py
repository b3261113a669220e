"""Assemble, normalize and emit an OpenAPI document.

This module coordinates the complete build:
1. Sort routes by their ``order``
2. Resolve external files into a scratch directory
3. Check component labels (referenced mode)
4. Build path items and components, assemble the document
5. Dereference (flat) or bundle (referenced) the document
6. Apply JSONPath transformations
7. Format the JSON text and send it to the configured output
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from rich.console import Console

from oasbuilder.config import DEFAULT_ROUTE_ORDER, OutputType, Representation
from oasbuilder.context import BuildContext
from oasbuilder.core.components import (
    build_component_schemas,
    check_duplicate_labels,
    collect_fixed_nodes,
)
from oasbuilder.core.paths import build_paths
from oasbuilder.core.resolver import bundle, dereference, resolve_external_files, scratch_directory
from oasbuilder.core.writer import format_document, write_document
from oasbuilder.models import DocumentParams, OutputConfig
from oasbuilder.routes import SecurityRequirement
from oasbuilder.transformers.jsonpath import apply_transformations


def sort_routes(routes: Iterable[Any]) -> list[Any]:
    """Ascending ``order``, unordered routes last; ties keep their original order."""
    return sorted(
        routes, key=lambda route: DEFAULT_ROUTE_ORDER if route.order is None else route.order
    )


def document_security(requirements: Iterable[SecurityRequirement]) -> list[dict[str, list[str]]]:
    """Union of the document-level requirements.

    Requirements naming the same scheme are merged into one entry whose scopes
    are the union of theirs, in first-seen order.
    """
    merged: dict[str, list[str]] = {}
    for requirement in requirements:
        scopes = merged.setdefault(requirement.name, [])
        scopes.extend(scope for scope in requirement.scopes if scope not in scopes)
    return [{name: scopes} for name, scopes in merged.items()]


def assemble_document(
    params: DocumentParams, routes: list[Any], ctx: BuildContext
) -> dict[str, Any]:
    """
    Build the document object before ``$ref`` normalization.

    Args:
        params: Document parameters
        routes: The routes, already sorted
        ctx: Context with every external file resolved

    Returns:
        The OpenAPI document as a dictionary
    """
    components: dict[str, Any] = {}
    if params.security_schemes:
        components["securitySchemes"] = {
            name: scheme.model_dump(by_alias=True, exclude_none=True)
            for name, scheme in params.security_schemes.items()
        }
    if ctx.referenced:
        schemas = build_component_schemas(collect_fixed_nodes(routes), ctx)
        if schemas:
            components["schemas"] = schemas

    document: dict[str, Any] = {
        "openapi": params.openapi_version,
        "info": params.info.model_dump(exclude_none=True),
        "tags": [tag.model_dump(exclude_none=True) for tag in params.tags],
        "servers": [server.model_dump(exclude_none=True) for server in params.servers],
    }
    if params.security is not None:
        document["security"] = document_security(params.security)
    document["paths"] = build_paths(routes, ctx)
    if components:
        document["components"] = components
    return document


def normalize_document(document: dict[str, Any], ctx: BuildContext, scratch_dir: Path) -> Any:
    """Dereference (flat) or bundle (referenced) the assembled document."""
    base_uri = scratch_dir.resolve().as_uri() + "/"
    if ctx.referenced:
        return bundle(document, base_uri)
    return dereference(document, base_uri)


def emit(text: str, output: OutputConfig) -> None:
    """Send formatted document text to the configured output."""
    if output.type is OutputType.CONSOLE:
        Console().print(text, end="", markup=False, highlight=False, emoji=False, soft_wrap=True)
    elif output.type is OutputType.FILE:
        write_document(text, Path(output.file))


def build_document(
    params: DocumentParams,
    representation: Representation = Representation.FLAT,
    console: Console | None = None,
) -> str:
    """
    Build the OpenAPI document described by *params*.

    Args:
        params: Document parameters, routes and output settings
        representation: Inline labeled schemas (flat) or reference them from
            ``components.schemas`` (referenced)
        console: Optional Rich Console for progress output

    Returns:
        The formatted JSON text, also sent to ``params.output``

    Raises:
        DuplicateLabelError: In referenced mode, if two different schemas
            share a label
        UnresolvedReferenceError: If an external reference was not resolved
        ResolutionError: If an external file cannot be loaded or dereferenced
    """
    ctx = BuildContext(representation=representation)
    routes = sort_routes(params.routes)

    with scratch_directory() as scratch_dir:
        if console:
            console.print("  [dim]→ resolving external files[/dim]")
        resolve_external_files(routes, scratch_dir, ctx, console=console)

        if ctx.referenced:
            if console:
                console.print("  [dim]→ checking component labels[/dim]")
            check_duplicate_labels(collect_fixed_nodes(routes))

        if console:
            console.print(f"  [dim]→ assembling {len(routes)} routes[/dim]")
        document = assemble_document(params, routes, ctx)

        if console:
            console.print(f"  [dim]→ normalizing references ({representation.value})[/dim]")
        document = normalize_document(document, ctx, scratch_dir)

    document = apply_transformations(document, params.transformations, console=console)
    text = format_document(document)
    emit(text, params.output)
    return text
