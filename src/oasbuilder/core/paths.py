"""Conversion of routes into OpenAPI path items.

Defined routes become full operation objects. Referenced routes become a
``$ref`` to the resolved copy of their external document, which the
normalization step replaces with the operation it points at.
"""

import re
from collections.abc import Iterable
from typing import Any

from oasbuilder.context import BuildContext
from oasbuilder.routes import (
    DefinedRoute,
    ReferencedRoute,
    RouteResponse,
    SecurityRequirement,
    Validation,
)
from oasbuilder.schema.base import Schema, ignore_none

JSON_CONTENT_TYPE = "application/json"

# First path segment, used as the tag of untagged routes.
_PATH_TAG_RE = re.compile(r"/([^/]+)")


def build_parameters(validation: Validation, ctx: BuildContext) -> list[dict[str, Any]]:
    """Header parameters first, then path, then query."""
    parameters: list[dict[str, Any]] = []
    if validation.headers is not None:
        parameters.extend(validation.headers.as_parameter_list("header", ctx))
    if validation.path is not None:
        parameters.extend(validation.path.as_parameter_list("path", ctx))
    if validation.query is not None:
        parameters.extend(validation.query.as_parameter_list("query", ctx))
    return parameters


def build_request_body(body: Schema, ctx: BuildContext) -> dict[str, Any]:
    media_type = ignore_none({"schema": body.to_schema(ctx), "examples": body.named_examples})
    return ignore_none(
        {
            "required": True if body.is_required else None,
            "content": {JSON_CONTENT_TYPE: media_type},
        }
    )


def build_response(response: RouteResponse, ctx: BuildContext) -> dict[str, Any]:
    """A response with a schema carries content; one without only a description."""
    if response.response_schema is None:
        return {"description": response.description}
    media_type = ignore_none(
        {"schema": response.response_schema.to_schema(ctx), "examples": response.examples}
    )
    return ignore_none(
        {
            "description": response.description,
            "headers": response.headers.as_response_headers(ctx) if response.headers else None,
            "content": {JSON_CONTENT_TYPE: media_type},
        }
    )


def build_responses(route: DefinedRoute, ctx: BuildContext) -> dict[str, Any]:
    success = route.success_response
    responses = {str(success.status_code): build_response(success, ctx)}
    for response in route.error_responses:
        responses[str(response.status_code)] = build_response(response, ctx)
    return responses


def route_tags(route: DefinedRoute) -> list[str] | None:
    if route.tags:
        return list(route.tags)
    match = _PATH_TAG_RE.search(route.path)
    return [match.group(1)] if match else None


def security_requirements(
    requirements: Iterable[SecurityRequirement],
) -> list[dict[str, list[str]]]:
    return [{requirement.name: list(requirement.scopes)} for requirement in requirements]


def defined_route_to_operation(route: DefinedRoute, ctx: BuildContext) -> dict[str, Any]:
    parameters = build_parameters(route.validation, ctx)
    body = route.validation.body
    return ignore_none(
        {
            "summary": route.description,
            "description": route.notes,
            "operationId": route.operation_id,
            "deprecated": True if route.deprecated else None,
            "tags": route_tags(route),
            "parameters": parameters or None,
            "requestBody": build_request_body(body, ctx) if body is not None else None,
            "responses": build_responses(route, ctx),
            "security": (
                security_requirements(route.security) if route.security is not None else None
            ),
            "x-order": route.order,
        }
    )


def referenced_route_to_operation(route: ReferencedRoute, ctx: BuildContext) -> dict[str, Any]:
    resolved = ctx.resolved_path(route.ref.file)
    return ignore_none(
        {
            "$ref": f"{resolved}#{route.ref.path}",
            "deprecated": True if route.deprecated else None,
        }
    )


def route_to_operation(route: Any, ctx: BuildContext) -> dict[str, Any]:
    if isinstance(route, ReferencedRoute):
        return referenced_route_to_operation(route, ctx)
    return defined_route_to_operation(route, ctx)


def build_paths(routes: Iterable[Any], ctx: BuildContext) -> dict[str, dict[str, Any]]:
    """Group operations by URL template, keyed by lowercase method.

    Path items are inserted in the order of *routes*, which the caller sorts.
    """
    paths: dict[str, dict[str, Any]] = {}
    for route in routes:
        paths.setdefault(route.path, {})[route.method.lower()] = route_to_operation(route, ctx)
    return paths
