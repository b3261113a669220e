"""Post-build edits addressed by JSONPath.

Each transformation selects locations in the normalized document with a
JSONPath expression (``jsonpath_ng.ext`` syntax, filters included) and
replaces the value at every match with ``transform(value)``.
"""

from collections.abc import Iterable
from typing import Any

from jsonpath_ng.ext import parse
from rich.console import Console

from oasbuilder.models import Transformation


def apply_transformation(document: Any, transformation: Transformation) -> Any:
    """
    Apply one transformation in place.

    Args:
        document: The normalized OpenAPI document
        transformation: JSONPath selector and value transform

    Returns:
        The document (a new object only when the root itself was replaced)
    """
    expression = parse(transformation.path)
    for match in expression.find(document):
        document = match.full_path.update(document, transformation.transform(match.value))
    return document


def apply_transformations(
    document: Any,
    transformations: Iterable[Transformation],
    console: Console | None = None,
) -> Any:
    """Apply *transformations* in order."""
    for transformation in transformations:
        if console:
            console.print(f"  [dim]→ transform {transformation.path}[/dim]")
        document = apply_transformation(document, transformation)
    return document
