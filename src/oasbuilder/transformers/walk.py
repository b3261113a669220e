"""Traversal helpers for JSON-like documents."""

from collections.abc import Callable, Iterator
from typing import Any


def replace_nodes(data: Any, replacement: Callable[[Any], Any | None]) -> Any:
    """
    Substitute nodes of a nested dict/list document, top-down.

    ``replacement(node)`` is asked about every node before its children. A
    non-``None`` result takes the node's place and is not descended into;
    ``None`` keeps the node and continues below it. Containers are updated in
    place.

    Args:
        data: The document (dict, list or scalar)
        replacement: Returns the substitute for a node, or ``None``

    Returns:
        The document, or the substitute when the root itself was replaced

    Example:
        def inline_part(node):
            if isinstance(node, dict) and node.get("$ref") == "#/Part":
                return {"type": "string"}
            return None

        replace_nodes({"a": {"$ref": "#/Part"}}, inline_part)
        # Result: {"a": {"type": "string"}}
    """
    substitute = replacement(data)
    if substitute is not None:
        return substitute

    if isinstance(data, dict):
        slots = list(data.items())
    elif isinstance(data, list):
        slots = list(enumerate(data))
    else:
        return data
    for slot, child in slots:
        data[slot] = replace_nodes(child, replacement)
    return data


def iter_refs(data: Any) -> Iterator[str]:
    """Yield every ``$ref`` string found anywhere in *data*."""
    if isinstance(data, dict):
        ref = data.get("$ref")
        if isinstance(ref, str):
            yield ref
        for value in data.values():
            yield from iter_refs(value)
    elif isinstance(data, list):
        for item in data:
            yield from iter_refs(item)
