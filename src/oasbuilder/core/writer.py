"""Module for formatting and writing OpenAPI documents."""

import json
from pathlib import Path
from typing import Any


def format_document(data: Any) -> str:
    """
    Render a document as canonical pretty-printed JSON text.

    Two-space indentation, non-ASCII characters kept as-is and a trailing
    newline.
    """
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_document(text: str, path: Path) -> None:
    """
    Write formatted document text to *path*, creating parent directories.

    Raises:
        IOError: If writing to the file fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def write_json(data: Any, path: Path) -> None:
    """Write *data* to *path* as formatted JSON."""
    write_document(format_document(data), path)
