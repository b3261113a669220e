"""Module for loading external JSON/YAML documents referenced by schemas and routes."""

import json
from pathlib import Path
from typing import Any

import yaml

from oasbuilder.config import FileFormat


def detect_format(path: Path) -> FileFormat:
    """
    Determine the document format from the file extension.

    Raises:
        ValueError: If the file extension is not .json, .yaml, or .yml
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        return FileFormat.JSON
    if suffix in (".yaml", ".yml"):
        return FileFormat.YAML
    raise ValueError(f"Unsupported file format: {suffix}. Expected .json, .yaml, or .yml")


def load_document(path: Path) -> Any:
    """
    Load a JSON or YAML document from disk.

    Args:
        path: Path to the document (.json, .yaml, or .yml)

    Returns:
        The parsed document

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file extension is not .json, .yaml, or .yml
        json.JSONDecodeError: If JSON parsing fails
        yaml.YAMLError: If YAML parsing fails
    """
    if not path.exists():
        raise FileNotFoundError(f"Referenced file not found: {path}")

    file_format = detect_format(path)
    with open(path, encoding="utf-8") as f:
        if file_format == FileFormat.JSON:
            return json.load(f)
        return yaml.safe_load(f)
