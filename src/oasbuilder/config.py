"""Configuration constants and enums for the OpenAPI route builder."""

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

CONFIG_FILENAME = ".oasbuilder.yaml"

# Routes without an explicit order sort after every ordered route.
DEFAULT_ROUTE_ORDER = 10000


class Representation(Enum):
    """How labeled schemas and ``$ref`` pointers appear in the final document."""

    FLAT = "flat"
    REFERENCED = "referenced"


class OutputType(Enum):
    """Where the formatted document text goes once it is built."""

    CONSOLE = "console"
    FILE = "file"
    NONE = "none"


class FileFormat(Enum):
    """Enum representing the format of an external schema file."""

    JSON = "json"
    YAML = "yaml"


class ProjectConfig(BaseModel):
    """Configuration model read from ``.oasbuilder.yaml``."""

    representation: Representation = Field(
        default=Representation.FLAT, description="Default representation mode"
    )
    output_file: str | None = Field(
        default=None, description="File to write the document to instead of the console"
    )


def get_config_path(target_dir: Path) -> Path:
    """Get the path to the config file in the target directory."""
    return target_dir / CONFIG_FILENAME


def load_config(target_dir: Path) -> ProjectConfig:
    """
    Load configuration from .oasbuilder.yaml file.
    Returns default config if file doesn't exist.
    """
    config_path = get_config_path(target_dir)
    if not config_path.exists():
        return ProjectConfig()
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return ProjectConfig(**data)
