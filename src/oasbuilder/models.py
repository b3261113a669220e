"""Pydantic models describing a document build.

:class:`DocumentParams` is the single input of
:func:`oasbuilder.core.assembler.build_document`: document metadata, the
routes, security settings, post-build transformations and the output sink.
"""

from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from oasbuilder.config import OutputType
from oasbuilder.routes import Route, SecurityRequirement


class Info(BaseModel):
    title: str
    version: str
    description: str | None = None


class ServerVariable(BaseModel):
    default: str
    description: str | None = None
    enum: list[str] | None = None


class Server(BaseModel):
    url: str
    description: str | None = None
    variables: dict[str, ServerVariable] | None = None


class Tag(BaseModel):
    name: str
    description: str | None = None


class SecurityScheme(BaseModel):
    """An entry of ``components.securitySchemes``.

    Only the common keys are declared; anything else (``flows``,
    ``openIdConnectUrl``, ...) is preserved as-is.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: Literal["apiKey", "http", "oauth2", "openIdConnect"]
    description: str | None = None
    name: str | None = None
    location: Literal["query", "header", "cookie"] | None = Field(default=None, alias="in")
    scheme: str | None = None
    bearer_format: str | None = Field(default=None, alias="bearerFormat")


class Transformation(BaseModel):
    """Replace every value matched by the JSONPath ``path`` with ``transform(value)``."""

    path: str
    transform: Callable[[Any], Any]


class OutputConfig(BaseModel):
    type: OutputType = OutputType.CONSOLE
    file: str | None = None

    @model_validator(mode="after")
    def _file_required_for_file_output(self) -> "OutputConfig":
        if self.type is OutputType.FILE and not self.file:
            raise ValueError("output.file is required when output.type is 'file'")
        return self


class DocumentParams(BaseModel):
    openapi_version: str = "3.0.0"
    info: Info
    servers: list[Server] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    routes: list[Route] = Field(default_factory=list)
    security: list[SecurityRequirement] | None = None
    security_schemes: dict[str, SecurityScheme] | None = None
    transformations: list[Transformation] = Field(default_factory=list)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_names_to_objects(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"name": tag} if isinstance(tag, str) else tag for tag in value]
        return value
