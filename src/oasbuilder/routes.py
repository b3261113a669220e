"""Route descriptors.

A route is either defined inline (:class:`DefinedRoute`, with its validation
schemas and responses) or points at an operation stored in an external
document (:class:`ReferencedRoute`). The ``kind`` field discriminates the
two when routes are loaded from plain data.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from oasbuilder.schema.base import Schema
from oasbuilder.schema.composite import ObjectNode

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


class _RouteModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class SecurityRequirement(_RouteModel):
    """A named security scheme and the scopes it requires."""

    name: str
    scopes: list[str] = Field(default_factory=list)


class RouteResponse(_RouteModel):
    """One response of a route.

    ``schema`` is accepted as the constructor keyword; a response without a
    schema renders only its description.
    """

    status_code: int
    description: str
    response_schema: Schema | None = Field(default=None, alias="schema")
    headers: ObjectNode | None = None
    examples: dict[str, dict[str, Any]] | None = None


class Validation(_RouteModel):
    """Request validation schemas by location."""

    path: ObjectNode | None = None
    query: ObjectNode | None = None
    headers: ObjectNode | None = None
    body: Schema | None = None


class ExternalOperation(_RouteModel):
    """Location of an operation object inside an external document."""

    file: str
    path: str

    @field_validator("path")
    @classmethod
    def _strip_fragment_marker(cls, value: str) -> str:
        return value[1:] if value.startswith("#") else value


class _BaseRoute(_RouteModel):
    method: HttpMethod
    path: str
    order: int | None = None
    deprecated: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def _uppercase_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class DefinedRoute(_BaseRoute):
    kind: Literal["defined"] = "defined"
    operation_id: str
    description: str
    notes: str | None = None
    tags: list[str] | None = None
    validation: Validation = Field(default_factory=Validation)
    success_response: RouteResponse
    error_responses: list[RouteResponse] = Field(default_factory=list)
    security: list[SecurityRequirement] | None = None


class ReferencedRoute(_BaseRoute):
    kind: Literal["referenced"] = "referenced"
    ref: ExternalOperation


Route = Annotated[DefinedRoute | ReferencedRoute, Field(discriminator="kind")]
