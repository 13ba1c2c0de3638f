"""
Pydantic schemas for the query catalogue API.
"""

from pydantic import BaseModel, Field

from sqlpatch.models import ParamTypeEnum, QueryDefinition


class ParameterPublic(BaseModel):
    name: str
    type: ParamTypeEnum
    label: str
    required: bool
    is_file: bool


class QueryPublic(BaseModel):
    """Response item for GET /queries/ and GET /queries/{id}."""

    id: str
    name: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    source_ref: str
    parameters: list[ParameterPublic] = Field(default_factory=list)
    supports_mass: bool = Field(
        default=True,
        description="Mass mode (/masse) is offered for queries without list parameters.",
    )

    @classmethod
    def from_definition(cls, query: QueryDefinition) -> "QueryPublic":
        return cls(
            id=query.id,
            name=query.name,
            description=query.description,
            tags=list(query.tags) if query.tags is not None else None,
            source_ref=query.source_ref,
            parameters=[ParameterPublic(**p.model_dump()) for p in query.parameters],
            supports_mass=not query.has_file_parameter,
        )


class QueriesPublic(BaseModel):
    data: list[QueryPublic]
    count: int
