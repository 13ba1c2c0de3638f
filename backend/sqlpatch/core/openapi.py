"""
Per-query OpenAPI documentation.

The patch routes take free-form bodies (fields depend on each template), so
they are hidden from the generated schema and one documented operation is
added per loaded query instead:

- POST {prefix}/patch/{id}: ticket, executionType and the query parameters;
- POST {prefix}/patch/{id}/masse: ticket + masseFile, only for queries without
  list parameters.
"""

from typing import Any

from sqlpatch.core.request_params import EXECUTION_TYPE_KEY
from sqlpatch.core.registry import QueryRegistry
from sqlpatch.engines.sql.assembler import TICKET_KEY
from sqlpatch.engines.sql.mass import MASS_ROWS_KEY
from sqlpatch.models import (
    ExecutionModeEnum,
    ParameterDefinition,
    ParamTypeEnum,
    QueryDefinition,
)

_FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
_MULTIPART_MEDIA_TYPE = "multipart/form-data"


def _ticket_schema() -> dict[str, Any]:
    return {
        "type": "string",
        "description": "Ticket / change request reference",
        "example": "dc905fff-27a6-452f-aa0d-360c6c37b94a",
    }


def _execution_type_schema() -> dict[str, Any]:
    return {
        "type": "string",
        "description": "Execution mode",
        "enum": [ExecutionModeEnum.UNITAIRE.value],
        "default": ExecutionModeEnum.UNITAIRE.value,
    }


def parameter_schema(param: ParameterDefinition) -> dict[str, Any]:
    if param.is_file:
        return {
            "type": "string",
            "format": "binary",
            "description": f"{param.label} (text file, one value per line)".strip(),
        }
    if param.type in (ParamTypeEnum.NUMBER, ParamTypeEnum.INTEGER):
        schema: dict[str, Any] = {"type": "integer"}
    elif param.type == ParamTypeEnum.DATE:
        schema = {"type": "string", "format": "date"}
    else:
        schema = {"type": "string"}
    if param.label:
        schema["description"] = param.label
    return schema


def _request_body(
    schema: dict[str, Any], description: str, *, multipart: bool
) -> dict[str, Any]:
    content: dict[str, Any] = {}
    if multipart:
        content[_MULTIPART_MEDIA_TYPE] = {"schema": schema}
    content[_FORM_MEDIA_TYPE] = {"schema": schema}
    return {"description": description, "required": True, "content": content}


def _responses() -> dict[str, Any]:
    return {
        "200": {
            "description": "Generated SQL file",
            "content": {"application/sql": {"schema": {"type": "string", "format": "binary"}}},
        },
        "400": {"description": "Invalid parameters"},
        "404": {"description": "Query not found"},
        "500": {"description": "Server error"},
    }


def _base_operation(query: QueryDefinition, summary: str, operation_id: str) -> dict[str, Any]:
    op: dict[str, Any] = {
        "summary": summary,
        "operationId": operation_id,
        "responses": _responses(),
    }
    if query.description:
        op["description"] = query.description
    if query.tags:
        op["tags"] = list(query.tags)
    return op


def build_unit_operation(query: QueryDefinition) -> dict[str, Any]:
    properties: dict[str, Any] = {
        TICKET_KEY: _ticket_schema(),
        EXECUTION_TYPE_KEY: _execution_type_schema(),
    }
    required = [TICKET_KEY]
    for param in query.parameters:
        properties[param.name] = parameter_schema(param)
        if param.required:
            required.append(param.name)

    op = _base_operation(query, query.display_name, f"patch-{query.id}")
    op["requestBody"] = _request_body(
        {"type": "object", "properties": properties, "required": required},
        "Parameters used to generate the SQL patch",
        multipart=query.has_file_parameter,
    )
    return op


def mass_column_order(query: QueryDefinition) -> str:
    names = [p.name for p in query.scalar_parameters]
    return ", ".join(names) if names else "no parameter"


def build_mass_operation(query: QueryDefinition) -> dict[str, Any]:
    columns = mass_column_order(query)
    op = _base_operation(query, f"{query.display_name} (mass mode)", f"patch-{query.id}-masse")
    op["description"] = (
        f"{query.description or ''}\n\n**Mass mode**: upload a CSV file with one line "
        f"per statement, values separated by commas in parameter order: {columns}."
    ).strip()
    schema = {
        "type": "object",
        "properties": {
            TICKET_KEY: _ticket_schema(),
            MASS_ROWS_KEY: {
                "type": "string",
                "format": "binary",
                "description": f"CSV file (required). Columns: {columns}",
            },
        },
        "required": [TICKET_KEY, MASS_ROWS_KEY],
    }
    op["requestBody"] = _request_body(
        schema, "Parameters used to generate the SQL patch in mass mode", multipart=True
    )
    return op


def add_query_operations(
    schema: dict[str, Any], registry: QueryRegistry, prefix: str = ""
) -> dict[str, Any]:
    """Add one POST operation per query (and its /masse variant) to *schema* in place."""
    paths = schema.setdefault("paths", {})
    for query in registry:
        base = f"{prefix}/patch/{query.id}"
        paths.setdefault(base, {})["post"] = build_unit_operation(query)
        if not query.has_file_parameter:
            paths.setdefault(f"{base}/masse", {})["post"] = build_mass_operation(query)
    return schema
