"""
Patch generation endpoints.

- POST /patch/{id}: unitaire (IN lists over the Oracle limit are batched).
- POST /patch/{id}/masse: one statement per row of the uploaded ``masseFile`` CSV.

Both return the generated .sql file as an attachment. Per-query request bodies
are documented by ``sqlpatch.core.openapi`` since the fields depend on each
template's parameters.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from sqlpatch.api.deps import GeneratorDep, RegistryDep
from sqlpatch.core.param_type import ParamValidationError, parse_execution_mode
from sqlpatch.core.registry import QueryNotFoundError
from sqlpatch.core.request_params import (
    extract_execution_type,
    extract_mass_rows,
    extract_values,
    read_form,
)
from sqlpatch.core.storage import ArtifactWriteError
from sqlpatch.engines.executor import PatchGenerator
from sqlpatch.engines.sql.mass import MASS_ROWS_KEY
from sqlpatch.models import ExecutionModeEnum

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patch", tags=["patch"], include_in_schema=False)

SQL_MEDIA_TYPE = "application/sql"


async def _generate(
    generator: PatchGenerator,
    query_id: str,
    mode: ExecutionModeEnum,
    values: dict[str, Any],
) -> FileResponse:
    """Run generation in a worker thread and map domain errors to HTTP codes."""
    try:
        artifact = await asyncio.to_thread(generator.generate, query_id, mode, values)
    except QueryNotFoundError as e:
        logger.warning("Unknown query requested: %s", query_id)
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ParamValidationError as e:
        logger.error("Validation error for query '%s' (%s): %s", query_id, mode.value, e)
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ArtifactWriteError as e:
        logger.error("Patch generation failed for query '%s': %s", query_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Cannot write patch file") from e

    path = generator.store.path_for(artifact.file_name)
    return FileResponse(path, media_type=SQL_MEDIA_TYPE, filename=artifact.file_name)


@router.post("/{query_id}")
async def generate_patch(
    query_id: str,
    request: Request,
    registry: RegistryDep,
    generator: GeneratorDep,
) -> FileResponse:
    """
    Generate a patch file from form fields (multipart when list parameters are uploaded).
    """
    query = registry.find(query_id)
    if query is None:
        logger.warning("Unknown query requested: %s", query_id)
        raise HTTPException(status_code=404, detail="Query not found")

    form = await read_form(request)
    try:
        mode = parse_execution_mode(extract_execution_type(form))
        values = await extract_values(form, query)
        rows = await extract_mass_rows(form) if mode == ExecutionModeEnum.MASSE else None
    except ParamValidationError as e:
        logger.warning("Invalid request for query '%s': %s", query_id, e)
        raise HTTPException(status_code=400, detail=str(e)) from e

    if rows is not None:
        values[MASS_ROWS_KEY] = rows
    return await _generate(generator, query_id, mode, values)


@router.post("/{query_id}/masse")
async def generate_patch_masse(
    query_id: str,
    request: Request,
    registry: RegistryDep,
    generator: GeneratorDep,
) -> FileResponse:
    """
    Generate one statement per CSV row; ``masseFile`` is required.
    """
    query = registry.find(query_id)
    if query is None:
        logger.warning("Unknown query requested (masse): %s", query_id)
        raise HTTPException(status_code=404, detail="Query not found")

    form = await read_form(request)
    try:
        rows = await extract_mass_rows(form)
        values = await extract_values(form, query)
    except ParamValidationError as e:
        logger.warning("Invalid request for query '%s' (masse): %s", query_id, e)
        raise HTTPException(status_code=400, detail=str(e)) from e

    if not rows:
        logger.warning("Missing or empty CSV file for query '%s' in mass mode", query_id)
        raise HTTPException(status_code=400, detail=f"'{MASS_ROWS_KEY}' is required in mass mode")
    logger.debug("CSV parsed: %d row(s) for query '%s'", len(rows), query_id)

    values[MASS_ROWS_KEY] = rows
    return await _generate(generator, query_id, ExecutionModeEnum.MASSE, values)
