"""
Patch generator: lookup -> validate -> render -> assemble -> write.

One call per request, synchronous, no shared mutable state besides the output
directory.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlpatch.core.param_type import check_required_params, parse_execution_mode
from sqlpatch.engines.sql import SQLTemplateEngine, assemble
from sqlpatch.models import ExecutionModeEnum, GeneratedArtifact

if TYPE_CHECKING:
    from sqlpatch.core.registry import QueryRegistry
    from sqlpatch.core.storage import ArtifactStore

_log = logging.getLogger(__name__)


class PatchGenerator:
    """
    generate(query_id, mode, values) -> GeneratedArtifact (already written to the store)

    Raises QueryNotFoundError, ParamValidationError or ArtifactWriteError.
    """

    def __init__(
        self,
        registry: QueryRegistry,
        store: ArtifactStore,
        *,
        engine: SQLTemplateEngine | None = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.engine = engine or SQLTemplateEngine()

    def render(
        self,
        query_id: str,
        mode: ExecutionModeEnum | str | None,
        values: Mapping[str, Any] | None = None,
        *,
        now: datetime | None = None,
    ) -> GeneratedArtifact:
        """Build the artifact without writing it."""
        query = self.registry.get(query_id)
        _mode = (
            mode if isinstance(mode, ExecutionModeEnum) else parse_execution_mode(mode)
        )
        _values = values or {}
        if _mode == ExecutionModeEnum.UNITAIRE:
            check_required_params(query, _values)

        sql = self.engine.render(query, query.sql, _values, _mode)
        _log.debug("Rendered SQL for '%s' (%s): %d chars", query.id, _mode.value, len(sql))
        return assemble(query, _mode, _values, sql, now=now)

    def generate(
        self,
        query_id: str,
        mode: ExecutionModeEnum | str | None,
        values: Mapping[str, Any] | None = None,
        *,
        now: datetime | None = None,
    ) -> GeneratedArtifact:
        artifact = self.render(query_id, mode, values, now=now)
        path = self.store.write(artifact)
        _log.info("Generated patch file %s", path)
        return artifact
