"""
SQL substitution engine.

Fills ``{{name}}`` placeholders of a stripped template with coerced literals.

Modes:

* unitaire: one pass, every declared parameter replaced (absent -> NULL).
* unitaire with an oversized list: when a file parameter holds more than
  ``in_clause_max_size`` values, the statement is repeated once per chunk of
  values, each copy preceded by a ``-- Batch i/n (k values)`` comment.
* masse: delegated to :func:`render_mass`, one statement per CSV row.

Rendering is a pure function of (template, parameters, values, mode).
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlpatch.core.config import settings
from sqlpatch.core.param_type import ParamValidationError
from sqlpatch.engines.sql.filters import coerce, in_list, non_null_values
from sqlpatch.engines.sql.mass import MASS_ROWS_KEY, render_mass
from sqlpatch.engines.sql.placeholders import substitute
from sqlpatch.models import ExecutionModeEnum, ParameterDefinition, QueryDefinition

_log = logging.getLogger(__name__)


def chunked(values: Sequence[str], size: int) -> list[Sequence[str]]:
    """Consecutive slices of at most *size* items, order preserved."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [values[i : i + size] for i in range(0, len(values), size)]


class SQLTemplateEngine:
    """Renders annotated SQL templates for one request."""

    def __init__(
        self, *, in_clause_max_size: int | None = None, strict: bool = False
    ) -> None:
        self.in_clause_max_size = in_clause_max_size or settings.IN_CLAUSE_MAX_SIZE
        self.strict = strict

    def render(
        self,
        query: QueryDefinition,
        template: str,
        values: Mapping[str, Any] | None = None,
        mode: ExecutionModeEnum = ExecutionModeEnum.UNITAIRE,
    ) -> str:
        """Render *template* (the query body) with *values* for *mode*."""
        _values = values or {}
        if mode == ExecutionModeEnum.MASSE:
            return render_mass(
                query, template, _values.get(MASS_ROWS_KEY), _values, strict=self.strict
            )

        batch = self._find_batch_param(query, _values)
        if batch is not None:
            param, kept = batch
            return self._render_batched(query, template, _values, param, kept)
        return substitute(template, self.literals(query, _values))

    def literals(
        self,
        query: QueryDefinition,
        values: Mapping[str, Any],
    ) -> dict[str, str]:
        """Coerced literal for every declared parameter, keyed by name."""
        out = {}
        for param in query.parameters:
            try:
                out[param.name] = coerce(
                    param.type, values.get(param.name), param.is_file, strict=self.strict
                )
            except ParamValidationError as e:
                raise ParamValidationError(f"Parameter '{param.name}': {e}") from e
        return out

    def _find_batch_param(
        self, query: QueryDefinition, values: Mapping[str, Any]
    ) -> tuple[ParameterDefinition, list[str]] | None:
        """First file parameter (declaration order) whose list exceeds the IN limit."""
        for param in query.file_parameters:
            raw = values.get(param.name)
            if not isinstance(raw, (list, tuple)):
                continue
            kept = non_null_values(raw)
            if len(kept) > self.in_clause_max_size:
                return param, kept
        return None

    def _render_batched(
        self,
        query: QueryDefinition,
        template: str,
        values: Mapping[str, Any],
        param: ParameterDefinition,
        kept: list[str],
    ) -> str:
        shared = self.literals(query, values)
        chunks = chunked(kept, self.in_clause_max_size)
        total = len(chunks)
        _log.debug(
            "Query '%s': %d values for '%s' split into %d batch(es)",
            query.id,
            len(kept),
            param.name,
            total,
        )
        parts = []
        for i, chunk in enumerate(chunks, start=1):
            sql = substitute(template, {**shared, param.name: in_list(chunk)})
            parts.append(f"-- Batch {i}/{total} ({len(chunk)} values)\n{sql}")
        return "\n\n".join(parts)
