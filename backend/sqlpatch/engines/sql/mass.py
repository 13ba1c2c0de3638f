"""
Mass mode: one statement per row of an uploaded CSV file.

Columns map positionally onto the query's non-file parameters in declaration
order. Missing or empty cells fall back to the request-wide values (e.g. the
ticket shared by the whole batch), then to NULL.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlpatch.core.param_type import ParamValidationError
from sqlpatch.engines.sql.filters import coerce
from sqlpatch.engines.sql.placeholders import substitute
from sqlpatch.models import ParameterDefinition, QueryDefinition

_log = logging.getLogger(__name__)

# Form field / values key carrying the CSV lines
MASS_ROWS_KEY = "masseFile"
CSV_SEPARATOR = ","


def parse_csv_row(
    row: str, columns: Sequence[ParameterDefinition]
) -> dict[str, str | None]:
    """
    Map the cells of *row* onto *columns* by position.

    Extra cells are ignored; parameters past the last cell are not set.
    Empty cells map to None.
    """
    cells = row.split(CSV_SEPARATOR)
    out: dict[str, str | None] = {}
    for param, cell in zip(columns, cells):
        cell = cell.strip()
        out[param.name] = cell or None
    return out


def render_mass(
    query: QueryDefinition,
    template: str,
    rows: Sequence[str] | None,
    global_values: Mapping[str, Any] | None = None,
    *,
    strict: bool = False,
) -> str:
    """
    Render *template* once per row; statements are prefixed with
    ``-- Row i/N`` and separated by a blank line.

    Raises ParamValidationError when there is no row at all.
    """
    if not rows:
        raise ParamValidationError(
            f"Mass mode for query '{query.id}' requires at least one CSV row"
        )
    _globals = global_values or {}
    columns = query.scalar_parameters

    # File parameters do not take part in the column mapping; same value for every row.
    shared = {
        p.name: coerce(p.type, _globals.get(p.name), True)
        for p in query.file_parameters
    }

    total = len(rows)
    statements = []
    for i, row in enumerate(rows, start=1):
        row_values = parse_csv_row(row, columns)
        literals = dict(shared)
        for param in columns:
            value = row_values.get(param.name)
            if value is None:
                value = _globals.get(param.name)
            try:
                literals[param.name] = coerce(param.type, value, strict=strict)
            except ParamValidationError as e:
                raise ParamValidationError(f"Row {i}, column '{param.name}': {e}") from e
        statements.append(f"-- Row {i}/{total}\n{substitute(template, literals)}")

    _log.debug("Mass render of '%s': %d row(s)", query.id, total)
    return "\n\n".join(statements)
