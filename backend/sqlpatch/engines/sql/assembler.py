"""
Patch file assembly: provenance header + rendered SQL, and the file name.

The header is a Jinja2 template so its wording can change without touching
the generation logic. File names follow ``{queryId}_{mode}_{yyyyMMddHHmmss}.sql``;
two files for the same query and mode within the same second share a name.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from jinja2 import Environment, StrictUndefined, Template

from sqlpatch.core.param_type import is_null_value
from sqlpatch.engines.sql.filters import SQL_NULL
from sqlpatch.models import ExecutionModeEnum, GeneratedArtifact, QueryDefinition

TICKET_KEY = "ticket"
_LINE_BREAK_RE = re.compile(r"[\r\n]+")
FILE_NAME_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

HEADER_TEMPLATE = """\
-- Patch file generated on {{ generated_at }}
-- Query: {{ query_name }}
-- ID: {{ query_id }}
-- Ticket: {{ ticket }}
-- Mode: {{ mode }}
"""

_HEADER_ENV = Environment(
    autoescape=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)
_header_template: Template = _HEADER_ENV.from_string(HEADER_TEMPLATE)


def _comment_text(value: Any) -> str:
    """Header values stay on their comment line: line breaks become spaces."""
    return _LINE_BREAK_RE.sub(" ", str(value)).strip()


def _mode_value(mode: ExecutionModeEnum | str) -> str:
    return mode.value if isinstance(mode, ExecutionModeEnum) else str(mode)


def build_header(
    query: QueryDefinition,
    mode: ExecutionModeEnum | str,
    values: Mapping[str, Any] | None,
    generated_at: datetime,
) -> str:
    """Five comment lines, newline-terminated."""
    ticket = (values or {}).get(TICKET_KEY)
    return _header_template.render(
        generated_at=generated_at.isoformat(),
        query_name=query.display_name,
        query_id=query.id,
        ticket=SQL_NULL if is_null_value(ticket) else _comment_text(ticket),
        mode=_mode_value(mode),
    )


def generate_file_name(
    query_id: str, mode: ExecutionModeEnum | str, generated_at: datetime
) -> str:
    timestamp = generated_at.strftime(FILE_NAME_TIMESTAMP_FORMAT)
    return f"{query_id}_{_mode_value(mode)}_{timestamp}.sql"


def assemble(
    query: QueryDefinition,
    mode: ExecutionModeEnum | str,
    values: Mapping[str, Any] | None,
    sql: str,
    *,
    now: datetime | None = None,
) -> GeneratedArtifact:
    """Build the artifact: header, blank line, *sql* verbatim."""
    generated_at = now or datetime.now()
    return GeneratedArtifact(
        file_name=generate_file_name(query.id, mode, generated_at),
        header=build_header(query, mode, values, generated_at),
        body=sql,
        created_at=generated_at,
    )
