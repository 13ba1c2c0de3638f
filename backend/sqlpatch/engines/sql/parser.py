"""
Parse metadata comments from an annotated SQL template.

Header grammar (one directive per line):

    -- @id: update-person-name
    -- @name: Display name
    -- @description: Free text
    -- @tags: person, update
    -- @param: name|type|label|required
    -- @param-file: name|type|label|required

parse_template() builds the QueryDefinition; strip_metadata() returns the SQL
body that the substitution engine works on.
"""

import logging

from sqlpatch.models import ParameterDefinition, ParamTypeEnum, QueryDefinition

_log = logging.getLogger(__name__)

METADATA_MARKER = "-- @"
_PARAM_DIRECTIVES = {"param": False, "param-file": True}
_METADATA_KEYS = ("id", "name", "description", "tags")


class TemplateParseError(ValueError):
    """Raised when a template cannot be loaded (e.g. missing -- @id:)."""

    pass


def _iter_directives(text: str):
    """Yield (key, value) for every '-- @key: value' line, in file order."""
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(METADATA_MARKER):
            continue
        key, sep, value = line[len(METADATA_MARKER):].partition(":")
        if not sep:
            continue
        yield key.strip(), value.strip()


def _parse_param(raw: str, is_file: bool) -> ParameterDefinition | None:
    parts = [p.strip() for p in raw.split("|")]
    if len(parts) < 3 or not parts[0]:
        return None
    return ParameterDefinition(
        name=parts[0],
        type=ParamTypeEnum.parse(parts[1]),
        label=parts[2],
        required=len(parts) >= 4 and parts[3].lower() == "true",
        is_file=is_file,
    )


def _parse_tags(raw: str | None) -> tuple[str, ...] | None:
    if raw is None or not raw.strip():
        return None
    return tuple(t.strip() for t in raw.split(",") if t.strip())


def strip_metadata(text: str) -> str:
    """
    Drop the leading block of metadata and blank lines.

    Everything from the first other line onwards is kept verbatim, blank lines
    and later '-- @' lines included.
    """
    lines = text.splitlines()
    start = 0
    for start, line in enumerate(lines):
        trimmed = line.strip()
        if trimmed and not trimmed.startswith(METADATA_MARKER):
            break
    else:
        return ""
    return "\n".join(lines[start:]).rstrip()


def parse_template(text: str, source_ref: str) -> QueryDefinition:
    """
    Build a QueryDefinition from template *text*.

    Raises TemplateParseError when the id directive is missing or empty.
    Malformed parameter lines (fewer than 3 fields) are skipped.
    """
    metadata: dict[str, str] = {}
    parameters: list[ParameterDefinition] = []
    for key, value in _iter_directives(text):
        if key in _PARAM_DIRECTIVES:
            param = _parse_param(value, _PARAM_DIRECTIVES[key])
            if param is None:
                _log.debug("Skipping malformed @%s line in %s: %r", key, source_ref, value)
                continue
            parameters.append(param)
        elif key in _METADATA_KEYS:
            metadata[key] = value

    query_id = metadata.get("id")
    if not query_id:
        raise TemplateParseError(
            f"Template {source_ref} must declare a non-empty '-- @id:' directive"
        )

    return QueryDefinition(
        id=query_id,
        name=metadata.get("name") or None,
        description=metadata.get("description") or None,
        tags=_parse_tags(metadata.get("tags")),
        source_ref=source_ref,
        parameters=tuple(parameters),
        sql=strip_metadata(text),
    )

