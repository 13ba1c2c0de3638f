"""
Request parameter extraction for patch generation.

Form fields (application/x-www-form-urlencoded or multipart/form-data) become
the values map handed to PatchGenerator:

- scalar parameters: the field's string value (blank fields are left out);
- file parameters: an uploaded text file or a textarea, one value per line;
- ``ticket``: copied as-is;
- ``masseFile`` (mass mode): CSV upload, one row per line.

Lines are trimmed and blank lines dropped before they reach the engine.
"""

from typing import Any

from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request

from sqlpatch.core.param_type import ParamValidationError
from sqlpatch.engines.sql.assembler import TICKET_KEY
from sqlpatch.engines.sql.mass import MASS_ROWS_KEY
from sqlpatch.models import QueryDefinition

EXECUTION_TYPE_KEY = "executionType"


def split_lines(text: str) -> list[str]:
    """Non-blank, trimmed lines of *text*."""
    return [line.strip() for line in text.splitlines() if line.strip()]


async def read_lines(field: UploadFile | str | None, name: str = "file") -> list[str] | None:
    """
    Lines of an uploaded file (UTF-8, BOM tolerated) or of a text field. None if absent.

    Raises ParamValidationError when an upload is not valid UTF-8.
    """
    if field is None:
        return None
    if isinstance(field, UploadFile):
        raw = await field.read()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParamValidationError(
                f"'{name}' must be a UTF-8 text file (invalid byte at position {e.start})"
            ) from e
    else:
        text = str(field)
    lines = split_lines(text)
    return lines or None


async def read_form(request: Request) -> FormData:
    ct = (request.headers.get("content-type") or "").split(";")[0].strip().lower()
    if ct in ("application/x-www-form-urlencoded", "multipart/form-data"):
        return await request.form()
    return FormData()


def _text_field(form: FormData, name: str) -> str | None:
    v = form.get(name)
    if v is None or isinstance(v, UploadFile):
        return None
    return v if v != "" else None


async def extract_values(form: FormData, query: QueryDefinition) -> dict[str, Any]:
    """Values for every declared parameter present in *form*, plus the ticket."""
    values: dict[str, Any] = {}
    for param in query.parameters:
        if param.is_file:
            lines = await read_lines(form.get(param.name), param.name)
            if lines is not None:
                values[param.name] = lines
        else:
            v = _text_field(form, param.name)
            if v is not None:
                values[param.name] = v

    ticket = _text_field(form, TICKET_KEY)
    if ticket is not None:
        values[TICKET_KEY] = ticket
    return values


async def extract_mass_rows(form: FormData) -> list[str] | None:
    return await read_lines(form.get(MASS_ROWS_KEY), MASS_ROWS_KEY)


def extract_execution_type(form: FormData) -> str | None:
    return _text_field(form, EXECUTION_TYPE_KEY)
