"""
Value coercion: turn raw request values into SQL literal text.

Escape to avoid SQL injection; null-equivalent input ('' / 'null' / None)
becomes the NULL literal. Every filter returns the literal text.
"""

import re
from collections.abc import Iterable
from typing import Any

from sqlpatch.core.param_type import check_param_type, is_null_value
from sqlpatch.models import ParamTypeEnum

# Single-quote escape for SQL strings
_SQL_QUOTE_ESCAPE = str.maketrans({"'": "''"})

SQL_NULL = "NULL"

_SHORT_DATE_RE = re.compile(r"\d{2}/\d{2}/\d{2}")
_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def escape_sql_string(value: str) -> str:
    """Double every single quote; nothing else is touched."""
    return value.translate(_SQL_QUOTE_ESCAPE)


def sql_string(value: Any) -> str:
    """
    Quote a text value. Null-equivalent -> NULL; otherwise trimmed and escaped.
    """
    if is_null_value(value):
        return SQL_NULL
    return f"'{escape_sql_string(str(value).strip())}'"


def sql_date(value: Any) -> str:
    """
    Format a date as 'DD/MM/YY' (dates are stored as CHAR on the target DB).

    DD/MM/YY is kept as-is, YYYY-MM-DD is converted; anything else is quoted
    unchanged and left to the template author.
    """
    if is_null_value(value):
        return SQL_NULL
    s = str(value).strip()
    if _SHORT_DATE_RE.fullmatch(s):
        return f"'{s}'"
    m = _ISO_DATE_RE.fullmatch(s)
    if m:
        year, month, day = m.groups()
        return f"'{day}/{month}/{year[-2:]}'"
    return f"'{escape_sql_string(s)}'"


def sql_raw(value: Any) -> str:
    """Emit the trimmed value unquoted (numbers and other non-text types)."""
    if is_null_value(value):
        return SQL_NULL
    return str(value).strip()


def in_list(values: Any) -> str:
    """
    Render values for an IN clause: 'a', 'b', 'c' (no parentheses).

    A bare string counts as a one-element list. Null-equivalent entries are
    dropped; nothing left -> NULL.
    """
    if values is None:
        return SQL_NULL
    if isinstance(values, str):
        values = [values]
    kept = non_null_values(values)
    if not kept:
        return SQL_NULL
    return ", ".join(f"'{escape_sql_string(v)}'" for v in kept)


def non_null_values(values: Iterable[Any]) -> list[str]:
    """Trimmed string form of every entry that is not null-equivalent, in order."""
    return [str(v).strip() for v in values if not is_null_value(v)]


_SCALAR_FILTERS = {
    ParamTypeEnum.TEXT: sql_string,
    ParamTypeEnum.DATE: sql_date,
}


def coerce(
    param_type: ParamTypeEnum,
    value: Any,
    is_file: bool = False,
    *,
    strict: bool = False,
) -> str:
    """
    Render *value* as SQL literal text for a parameter of *param_type*.

    List parameters go through in_list(); text and date have dedicated filters;
    every other type is emitted raw. With strict=True, number/integer values are
    validated first (ParamValidationError on failure).
    """
    if is_file:
        return in_list(value)
    if isinstance(value, (list, tuple)):
        # a scalar parameter only ever uses the first non-null entry
        kept = non_null_values(value)
        value = kept[0] if kept else None
    if is_null_value(value):
        return SQL_NULL
    if strict:
        check_param_type(param_type, str(value))
    return _SCALAR_FILTERS.get(param_type, sql_raw)(value)
