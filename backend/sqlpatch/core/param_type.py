"""
Parameter validation for patch generation requests.

Runs before rendering: required check (unitary mode) and, when strict typing is
enabled, numeric checks for number/integer parameters. Everything else is left
to the null-equivalence rules of the SQL filters.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlpatch.models import ExecutionModeEnum, ParamTypeEnum, QueryDefinition


class ParamValidationError(ValueError):
    """Raised when request input is rejected (missing required param, bad mode, ...)."""

    pass


def is_null_value(value: Any) -> bool:
    """None, blank, or case-insensitive 'null'."""
    if value is None:
        return True
    s = str(value).strip()
    return not s or s.lower() == "null"


def has_value(value: Any) -> bool:
    """True if *value* (scalar or list) carries at least one non-null entry."""
    if isinstance(value, (list, tuple)):
        return any(not is_null_value(v) for v in value)
    return not is_null_value(value)


def _check_number(value: str) -> str:
    s = value.strip()
    try:
        x = Decimal(s)
    except InvalidOperation as e:
        raise ParamValidationError(f"Invalid number: {s!r}") from e
    if not x.is_finite():
        raise ParamValidationError(f"Invalid number: {s!r}")
    return s


def _check_integer(value: str) -> str:
    s = _check_number(value)
    if Decimal(s) != Decimal(s).to_integral_value():
        raise ParamValidationError(f"Expected integer, got: {s!r}")
    return s


_CHECKERS = {
    ParamTypeEnum.NUMBER: _check_number,
    ParamTypeEnum.INTEGER: _check_integer,
}


def check_param_type(param_type: ParamTypeEnum, value: str) -> str:
    """Validate a non-null scalar for strict coercion; returns the trimmed value."""
    checker = _CHECKERS.get(param_type)
    if checker is None:
        return value.strip()
    return checker(value)


def parse_execution_mode(value: str | None) -> ExecutionModeEnum:
    """Blank -> unitaire. Unknown modes raise ParamValidationError."""
    s = (value or "").strip().lower()
    if not s:
        return ExecutionModeEnum.UNITAIRE
    try:
        return ExecutionModeEnum(s)
    except ValueError as e:
        allowed = ", ".join(m.value for m in ExecutionModeEnum)
        raise ParamValidationError(
            f"Unknown execution mode {value!r} (expected one of: {allowed})"
        ) from e


def check_required_params(
    query: QueryDefinition, values: Mapping[str, Any] | None
) -> None:
    """
    Raise ParamValidationError listing every required parameter without a value.

    A list parameter counts as missing when all its entries are null-equivalent.
    """
    _values = values or {}
    missing = [
        p.name for p in query.parameters if p.required and not has_value(_values.get(p.name))
    ]
    if missing:
        raise ParamValidationError(
            f"Missing required parameter(s) for query '{query.id}': {', '.join(missing)}"
        )
