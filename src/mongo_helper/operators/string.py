"""String operators -> $regex, $options (case-insensitive)."""

from __future__ import annotations

import re
from typing import Any

from ..exceptions import MongoQueryError
from ..filters import FilterOperator

_STRING_OPS = frozenset(
    {
        FilterOperator.CONTAINS,
        FilterOperator.ICONTAINS,
        FilterOperator.STARTSWITH,
        FilterOperator.ISTARTSWITH,
        FilterOperator.ENDSWITH,
        FilterOperator.IENDSWITH,
        FilterOperator.REGEX,
        FilterOperator.IREGEX,
    }
)

_CASE_INSENSITIVE = frozenset(
    {
        FilterOperator.ICONTAINS,
        FilterOperator.ISTARTSWITH,
        FilterOperator.IENDSWITH,
        FilterOperator.IREGEX,
    }
)


def compile_string(field: str, op: FilterOperator, val: Any) -> dict[str, Any] | None:
    """Compile string operators to MongoDB $regex. Returns None if not a string op."""
    if op not in _STRING_OPS:
        return None
    if not isinstance(val, str):
        raise MongoQueryError(f"String operator {op.value} requires string value")
    options = "i" if op in _CASE_INSENSITIVE else ""
    if op in (FilterOperator.CONTAINS, FilterOperator.ICONTAINS):
        pattern = re.escape(val)
    elif op in (FilterOperator.STARTSWITH, FilterOperator.ISTARTSWITH):
        pattern = "^" + re.escape(val)
    elif op in (FilterOperator.ENDSWITH, FilterOperator.IENDSWITH):
        pattern = re.escape(val) + "$"
    else:
        pattern = val
    return {field: {"$regex": pattern, "$options": options}}
