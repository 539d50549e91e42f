"""Null / presence checks -> $exists, $eq null."""

from __future__ import annotations

from typing import Any

from ..filters import FilterOperator


def compile_null(field: str, op: FilterOperator, val: Any) -> dict[str, Any] | None:
    """Compile presence operators. Returns None if not a presence op."""
    if op == FilterOperator.IS_NULL:
        return {"$or": [{field: {"$exists": False}}, {field: {"$eq": None}}]}
    if op == FilterOperator.IS_NOT_NULL:
        return {field: {"$exists": True, "$ne": None}}
    if op == FilterOperator.EXISTS:
        return {field: {"$exists": True if val is None else bool(val)}}
    return None
