"""Standard comparison operators for MongoDB query compilation."""

from __future__ import annotations

from typing import Any

from ..exceptions import MongoQueryError
from ..filters import FilterOperator

_MONGO_OP_MAP: dict[FilterOperator, str] = {
    FilterOperator.EQ: "$eq",
    FilterOperator.NE: "$ne",
    FilterOperator.GT: "$gt",
    FilterOperator.GE: "$gte",
    FilterOperator.LT: "$lt",
    FilterOperator.LE: "$lte",
    FilterOperator.IN: "$in",
    FilterOperator.NOT_IN: "$nin",
}


def compile_standard(
    field: str, op: FilterOperator, val: Any
) -> dict[str, Any] | None:
    """Compile comparison operators to MongoDB query fragments."""
    mongo_op = _MONGO_OP_MAP.get(op)
    if mongo_op:
        if op in {FilterOperator.IN, FilterOperator.NOT_IN}:
            normalized = list(val) if isinstance(val, (list, tuple, set)) else [val]
            return {field: {mongo_op: normalized}}
        return {field: {mongo_op: val}}

    if op == FilterOperator.BETWEEN:
        lo, hi = _validate_range_operand(val, op_name="between")
        return {"$and": [{field: {"$gte": lo}}, {field: {"$lte": hi}}]}

    if op == FilterOperator.NOT_BETWEEN:
        lo, hi = _validate_range_operand(val, op_name="not_between")
        return {"$or": [{field: {"$lt": lo}}, {field: {"$gt": hi}}]}

    return None


def _validate_range_operand(val: Any, *, op_name: str) -> tuple[Any, Any]:
    if not isinstance(val, (list, tuple)) or len(val) != 2:
        raise MongoQueryError(f"{op_name} requires a list of two values")
    return val[0], val[1]
