"""
Filter predicates over document fields.

A filter is a tree of field/operator/value leaves combined with AND, OR and
NOT. Trees are built with the ``F`` field proxy or with :func:`where`::

    adults = F("age") >= 18
    spec = adults & ((F("role") == "admin") | (F("role") == "superuser"))

Trees serialise with ``to_dict()`` to the ``{"op", "attr", "val"}`` /
``{"op", "conditions"}`` AST consumed by
:class:`~mongo_helper.query_builder.MongoQueryBuilder`. An AST stored or
received as plain data is turned back into a tree with
:meth:`FilterSpec.from_dict`; a plain dict handed to the helper is always a
raw MongoDB filter.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class FilterOperator(str, Enum):
    """Supported leaf and logical operators."""

    # Standard comparison
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    IN = "in"
    NOT_IN = "not_in"
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"

    # String operations
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    STARTSWITH = "startswith"
    ISTARTSWITH = "istartswith"
    ENDSWITH = "endswith"
    IENDSWITH = "iendswith"
    REGEX = "regex"
    IREGEX = "iregex"

    # Presence checks
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    EXISTS = "exists"

    # Logical operators
    AND = "and"
    OR = "or"
    NOT = "not"


class FilterSpec:
    """Base class for filter nodes with logic operator support."""

    def __and__(self, other: FilterSpec) -> AndFilter:
        return AndFilter(self, other)

    def __or__(self, other: FilterSpec) -> OrFilter:
        return OrFilter(self, other)

    def __invert__(self) -> NotFilter:
        return NotFilter(self)

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    @staticmethod
    def from_dict(data: dict[str, Any]) -> FilterSpec:
        """Rebuild a filter tree from its ``to_dict()`` form.

        Raises:
            ValueError: If a node has an unknown operator, a leaf has no
                ``attr``, or a logical node has the wrong number of children.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Filter node must be a dict, got {type(data).__name__}")
        try:
            op = FilterOperator(data.get("op"))
        except ValueError:
            raise ValueError(f"Unknown filter operator: {data.get('op')!r}") from None
        conditions = data.get("conditions") or []
        if op in (FilterOperator.AND, FilterOperator.OR):
            if not conditions:
                raise ValueError(f"{op.value!r} filter needs at least one condition")
            children = [FilterSpec.from_dict(c) for c in conditions]
            if op is FilterOperator.AND:
                return AndFilter(*children)
            return OrFilter(*children)
        if op is FilterOperator.NOT:
            if len(conditions) != 1:
                raise ValueError("'not' filter needs exactly one condition")
            return NotFilter(FilterSpec.from_dict(conditions[0]))
        if not data.get("attr"):
            raise ValueError(f"Filter condition missing 'attr': {data!r}")
        return FieldCondition(data["attr"], op, data.get("val"))


class FieldCondition(FilterSpec):
    """Compare a single field against a value."""

    def __init__(self, attr: str, op: FilterOperator | str, val: Any = None) -> None:
        if not attr:
            raise ValueError("Field name must not be empty")
        self.attr = attr
        self.op = FilterOperator(op) if isinstance(op, str) else op
        if self.op in (FilterOperator.AND, FilterOperator.OR, FilterOperator.NOT):
            raise ValueError(f"{self.op.value!r} is not a field operator")
        self.val = val

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op.value, "attr": self.attr, "val": self.val}

    def __repr__(self) -> str:
        return f"FieldCondition({self.attr!r}, {self.op.value!r}, {self.val!r})"


class AndFilter(FilterSpec):
    """Logical AND composite."""

    def __init__(self, *filters: FilterSpec) -> None:
        self.filters = filters

    def to_dict(self) -> dict[str, Any]:
        return {"op": "and", "conditions": [f.to_dict() for f in self.filters]}


class OrFilter(FilterSpec):
    """Logical OR composite."""

    def __init__(self, *filters: FilterSpec) -> None:
        self.filters = filters

    def to_dict(self) -> dict[str, Any]:
        return {"op": "or", "conditions": [f.to_dict() for f in self.filters]}


class NotFilter(FilterSpec):
    """Logical NOT composite."""

    def __init__(self, filter_: FilterSpec) -> None:
        self.filter = filter_

    def to_dict(self) -> dict[str, Any]:
        return {"op": "not", "conditions": [self.filter.to_dict()]}


class F:
    """Field proxy: ``F("age") > 18`` builds a :class:`FieldCondition`."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> FieldCondition:  # type: ignore[override]
        return FieldCondition(self.name, FilterOperator.EQ, other)

    def __ne__(self, other: object) -> FieldCondition:  # type: ignore[override]
        return FieldCondition(self.name, FilterOperator.NE, other)

    def __gt__(self, other: Any) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.GT, other)

    def __ge__(self, other: Any) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.GE, other)

    def __lt__(self, other: Any) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.LT, other)

    def __le__(self, other: Any) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.LE, other)

    __hash__ = None  # type: ignore[assignment]

    def in_(self, values: list[Any]) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.IN, list(values))

    def not_in(self, values: list[Any]) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.NOT_IN, list(values))

    def between(self, low: Any, high: Any) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.BETWEEN, [low, high])

    def contains(self, text: str, *, ignore_case: bool = False) -> FieldCondition:
        op = FilterOperator.ICONTAINS if ignore_case else FilterOperator.CONTAINS
        return FieldCondition(self.name, op, text)

    def startswith(self, text: str, *, ignore_case: bool = False) -> FieldCondition:
        op = FilterOperator.ISTARTSWITH if ignore_case else FilterOperator.STARTSWITH
        return FieldCondition(self.name, op, text)

    def endswith(self, text: str, *, ignore_case: bool = False) -> FieldCondition:
        op = FilterOperator.IENDSWITH if ignore_case else FilterOperator.ENDSWITH
        return FieldCondition(self.name, op, text)

    def is_null(self) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.IS_NULL)

    def exists(self, flag: bool = True) -> FieldCondition:
        return FieldCondition(self.name, FilterOperator.EXISTS, flag)


def where(attr: str, op: FilterOperator | str, val: Any = None) -> FieldCondition:
    """Shorthand for ``FieldCondition(attr, op, val)``."""
    return FieldCondition(attr, op, val)

