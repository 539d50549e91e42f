"""Compile filters, sorts, updates and index keys into MongoDB documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .conditions import SortCondition, SortDirection, UpdateCondition
from .exceptions import MongoQueryError
from .filters import FilterOperator, FilterSpec
from .operators import compile_null, compile_standard, compile_string

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_COMPILERS = [
    compile_standard,
    compile_string,
    compile_null,
]

Where = FilterSpec | dict[str, Any] | None


def _compile_leaf(data: dict[str, Any]) -> dict[str, Any]:
    """Compile a single field condition to a MongoDB query document."""
    attr = data.get("attr")
    if not attr:
        raise MongoQueryError(f"Filter condition missing 'attr': {data}")
    try:
        op = FilterOperator(data.get("op", ""))
    except ValueError as e:
        raise MongoQueryError(f"Unknown filter operator: {data.get('op')!r}") from e
    val = data.get("val")
    for compiler in _COMPILERS:
        result = compiler(attr, op, val)
        if result is not None:
            return result
    raise MongoQueryError(f"Operator {op.value!r} cannot be applied to a field")


def _compile_node(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively compile a filter AST to a MongoDB filter."""
    if not isinstance(data, dict):
        raise MongoQueryError("Filter node must be a dict")
    op_str = str(data.get("op", "")).lower()
    if op_str in (FilterOperator.AND, FilterOperator.OR):
        conditions = data.get("conditions", [])
        if not conditions:
            return {}
        return {f"${op_str}": [_compile_node(c) for c in conditions]}
    if op_str == FilterOperator.NOT:
        conditions = data.get("conditions", [])
        inner = _compile_node(conditions[0]) if conditions else {}
        return {"$nor": [inner]} if inner else {}
    return _compile_leaf(data)


@dataclass(frozen=True)
class FindSpec:
    """Native arguments for ``Collection.find``.

    ``skip`` and ``limit`` are ``None`` unless a positive value was given.
    """

    filter: dict[str, Any]
    skip: int | None = None
    limit: int | None = None
    sort: list[tuple[str, int]] = field(default_factory=list)

    def find_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``find`` with unset options omitted."""
        kwargs: dict[str, Any] = {}
        if self.skip is not None:
            kwargs["skip"] = self.skip
        if self.limit is not None:
            kwargs["limit"] = self.limit
        if self.sort:
            kwargs["sort"] = list(self.sort)
        return kwargs


class MongoQueryBuilder:
    """Translates helper arguments into native MongoDB constructs."""

    def build_match(self, where: Where) -> dict[str, Any]:
        """Build a filter document.

        Accepts a :class:`FilterSpec` tree, a raw MongoDB filter (e.g.
        ``{"age": {"$gte": 5}}``) or ``None``. A dict is never inspected, so
        documents with fields named ``op`` or ``attr`` filter normally; wrap
        a stored AST with :meth:`FilterSpec.from_dict` to compile it. ``None``
        and empty input match every document and yield ``{}``.
        """
        if where is None:
            return {}
        if isinstance(where, dict):
            return dict(where)
        if not isinstance(where, FilterSpec):
            raise MongoQueryError("where must be a FilterSpec, dict or None")
        return _compile_node(where.to_dict())

    def build_sort(
        self, sort_conditions: Iterable[SortCondition] | None
    ) -> list[tuple[str, int]]:
        """Build sort tuples in the given order; earlier entries take precedence."""
        if not sort_conditions:
            return []
        return [(sc.field, int(sc.direction)) for sc in sort_conditions]

    def build_update(
        self, conditions: Iterable[UpdateCondition] | None
    ) -> dict[str, Any] | None:
        """Combine conditions into one ``$set``; later conditions win per field."""
        fields: dict[str, Any] = {}
        for condition in conditions or ():
            fields[condition.field] = condition.value
        if not fields:
            return None
        return {"$set": fields}

    def build_find(
        self,
        where: Where = None,
        skip: int = -1,
        limit: int = -1,
        sort_conditions: Iterable[SortCondition] | None = None,
    ) -> FindSpec:
        """Build filter, pagination and sort for ``find``.

        Only positive ``skip`` / ``limit`` are applied; zero and negative
        values both mean "unset".
        """
        return FindSpec(
            filter=self.build_match(where),
            skip=skip if skip and skip > 0 else None,
            limit=limit if limit and limit > 0 else None,
            sort=self.build_sort(sort_conditions),
        )

    def build_index_keys(
        self, fields: Mapping[str, SortDirection | int | str]
    ) -> list[tuple[str, int]]:
        """Index key list in mapping order, each with its declared direction."""
        return [
            (name, int(SortDirection.parse(direction)))
            for name, direction in fields.items()
        ]
