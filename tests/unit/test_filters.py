"""Unit tests for filter trees and their dict form."""

from __future__ import annotations

import pytest

from mongo_helper.conditions import SortCondition, SortDirection
from mongo_helper.filters import (
    AndFilter,
    F,
    FieldCondition,
    FilterOperator,
    FilterSpec,
    NotFilter,
    OrFilter,
)


def test_field_proxy_builds_condition() -> None:
    cond = F("age") >= 18
    assert isinstance(cond, FieldCondition)
    assert cond.to_dict() == {"op": ">=", "attr": "age", "val": 18}


def test_operators_compose() -> None:
    a = F("a") == 1
    b = F("b") == 2
    assert isinstance(a & b, AndFilter)
    assert isinstance(a | b, OrFilter)
    assert isinstance(~a, NotFilter)
    assert (~a).to_dict() == {"op": "not", "conditions": [a.to_dict()]}


def test_string_operator_accepted() -> None:
    cond = FieldCondition("name", "startswith", "T")
    assert cond.op is FilterOperator.STARTSWITH


def test_logical_operator_rejected_on_field() -> None:
    with pytest.raises(ValueError, match="not a field operator"):
        FieldCondition("a", "and", 1)


def test_empty_field_rejected() -> None:
    with pytest.raises(ValueError):
        FieldCondition("", "=", 1)


def test_unknown_operator_rejected() -> None:
    with pytest.raises(ValueError):
        FieldCondition("a", "~~", 1)


class TestFromDict:
    def test_rebuilds_tree(self) -> None:
        spec = (F("a") == 1) & ~(F("b").in_([2, 3]) | F("c").is_null())
        rebuilt = FilterSpec.from_dict(spec.to_dict())
        assert isinstance(rebuilt, AndFilter)
        assert rebuilt.to_dict() == spec.to_dict()

    def test_leaf_keeps_operator_and_value(self) -> None:
        leaf = FilterSpec.from_dict({"op": "between", "attr": "age", "val": [1, 9]})
        assert isinstance(leaf, FieldCondition)
        assert leaf.op is FilterOperator.BETWEEN
        assert leaf.val == [1, 9]

    def test_unknown_operator(self) -> None:
        with pytest.raises(ValueError, match="Unknown filter operator"):
            FilterSpec.from_dict({"op": "~~", "attr": "age", "val": 1})

    def test_missing_operator(self) -> None:
        with pytest.raises(ValueError, match="Unknown filter operator"):
            FilterSpec.from_dict({"op": None, "attr": "age"})
        with pytest.raises(ValueError, match="Unknown filter operator"):
            FilterSpec.from_dict({"age": 1})

    def test_missing_attr(self) -> None:
        with pytest.raises(ValueError, match="missing 'attr'"):
            FilterSpec.from_dict({"op": "=", "val": 1})

    def test_not_needs_exactly_one_condition(self) -> None:
        leaf = {"op": "=", "attr": "a", "val": 1}
        with pytest.raises(ValueError, match="exactly one"):
            FilterSpec.from_dict({"op": "not", "conditions": [leaf, leaf]})

    def test_empty_group(self) -> None:
        with pytest.raises(ValueError, match="at least one"):
            FilterSpec.from_dict({"op": "or", "conditions": []})


class TestSortCondition:
    def test_default_ascending(self) -> None:
        assert SortCondition("age").direction is SortDirection.ASCENDING

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (-1, SortDirection.DESCENDING),
            ("desc", SortDirection.DESCENDING),
            ("ASC", SortDirection.ASCENDING),
            (SortDirection.DESCENDING, SortDirection.DESCENDING),
        ],
    )
    def test_direction_parsing(self, raw, expected) -> None:
        assert SortCondition("age", raw).direction is expected

    def test_invalid_direction(self) -> None:
        with pytest.raises(ValueError):
            SortCondition("age", "sideways")
