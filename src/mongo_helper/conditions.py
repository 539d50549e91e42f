"""Update and sort conditions passed to :class:`~mongo_helper.MongoHelper`."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class SortDirection(IntEnum):
    """Sort / index direction; values are the native MongoDB key values."""

    ASCENDING = 1
    DESCENDING = -1

    @classmethod
    def parse(cls, value: SortDirection | int | str) -> SortDirection:
        """Accept an enum member, ``1`` / ``-1`` or ``"asc"`` / ``"desc"``."""
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in ("asc", "ascending"):
                return cls.ASCENDING
            if lowered in ("desc", "descending"):
                return cls.DESCENDING
            raise ValueError(f"Unknown sort direction: {value!r}")
        return cls(value)


@dataclass(frozen=True)
class UpdateCondition:
    """Set ``field`` (dot notation allowed) to ``value``."""

    field: str
    value: Any


@dataclass(frozen=True)
class SortCondition:
    """Order by ``field``. Earlier conditions take precedence in a sort list."""

    field: str
    direction: SortDirection = SortDirection.ASCENDING

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection.parse(self.direction))
