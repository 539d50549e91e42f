"""Convenience layer over Motor: a generic CRUD / index facade and an
ObjectId-aware JSON converter.
"""

from __future__ import annotations

from .conditions import SortCondition, SortDirection, UpdateCondition
from .connection import MongoConnectionManager
from .cursor import QueryCursor
from .exceptions import (
    MongoConnectionError,
    MongoHelperError,
    MongoMappingError,
    MongoQueryError,
    ObjectIdDecodeError,
)
from .filters import (
    AndFilter,
    F,
    FieldCondition,
    FilterOperator,
    FilterSpec,
    NotFilter,
    OrFilter,
    where,
)
from .helper import MongoHelper
from .json_convert import (
    EMPTY_OBJECT_ID,
    ObjectIdConverter,
    ObjectIdField,
    StrictObjectIdField,
    deserialize_object,
    serialize_object,
)
from .query_builder import FindSpec, MongoQueryBuilder
from .serialization import model_from_doc, model_to_doc

__all__ = [
    # Facade
    "MongoHelper",
    "MongoConnectionManager",
    "QueryCursor",
    # Conditions and filters
    "UpdateCondition",
    "SortCondition",
    "SortDirection",
    "FilterSpec",
    "FieldCondition",
    "AndFilter",
    "OrFilter",
    "NotFilter",
    "FilterOperator",
    "F",
    "where",
    # Utilities
    "MongoQueryBuilder",
    "FindSpec",
    "model_from_doc",
    "model_to_doc",
    # Identifier codec
    "EMPTY_OBJECT_ID",
    "ObjectIdConverter",
    "ObjectIdField",
    "StrictObjectIdField",
    "serialize_object",
    "deserialize_object",
    # Exceptions
    "MongoHelperError",
    "MongoConnectionError",
    "MongoQueryError",
    "MongoMappingError",
    "ObjectIdDecodeError",
]
