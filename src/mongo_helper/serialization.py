"""Pydantic model <-> BSON document round-trip (ObjectId, UUID, Decimal, Enum)."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar, cast
from uuid import UUID

from bson import Decimal128, ObjectId
from pydantic import BaseModel

from .exceptions import MongoMappingError
from .json_convert import EMPTY_OBJECT_ID

TModel = TypeVar("TModel", bound=BaseModel)


def _serialize_value(value: Any) -> Any:
    """Convert Python types to BSON-safe types."""
    if isinstance(value, Enum):
        return _serialize_value(value.value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_serialize_value(v) for v in value]
    return value


def _deserialize_value(value: Any) -> Any:
    """Convert BSON types back to Python types."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {k: _deserialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_deserialize_value(v) for v in value]
    return value


def is_empty_id(value: Any) -> bool:
    """True for a missing id: ``None`` or the all-zero ``ObjectId``."""
    return value is None or value == EMPTY_OBJECT_ID


def model_to_doc(model: BaseModel, *, use_id_field: str = "id") -> dict[str, Any]:
    """Convert a Pydantic model to a BSON-ready document.

    Dumps in Python mode so ``ObjectId`` and ``datetime`` values stay native.
    ``use_id_field`` becomes ``_id``; a missing or empty id is replaced by a
    fresh ``ObjectId`` the way the driver assigns one on insert.
    """
    try:
        data = model.model_dump(mode="python")
    except Exception as e:
        raise MongoMappingError(str(e)) from e
    data = cast("dict[str, Any]", _serialize_value(data))
    if use_id_field in data:
        data["_id"] = data.pop(use_id_field)
    if is_empty_id(data.get("_id")):
        data["_id"] = ObjectId()
    return data


def model_from_doc(
    cls: type[TModel],
    doc: dict[str, Any],
    *,
    id_field: str = "id",
) -> TModel:
    """Convert a BSON document to a Pydantic model instance.

    Maps ``_id`` to ``id_field`` (e.g. "id") for the model.
    """
    if not isinstance(doc, dict):
        raise MongoMappingError("Document must be a dict")
    doc = dict(doc)
    if "_id" in doc:
        doc[id_field] = doc.pop("_id")
    doc = _deserialize_value(doc)
    try:
        return cls.model_validate(doc)
    except Exception as e:
        raise MongoMappingError(str(e)) from e


def to_document(value: BaseModel | dict[str, Any], *, id_field: str = "id") -> dict[str, Any]:
    """Map a model with :func:`model_to_doc`; dicts are inserted as given."""
    if isinstance(value, BaseModel):
        return model_to_doc(value, use_id_field=id_field)
    if isinstance(value, dict):
        return value
    raise MongoMappingError(
        f"Cannot insert {type(value).__name__}; expected a pydantic model or dict"
    )
