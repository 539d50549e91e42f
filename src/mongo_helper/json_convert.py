"""ObjectId <-> JSON string conversion.

The converter plugs into pydantic in two places:

* as ``Annotated`` metadata (:data:`ObjectIdField`), giving model fields a
  core schema that accepts ``ObjectId`` instances or their string form and
  serialises to the string form in JSON mode;
* as the ``fallback`` of :func:`pydantic_core.to_json`, so
  :func:`serialize_object` can encode plain dicts and lists holding ids.

Decoding is lenient by default: a value that is not a valid id decodes to
:data:`EMPTY_OBJECT_ID` (with a warning logged) instead of failing. Stored
documents written by older clients rely on this. Use
:data:`StrictObjectIdField` or ``ObjectIdConverter(strict=True)`` to get
:class:`~mongo_helper.exceptions.ObjectIdDecodeError` instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, TypeVar

from bson import ObjectId
from pydantic import TypeAdapter
from pydantic_core import core_schema, to_json

from .exceptions import ObjectIdDecodeError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

logger = logging.getLogger("mongo_helper.json_convert")

T = TypeVar("T")

EMPTY_OBJECT_ID = ObjectId(b"\x00" * 12)


class ObjectIdConverter:
    """Bidirectional ``ObjectId`` <-> string converter."""

    default: ClassVar[ObjectIdConverter]
    strict_default: ClassVar[ObjectIdConverter]

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    def can_convert(self, tp: Any) -> bool:
        """True only for ``ObjectId`` and its subclasses."""
        return isinstance(tp, type) and issubclass(tp, ObjectId)

    def write(self, value: ObjectId) -> str:
        return str(value)

    def read(self, value: Any) -> ObjectId:
        """Parse ``value`` into an ``ObjectId``.

        ``ObjectId`` instances pass through. Anything else must be a 24-hex
        string; otherwise the lenient converter returns
        :data:`EMPTY_OBJECT_ID` and the strict one raises.
        """
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        if self.strict:
            raise ObjectIdDecodeError(value)
        logger.warning("Invalid ObjectId %r decoded as the empty id", value)
        return EMPTY_OBJECT_ID

    def fallback(self, value: Any) -> Any:
        """``to_json`` fallback for values pydantic cannot serialise itself."""
        if isinstance(value, ObjectId):
            return self.write(value)
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    def __get_pydantic_core_schema__(
        self, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            self.read,
            serialization=core_schema.plain_serializer_function_ser_schema(
                self.write, when_used="json"
            ),
        )


ObjectIdConverter.default = ObjectIdConverter()
ObjectIdConverter.strict_default = ObjectIdConverter(strict=True)

ObjectIdField = Annotated[ObjectId, ObjectIdConverter.default]
StrictObjectIdField = Annotated[ObjectId, ObjectIdConverter.strict_default]


def serialize_object(value: Any) -> str:
    """Serialise ``value`` to JSON text with ``ObjectId`` support."""
    return to_json(value, fallback=ObjectIdConverter.default.fallback).decode()


def deserialize_object(cls: type[T], value: str | bytes) -> T:
    """Deserialise JSON text into ``cls`` with ``ObjectId`` support.

    Model fields typed :data:`ObjectIdField` decode through the converter;
    passing ``ObjectId`` itself as ``cls`` decodes a bare JSON string.
    """
    if ObjectIdConverter.default.can_convert(cls):
        return TypeAdapter(ObjectIdField).validate_json(value)  # type: ignore[return-value]
    return TypeAdapter(cls).validate_json(value)
