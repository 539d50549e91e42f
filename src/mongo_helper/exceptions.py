"""Exceptions raised by the MongoDB helper.

Driver failures (``pymongo.errors.PyMongoError``) are not wrapped; they
propagate to the caller unchanged.
"""

from __future__ import annotations


class MongoHelperError(Exception):
    """Root exception for the helper."""


class MongoConnectionError(MongoHelperError):
    """Raised when the client cannot be created or is not connected."""


class MongoQueryError(MongoHelperError):
    """Raised when a filter, update or JSON document cannot be built."""


class MongoMappingError(MongoHelperError):
    """Raised when a document cannot be mapped to or from a model."""


class ObjectIdDecodeError(MongoHelperError, ValueError):
    """Raised by the strict identifier codec on an unparsable value."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"{value!r} is not a valid ObjectId")
