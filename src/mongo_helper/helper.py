"""MongoHelper — generic CRUD and index facade over a Motor client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar, overload

import json5
from bson import json_util
from bson.errors import BSONError
from pydantic import BaseModel
from pymongo import IndexModel

from .conditions import SortDirection
from .connection import MongoConnectionManager
from .cursor import QueryCursor
from .exceptions import MongoQueryError
from .query_builder import MongoQueryBuilder, Where
from .serialization import is_empty_id, model_from_doc, to_document

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .conditions import SortCondition, UpdateCondition

logger = logging.getLogger("mongo_helper.helper")

TModel = TypeVar("TModel", bound=BaseModel)

Directions = Mapping[str, SortDirection | int | str]


def _is_blank(collection: str | None) -> bool:
    return collection is None or not collection.strip()


class MongoHelper:
    """Generic data-access facade parameterised per call by collection name.

    A helper is bound to one database. ``with_database()`` returns another
    helper on the same connection bound to a different database; nothing on
    an existing helper changes after construction.

    Every collection-level call treats a blank collection name as "nothing
    to do": it returns ``0`` affected documents (``-1`` for :meth:`count`,
    ``[]`` for :meth:`query`) without touching the server. Driver errors are
    not caught.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        database: str | None = None,
        *,
        id_field: str = "id",
        query_builder: MongoQueryBuilder | None = None,
    ) -> None:
        self._connection = connection
        self._database = database
        self._id_field = id_field
        self._query_builder = query_builder or MongoQueryBuilder()

    @classmethod
    async def from_url(
        cls,
        url: str,
        database: str | None = None,
        **client_options: Any,
    ) -> MongoHelper:
        """Connect to ``url`` and return a helper bound to ``database``.

        ``client_options`` are passed to the Motor client (timeouts, TLS, app
        name). The helper owns the new connection; :meth:`close` releases it.
        """
        connection = MongoConnectionManager(url, database=database, **client_options)
        await connection.connect()
        return cls(connection, database)

    @property
    def connection(self) -> MongoConnectionManager:
        return self._connection

    @property
    def database(self) -> str | None:
        """Name of the bound database (falls back to the connection default)."""
        return self._database or self._connection.database

    def with_database(self, database: str) -> MongoHelper:
        """Return a helper on the same connection bound to ``database``."""
        return type(self)(
            self._connection,
            database,
            id_field=self._id_field,
            query_builder=self._query_builder,
        )

    def _db(self) -> Any:
        return self._connection.get_database(self._database)

    def _collection(self, collection: str) -> Any:
        return self._db().get_collection(collection)

    def _mapper(self, model: type[TModel] | None) -> Any:
        if model is None:
            return None
        id_field = self._id_field

        def _map(doc: dict[str, Any]) -> TModel:
            return model_from_doc(model, doc, id_field=id_field)

        return _map

    def _assign_id(self, model: BaseModel, doc_id: Any) -> None:
        if self._id_field not in type(model).model_fields:
            return
        if model.model_config.get("frozen"):
            return
        if is_empty_id(getattr(model, self._id_field, None)):
            setattr(model, self._id_field, doc_id)

    # -- CRUD ----------------------------------------------------------------

    async def insert(
        self,
        collection: str,
        documents: Sequence[BaseModel | dict[str, Any]] | None,
    ) -> int:
        """Insert all documents in one round trip. Returns the number inserted.

        Models are mapped with :func:`~mongo_helper.serialization.model_to_doc`
        and receive the generated id when theirs was empty.
        """
        if _is_blank(collection) or not documents:
            logger.debug("insert skipped for collection %r: nothing to do", collection)
            return 0
        docs = [to_document(d, id_field=self._id_field) for d in documents]
        result = await self._collection(collection).insert_many(docs)
        for original, doc in zip(documents, docs):
            if isinstance(original, BaseModel):
                self._assign_id(original, doc["_id"])
        return len(result.inserted_ids)

    async def insert_json(
        self, collection: str, jsons: Iterable[str | bytes] | str | bytes | None
    ) -> int:
        """Insert JSON text documents without a model.

        Documents are parsed as JSON5, so shell-style text such as
        ``{Name:'Colin',Age:15}`` is accepted, and Extended JSON values such
        as ``{"$oid": ...}`` become their BSON types. A single string is
        treated as one document.

        Raises:
            MongoQueryError: If a document is not valid JSON, holds an invalid
                Extended JSON value, or is not an object. Nothing is inserted.
        """
        if isinstance(jsons, (str, bytes)):
            jsons = [jsons]
        if _is_blank(collection) or not jsons:
            logger.debug(
                "insert_json skipped for collection %r: nothing to do", collection
            )
            return 0
        docs = []
        for text in jsons:
            try:
                doc = json5.loads(text, object_hook=json_util.object_hook)
            except (ValueError, TypeError, BSONError) as e:
                raise MongoQueryError(f"Invalid JSON document: {e}") from e
            if not isinstance(doc, dict):
                raise MongoQueryError("JSON document must be an object")
            docs.append(doc)
        if not docs:
            return 0
        result = await self._collection(collection).insert_many(docs)
        return len(result.inserted_ids)

    async def update(
        self,
        collection: str,
        conditions: Iterable[UpdateCondition] | None,
        where: Where = None,
    ) -> int:
        """Set every condition's field on **all** matching documents.

        Conditions combine into one ``$set``; a later condition for the same
        field overrides an earlier one. ``where`` defaults to match-all.
        Returns the modified count.
        """
        if _is_blank(collection):
            return 0
        update = self._query_builder.build_update(conditions)
        if update is None:
            logger.debug("update skipped for collection %r: no conditions", collection)
            return 0
        match = self._query_builder.build_match(where)
        result = await self._collection(collection).update_many(match, update)
        return result.modified_count

    async def delete(self, collection: str, where: Where = None) -> int:
        """Delete every document matching ``where``. Returns the deleted count.

        .. warning::
            Omitting ``where`` (or passing an empty filter) deletes **every**
            document in the collection. Pass an explicit filter to avoid it.
        """
        if _is_blank(collection):
            return 0
        match = self._query_builder.build_match(where)
        if not match:
            logger.debug("delete on %r without a filter removes all documents", collection)
        result = await self._collection(collection).delete_many(match)
        return result.deleted_count

    async def count(self, collection: str, where: Where = None) -> int:
        """Count documents matching ``where``.

        Returns ``-1`` for a blank collection name, meaning "not executed",
        as opposed to ``0`` matches.
        """
        if _is_blank(collection):
            return -1
        match = self._query_builder.build_match(where)
        return await self._collection(collection).count_documents(match)

    @overload
    async def query(
        self,
        collection: str,
        where: Where = ...,
        skip: int = ...,
        limit: int = ...,
        sort_conditions: Sequence[SortCondition] | None = ...,
        *,
        model: None = ...,
    ) -> list[dict[str, Any]]: ...

    @overload
    async def query(
        self,
        collection: str,
        where: Where = ...,
        skip: int = ...,
        limit: int = ...,
        sort_conditions: Sequence[SortCondition] | None = ...,
        *,
        model: type[TModel],
    ) -> list[TModel]: ...

    async def query(
        self,
        collection: str,
        where: Where = None,
        skip: int = -1,
        limit: int = -1,
        sort_conditions: Sequence[SortCondition] | None = None,
        *,
        model: type[TModel] | None = None,
    ) -> list[Any]:
        """Return all matching documents, materialised.

        Only positive ``skip`` / ``limit`` are applied, so ``0`` behaves like
        "unset". Sort conditions apply in order, later ones breaking ties.
        With ``model`` the documents are validated into that pydantic type.
        """
        if _is_blank(collection):
            return []
        async with self.query_streaming(
            collection, where, skip, limit, sort_conditions, model=model
        ) as cursor:
            return await cursor.to_list()

    def query_streaming(
        self,
        collection: str,
        where: Where = None,
        skip: int = -1,
        limit: int = -1,
        sort_conditions: Sequence[SortCondition] | None = None,
        *,
        model: type[TModel] | None = None,
        batch_size: int | None = None,
    ) -> QueryCursor[Any]:
        """Return a :class:`~mongo_helper.cursor.QueryCursor` over the matches.

        Arguments behave exactly as in :meth:`query`. Nothing is fetched until
        iteration starts; close the cursor (``async with``) when done.
        """
        if _is_blank(collection):
            return QueryCursor.empty()
        spec = self._query_builder.build_find(where, skip, limit, sort_conditions)
        kwargs = spec.find_kwargs()
        if batch_size:
            kwargs["batch_size"] = batch_size
        cursor = self._collection(collection).find(spec.filter, **kwargs)
        return QueryCursor(cursor, self._mapper(model))

    # -- Indexes and administration ------------------------------------------

    async def list_index_keys(self, collection: str) -> list[str]:
        """Key fields of each index, sorted and comma-joined (``{b, a}`` -> ``"a,b"``).

        The sort only makes index signatures comparable; it does not reflect
        the compound key order.
        """
        if _is_blank(collection):
            return []
        keys: list[str] = []
        async for index in self._collection(collection).list_indexes():
            key = index.get("key")
            if key is None:
                continue
            names = list(key.keys()) if isinstance(key, Mapping) else [k for k, _ in key]
            keys.append(",".join(sorted(names)))
        return keys

    async def create_single_index(
        self,
        collection: str,
        fields: Directions,
        *,
        name: str | None = None,
        unique: bool = False,
    ) -> str | None:
        """Create one compound index over ``fields`` in mapping order.

        Returns the index name, or ``None`` when there was nothing to create.
        """
        if _is_blank(collection) or not fields:
            return None
        keys = self._query_builder.build_index_keys(fields)
        options: dict[str, Any] = {"unique": unique}
        if name:
            options["name"] = name
        return await self._collection(collection).create_index(keys, **options)

    async def create_many_indexes(
        self, collection: str, fields: Directions
    ) -> list[str]:
        """Create one single-field index per entry. Returns the index names."""
        if _is_blank(collection) or not fields:
            return []
        models = [
            IndexModel([key]) for key in self._query_builder.build_index_keys(fields)
        ]
        return list(await self._collection(collection).create_indexes(models))

    async def drop_collection(self, collection: str) -> None:
        if _is_blank(collection):
            return
        await self._db().drop_collection(collection)

    async def drop_database(self, database: str) -> None:
        """Drop ``database``. No name guard: driver errors propagate."""
        await self._connection.client.drop_database(database)

    async def ping(self) -> bool:
        return await self._connection.health_check()

    def close(self) -> None:
        """Close the underlying client, shared by every helper on the connection."""
        self._connection.close()
