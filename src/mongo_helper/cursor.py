"""QueryCursor — scoped, forward-only streaming over a server-side cursor."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger("mongo_helper.cursor")

T = TypeVar("T")


class QueryCursor(Generic[T]):
    """Forward-only iterator over query results.

    The cursor holds server-side state until closed. Use it as an async
    context manager so it is released on every exit path, including an early
    ``break`` or an exception::

        async with helper.query_streaming("persons", model=Person) as cursor:
            async for person in cursor:
                ...

    ``next_batch()`` retrieves results page by page instead.
    """

    def __init__(
        self,
        cursor: Any | None,
        mapper: Callable[[dict[str, Any]], T] | None = None,
    ) -> None:
        self._cursor = cursor
        self._iterator: Any | None = None
        self._mapper = mapper
        self._closed = cursor is None

    @classmethod
    def empty(cls) -> QueryCursor[T]:
        """A cursor that yields nothing and owns no server state."""
        return cls(None)

    @property
    def closed(self) -> bool:
        return self._closed

    def _map(self, doc: dict[str, Any]) -> T:
        if self._mapper is None:
            return doc  # type: ignore[return-value]
        return self._mapper(doc)

    async def __aenter__(self) -> QueryCursor[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __aiter__(self) -> QueryCursor[T]:
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        try:
            if self._iterator is None:
                self._iterator = self._cursor.__aiter__()  # type: ignore[union-attr]
            doc = await self._iterator.__anext__()
        except StopAsyncIteration:
            await self.close()
            raise
        return self._map(doc)

    async def next_batch(self, size: int) -> list[T]:
        """Return up to ``size`` further results; an empty list when exhausted."""
        if size <= 0:
            raise ValueError("Batch size must be positive")
        batch: list[T] = []
        async for item in self:
            batch.append(item)
            if len(batch) >= size:
                break
        return batch

    async def to_list(self) -> list[T]:
        """Drain the remaining results and close the cursor."""
        try:
            return [item async for item in self]
        finally:
            await self.close()

    async def close(self) -> None:
        """Release the server-side cursor. Idempotent."""
        if self._closed:
            return
        self._closed = True
        # Motor's close() is a coroutine; mongomock-motor's is synchronous.
        result = self._cursor.close()  # type: ignore[union-attr]
        if inspect.isawaitable(result):
            await result
        logger.debug("Closed query cursor")
