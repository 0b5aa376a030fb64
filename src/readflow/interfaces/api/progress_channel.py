"""Progress sink that can be consumed as an async iterator."""

import asyncio
from collections.abc import AsyncIterator

from readflow.domain.entities import ParseProgressEvent

_CLOSED = object()


class ProgressChannel:
    """Callable progress sink backed by a queue; iterate it to receive events until closed."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def __call__(self, event: ParseProgressEvent) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[ParseProgressEvent]:
        return self

    async def __anext__(self) -> ParseProgressEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item
