from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Coroutine
from typing import Any

logger = logging.getLogger("geminirelay.relay")

_CLOSED = object()


class QueueWriter:
    """Bridges a relay task to a Starlette ``StreamingResponse`` body.

    The relay writes frames into an unbounded queue; :meth:`frames` drains it
    for the response. The producing task is only started once the response
    begins consuming, so a client that never reads never triggers an
    upstream call. If the response stops consuming before the writer is
    closed, the client has disconnected: further writes are dropped and the
    producing task is cancelled so it releases its upstream connection.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self.disconnected = False
        self.producer: asyncio.Task | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, frame: str) -> None:
        if self._closed or self.disconnected:
            return
        self._queue.put_nowait(frame)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def frames(
        self, start: Callable[[], Coroutine[Any, Any, None]] | None = None
    ) -> AsyncIterator[str]:
        finished = False
        try:
            if start is not None:
                self.producer = asyncio.create_task(start())
            while True:
                frame = await self._queue.get()
                if frame is _CLOSED:
                    finished = True
                    return
                yield frame
        finally:
            if not finished:
                logger.info("Client disconnected, stopping relay")
                self.disconnected = True
                if self.producer is not None and not self.producer.done():
                    self.producer.cancel()
