from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from render_server.features.agent.schemas import ErrorEvent, StreamEvent, encode_sse, is_terminal

logger = logging.getLogger(__name__)


class EventRelay:
    """Ordered, request-scoped channel between producers and one SSE response.

    Events are forwarded one by one in publish order. The first ``done`` or
    ``error`` event closes the channel; anything published afterwards is
    dropped.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def publish(self, event: StreamEvent) -> bool:
        if self._closed:
            logger.debug("Dropping %s event published after stream end.", event.type)
            return False
        if is_terminal(event):
            self._closed = True
        await self._queue.put(event)
        return True

    def fail(self, error: str) -> bool:
        """Close the channel with an ``error`` event from synchronous code."""
        if self._closed:
            return False
        self._closed = True
        self._queue.put_nowait(ErrorEvent(error=error))
        return True

    async def events(self) -> AsyncIterator[StreamEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if is_terminal(event):
                return

    async def sse(self) -> AsyncIterator[str]:
        async for event in self.events():
            yield encode_sse(event)
