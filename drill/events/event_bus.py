"""Fan-out bus carrying display updates to every connected browser."""

import asyncio
import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

_DEFAULT_QUEUE_SIZE = 128

T = TypeVar("T")


class EventBus(Generic[T]):
    """Fan-out event bus backed by asyncio.Queue.

    Each subscriber (one per open SSE stream) owns a queue.  Publishing
    never blocks: a full queue means that viewer is not keeping up, so
    the event is dropped for it alone.

    ``publish`` is synchronous because the session controller is
    synchronous; it must be called from the event loop thread.
    """

    def __init__(self, maxsize: int = _DEFAULT_QUEUE_SIZE) -> None:
        self._subscribers: list[asyncio.Queue[T]] = []
        self._maxsize = maxsize

    def publish(self, event: T) -> None:
        """Push *event* to every subscriber queue."""
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    "Display queue full, dropping %s for one viewer",
                    getattr(event, "type", type(event).__name__),
                )

    async def subscribe(self) -> asyncio.Queue[T]:
        queue: asyncio.Queue[T] = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers.append(queue)
        logger.debug("Viewer subscribed (total: %d)", len(self._subscribers))
        return queue

    async def unsubscribe(self, queue: asyncio.Queue[T]) -> None:
        """Remove a subscriber queue.  No-op if the queue is not registered."""
        try:
            self._subscribers.remove(queue)
            logger.debug("Viewer unsubscribed (remaining: %d)", len(self._subscribers))
        except ValueError:
            logger.debug("Attempted to unsubscribe an unknown queue, ignoring")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
