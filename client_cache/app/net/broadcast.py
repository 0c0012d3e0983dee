"""
Shared error side channel for the request engine.
"""

import asyncio
import inspect
from typing import Any, Callable, List, Set

from shared.logging import get_logger


class ErrorBroadcast:
    """Fan-out channel mirroring request failures to process-wide listeners.

    Emission is fire-and-forget: a slow queue or a failing listener never
    affects the request that produced the error.
    """

    def __init__(self, name: str = "errors"):
        self.name = name
        self.logger = get_logger("client_cache.broadcast")
        self._queues: Set[asyncio.Queue] = set()
        self._listeners: List[Callable[[Any], Any]] = []
        self._pending: Set[asyncio.Future] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._queues) + len(self._listeners)

    def subscribe(self, maxsize: int = 0) -> asyncio.Queue:
        """Create a queue that receives every emitted message."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._queues.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        self._queues.discard(queue)

    def add_listener(self, callback: Callable[[Any], Any]) -> Callable[[Any], Any]:
        """Register a callback; coroutine callbacks are scheduled, not awaited."""
        self._listeners.append(callback)
        return callback

    def remove_listener(self, callback: Callable[[Any], Any]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def emit(self, message: Any) -> int:
        """Deliver ``message`` to every subscriber and return how many got it."""
        delivered = 0

        for queue in list(self._queues):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                self.logger.warning(
                    "Error broadcast queue full, dropping message",
                    channel=self.name,
                    maxsize=queue.maxsize
                )

        for listener in list(self._listeners):
            try:
                result = listener(message)
                if inspect.isawaitable(result):
                    pending = asyncio.ensure_future(result)
                    self._pending.add(pending)
                    pending.add_done_callback(self._listener_done)
                delivered += 1
            except Exception as e:
                self.logger.error(
                    "Error broadcast listener failed",
                    channel=self.name,
                    error=str(e)
                )

        return delivered

    def _listener_done(self, pending: asyncio.Future):
        self._pending.discard(pending)
        if not pending.cancelled() and pending.exception() is not None:
            self.logger.error(
                "Error broadcast listener failed",
                channel=self.name,
                error=str(pending.exception())
            )
