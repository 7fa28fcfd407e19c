"""Fan staleness signals out to WebSocket clients."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

logger = logging.getLogger(__name__)


class StaleBroadcaster:
    """Table listener that forwards stale identities to asyncio queues.

    Signals arrive on tracker worker threads; each queue is fed on its own
    event loop via ``call_soon_threadsafe``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._queues: list[tuple[asyncio.AbstractEventLoop, asyncio.Queue[Any]]] = []

    def __call__(self, identity: str) -> None:
        msg = {"type": "stale", "path": identity}
        with self._lock:
            targets = list(self._queues)
        for loop, queue in targets:
            try:
                loop.call_soon_threadsafe(_put_or_drop, queue, msg)
            except RuntimeError:
                # Loop already closed; its client is gone
                self.unsubscribe(queue)

    def subscribe(self, queue: asyncio.Queue[Any]) -> None:
        """Register *queue*, bound to the running event loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            self._queues.append((loop, queue))

    def unsubscribe(self, queue: asyncio.Queue[Any]) -> None:
        with self._lock:
            self._queues = [(lp, q) for lp, q in self._queues if q is not queue]

    def __len__(self) -> int:
        with self._lock:
            return len(self._queues)


def _put_or_drop(queue: asyncio.Queue[Any], msg: dict[str, Any]) -> None:
    try:
        queue.put_nowait(msg)
    except asyncio.QueueFull:
        logger.debug("WebSocket queue full, dropping stale signal for %s", msg["path"])
