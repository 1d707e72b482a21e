"""
Notification Sink — single replaceable destination for pushed state changes

Only one listener is active per connection. Forwarding never blocks the
reader: a full queue drops the newest notification.
"""

import asyncio
import threading
from typing import Any, Optional

from yeelink.config import Config
from yeelink.connection.logger import get_logger
from yeelink.connection.protocol import Notification

log = get_logger("sink")


class NotificationStream:
    """
    Bounded queue of notifications with async iteration.

    Usage:
        stream = bulb.get_notifications()
        async for notification in stream:
            print(notification.params)

    Iteration ends once the stream is closed (replaced by another sink or the
    connection went away) and everything already queued has been consumed.
    """

    def __init__(self, maxsize: Optional[int] = None):
        self._queue: asyncio.Queue = asyncio.Queue(
            maxsize=Config.NOTIFY_BUFFER if maxsize is None else maxsize
        )
        self._closed = False

    def put_nowait(self, notification: Notification):
        if self._closed:
            raise asyncio.QueueFull
        self._queue.put_nowait(notification)

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # get() notices the flag once the backlog is drained
            pass

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    async def get(self) -> Optional[Notification]:
        """Next notification, or None once the stream is closed and drained."""
        if self._closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is None:
            # keep the end marker visible to any other waiter
            self._queue.put_nowait(None)
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> Notification:
        item = await self.get()
        if item is None:
            raise StopAsyncIteration
        return item


class NotificationSink:
    """Single-slot holder of the current notification target."""

    def __init__(self):
        self._lock = threading.Lock()
        self._target: Optional[Any] = None

    def set(self, target: Optional[Any]) -> Optional[Any]:
        """
        Install target (anything with put_nowait, e.g. asyncio.Queue) and
        return the previous one. A replaced NotificationStream is closed.
        """
        with self._lock:
            previous, self._target = self._target, target
        if previous is not None and previous is not target and isinstance(previous, NotificationStream):
            previous.close()
        return previous

    @property
    def target(self) -> Optional[Any]:
        with self._lock:
            return self._target

    def forward(self, notification: Notification) -> bool:
        """Hand notification to the current target without blocking."""
        with self._lock:
            target = self._target
        if target is None:
            return False
        try:
            target.put_nowait(notification)
        except asyncio.QueueFull:
            log.warning(f"Notification dropped, sink is full: {notification.params}")
            return False
        return True

    def close(self):
        """Connection teardown: end the installed stream, keep the slot."""
        with self._lock:
            target = self._target
        if isinstance(target, NotificationStream):
            target.close()
