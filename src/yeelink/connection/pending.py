"""
Pending-Reply Table — correlation id -> one-shot future

Shared by the Writer (register/discard) and the Reader (resolve/close).
Every entry is removed exactly once: by its reply, by its waiter giving up,
or by connection teardown.
"""

import asyncio
import threading
from typing import Dict, List, Optional, Union

from yeelink.connection.errors import BulbError, ConnectionClosed

Outcome = Union[List[str], BulbError]


class PendingReplies:
    """Lock-protected map of correlation ids to reply futures."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[int, asyncio.Future] = {}
        self._closed_reason: Optional[str] = None
        self._closed_cause: Optional[BaseException] = None

    def register(self, request_id: int) -> asyncio.Future:
        """Store a fresh future under request_id and return it."""
        future = asyncio.get_running_loop().create_future()
        with self._lock:
            if self._closed_reason is not None:
                raise self._closed_error()
            if request_id in self._entries:
                raise ValueError(f"Request id {request_id} already pending")
            self._entries[request_id] = future
        return future

    def resolve(self, request_id: int, outcome: Outcome) -> bool:
        """
        Complete the entry for request_id with outcome.
        Returns False when no such entry is registered.
        """
        with self._lock:
            future = self._entries.pop(request_id, None)
        if future is None:
            return False
        _complete(future, outcome)
        return True

    def discard(self, request_id: int) -> bool:
        """Drop an entry whose waiter is gone."""
        with self._lock:
            return self._entries.pop(request_id, None) is not None

    def close(self, reason: str = "Connection closed", cause: Optional[BaseException] = None) -> int:
        """
        Tear the table down: fail every remaining entry with ConnectionClosed
        and refuse new registrations. Returns the number of entries drained.
        """
        with self._lock:
            if self._closed_reason is None:
                self._closed_reason = reason
                self._closed_cause = cause
            drained = list(self._entries.values())
            self._entries.clear()
        for future in drained:
            _complete(future, self._closed_error())
        return len(drained)

    def _closed_error(self) -> ConnectionClosed:
        exc = ConnectionClosed(self._closed_reason)
        exc.__cause__ = self._closed_cause
        return exc

    @property
    def closed(self) -> bool:
        return self._closed_reason is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, request_id) -> bool:
        with self._lock:
            return request_id in self._entries


def _complete(future: asyncio.Future, outcome: Outcome):
    if future.done():
        return
    if isinstance(outcome, BaseException):
        future.set_exception(outcome)
    else:
        future.set_result(outcome)
