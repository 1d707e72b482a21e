"""
Writer — outbound half of a bulb connection

Assigns correlation ids, registers pending replies before transmitting and
serializes every write on one lock so concurrent callers never interleave
partial lines or share an id.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

from yeelink.connection.errors import BulbIoError
from yeelink.connection.logger import get_logger
from yeelink.connection.pending import PendingReplies
from yeelink.connection.protocol import encode_request

log = get_logger("writer")


class Writer:
    """Sends requests and waits for their correlated replies."""

    def __init__(
        self,
        stream: asyncio.StreamWriter,
        pending: PendingReplies,
        on_error: Optional[Callable[[BulbIoError], None]] = None,
    ):
        self._stream = stream
        self._pending = pending
        self._on_error = on_error
        self._lock = asyncio.Lock()
        self._counter = 0
        self.expect_reply = True

    @property
    def last_id(self) -> int:
        return self._counter

    def _next_id(self) -> int:
        self._counter += 1
        return self._counter

    async def invoke(
        self,
        method: str,
        params: Sequence[str] = (),
        expect_reply: Optional[bool] = None,
    ) -> Optional[List[str]]:
        """
        Send method with already-stringified params.

        Returns the reply values, or None in fire-and-forget mode.
        Raises BulbIoError on send failure, ErrResponse when the bulb rejects
        the request and ConnectionClosed when the reply can no longer arrive.
        """
        if expect_reply is None:
            expect_reply = self.expect_reply

        future = None
        async with self._lock:
            request_id = self._next_id()
            if expect_reply:
                future = self._pending.register(request_id)
            try:
                await self._send(encode_request(request_id, method, params))
            except BulbIoError as exc:
                self._forget(request_id, future)
                # a failed write ends the whole connection, not just this call
                if self._on_error is not None:
                    self._on_error(exc)
                raise
            except asyncio.CancelledError:
                self._forget(request_id, future)
                raise

        if future is None:
            return None

        try:
            return await future
        except asyncio.CancelledError:
            self._pending.discard(request_id)
            raise

    def _forget(self, request_id: int, future: Optional[asyncio.Future]):
        if future is not None:
            self._pending.discard(request_id)
            future.cancel()

    async def _send(self, content: bytes):
        if self._stream.is_closing():
            raise BulbIoError("Connection is closed")
        log.debug(f"send -> {content.rstrip()!r}")
        try:
            self._stream.write(content)
            await self._stream.drain()
        except (OSError, RuntimeError) as exc:
            log.error(f"Write error: {exc}")
            raise BulbIoError(f"Write error: {exc}") from exc

    def shutdown(self):
        """Close the write half without waiting."""
        if not self._stream.is_closing():
            self._stream.close()

    async def close(self):
        self.shutdown()
        try:
            await self._stream.wait_closed()
        except OSError as exc:
            log.debug(f"Error while closing writer: {exc}")
