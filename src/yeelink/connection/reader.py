"""
Reader — inbound half of a bulb connection

Runs as one background task for the connection's whole life:
  line -> decode -> Result/Error resolve a pending reply
                 -> Notification goes to the current sink
On EOF, socket error or an undecodable line the loop stops and tears the
connection down so no waiter is left hanging.
"""

import asyncio
from typing import Callable, Optional

from yeelink.connection.errors import BulbError, BulbIoError, ErrResponse, MalformedMessage
from yeelink.connection.logger import get_logger
from yeelink.connection.pending import PendingReplies
from yeelink.connection.protocol import Error, Notification, Result, decode_line
from yeelink.connection.sink import NotificationSink

log = get_logger("reader")


class Reader:
    """Demultiplexes the inbound stream into replies and notifications."""

    def __init__(
        self,
        pending: PendingReplies,
        sink: NotificationSink,
        on_close: Optional[Callable[[Optional[BulbError]], None]] = None,
    ):
        self._pending = pending
        self._sink = sink
        self._on_close = on_close
        self.error: Optional[BulbError] = None
        self.lines_read = 0

    async def run(self, stream: asyncio.StreamReader):
        """Read until the connection ends, then tear down."""
        reason = "Connection closed by peer"
        try:
            while True:
                try:
                    line = await stream.readline()
                except (OSError, asyncio.IncompleteReadError) as exc:
                    self.error = BulbIoError(f"Read error: {exc}")
                    self.error.__cause__ = exc
                    reason = "Connection lost"
                    log.error(f"Read error: {exc}")
                    break
                except ValueError as exc:
                    # StreamReader line limit exceeded
                    self.error = MalformedMessage(f"Line too long: {exc}")
                    reason = "Protocol error"
                    log.error(f"Protocol error: {exc}")
                    break

                if not line:
                    log.info("EOF from bulb")
                    break

                if not line.strip():
                    continue

                self.lines_read += 1
                log.debug(f"recv <- {line.rstrip()!r}")

                try:
                    self.dispatch(decode_line(line))
                except MalformedMessage as exc:
                    self.error = exc
                    reason = "Protocol error"
                    log.error(f"Protocol error: {exc} line={line!r}")
                    break

        except asyncio.CancelledError:
            # error is preset when a failed write cancelled us
            reason = "Connection lost" if self.error is not None else "Connection closed"
            log.info("Reader cancelled")
            raise
        finally:
            self.teardown(reason)

    def dispatch(self, message):
        """Route one decoded message."""
        if isinstance(message, Result):
            if not self._pending.resolve(message.id, message.values):
                log.warning(f"Result for unknown request id={message.id}")

        elif isinstance(message, Error):
            outcome = ErrResponse(message.code, message.message)
            if not self._pending.resolve(message.id, outcome):
                log.warning(f"Error for unknown request id={message.id}: {outcome}")

        elif isinstance(message, Notification):
            self._sink.forward(message)

    def teardown(self, reason: str):
        drained = self._pending.close(reason, cause=self.error)
        self._sink.close()
        log.info(f"Reader stopped ({reason}), failed {drained} pending replies")
        if self._on_close is not None:
            self._on_close(self.error)
