"""
Bulb — public handle on one device connection

Ties together:
  Writer (ids, pending registration, transmit)
  Reader (background task: replies + notifications)
  NotificationSink (single replaceable listener)

State: CONNECTING -> ACTIVE -> CLOSED. CLOSED is final; the moment the
reader stops every pending reply fails with ConnectionClosed.
"""

import asyncio
import socket
from enum import Enum
from typing import Any, List, Optional

from yeelink.commands import Commands
from yeelink.config import Config
from yeelink.connection.errors import BulbConnectError, BulbError, BulbIoError
from yeelink.connection.logger import get_logger
from yeelink.connection.pending import PendingReplies
from yeelink.connection.reader import Reader
from yeelink.connection.sink import NotificationSink, NotificationStream
from yeelink.connection.writer import Writer
from yeelink.types import MusicAction

log = get_logger("bulb")


class ConnectionState(Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


class Bulb(Commands):
    """
    Connection to one bulb.

    Usage:
        bulb = await Bulb.connect("192.168.1.204")
        await bulb.toggle()
        async for notification in bulb.get_notifications():
            ...
        await bulb.close()

    Must be created inside a running event loop: the reader task starts
    immediately so replies and notifications are processed even if the caller
    never sends anything.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self._state = ConnectionState.CONNECTING
        self._pending = PendingReplies()
        self._sink = NotificationSink()
        self._writer = Writer(writer, self._pending, on_error=self._on_write_error)
        self._reader = Reader(self._pending, self._sink, on_close=self._on_reader_closed)
        self.peer = writer.get_extra_info("peername")

        loop = asyncio.get_running_loop()
        self._reader_task = loop.create_task(self._reader.run(reader))
        self._reader_task.add_done_callback(self._on_reader_done)
        self._state = ConnectionState.ACTIVE
        log.info(f"Connected to {self.peer}")

    # -- construction --

    @classmethod
    async def connect(cls, host: str, port: int = 0) -> "Bulb":
        """Dial host:port; port 0 means the default bulb port (55443)."""
        if not port:
            port = Config.DEFAULT_PORT
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except OSError as exc:
            log.error(f"Connect to {host}:{port} failed: {exc}")
            raise BulbConnectError(f"Could not connect to {host}:{port}: {exc}") from exc
        return cls(reader, writer)

    @classmethod
    def attach(cls, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> "Bulb":
        """Wrap an already established asyncio stream pair."""
        return cls(reader, writer)

    @classmethod
    async def attach_socket(cls, sock: socket.socket) -> "Bulb":
        """Wrap an already connected TCP socket."""
        try:
            reader, writer = await asyncio.open_connection(sock=sock)
        except OSError as exc:
            raise BulbConnectError(f"Could not attach socket: {exc}") from exc
        return cls(reader, writer)

    # -- reply mode --

    def no_response(self) -> "Bulb":
        """
        Stop waiting for replies: commands return None right after sending.

        Transport failures are still raised. Useful for music mode or when the
        bulb is known not to answer; otherwise prefer wrapping calls in
        asyncio.wait_for.
        """
        self._writer.expect_reply = False
        return self

    def get_response(self) -> "Bulb":
        """Undo no_response()."""
        self._writer.expect_reply = True
        return self

    @property
    def expect_reply(self) -> bool:
        return self._writer.expect_reply

    async def invoke(self, method: str, *params: str, expect_reply: Optional[bool] = None) -> Optional[List[str]]:
        """Send method with already-stringified params (see protocol.stringify)."""
        return await self._writer.invoke(method, params, expect_reply)

    # -- notifications --

    def get_notifications(self, maxsize: Optional[int] = None) -> NotificationStream:
        """
        Install a fresh notification stream and return it.

        The previous stream is closed. The stream buffers Config.NOTIFY_BUFFER
        notifications by default; newer ones are dropped while it is full.
        """
        stream = NotificationStream(maxsize)
        self._sink.set(stream)
        return stream

    def set_notifications(self, target: Any):
        """Route notifications to target (anything with put_nowait), or None to discard them."""
        self._sink.set(target)

    # -- music mode --

    async def start_music(self, host: str, port: int = 0) -> "Bulb":
        """
        Open a music-mode connection.

        Listens on port (0 picks a free one), asks the bulb to connect to
        host:port and wraps the accepted socket. The returned Bulb never
        waits for replies: the bulb sends none on that channel.
        """
        loop = asyncio.get_running_loop()
        accepted: asyncio.Future = loop.create_future()

        def _on_connect(reader, writer):
            if accepted.done():
                writer.close()
                return
            accepted.set_result((reader, writer))

        try:
            server = await asyncio.start_server(_on_connect, host="0.0.0.0", port=port)
        except OSError as exc:
            raise BulbConnectError(f"Could not listen for music mode: {exc}") from exc

        try:
            local_port = server.sockets[0].getsockname()[1]
            log.info(f"Waiting for music connection on port {local_port}")
            await self.set_music(MusicAction.ON, host, local_port)
            reader, writer = await asyncio.wait_for(accepted, timeout=Config.MUSIC_ACCEPT_TIMEOUT)
        except asyncio.TimeoutError as exc:
            raise BulbConnectError("Bulb did not open the music connection") from exc
        finally:
            # closes the listening socket now; wait_closed() would also wait
            # for the accepted music connection to end
            server.close()

        return Bulb.attach(reader, writer).no_response()

    # -- lifecycle --

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is ConnectionState.CLOSED

    @property
    def error(self) -> Optional[BulbError]:
        """What ended the connection, if it ended abnormally."""
        return self._reader.error

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _on_reader_closed(self, error: Optional[BulbError]):
        self._state = ConnectionState.CLOSED
        self._writer.shutdown()
        if error is not None:
            log.warning(f"Connection to {self.peer} lost: {error}")

    def _on_reader_done(self, task: asyncio.Task):
        if not self._pending.closed:
            # cancelled before its first step, so run() never tore down
            self._reader.teardown("Connection lost" if self._reader.error else "Connection closed")

    def _on_write_error(self, error: BulbIoError):
        if self._reader_task.done() or self._pending.closed:
            return
        log.error(f"Write to {self.peer} failed, closing connection: {error}")
        self._reader.error = error
        self._reader_task.cancel()

    async def wait_closed(self):
        """Wait until the connection ends (without ending it)."""
        await asyncio.wait([self._reader_task])

    async def close(self):
        """Stop the reader, fail pending replies and close the socket."""
        if not self._reader_task.done():
            self._reader_task.cancel()
            await asyncio.wait([self._reader_task])
        await self._writer.close()
        log.info(f"Closed connection to {self.peer}")

    async def __aenter__(self) -> "Bulb":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
