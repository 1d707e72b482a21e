"""Shared fixtures for yeelink tests."""

import asyncio
import json
import os
import tempfile

import pytest

# Keep log files out of the real home directory
os.environ.setdefault("YEELINK_DATA_DIR", tempfile.mkdtemp(prefix="yeelink-test-"))


@pytest.fixture
def tmp_data_dir(tmp_path):
    """Point the yeelink data dir at a temp directory for isolated tests."""
    data_dir = tmp_path / ".yeelink"
    data_dir.mkdir()
    (data_dir / "logs").mkdir()

    from yeelink import config
    original = (config.Config.DATA_DIR, config.Config.LOG_DIR)
    config.Config.DATA_DIR = data_dir
    config.Config.LOG_DIR = data_dir / "logs"

    yield data_dir

    config.Config.DATA_DIR, config.Config.LOG_DIR = original


class FakeBulb:
    """
    Scripted device peer on 127.0.0.1.

    respond(request) may return a list of raw lines to send back for each
    request received; tests can also push lines at any time with send().
    """

    def __init__(self, respond=None):
        self._respond = respond
        self._server = None
        self._writer = None
        self._connected = asyncio.Event()
        self._requests = asyncio.Queue()
        self.raw = []
        self.port = None

    async def start(self):
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def _handle(self, reader, writer):
        self._writer = writer
        self._connected.set()
        while True:
            line = await reader.readline()
            if not line:
                break
            self.raw.append(line)
            request = json.loads(line)
            await self._requests.put(request)
            if self._respond is not None:
                for out in self._respond(request) or []:
                    writer.write(out if isinstance(out, bytes) else out.encode())
                await writer.drain()

    async def next_request(self, timeout=2.0):
        return await asyncio.wait_for(self._requests.get(), timeout)

    async def send(self, data):
        await asyncio.wait_for(self._connected.wait(), 2.0)
        self._writer.write(data if isinstance(data, bytes) else data.encode())
        await self._writer.drain()

    async def hang_up(self):
        await asyncio.wait_for(self._connected.wait(), 2.0)
        self._writer.close()

    def stop(self):
        if self._writer is not None:
            self._writer.close()
        if self._server is not None:
            self._server.close()


def reply_ok(request):
    return [f'{{"id":{request["id"]}, "result":["ok"]}}\r\n']


async def connect_fake(respond=None):
    """Start a FakeBulb and connect a Bulb to it."""
    from yeelink.connection.bulb import Bulb

    fake = await FakeBulb(respond).start()
    bulb = await Bulb.connect("127.0.0.1", fake.port)
    return fake, bulb
