"""Tests for the notification sink and stream."""

import asyncio

import pytest
from yeelink.connection.protocol import Notification
from yeelink.connection.sink import NotificationSink, NotificationStream


def props(**params):
    return Notification("props", params)


class TestNotificationStream:
    @pytest.mark.asyncio
    async def test_iterates_until_closed(self):
        stream = NotificationStream()
        stream.put_nowait(props(power="on"))
        stream.put_nowait(props(bright="10"))
        stream.close()

        received = [n async for n in stream]
        assert received == [props(power="on"), props(bright="10")]

    @pytest.mark.asyncio
    async def test_get_after_close_returns_none(self):
        stream = NotificationStream()
        stream.close()
        assert await stream.get() is None
        assert await stream.get() is None

    @pytest.mark.asyncio
    async def test_put_after_close_rejected(self):
        stream = NotificationStream()
        stream.close()
        with pytest.raises(asyncio.QueueFull):
            stream.put_nowait(props(power="off"))

    @pytest.mark.asyncio
    async def test_close_while_full_still_drains(self):
        stream = NotificationStream(maxsize=1)
        stream.put_nowait(props(power="on"))
        stream.close()
        assert await stream.get() == props(power="on")
        assert await stream.get() is None

    @pytest.mark.asyncio
    async def test_close_wakes_waiter(self):
        stream = NotificationStream()
        waiter = asyncio.ensure_future(stream.get())
        await asyncio.sleep(0)
        stream.close()
        assert await asyncio.wait_for(waiter, 1.0) is None

    @pytest.mark.asyncio
    async def test_default_capacity(self):
        from yeelink.config import Config
        stream = NotificationStream()
        for i in range(Config.NOTIFY_BUFFER):
            stream.put_nowait(props(bright=str(i)))
        with pytest.raises(asyncio.QueueFull):
            stream.put_nowait(props(bright="overflow"))


class TestNotificationSink:
    @pytest.mark.asyncio
    async def test_forward_without_target(self):
        sink = NotificationSink()
        assert sink.forward(props(power="on")) is False

    @pytest.mark.asyncio
    async def test_forward_to_queue(self):
        sink = NotificationSink()
        queue = asyncio.Queue()
        sink.set(queue)
        assert sink.forward(props(power="on")) is True
        assert queue.get_nowait() == props(power="on")

    @pytest.mark.asyncio
    async def test_full_target_drops_newest(self):
        sink = NotificationSink()
        stream = NotificationStream(maxsize=2)
        sink.set(stream)
        assert sink.forward(props(bright="1")) is True
        assert sink.forward(props(bright="2")) is True
        assert sink.forward(props(bright="3")) is False
        stream.close()

        received = [n async for n in stream]
        assert received == [props(bright="1"), props(bright="2")]

    @pytest.mark.asyncio
    async def test_replacement_routes_to_new_target(self):
        sink = NotificationSink()
        first = NotificationStream()
        second = NotificationStream()
        sink.set(first)
        sink.forward(props(power="on"))

        previous = sink.set(second)
        sink.forward(props(power="off"))

        assert previous is first
        assert first.closed
        assert [n async for n in first] == [props(power="on")]
        assert second.qsize() == 1
        assert await second.get() == props(power="off")

    @pytest.mark.asyncio
    async def test_set_none_discards(self):
        sink = NotificationSink()
        queue = asyncio.Queue()
        sink.set(queue)
        sink.set(None)
        assert sink.target is None
        assert sink.forward(props(power="on")) is False
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_close_ends_stream(self):
        sink = NotificationSink()
        stream = NotificationStream()
        sink.set(stream)
        sink.close()
        assert stream.closed
        assert sink.forward(props(power="on")) is False
