"""Tests for the pending-reply table, isolated from any socket."""

import asyncio

import pytest
from yeelink.connection.errors import ConnectionClosed, ErrResponse
from yeelink.connection.pending import PendingReplies


class TestPendingReplies:
    @pytest.fixture
    def table(self):
        return PendingReplies()

    @pytest.mark.asyncio
    async def test_resolve_completes_future(self, table):
        future = table.register(1)
        assert 1 in table
        assert table.resolve(1, ["ok"]) is True
        assert await future == ["ok"]
        assert 1 not in table

    @pytest.mark.asyncio
    async def test_resolve_unknown_id(self, table):
        assert table.resolve(42, ["ok"]) is False

    @pytest.mark.asyncio
    async def test_resolve_is_exactly_once(self, table):
        future = table.register(1)
        assert table.resolve(1, ["first"]) is True
        assert table.resolve(1, ["second"]) is False
        assert await future == ["first"]

    @pytest.mark.asyncio
    async def test_resolve_with_error(self, table):
        future = table.register(1)
        table.resolve(1, ErrResponse(-1, "unsupported method"))
        with pytest.raises(ErrResponse) as info:
            await future
        assert info.value.code == -1
        assert info.value.message == "unsupported method"

    @pytest.mark.asyncio
    async def test_duplicate_register(self, table):
        table.register(1)
        with pytest.raises(ValueError):
            table.register(1)

    @pytest.mark.asyncio
    async def test_discard(self, table):
        table.register(1)
        assert table.discard(1) is True
        assert table.discard(1) is False
        assert len(table) == 0

    @pytest.mark.asyncio
    async def test_close_fails_everything(self, table):
        futures = [table.register(i) for i in range(1, 4)]
        assert table.close("gone") == 3
        assert len(table) == 0
        for future in futures:
            with pytest.raises(ConnectionClosed, match="gone"):
                await future

    @pytest.mark.asyncio
    async def test_close_keeps_cause(self, table):
        future = table.register(1)
        cause = OSError("reset")
        table.close("Connection lost", cause=cause)
        with pytest.raises(ConnectionClosed) as info:
            await future
        assert info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_register_after_close(self, table):
        table.close()
        assert table.closed
        with pytest.raises(ConnectionClosed):
            table.register(1)

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, table):
        table.register(1)
        assert table.close("first") == 1
        assert table.close("second") == 0
        with pytest.raises(ConnectionClosed, match="first"):
            table.register(2)

    @pytest.mark.asyncio
    async def test_resolve_after_waiter_cancelled(self, table):
        future = table.register(1)
        future.cancel()
        assert table.resolve(1, ["late"]) is True
        assert future.cancelled()

    @pytest.mark.asyncio
    async def test_out_of_order_resolution(self, table):
        futures = {i: table.register(i) for i in range(1, 6)}
        for i in reversed(range(1, 6)):
            table.resolve(i, [f"reply-{i}"])
        results = await asyncio.gather(*futures.values())
        assert results == [[f"reply-{i}"] for i in range(1, 6)]
