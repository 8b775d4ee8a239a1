import asyncio

import pytest

from geminirelay.relay.writers import QueueWriter


async def _drain(writer, start=None):
    return [frame async for frame in writer.frames(start)]


class TestQueueWriter:
    async def test_frames_until_close(self):
        writer = QueueWriter()
        await writer.write("a")
        await writer.write("b")
        await writer.close()
        await writer.write("after close")

        assert await _drain(writer) == ["a", "b"]
        assert not writer.disconnected

    async def test_close_is_idempotent(self):
        writer = QueueWriter()
        await writer.close()
        await writer.close()
        assert await _drain(writer) == []
        assert writer.closed

    async def test_consumer_sees_frames_from_running_producer(self):
        writer = QueueWriter()

        async def produce():
            for token in ("x", "y", "z"):
                await writer.write(token)
                await asyncio.sleep(0)
            await writer.close()

        assert await _drain(writer, produce) == ["x", "y", "z"]
        await writer.producer

    async def test_producer_not_started_until_consumed(self):
        writer = QueueWriter()
        calls = []

        async def produce():
            calls.append("started")
            await writer.close()

        frames = writer.frames(produce)
        await asyncio.sleep(0)
        assert calls == []
        assert writer.producer is None

        # Response abandoned before its body was read
        await frames.aclose()
        assert calls == []
        assert writer.producer is None

    async def test_early_stop_cancels_producer(self):
        writer = QueueWriter()
        started = asyncio.Event()

        async def produce():
            await writer.write("first")
            started.set()
            await asyncio.Event().wait()

        frames = writer.frames(produce)
        assert await frames.__anext__() == "first"
        await started.wait()
        await frames.aclose()

        assert writer.disconnected
        with pytest.raises(asyncio.CancelledError):
            await writer.producer

        await writer.write("dropped")
        await writer.close()
        assert writer._queue.qsize() == 1  # only the close marker

    async def test_cancelled_before_first_frame_cancels_producer(self):
        writer = QueueWriter()

        async def produce():
            await asyncio.Event().wait()

        consumer = asyncio.create_task(_drain(writer, produce))
        while writer.producer is None:
            await asyncio.sleep(0)
        consumer.cancel()

        with pytest.raises(asyncio.CancelledError):
            await consumer
        with pytest.raises(asyncio.CancelledError):
            await writer.producer
        assert writer.disconnected
