"""
Tests for the stream pipeline.
"""

from typing import AsyncIterable, AsyncIterator, List

import pytest

from upload_relay.core.exceptions import StorageError, TransportError
from upload_relay.core.services.pipeline import pipeline

from conftest import MemorySink, TrackedSource


async def upper(stream: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
    async for chunk in stream:
        yield chunk.upper()


class TestPipeline:
    """Test cases for pipeline."""

    @pytest.mark.asyncio
    async def test_writes_every_chunk_in_order(self) -> None:
        source = TrackedSource([b"chunk", b"of", b"data"])
        sink = MemorySink()

        written = await pipeline(source, sink=sink)

        assert written == 11
        assert sink.chunks == [b"chunk", b"of", b"data"]
        assert source.closed is True

    @pytest.mark.asyncio
    async def test_applies_transforms_in_order(self) -> None:
        seen: List[bytes] = []

        async def record(stream: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
            async for chunk in stream:
                seen.append(chunk)
                yield chunk

        sink = MemorySink()
        await pipeline(TrackedSource([b"ab", b"cd"]), upper, record, sink=sink)

        assert seen == [b"AB", b"CD"]
        assert sink.data == b"ABCD"

    @pytest.mark.asyncio
    async def test_empty_source_writes_nothing(self) -> None:
        sink = MemorySink()

        assert await pipeline(TrackedSource([]), upper, sink=sink) == 0
        assert sink.chunks == []

    @pytest.mark.asyncio
    async def test_sink_failure_propagates_and_closes_source(self) -> None:
        error = StorageError("disk full")
        source = TrackedSource([b"one", b"two", b"three", b"four"])
        sink = MemorySink(fail_on_write=2, error=error)

        with pytest.raises(StorageError) as exc_info:
            await pipeline(source, upper, sink=sink)

        assert exc_info.value is error
        assert sink.chunks == [b"ONE"]
        assert source.pulled == 2
        assert source.closed is True

    @pytest.mark.asyncio
    async def test_source_failure_propagates_unchanged(self) -> None:
        error = TransportError("connection reset")
        source = TrackedSource([b"partial"], error=error)
        sink = MemorySink()

        with pytest.raises(TransportError) as exc_info:
            await pipeline(source, upper, sink=sink)

        assert exc_info.value is error
        assert sink.chunks == [b"PARTIAL"]
        assert source.closed is True

    @pytest.mark.asyncio
    async def test_pulls_one_chunk_per_write(self) -> None:
        source = TrackedSource([b"a", b"b", b"c"])
        pulled_at_write: List[int] = []

        class ObservingSink(MemorySink):
            async def write(self, chunk: bytes) -> None:
                pulled_at_write.append(source.pulled)
                await super().write(chunk)

        await pipeline(source, upper, sink=ObservingSink())

        assert pulled_at_write == [1, 2, 3]
