"""
Shared test doubles for the upload relay tests.
"""

from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple

import pytest

from upload_relay.core.interfaces.notifications import INotificationChannel, INotificationEmitter
from upload_relay.core.interfaces.storage import IStorageSink


class RecordingEmitter(INotificationEmitter):
    """Emitter that records every (recipient, event, payload)."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def to(self, recipient_id: str) -> INotificationChannel:
        emitter = self

        class _Channel(INotificationChannel):
            def emit(self, event: str, payload: Dict[str, Any]) -> None:
                emitter.calls.append((recipient_id, event, payload))

        return _Channel()

    @property
    def payloads(self) -> List[Dict[str, Any]]:
        return [payload for _, _, payload in self.calls]


class SequenceClock:
    """Clock returning preset millisecond readings, then repeating the last."""

    def __init__(self, readings: Iterable[float]) -> None:
        self._readings = list(readings)
        self.calls = 0

    def __call__(self) -> float:
        index = min(self.calls, len(self._readings) - 1)
        self.calls += 1
        return self._readings[index]


class MemorySink(IStorageSink):
    """Sink collecting chunks in memory."""

    def __init__(self, path: str = "memory", fail_on_write: Optional[int] = None,
                 error: Optional[Exception] = None) -> None:
        self.path = path
        self.chunks: List[bytes] = []
        self.opened = False
        self.closed = False
        self._fail_on_write = fail_on_write
        self.error = error or OSError("disk full")

    async def open(self) -> None:
        self.opened = True

    async def write(self, chunk: bytes) -> None:
        if self._fail_on_write is not None and len(self.chunks) + 1 >= self._fail_on_write:
            raise self.error
        self.chunks.append(chunk)

    async def close(self) -> None:
        self.closed = True

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)


class TrackedSource:
    """Async chunk source that records how far it was read and whether it was closed."""

    def __init__(self, chunks: Iterable[bytes], error: Optional[Exception] = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.pulled = 0
        self.closed = False

    def __aiter__(self) -> "TrackedSource":
        return self

    async def __anext__(self) -> bytes:
        if self.closed:
            raise StopAsyncIteration
        if self.pulled < len(self._chunks):
            chunk = self._chunks[self.pulled]
            self.pulled += 1
            return chunk
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True


async def async_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()
